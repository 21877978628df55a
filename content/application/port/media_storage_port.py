from abc import ABC, abstractmethod

from content.domain.media import MediaUpload, StoredMedia


class MediaStoragePort(ABC):
    @abstractmethod
    async def upload(self, upload: MediaUpload, folder: str) -> StoredMedia:
        raise NotImplementedError
