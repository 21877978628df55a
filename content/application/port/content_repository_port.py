from abc import ABC, abstractmethod
from typing import Optional

from content.domain.playlist import Playlist
from content.domain.video import Video


class ContentRepositoryPort(ABC):
    @abstractmethod
    async def save_video(self, video: Video) -> Video:
        raise NotImplementedError

    @abstractmethod
    async def find_video(self, video_id: str) -> Optional[Video]:
        raise NotImplementedError

    @abstractmethod
    async def increment_views(self, video_id: str) -> bool:
        raise NotImplementedError

    # 소유자 전용 변경: 조건(id, owner_id)에 맞는 행이 없으면 None/False를 돌려줍니다.
    @abstractmethod
    async def update_owned_video(self, video_id: str, owner_id: str, changes: dict) -> Optional[Video]:
        raise NotImplementedError

    @abstractmethod
    async def toggle_owned_video_publish(self, video_id: str, owner_id: str) -> Optional[Video]:
        raise NotImplementedError

    @abstractmethod
    async def delete_owned_video(self, video_id: str, owner_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def save_playlist(self, playlist: Playlist) -> Playlist:
        raise NotImplementedError

    @abstractmethod
    async def find_playlist(self, playlist_id: str) -> Optional[Playlist]:
        raise NotImplementedError

    @abstractmethod
    async def update_owned_playlist(self, playlist_id: str, owner_id: str, changes: dict) -> Optional[Playlist]:
        raise NotImplementedError

    @abstractmethod
    async def delete_owned_playlist(self, playlist_id: str, owner_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def add_video_to_owned_playlist(self, playlist_id: str, owner_id: str, video_id: str) -> Optional[Playlist]:
        raise NotImplementedError

    @abstractmethod
    async def remove_video_from_owned_playlist(
        self, playlist_id: str, owner_id: str, video_id: str
    ) -> Optional[Playlist]:
        raise NotImplementedError
