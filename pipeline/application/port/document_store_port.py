from abc import ABC, abstractmethod
from typing import Optional

from pipeline.domain.stage import CollectionQuery


class DocumentStorePort(ABC):
    @abstractmethod
    async def fetch(self, collection: str, query: Optional[CollectionQuery] = None) -> list[dict]:
        """
        컬렉션 문서를 필터/검색/정렬/페이지 조건에 맞게 읽어 dict 목록으로 반환합니다.
        배열 필드(watch_history, video_ids)는 저장된 순서대로 채워져야 합니다.
        """
        raise NotImplementedError
