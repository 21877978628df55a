from abc import ABC, abstractmethod

from relationship.domain.like import Like
from relationship.domain.subscription import Subscription

Edge = Subscription | Like


class RelationshipRepositoryPort(ABC):

    @abstractmethod
    async def exists(self, edge: Edge) -> bool:
        pass

    @abstractmethod
    async def create(self, edge: Edge) -> bool:
        """간선을 만듭니다. 유일 제약에 막혀 이미 존재하면 False."""
        pass

    @abstractmethod
    async def delete(self, edge: Edge) -> bool:
        """간선을 지웁니다. 실제로 지운 행이 있을 때만 True."""
        pass
