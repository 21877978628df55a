from typing import Optional
from abc import ABC, abstractmethod
from account.domain.account import Account

class AccountRepositoryPort(ABC):

    @abstractmethod
    async def save(self, account: Account) -> Account:
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        pass

    @abstractmethod
    async def find_by_id(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def record_watch(self, account_id: str, video_id: str) -> bool:
        pass
