import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from account.application.port.account_repository_port import AccountRepositoryPort
from account.domain.account import Account
from account.infrastructure.orm.account_orm import AccountORM, WatchHistoryORM
from config.database.session import SessionLocal, open_session
from shared.domain.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


class AccountRepositoryImpl(AccountRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    async def save(self, account: Account) -> Account:
        async with open_session(self.session_factory) as db:
            orm_account = AccountORM(
                username=account.username,
                email=account.email,
                full_name=account.full_name,
                avatar=account.avatar,
                cover_image=account.cover_image,
            )
            db.add(orm_account)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict("Username or email is already taken") from exc
            await db.refresh(orm_account)
            return self._to_domain(orm_account)

    async def update(self, account: Account) -> Account:
        async with open_session(self.session_factory) as db:
            orm_account: Optional[AccountORM] = await db.get(AccountORM, account.id)
            if orm_account is None:
                raise NotFound(f"Account id={account.id} not found")
            orm_account.full_name = account.full_name
            orm_account.email = account.email
            orm_account.avatar = account.avatar
            orm_account.cover_image = account.cover_image
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise Conflict("Email is already taken") from exc
            await db.refresh(orm_account)
            return self._to_domain(orm_account)

    async def find_by_id(self, account_id: str) -> Account | None:
        async with open_session(self.session_factory) as db:
            orm_account = await db.get(AccountORM, account_id)
            if orm_account is None:
                return None
            return self._to_domain(orm_account)

    async def find_by_username(self, username: str) -> Account | None:
        async with open_session(self.session_factory) as db:
            orm_account = await db.scalar(
                select(AccountORM).where(func.lower(AccountORM.username) == username.strip().lower())
            )
            if orm_account is None:
                return None
            return self._to_domain(orm_account)

    async def record_watch(self, account_id: str, video_id: str) -> bool:
        """
        시청 기록에 영상을 추가합니다. 이미 있는 영상은 지우고 맨 뒤에 다시 넣어
        기록은 영상마다 한 번만, 가장 최근 시청이 마지막에 오도록 유지합니다.
        """
        async with open_session(self.session_factory) as db:
            await db.execute(
                delete(WatchHistoryORM).where(
                    WatchHistoryORM.user_id == account_id,
                    WatchHistoryORM.video_id == video_id,
                )
            )
            db.add(WatchHistoryORM(user_id=account_id, video_id=video_id))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.info("watch of video %s by %s already recorded concurrently", video_id, account_id)
                return False
        return True

    @staticmethod
    def _to_domain(orm_account: AccountORM) -> Account:
        account = Account(
            username=orm_account.username,
            email=orm_account.email,
            full_name=orm_account.full_name,
            avatar=orm_account.avatar,
            cover_image=orm_account.cover_image,
        )
        account.id = orm_account.id
        account.created_at = orm_account.created_at
        account.updated_at = orm_account.updated_at
        return account
