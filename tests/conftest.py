import os

# 테스트는 asyncpg 없이 인메모리 SQLite로 돕니다. 설정 모듈이 읽기 전에 지정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from account.infrastructure.orm.account_orm import AccountORM
from account.infrastructure.repository.account_repository_impl import AccountRepositoryImpl
from config.database.session import init_db_schema
from content.infrastructure.orm.models import VideoORM
from content.infrastructure.repository.content_repository_impl import ContentRepositoryImpl
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.infrastructure.sql_document_store import SqlDocumentStore
from relationship.infrastructure.orm.relationship_orm import LikeORM, SubscriptionORM
from relationship.infrastructure.repository.relationship_repository_impl import RelationshipRepositoryImpl
from shared.domain.reference import new_reference

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def _sqlite_engine(foreign_keys: bool = False):
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if foreign_keys:

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


@pytest.fixture
async def engine():
    engine = _sqlite_engine()
    await init_db_schema(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def fk_engine():
    # PostgreSQL처럼 외래 키를 검사하는 엔진
    engine = _sqlite_engine(foreign_keys=True)
    await init_db_schema(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def fk_session_factory(fk_engine):
    return async_sessionmaker(fk_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def runner(session_factory):
    return PipelineRunner(SqlDocumentStore(session_factory))


@pytest.fixture
def account_repo(session_factory):
    return AccountRepositoryImpl(session_factory)


@pytest.fixture
def content_repo(session_factory):
    return ContentRepositoryImpl(session_factory)


@pytest.fixture
def relationship_repo(session_factory):
    return RelationshipRepositoryImpl(session_factory)


class Seeder:
    """테스트 데이터를 ORM으로 직접 넣습니다. 생성 시각은 호출 순서대로 1분씩 늘어납니다."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._tick = 0

    def _next_time(self) -> datetime:
        self._tick += 1
        return BASE_TIME + timedelta(minutes=self._tick)

    async def _add(self, orm):
        async with self.session_factory() as db:
            db.add(orm)
            await db.commit()
        return orm.id

    async def user(self, username: str, full_name: str | None = None) -> str:
        return await self._add(
            AccountORM(
                id=new_reference(),
                username=username,
                email=f"{username}@example.com",
                full_name=full_name or username.title(),
                avatar=f"https://cdn.example.com/{username}.png",
                created_at=self._next_time(),
            )
        )

    async def video(
        self,
        owner_id: str,
        title: str,
        description: str = "a video",
        views: int = 0,
        is_published: bool = True,
    ) -> str:
        return await self._add(
            VideoORM(
                id=new_reference(),
                owner_id=owner_id,
                title=title,
                description=description,
                video_file=f"https://cdn.example.com/{title}.mp4",
                thumbnail=f"https://cdn.example.com/{title}.jpg",
                duration=60.0,
                views=views,
                is_published=is_published,
                created_at=self._next_time(),
            )
        )

    async def subscription(self, subscriber_id: str, channel_id: str) -> str:
        return await self._add(
            SubscriptionORM(
                id=new_reference(),
                subscriber_id=subscriber_id,
                channel_id=channel_id,
                created_at=self._next_time(),
            )
        )

    async def video_like(self, liked_by_id: str, video_id: str) -> str:
        return await self._add(
            LikeORM(id=new_reference(), liked_by_id=liked_by_id, video_id=video_id, created_at=self._next_time())
        )


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
def fk_seed(fk_session_factory):
    return Seeder(fk_session_factory)
