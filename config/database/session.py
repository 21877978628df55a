import asyncio
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from config.settings import DatabaseSettings
from shared.domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)

settings = DatabaseSettings()


def _engine_options(url: str) -> dict:
    # asyncpg는 쿼리 단위 타임아웃을 지원하므로 저장소 호출 시간을 제한합니다.
    if url.startswith("postgresql+asyncpg"):
        return {
            "pool_timeout": settings.pool_timeout,
            "connect_args": {"command_timeout": settings.command_timeout},
        }
    return {}


engine = create_async_engine(
    settings.url,
    echo=settings.echo,
    pool_pre_ping=True,
    **_engine_options(settings.url),
)

SessionLocal = async_sessionmaker(engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


@asynccontextmanager
async def open_session(session_factory=SessionLocal):
    """
    요청 단위 세션을 열고, 저장소 I/O 실패와 타임아웃을 StoreUnavailable로 변환합니다.
    IntegrityError는 유일성 경합 처리를 위해 리포지토리가 직접 다루도록 그대로 전달합니다.
    """
    try:
        async with session_factory() as db:
            yield db
    except IntegrityError:
        raise
    except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
        logger.error("store call failed: %s", exc)
        raise StoreUnavailable("Store is unavailable, try again later") from exc


async def init_db_schema(bind=engine):
    """
    애플리케이션 기동 시 테이블이 없을 경우를 대비해 스키마를 생성합니다.
    """
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
