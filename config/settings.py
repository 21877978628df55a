import os
import urllib.parse
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()


def _default_database_url() -> str:
    # DATABASE_URL이 없으면 SQL_* 환경 변수로 asyncpg 접속 문자열을 조립합니다.
    password = urllib.parse.quote_plus(os.getenv("SQL_PASSWORD", ""))
    return (
        f"postgresql+asyncpg://{os.getenv('SQL_USER', 'postgres')}:{password}"
        f"@{os.getenv('SQL_HOST', 'localhost')}:{os.getenv('SQL_PORT', '5432')}"
        f"/{os.getenv('SQL_DATABASE', 'vidtube')}"
    )


@dataclass
class DatabaseSettings:
    url: str = os.getenv("DATABASE_URL") or _default_database_url()
    echo: bool = os.getenv("SQL_ECHO", "false").lower() == "true"
    command_timeout: float = float(os.getenv("SQL_COMMAND_TIMEOUT", "10"))
    pool_timeout: float = float(os.getenv("SQL_POOL_TIMEOUT", "30"))


@dataclass
class S3Settings:
    bucket: str | None = os.getenv("AWS_S3_BUCKET")
    region: str | None = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
    access_key_id: str | None = os.getenv("AWS_ACCESS_KEY_ID")
    secret_access_key: str | None = os.getenv("AWS_SECRET_ACCESS_KEY")


@dataclass
class FeedSettings:
    default_limit: int = int(os.getenv("FEED_DEFAULT_LIMIT", "10"))
    max_limit: int = int(os.getenv("FEED_MAX_LIMIT", "100"))


@dataclass
class AppSettings:
    host: str = os.getenv("APP_HOST", "0.0.0.0")
    port: int = int(os.getenv("APP_PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: list[str] = field(
        default_factory=lambda: [
            origin for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if origin
        ]
    )
