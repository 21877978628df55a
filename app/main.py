import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from account.adapter.input.web.account_router import account_router
from config.database.session import init_db_schema
from config.settings import AppSettings
from content.adapter.input.web.playlist_router import playlist_router
from content.adapter.input.web.video_router import video_router
from relationship.adapter.input.web.like_router import like_router
from relationship.adapter.input.web.subscription_router import subscription_router
from shared.domain.errors import (
    Conflict,
    DomainError,
    Forbidden,
    InvalidPipelineInput,
    InvalidReference,
    NotFound,
    StoreUnavailable,
    UnsupportedTargetKind,
)

settings = AppSettings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidReference: 400,
    InvalidPipelineInput: 400,
    NotFound: 404,
    Forbidden: 403,
    Conflict: 409,
    UnsupportedTargetKind: 501,
    StoreUnavailable: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan 훅에서 DB 스키마를 준비합니다.
    """
    # DB 스키마 미존재 시 자동 생성하여 UndefinedTable 오류를 예방합니다.
    await init_db_schema()
    yield


app = FastAPI(title="VidTube Server", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"kind": exc.kind, "message": exc.message})


app.include_router(account_router, prefix="/users")
app.include_router(video_router, prefix="/videos")
app.include_router(subscription_router, prefix="/subscriptions")
app.include_router(like_router, prefix="/likes")
app.include_router(playlist_router, prefix="/playlists")


@app.get("/health")
def health_check() -> dict[str, str]:
    """
    헬스체크 엔드포인트입니다.
    """
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
