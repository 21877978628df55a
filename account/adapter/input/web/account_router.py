from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, Field

from account.application.usecase.account_usecase import AccountUseCase
from account.application.usecase.channel_query_usecase import ChannelQueryUseCase
from account.infrastructure.repository.account_repository_impl import AccountRepositoryImpl
from content.infrastructure.client.s3_media_storage import S3MediaStorage
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.infrastructure.sql_document_store import SqlDocumentStore
from shared.adapter.input.web.upload import to_media_upload
from shared.adapter.input.web.viewer import get_viewer_id

account_router = APIRouter(tags=["users"])
usecase = AccountUseCase(AccountRepositoryImpl(), S3MediaStorage())
channel_usecase = ChannelQueryUseCase(PipelineRunner(SqlDocumentStore()))


class RegisterChannelRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    email: str = Field(min_length=3, max_length=255)
    full_name: str = Field(min_length=1, max_length=255)
    avatar: str | None = Field(default=None, max_length=1024)
    cover_image: str | None = Field(default=None, max_length=1024)


class UpdateAccountRequest(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)


def _account_to_dict(account):
    return {
        "id": account.id,
        "username": account.username,
        "email": account.email,
        "full_name": account.full_name,
        "avatar": account.avatar,
        "cover_image": account.cover_image,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


@account_router.post("/register", status_code=201)
async def register_channel(request: RegisterChannelRequest):
    account = await usecase.register_channel(
        username=request.username,
        email=request.email,
        full_name=request.full_name,
        avatar=request.avatar,
        cover_image=request.cover_image,
    )
    return _account_to_dict(account)


@account_router.get("/c/{username}")
async def get_channel_profile(username: str, viewer_id: str | None = Depends(get_viewer_id)):
    return await channel_usecase.get_channel_profile(username, viewer_id)


@account_router.get("/history")
async def get_watch_history(viewer_id: str | None = Depends(get_viewer_id)):
    return await channel_usecase.get_watch_history(viewer_id)


@account_router.get("/me")
async def get_current_account(viewer_id: str | None = Depends(get_viewer_id)):
    return _account_to_dict(await usecase.get_account(viewer_id))


@account_router.patch("/me")
async def update_account_details(request: UpdateAccountRequest, viewer_id: str | None = Depends(get_viewer_id)):
    account = await usecase.update_account_details(
        viewer_id,
        full_name=request.full_name,
        email=request.email,
    )
    return _account_to_dict(account)


@account_router.patch("/me/avatar")
async def update_avatar(avatar: UploadFile = File(...), viewer_id: str | None = Depends(get_viewer_id)):
    account = await usecase.update_avatar(viewer_id, to_media_upload(avatar))
    return _account_to_dict(account)


@account_router.patch("/me/cover-image")
async def update_cover_image(cover_image: UploadFile = File(...), viewer_id: str | None = Depends(get_viewer_id)):
    account = await usecase.update_cover_image(viewer_id, to_media_upload(cover_image))
    return _account_to_dict(account)
