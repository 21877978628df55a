from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from account.infrastructure.repository.account_repository_impl import AccountRepositoryImpl
from config.settings import FeedSettings
from content.application.usecase.video_query_usecase import VideoQueryUseCase
from content.application.usecase.video_usecase import VideoUseCase
from content.infrastructure.client.s3_media_storage import S3MediaStorage
from content.infrastructure.repository.content_repository_impl import ContentRepositoryImpl
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.infrastructure.sql_document_store import SqlDocumentStore
from shared.adapter.input.web.upload import to_media_upload
from shared.adapter.input.web.viewer import get_viewer_id

video_router = APIRouter(tags=["videos"])

# 영상 조회/변경 유즈케이스 싱글턴
feed_settings = FeedSettings()
repository = ContentRepositoryImpl()
query_usecase = VideoQueryUseCase(
    PipelineRunner(SqlDocumentStore()),
    repository,
    AccountRepositoryImpl(),
    feed_settings,
)
usecase = VideoUseCase(repository, S3MediaStorage())


def _video_to_dict(video):
    return {
        "id": video.id,
        "title": video.title,
        "description": video.description,
        "video_file": video.video_file,
        "thumbnail": video.thumbnail,
        "owner_id": video.owner_id,
        "duration": video.duration,
        "views": video.views,
        "is_published": video.is_published,
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


@video_router.get("")
async def list_videos(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=feed_settings.default_limit, ge=1),
    query: str | None = Query(default=None, description="제목/설명 검색어"),
    sort_by: str = Query(default="created_at"),
    sort_type: str = Query(default="desc", description="asc 또는 desc"),
    user_id: str | None = Query(default=None, description="채널(소유자) 필터"),
):
    videos = await query_usecase.list_videos(
        page=page,
        limit=limit,
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        owner_id=user_id,
    )
    return {"page": page, "limit": min(limit, feed_settings.max_limit), "items": videos}


@video_router.post("", status_code=201)
async def publish_video(
    title: str = Form(..., max_length=255),
    description: str = Form(..., max_length=5000),
    duration: float | None = Form(default=None, ge=0),
    video_file: UploadFile = File(...),
    thumbnail: UploadFile = File(...),
    viewer_id: str | None = Depends(get_viewer_id),
):
    video = await usecase.publish_video(
        viewer_id,
        title=title,
        description=description,
        video_upload=to_media_upload(video_file),
        thumbnail_upload=to_media_upload(thumbnail),
        duration=duration,
    )
    return _video_to_dict(video)


@video_router.get("/{video_id}")
async def get_video(video_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    view = await query_usecase.get_video_detail(video_id, viewer_id)
    return view.detail


@video_router.patch("/{video_id}")
async def update_video(
    video_id: str,
    title: str | None = Form(default=None, max_length=255),
    description: str | None = Form(default=None, max_length=5000),
    thumbnail: UploadFile | None = File(default=None),
    viewer_id: str | None = Depends(get_viewer_id),
):
    video = await usecase.update_video(
        viewer_id,
        video_id,
        title=title,
        description=description,
        thumbnail_upload=to_media_upload(thumbnail) if thumbnail else None,
    )
    return _video_to_dict(video)


@video_router.delete("/{video_id}")
async def delete_video(video_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    await usecase.delete_video(viewer_id, video_id)
    return {"deleted": True}


@video_router.patch("/toggle/publish/{video_id}")
async def toggle_publish_status(video_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    video = await usecase.toggle_publish_status(viewer_id, video_id)
    return {"id": video.id, "is_published": video.is_published}
