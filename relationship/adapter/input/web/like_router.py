from fastapi import APIRouter, Depends

from account.infrastructure.repository.account_repository_impl import AccountRepositoryImpl
from content.application.usecase.video_query_usecase import VideoQueryUseCase
from content.infrastructure.repository.content_repository_impl import ContentRepositoryImpl
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.infrastructure.sql_document_store import SqlDocumentStore
from relationship.application.usecase.toggle_usecase import ToggleUseCase
from relationship.domain.like import LikeTarget
from relationship.infrastructure.repository.relationship_repository_impl import RelationshipRepositoryImpl
from shared.adapter.input.web.viewer import get_viewer_id

like_router = APIRouter(tags=["likes"])
toggle_usecase = ToggleUseCase(RelationshipRepositoryImpl())
query_usecase = VideoQueryUseCase(
    PipelineRunner(SqlDocumentStore()),
    ContentRepositoryImpl(),
    AccountRepositoryImpl(),
)


@like_router.post("/toggle/v/{video_id}")
async def toggle_video_like(video_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    result = await toggle_usecase.toggle_like(viewer_id, LikeTarget.VIDEO, video_id)
    return {"liked": result.active}


@like_router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(comment_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    result = await toggle_usecase.toggle_like(viewer_id, LikeTarget.COMMENT, comment_id)
    return {"liked": result.active}


@like_router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(tweet_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    result = await toggle_usecase.toggle_like(viewer_id, LikeTarget.TWEET, tweet_id)
    return {"liked": result.active}


@like_router.get("/videos")
async def list_liked_videos(viewer_id: str | None = Depends(get_viewer_id)):
    return await query_usecase.list_liked_videos(viewer_id)
