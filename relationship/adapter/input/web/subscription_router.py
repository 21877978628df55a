from fastapi import APIRouter, Depends

from account.application.usecase.channel_query_usecase import ChannelQueryUseCase
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.infrastructure.sql_document_store import SqlDocumentStore
from relationship.application.usecase.toggle_usecase import ToggleUseCase
from relationship.infrastructure.repository.relationship_repository_impl import RelationshipRepositoryImpl
from shared.adapter.input.web.viewer import get_viewer_id

subscription_router = APIRouter(tags=["subscriptions"])
toggle_usecase = ToggleUseCase(RelationshipRepositoryImpl())
channel_usecase = ChannelQueryUseCase(PipelineRunner(SqlDocumentStore()))


@subscription_router.post("/c/{channel_id}")
async def toggle_subscription(channel_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    result = await toggle_usecase.toggle_subscription(viewer_id, channel_id)
    return {"subscribed": result.active}


@subscription_router.get("/c/{channel_id}")
async def list_channel_subscribers(channel_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    return await channel_usecase.list_subscribers(channel_id, viewer_id)


@subscription_router.get("/u/{subscriber_id}")
async def list_subscribed_channels(subscriber_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    return await channel_usecase.list_subscribed_channels(subscriber_id, viewer_id)
