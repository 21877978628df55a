from typing import Optional

from pipeline.application.pipeline_builder import PipelineBuilder
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.domain import collection
from pipeline.domain.expressions import Contains, First, Size
from pipeline.domain.stage import Predicate, SortDirection
from shared.domain.errors import InvalidPipelineInput, NotFound
from shared.domain.reference import require_reference, require_viewer

PUBLIC_USER_FIELDS = {"id": True, "username": True, "full_name": True, "avatar": True}


def _normalize_viewer(viewer_id: Optional[str]) -> Optional[str]:
    # 파생 플래그는 소문자 참조와 비교하므로 조회자 식별자도 같은 형태로 맞춥니다.
    return None if viewer_id is None else require_reference(viewer_id, "viewer id")


class ChannelQueryUseCase:
    def __init__(self, runner: PipelineRunner):
        # 채널 프로필, 시청 기록, 구독 목록 조회를 담당합니다.
        self.runner = runner

    async def get_channel_profile(self, handle: str, viewer_id: Optional[str] = None) -> dict:
        if not handle or not handle.strip():
            raise InvalidPipelineInput("username is missing")
        viewer_id = _normalize_viewer(viewer_id)

        stages = (
            PipelineBuilder()
            .match(Predicate("username", handle.strip().lower(), "ieq"))
            .join(collection.SUBSCRIPTIONS, "id", "channel_id", "subscribers")
            .join(collection.SUBSCRIPTIONS, "id", "subscriber_id", "subscribed_to")
            .derive(
                subscriber_count=Size("subscribers"),
                subscribed_to_count=Size("subscribed_to"),
                is_subscribed=Contains("subscribers.subscriber_id", viewer_id),
            )
            .project(
                {
                    "id": True,
                    "full_name": True,
                    "username": True,
                    "subscriber_count": True,
                    "subscribed_to_count": True,
                    "is_subscribed": True,
                    "avatar": True,
                    "cover_image": True,
                    "email": True,
                }
            )
            .build()
        )
        channels = await self.runner.aggregate(collection.USERS, stages)
        if not channels:
            raise NotFound("channel does not exist")
        return channels[0]

    async def get_watch_history(self, viewer_id: Optional[str]) -> list[dict]:
        viewer_id = require_viewer(viewer_id)
        owner_stages = PipelineBuilder().project(PUBLIC_USER_FIELDS).build()
        video_stages = (
            PipelineBuilder()
            .join(collection.USERS, "owner_id", "id", "owner", owner_stages)
            .derive(owner=First("owner"))
            .build()
        )
        stages = (
            PipelineBuilder()
            .match_reference("id", viewer_id)
            .join(collection.VIDEOS, "watch_history", "id", "watch_history", video_stages)
            .build()
        )
        users = await self.runner.aggregate(collection.USERS, stages)
        if not users:
            raise NotFound("Account not found")
        return users[0]["watch_history"]

    async def list_subscribers(self, channel_id: str, viewer_id: Optional[str] = None) -> list[dict]:
        """채널을 구독한 사용자 목록. is_mutual은 채널도 그 사용자를 구독하는지 여부."""
        return await self._list_edges(
            edge_field="channel_id",
            endpoint_id=channel_id,
            other_field="subscriber_id",
            as_field="subscriber",
            viewer_id=viewer_id,
        )

    async def list_subscribed_channels(self, subscriber_id: str, viewer_id: Optional[str] = None) -> list[dict]:
        """사용자가 구독 중인 채널 목록. is_mutual은 그 채널이 사용자를 맞구독하는지 여부."""
        return await self._list_edges(
            edge_field="subscriber_id",
            endpoint_id=subscriber_id,
            other_field="channel_id",
            as_field="channel",
            viewer_id=viewer_id,
        )

    async def _list_edges(
        self,
        edge_field: str,
        endpoint_id: str,
        other_field: str,
        as_field: str,
        viewer_id: Optional[str],
    ) -> list[dict]:
        endpoint_id = require_reference(endpoint_id, "user id")
        viewer_id = _normalize_viewer(viewer_id)
        user_stages = (
            PipelineBuilder()
            .join(collection.SUBSCRIPTIONS, "id", "channel_id", "subscribers")
            .join(collection.SUBSCRIPTIONS, "id", "subscriber_id", "subscriptions")
            .derive(
                subscriber_count=Size("subscribers"),
                is_mutual=Contains(
                    "subscribers.subscriber_id" if edge_field == "channel_id" else "subscriptions.channel_id",
                    endpoint_id,
                ),
                is_subscribed=Contains("subscribers.subscriber_id", viewer_id),
            )
            .project({**PUBLIC_USER_FIELDS, "subscriber_count": True, "is_mutual": True, "is_subscribed": True})
            .build()
        )
        stages = (
            PipelineBuilder()
            .match_reference(edge_field, endpoint_id)
            .sort("created_at", SortDirection.DESC)
            .join(collection.USERS, other_field, "id", as_field, user_stages)
            .unwind(as_field)
            .project({as_field: True, "subscribed_at": "created_at"})
            .build()
        )
        return await self.runner.aggregate(collection.SUBSCRIPTIONS, stages)
