import logging
from typing import Optional

from account.application.port.account_repository_port import AccountRepositoryPort
from config.settings import FeedSettings
from content.application.port.content_repository_port import ContentRepositoryPort
from content.domain.video_view import VideoView
from pipeline.application.pipeline_builder import PipelineBuilder
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.domain import collection
from pipeline.domain.expressions import Contains, First, Size
from pipeline.domain.stage import Predicate, SortDirection
from shared.domain.errors import InvalidPipelineInput, NotFound, StoreUnavailable
from shared.domain.reference import is_valid_reference, require_reference, require_viewer

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "views", "duration", "title")
SEARCH_FIELDS = ("title", "description")

VIDEO_FIELDS = {
    "id": True,
    "video_file": True,
    "thumbnail": True,
    "title": True,
    "description": True,
    "duration": True,
    "views": True,
    "is_published": True,
    "owner_id": True,
    "created_at": True,
}


class VideoQueryUseCase:
    def __init__(
        self,
        runner: PipelineRunner,
        content_repository: ContentRepositoryPort,
        account_repository: AccountRepositoryPort,
        feed_settings: Optional[FeedSettings] = None,
    ):
        self.runner = runner
        self.content_repo = content_repository
        self.account_repo = account_repository
        self.feed_settings = feed_settings or FeedSettings()

    async def list_videos(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        query: Optional[str] = None,
        sort_by: str = "created_at",
        sort_type: str = "desc",
        owner_id: Optional[str] = None,
    ) -> list[dict]:
        """
        검색 → 소유자 필터 → 정렬 → 페이지 → 소유자 조인 → 공개 영상만.
        공개 여부는 페이지를 자른 뒤에 거르므로 한 페이지가 limit보다 짧을 수 있습니다.
        """
        if limit is None:
            limit = self.feed_settings.default_limit
        limit = min(limit, self.feed_settings.max_limit)
        sort_by = sort_by or "created_at"
        if sort_by not in SORTABLE_FIELDS:
            raise InvalidPipelineInput(f"Cannot sort videos by {sort_by}")

        builder = PipelineBuilder()
        if query and query.strip():
            builder.search(query, SEARCH_FIELDS)
        # 형식이 잘못된 owner_id는 필터 없이 무시합니다.
        if owner_id and is_valid_reference(owner_id):
            builder.match_reference("owner_id", owner_id, scope=True)

        owner_stages = PipelineBuilder().project({"id": True, "username": True, "avatar": True}).build()
        stages = (
            builder.sort(sort_by, SortDirection.parse(sort_type))
            .paginate(page, limit)
            .join(collection.USERS, "owner_id", "id", "owner_details", owner_stages)
            .unwind("owner_details")
            .match(Predicate("is_published", True))
            .build()
        )
        return await self.runner.aggregate(collection.VIDEOS, stages)

    async def get_video_detail(self, video_id: str, viewer_id: Optional[str] = None) -> VideoView:
        video_id = require_reference(video_id, "video id")
        if viewer_id is not None:
            viewer_id = require_reference(viewer_id, "viewer id")

        owner_stages = (
            PipelineBuilder()
            .join(collection.SUBSCRIPTIONS, "id", "channel_id", "subscribers")
            .derive(
                subscriber_count=Size("subscribers"),
                is_subscribed=Contains("subscribers.subscriber_id", viewer_id),
            )
            .project(
                {
                    "id": True,
                    "username": True,
                    "full_name": True,
                    "avatar": True,
                    "subscriber_count": True,
                    "is_subscribed": True,
                }
            )
            .build()
        )
        stages = (
            PipelineBuilder()
            .match_reference("id", video_id)
            .join(collection.LIKES, "id", "video_id", "likes")
            .join(collection.USERS, "owner_id", "id", "owner", owner_stages)
            .derive(
                likes_count=Size("likes"),
                is_liked=Contains("likes.liked_by_id", viewer_id),
                owner=First("owner"),
            )
            .project({**VIDEO_FIELDS, "owner": True, "likes_count": True, "is_liked": True})
            .build()
        )
        videos = await self.runner.aggregate(collection.VIDEOS, stages)
        if not videos:
            raise NotFound("Video not found")
        detail = videos[0]
        if not detail.get("is_published") and detail.get("owner_id") != viewer_id:
            raise NotFound("Video not found")

        view = VideoView(detail=detail)
        try:
            view.view_counted = await self.content_repo.increment_views(video_id)
        except StoreUnavailable as exc:
            logger.warning("view count for video %s was not recorded: %s", video_id, exc.message)
        if viewer_id is not None:
            try:
                view.history_recorded = await self.account_repo.record_watch(viewer_id, video_id)
            except StoreUnavailable as exc:
                logger.warning("watch history for %s was not recorded: %s", viewer_id, exc.message)
        return view

    async def list_liked_videos(self, viewer_id: Optional[str]) -> list[dict]:
        viewer_id = require_viewer(viewer_id)
        owner_stages = PipelineBuilder().project({"username": True, "full_name": True, "avatar": True}).build()
        video_stages = (
            PipelineBuilder()
            .join(collection.USERS, "owner_id", "id", "owner_details", owner_stages)
            .unwind("owner_details")
            .build()
        )
        stages = (
            PipelineBuilder()
            .match_reference("liked_by_id", viewer_id)
            .match(Predicate("video_id", True, "exists"))
            .join(collection.VIDEOS, "video_id", "id", "video", video_stages)
            .unwind("video")
            .sort("created_at", SortDirection.DESC)
            .project(
                {
                    "liked_at": "created_at",
                    "video": {
                        **VIDEO_FIELDS,
                        "owner_details": {"username": True, "full_name": True, "avatar": True},
                    },
                }
            )
            .build()
        )
        return await self.runner.aggregate(collection.LIKES, stages)
