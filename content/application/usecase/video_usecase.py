import logging
from typing import Optional

from content.application.port.content_repository_port import ContentRepositoryPort
from content.application.port.media_storage_port import MediaStoragePort
from content.domain.media import MediaUpload
from content.domain.video import Video
from shared.domain.errors import Forbidden, InvalidPipelineInput, NotFound
from shared.domain.reference import require_reference, require_viewer

logger = logging.getLogger(__name__)


class VideoUseCase:
    def __init__(self, content_repository: ContentRepositoryPort, media_storage: MediaStoragePort):
        self.repo = content_repository
        self.media_storage = media_storage

    async def publish_video(
        self,
        viewer_id: Optional[str],
        title: str,
        description: str,
        video_upload: MediaUpload,
        thumbnail_upload: MediaUpload,
        duration: Optional[float] = None,
    ) -> Video:
        owner_id = require_viewer(viewer_id)
        if not title or not title.strip() or not description or not description.strip():
            raise InvalidPipelineInput("title and description are required")

        stored_video = await self.media_storage.upload(video_upload, f"videos/{owner_id}")
        stored_thumbnail = await self.media_storage.upload(thumbnail_upload, f"thumbnails/{owner_id}")
        if duration is None:
            duration = stored_video.duration
        if duration is None:
            # 재생 시간은 업로드하는 클라이언트가 알려 주어야 합니다.
            logger.warning("duration of the uploaded video from %s is unknown, storing 0", owner_id)
            duration = 0.0

        video = Video(
            title=title.strip(),
            description=description.strip(),
            video_file=stored_video.url,
            thumbnail=stored_thumbnail.url,
            owner_id=owner_id,
            duration=duration,
        )
        saved = await self.repo.save_video(video)
        logger.info("video %s published by %s", saved.id, owner_id)
        return saved

    async def update_video(
        self,
        viewer_id: Optional[str],
        video_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_upload: Optional[MediaUpload] = None,
    ) -> Video:
        owner_id = require_viewer(viewer_id)
        video_id = require_reference(video_id, "video id")

        changes = {}
        if title is not None and title.strip():
            changes["title"] = title.strip()
        if description is not None and description.strip():
            changes["description"] = description.strip()
        if not changes and thumbnail_upload is None:
            raise InvalidPipelineInput("Nothing to update")
        if thumbnail_upload is not None:
            stored = await self.media_storage.upload(thumbnail_upload, f"thumbnails/{owner_id}")
            changes["thumbnail"] = stored.url

        updated = await self.repo.update_owned_video(video_id, owner_id, changes)
        if updated is None:
            await self._raise_missing_or_forbidden(video_id, owner_id)
        return updated

    async def delete_video(self, viewer_id: Optional[str], video_id: str) -> None:
        owner_id = require_viewer(viewer_id)
        video_id = require_reference(video_id, "video id")
        if not await self.repo.delete_owned_video(video_id, owner_id):
            await self._raise_missing_or_forbidden(video_id, owner_id)
        logger.info("video %s deleted by %s", video_id, owner_id)

    async def toggle_publish_status(self, viewer_id: Optional[str], video_id: str) -> Video:
        owner_id = require_viewer(viewer_id)
        video_id = require_reference(video_id, "video id")
        toggled = await self.repo.toggle_owned_video_publish(video_id, owner_id)
        if toggled is None:
            await self._raise_missing_or_forbidden(video_id, owner_id)
        return toggled

    async def _raise_missing_or_forbidden(self, video_id: str, owner_id: str) -> None:
        # 조건부 쓰기가 아무 행도 건드리지 않았을 때만 다시 읽어서 원인을 구분합니다.
        if await self.repo.find_video(video_id) is None:
            raise NotFound("Video not found")
        logger.info("video %s mutation refused for %s", video_id, owner_id)
        raise Forbidden("Only the owner can modify this video")
