import logging
from typing import Optional

from content.application.port.content_repository_port import ContentRepositoryPort
from content.domain.playlist import Playlist
from pipeline.application.pipeline_builder import PipelineBuilder
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.domain import collection
from pipeline.domain.expressions import First, Size, SumOf
from pipeline.domain.stage import SortDirection
from shared.domain.errors import Forbidden, InvalidPipelineInput, NotFound
from shared.domain.reference import require_reference, require_viewer

logger = logging.getLogger(__name__)

PLAYLIST_FIELDS = {
    "id": True,
    "name": True,
    "description": True,
    "owner_id": True,
    "created_at": True,
    "updated_at": True,
    "total_videos": True,
    "total_views": True,
}

PLAYLIST_VIDEO_FIELDS = {
    "id": True,
    "title": True,
    "thumbnail": True,
    "duration": True,
    "views": True,
    "created_at": True,
}


class PlaylistUseCase:
    def __init__(self, runner: PipelineRunner, content_repository: ContentRepositoryPort):
        self.runner = runner
        self.repo = content_repository

    async def list_user_playlists(self, owner_id: str) -> list[dict]:
        owner_id = require_reference(owner_id, "user id")
        stages = (
            PipelineBuilder()
            .match_reference("owner_id", owner_id)
            .join(collection.VIDEOS, "video_ids", "id", "videos")
            .derive(total_videos=Size("videos"), total_views=SumOf("videos.views"))
            .sort("updated_at", SortDirection.DESC)
            .project(PLAYLIST_FIELDS)
            .build()
        )
        return await self.runner.aggregate(collection.PLAYLISTS, stages)

    async def get_playlist(self, playlist_id: str) -> dict:
        playlist_id = require_reference(playlist_id, "playlist id")
        owner_stages = PipelineBuilder().project({"id": True, "username": True, "full_name": True, "avatar": True}).build()
        stages = (
            PipelineBuilder()
            .match_reference("id", playlist_id)
            .join(collection.VIDEOS, "video_ids", "id", "videos")
            .join(collection.USERS, "owner_id", "id", "owner", owner_stages)
            .derive(
                total_videos=Size("videos"),
                total_views=SumOf("videos.views"),
                owner=First("owner"),
            )
            .project({**PLAYLIST_FIELDS, "owner": True, "videos": PLAYLIST_VIDEO_FIELDS})
            .build()
        )
        playlists = await self.runner.aggregate(collection.PLAYLISTS, stages)
        if not playlists:
            raise NotFound("Playlist not found")
        return playlists[0]

    async def create_playlist(self, viewer_id: Optional[str], name: str, description: str) -> Playlist:
        owner_id = require_viewer(viewer_id)
        if not name or not name.strip() or not description or not description.strip():
            raise InvalidPipelineInput("name and description are required")
        return await self.repo.save_playlist(
            Playlist(name=name.strip(), description=description.strip(), owner_id=owner_id)
        )

    async def update_playlist(
        self,
        viewer_id: Optional[str],
        playlist_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Playlist:
        owner_id = require_viewer(viewer_id)
        playlist_id = require_reference(playlist_id, "playlist id")
        changes = {}
        if name is not None and name.strip():
            changes["name"] = name.strip()
        if description is not None and description.strip():
            changes["description"] = description.strip()
        if not changes:
            raise InvalidPipelineInput("Nothing to update")

        updated = await self.repo.update_owned_playlist(playlist_id, owner_id, changes)
        if updated is None:
            await self._raise_missing_or_forbidden(playlist_id, owner_id)
        return updated

    async def delete_playlist(self, viewer_id: Optional[str], playlist_id: str) -> None:
        owner_id = require_viewer(viewer_id)
        playlist_id = require_reference(playlist_id, "playlist id")
        if not await self.repo.delete_owned_playlist(playlist_id, owner_id):
            await self._raise_missing_or_forbidden(playlist_id, owner_id)

    async def add_video(self, viewer_id: Optional[str], playlist_id: str, video_id: str) -> Playlist:
        owner_id = require_viewer(viewer_id)
        playlist_id = require_reference(playlist_id, "playlist id")
        video_id = require_reference(video_id, "video id")
        if await self.repo.find_video(video_id) is None:
            raise NotFound("Video not found")

        updated = await self.repo.add_video_to_owned_playlist(playlist_id, owner_id, video_id)
        if updated is None:
            await self._raise_missing_or_forbidden(playlist_id, owner_id)
        return updated

    async def remove_video(self, viewer_id: Optional[str], playlist_id: str, video_id: str) -> Playlist:
        owner_id = require_viewer(viewer_id)
        playlist_id = require_reference(playlist_id, "playlist id")
        video_id = require_reference(video_id, "video id")
        updated = await self.repo.remove_video_from_owned_playlist(playlist_id, owner_id, video_id)
        if updated is None:
            await self._raise_missing_or_forbidden(playlist_id, owner_id)
        return updated

    async def _raise_missing_or_forbidden(self, playlist_id: str, owner_id: str) -> None:
        if await self.repo.find_playlist(playlist_id) is None:
            raise NotFound("Playlist not found")
        logger.info("playlist %s mutation refused for %s", playlist_id, owner_id)
        raise Forbidden("Only the owner can modify this playlist")
