from fastapi import APIRouter, Depends

from content.adapter.input.web.request.playlist_requests import CreatePlaylistRequest, UpdatePlaylistRequest
from content.application.usecase.playlist_usecase import PlaylistUseCase
from content.infrastructure.repository.content_repository_impl import ContentRepositoryImpl
from pipeline.application.pipeline_runner import PipelineRunner
from pipeline.infrastructure.sql_document_store import SqlDocumentStore
from shared.adapter.input.web.viewer import get_viewer_id

playlist_router = APIRouter(tags=["playlists"])
usecase = PlaylistUseCase(PipelineRunner(SqlDocumentStore()), ContentRepositoryImpl())


def _playlist_to_dict(playlist):
    return {
        "id": playlist.id,
        "name": playlist.name,
        "description": playlist.description,
        "owner_id": playlist.owner_id,
        "video_ids": playlist.video_ids,
        "created_at": playlist.created_at,
        "updated_at": playlist.updated_at,
    }


@playlist_router.post("", status_code=201)
async def create_playlist(request: CreatePlaylistRequest, viewer_id: str | None = Depends(get_viewer_id)):
    playlist = await usecase.create_playlist(viewer_id, request.name, request.description)
    return _playlist_to_dict(playlist)


@playlist_router.get("/user/{user_id}")
async def list_user_playlists(user_id: str):
    return await usecase.list_user_playlists(user_id)


@playlist_router.get("/{playlist_id}")
async def get_playlist(playlist_id: str):
    return await usecase.get_playlist(playlist_id)


@playlist_router.patch("/{playlist_id}")
async def update_playlist(
    playlist_id: str,
    request: UpdatePlaylistRequest,
    viewer_id: str | None = Depends(get_viewer_id),
):
    playlist = await usecase.update_playlist(viewer_id, playlist_id, request.name, request.description)
    return _playlist_to_dict(playlist)


@playlist_router.delete("/{playlist_id}")
async def delete_playlist(playlist_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    await usecase.delete_playlist(viewer_id, playlist_id)
    return {"deleted": True}


@playlist_router.patch("/add/{video_id}/{playlist_id}")
async def add_video_to_playlist(video_id: str, playlist_id: str, viewer_id: str | None = Depends(get_viewer_id)):
    playlist = await usecase.add_video(viewer_id, playlist_id, video_id)
    return _playlist_to_dict(playlist)


@playlist_router.patch("/remove/{video_id}/{playlist_id}")
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    viewer_id: str | None = Depends(get_viewer_id),
):
    playlist = await usecase.remove_video(viewer_id, playlist_id, video_id)
    return _playlist_to_dict(playlist)
