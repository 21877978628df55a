import io

import pytest

from account.application.usecase.channel_query_usecase import ChannelQueryUseCase
from content.application.usecase.playlist_usecase import PlaylistUseCase
from content.application.usecase.video_query_usecase import VideoQueryUseCase
from content.application.usecase.video_usecase import VideoUseCase
from content.domain.media import MediaUpload
from fakes import FakeMediaStorage
from shared.domain.errors import Forbidden, InvalidPipelineInput, NotFound
from shared.domain.reference import new_reference


@pytest.fixture
def storage():
    return FakeMediaStorage(duration=42.5)


@pytest.fixture
def videos(content_repo, storage):
    return VideoUseCase(content_repo, storage)


def _upload(name):
    return MediaUpload(file=io.BytesIO(b"data"), filename=name, content_type="application/octet-stream")


async def test_publish_video_uploads_media(seed, videos, storage):
    alice = await seed.user("alice")

    video = await videos.publish_video(alice, " Title ", "Description", _upload("clip.mp4"), _upload("thumb.jpg"))

    assert video.id is not None
    assert video.title == "Title"
    assert video.owner_id == alice
    assert video.duration == 42.5
    assert video.video_file == f"https://media.test/videos/{alice}/clip.mp4"
    assert video.thumbnail == f"https://media.test/thumbnails/{alice}/thumb.jpg"
    assert video.views == 0
    assert video.is_published is True


async def test_publish_requires_viewer_and_fields(videos):
    with pytest.raises(Forbidden):
        await videos.publish_video(None, "t", "d", _upload("a.mp4"), _upload("a.jpg"))
    with pytest.raises(InvalidPipelineInput):
        await videos.publish_video(new_reference(), "", "d", _upload("a.mp4"), _upload("a.jpg"))


async def test_non_owner_cannot_change_video(seed, videos, content_repo):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    video_id = await seed.video(alice, "clip")

    with pytest.raises(Forbidden):
        await videos.update_video(bob, video_id, title="stolen")
    with pytest.raises(Forbidden):
        await videos.toggle_publish_status(bob, video_id)
    with pytest.raises(Forbidden):
        await videos.delete_video(bob, video_id)

    video = await content_repo.find_video(video_id)
    assert video.title == "clip"
    assert video.is_published is True


async def test_missing_video_is_not_found(videos):
    with pytest.raises(NotFound):
        await videos.update_video(new_reference(), new_reference(), title="x")
    with pytest.raises(NotFound):
        await videos.delete_video(new_reference(), new_reference())


async def test_owner_updates_and_toggles_publish(seed, videos, storage):
    alice = await seed.user("alice")
    video_id = await seed.video(alice, "clip")

    updated = await videos.update_video(alice, video_id, title="new title", thumbnail_upload=_upload("t.png"))
    assert updated.title == "new title"
    assert updated.description == "a video"
    assert updated.thumbnail == f"https://media.test/thumbnails/{alice}/t.png"

    toggled = await videos.toggle_publish_status(alice, video_id)
    assert toggled.is_published is False
    toggled = await videos.toggle_publish_status(alice, video_id)
    assert toggled.is_published is True

    with pytest.raises(InvalidPipelineInput):
        await videos.update_video(alice, video_id)


async def test_delete_video_removes_references(seed, videos, runner, content_repo, account_repo):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    video_id = await seed.video(alice, "clip")
    await seed.video_like(bob, video_id)
    await account_repo.record_watch(bob, video_id)
    playlists = PlaylistUseCase(runner, content_repo)
    playlist = await playlists.create_playlist(alice, "mix", "favourites")
    await playlists.add_video(alice, playlist.id, video_id)

    await videos.delete_video(alice, video_id)

    assert await content_repo.find_video(video_id) is None
    assert (await content_repo.find_playlist(playlist.id)).video_ids == []
    assert await ChannelQueryUseCase(runner).get_watch_history(bob) == []
    assert await VideoQueryUseCase(runner, content_repo, account_repo).list_liked_videos(bob) == []


async def test_client_duration_wins_and_unknown_duration_is_zero(seed, content_repo):
    alice = await seed.user("alice")

    video = await VideoUseCase(content_repo, FakeMediaStorage(duration=42.5)).publish_video(
        alice, "clip", "a video", _upload("a.mp4"), _upload("a.jpg"), duration=12.0
    )
    assert video.duration == 12.0

    video = await VideoUseCase(content_repo, FakeMediaStorage()).publish_video(
        alice, "clip", "a video", _upload("b.mp4"), _upload("b.jpg")
    )
    assert video.duration == 0.0
