import pytest

from account.application.usecase.channel_query_usecase import ChannelQueryUseCase
from config.settings import FeedSettings
from content.application.usecase.video_query_usecase import VideoQueryUseCase
from relationship.application.usecase.toggle_usecase import ToggleUseCase
from relationship.domain.like import LikeTarget
from shared.domain.errors import InvalidPipelineInput, InvalidReference, NotFound
from shared.domain.reference import new_reference


@pytest.fixture
def videos(runner, content_repo, account_repo):
    return VideoQueryUseCase(runner, content_repo, account_repo, FeedSettings(default_limit=10, max_limit=3))


async def test_feed_pages_are_disjoint_and_hide_unpublished(seed, videos):
    alice = await seed.user("alice")
    hidden = await seed.video(alice, "draft", is_published=False)
    published = [await seed.video(alice, f"clip-{i}") for i in range(5)]

    pages = [await videos.list_videos(page=page, limit=2) for page in (1, 2, 3)]
    ids = [v["id"] for page in pages for v in page]

    assert [len(p) for p in pages] == [2, 2, 1]
    assert ids == list(reversed(published))
    assert hidden not in ids
    assert await videos.list_videos(page=4, limit=2) == []


async def test_feed_attaches_owner_details(seed, videos):
    alice = await seed.user("alice")
    await seed.video(alice, "clip")

    (video,) = await videos.list_videos()

    assert video["owner_details"] == {
        "id": alice,
        "username": "alice",
        "avatar": "https://cdn.example.com/alice.png",
    }


async def test_feed_search_owner_filter_and_sort(seed, videos):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    await seed.video(alice, "cat tricks", views=3)
    await seed.video(bob, "Cats and dogs", views=9)
    await seed.video(bob, "dog park", views=1)

    found = await videos.list_videos(query="cat", sort_by="views", sort_type="asc")
    assert [v["title"] for v in found] == ["cat tricks", "Cats and dogs"]

    owned = await videos.list_videos(owner_id=bob)
    assert {v["title"] for v in owned} == {"Cats and dogs", "dog park"}

    # 형식이 잘못된 소유자 필터는 무시됩니다.
    assert len(await videos.list_videos(owner_id="not-a-reference")) == 3


async def test_feed_limit_is_capped_and_sort_field_checked(seed, videos):
    alice = await seed.user("alice")
    for i in range(5):
        await seed.video(alice, f"clip-{i}")

    assert len(await videos.list_videos(limit=50)) == 3
    with pytest.raises(InvalidPipelineInput):
        await videos.list_videos(sort_by="password")


async def test_video_detail_counts_view_and_records_history(seed, videos, runner, relationship_repo, content_repo):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    video_id = await seed.video(alice, "clip")
    await seed.subscription(bob, alice)
    await ToggleUseCase(relationship_repo).toggle_like(bob, LikeTarget.VIDEO, video_id)

    view = await videos.get_video_detail(video_id, viewer_id=bob)

    assert view.view_counted is True
    assert view.history_recorded is True
    assert view.detail["likes_count"] == 1
    assert view.detail["is_liked"] is True
    assert view.detail["owner"]["username"] == "alice"
    assert view.detail["owner"]["subscriber_count"] == 1
    assert view.detail["owner"]["is_subscribed"] is True
    assert (await content_repo.find_video(video_id)).views == 1

    history = await ChannelQueryUseCase(runner).get_watch_history(bob)
    assert [v["id"] for v in history] == [video_id]
    assert history[0]["owner"]["username"] == "alice"


async def test_anonymous_detail_counts_view_without_history(seed, videos, content_repo):
    alice = await seed.user("alice")
    video_id = await seed.video(alice, "clip")

    view = await videos.get_video_detail(video_id)

    assert view.view_counted is True
    assert view.history_recorded is False
    assert view.detail["is_liked"] is False
    assert (await content_repo.find_video(video_id)).views == 1


async def test_rewatch_moves_video_to_end_of_history(seed, videos, runner):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    first = await seed.video(alice, "first")
    second = await seed.video(alice, "second")

    for video_id in (first, second, first):
        await videos.get_video_detail(video_id, viewer_id=bob)

    history = await ChannelQueryUseCase(runner).get_watch_history(bob)
    assert [v["id"] for v in history] == [second, first]


async def test_unpublished_detail_is_visible_to_owner_only(seed, videos):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    draft = await seed.video(alice, "draft", is_published=False)

    with pytest.raises(NotFound):
        await videos.get_video_detail(draft, viewer_id=bob)
    view = await videos.get_video_detail(draft, viewer_id=alice)
    assert view.detail["title"] == "draft"


async def test_video_detail_errors(videos):
    with pytest.raises(InvalidReference):
        await videos.get_video_detail("42")
    with pytest.raises(NotFound):
        await videos.get_video_detail(new_reference())


async def test_liked_videos_most_recent_first(seed, videos):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    first = await seed.video(alice, "first")
    second = await seed.video(alice, "second")
    await seed.video_like(bob, first)
    await seed.video_like(bob, second)

    liked = await videos.list_liked_videos(bob)

    assert [item["video"]["id"] for item in liked] == [second, first]
    assert liked[0]["video"]["owner_details"] == {
        "username": "alice",
        "full_name": "Alice",
        "avatar": "https://cdn.example.com/alice.png",
    }
    assert set(liked[0]) == {"liked_at", "video"}
    assert await videos.list_liked_videos(alice) == []
