from relationship.application.usecase.toggle_usecase import ToggleUseCase
from relationship.domain.like import Like, LikeTarget
from relationship.domain.subscription import Subscription
from shared.domain.reference import new_reference


async def test_create_reports_existing_edge(seed, relationship_repo):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    edge = Subscription(subscriber_id=bob, channel_id=alice)

    assert await relationship_repo.create(edge) is True
    assert await relationship_repo.create(edge) is False
    assert await relationship_repo.exists(edge) is True


async def test_delete_reports_whether_a_row_was_removed(seed, relationship_repo):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    edge = Subscription(subscriber_id=bob, channel_id=alice)
    await relationship_repo.create(edge)

    assert await relationship_repo.delete(edge) is True
    assert await relationship_repo.delete(edge) is False
    assert await relationship_repo.exists(edge) is False


async def test_video_and_comment_likes_share_the_table(seed, relationship_repo):
    alice = await seed.user("alice")
    video_id = await seed.video(alice, "clip")
    comment_id = new_reference()
    toggles = ToggleUseCase(relationship_repo)

    assert (await toggles.toggle_like(alice, LikeTarget.VIDEO, video_id)).active is True
    assert (await toggles.toggle_like(alice, LikeTarget.COMMENT, comment_id)).active is True
    assert await relationship_repo.exists(Like(alice, LikeTarget.COMMENT, comment_id)) is True

    assert (await toggles.toggle_like(alice, LikeTarget.VIDEO, video_id)).active is False
    assert await relationship_repo.exists(Like(alice, LikeTarget.VIDEO, video_id)) is False
    assert await relationship_repo.exists(Like(alice, LikeTarget.COMMENT, comment_id)) is True
