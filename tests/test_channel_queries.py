import pytest

from account.application.usecase.channel_query_usecase import ChannelQueryUseCase
from relationship.application.usecase.toggle_usecase import ToggleUseCase
from shared.domain.errors import Forbidden, InvalidPipelineInput, NotFound
from shared.domain.reference import new_reference


@pytest.fixture
def channels(runner):
    return ChannelQueryUseCase(runner)


@pytest.fixture
def toggles(relationship_repo):
    return ToggleUseCase(relationship_repo)


async def test_subscribe_then_view_profile(seed, channels, toggles):
    alice = await seed.user("alice")
    bob = await seed.user("bob")

    result = await toggles.toggle_subscription(bob, alice)
    assert result.active is True

    profile = await channels.get_channel_profile("ALICE", viewer_id=bob)
    assert profile["id"] == alice
    assert profile["subscriber_count"] == 1
    assert profile["subscribed_to_count"] == 0
    assert profile["is_subscribed"] is True
    assert "subscribers" not in profile

    anonymous = await channels.get_channel_profile("alice")
    assert anonymous["is_subscribed"] is False

    result = await toggles.toggle_subscription(bob, alice)
    assert result.active is False
    profile = await channels.get_channel_profile("alice", viewer_id=bob)
    assert profile["subscriber_count"] == 0
    assert profile["is_subscribed"] is False


async def test_repeated_toggles_keep_a_single_edge(seed, channels, toggles):
    alice = await seed.user("alice")
    bob = await seed.user("bob")

    for _ in range(3):
        await toggles.toggle_subscription(bob, alice)

    profile = await channels.get_channel_profile("alice")
    assert profile["subscriber_count"] == 1


async def test_profile_lookup_errors(seed, channels):
    await seed.user("alice")
    with pytest.raises(NotFound):
        await channels.get_channel_profile("nobody")
    with pytest.raises(InvalidPipelineInput):
        await channels.get_channel_profile("   ")


async def test_subscriber_listings_flag_mutual_subscriptions(seed, channels):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    carol = await seed.user("carol")
    await seed.subscription(bob, alice)
    await seed.subscription(carol, alice)
    await seed.subscription(alice, bob)

    subscribers = await channels.list_subscribers(alice, viewer_id=carol)

    # 최근 구독이 먼저
    assert [s["subscriber"]["username"] for s in subscribers] == ["carol", "bob"]
    by_name = {s["subscriber"]["username"]: s for s in subscribers}
    assert by_name["bob"]["subscriber"]["is_mutual"] is True
    assert by_name["carol"]["subscriber"]["is_mutual"] is False
    assert by_name["bob"]["subscriber"]["subscriber_count"] == 1
    assert by_name["carol"]["subscriber"]["is_subscribed"] is False
    assert all(s["subscribed_at"] is not None for s in subscribers)

    subscribed = await channels.list_subscribed_channels(bob)
    assert len(subscribed) == 1
    assert subscribed[0]["channel"]["id"] == alice
    assert subscribed[0]["channel"]["is_mutual"] is True
    assert subscribed[0]["channel"]["subscriber_count"] == 2


async def test_watch_history_requires_a_known_viewer(channels):
    with pytest.raises(Forbidden):
        await channels.get_watch_history(None)
    with pytest.raises(NotFound):
        await channels.get_watch_history(new_reference())


async def test_flags_do_not_depend_on_reference_case(seed, channels):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    await seed.subscription(bob, alice)
    await seed.subscription(alice, bob)

    profile = await channels.get_channel_profile("alice", viewer_id=bob.upper())
    assert profile["is_subscribed"] is True

    for channel_id in (alice, alice.upper()):
        (entry,) = await channels.list_subscribers(channel_id, viewer_id=alice.upper())
        assert entry["subscriber"]["id"] == bob
        assert entry["subscriber"]["is_mutual"] is True
        assert entry["subscriber"]["is_subscribed"] is True

    (entry,) = await channels.list_subscribed_channels(bob.upper())
    assert entry["channel"]["is_mutual"] is True
