import uuid

import pytest
from sqlalchemy.exc import OperationalError

from soundgraph.engine.errors import InconsistentState, InvalidArgument, NotFound, StorageFailure
from soundgraph.engine.follow_graph import FollowGraphManager, FollowStatus
from soundgraph.engine.store import Relation
from soundgraph.models import Follow
from soundgraph.storage import SqlStorage


async def _views(store, a, b):
    """(a in b.followers, b in a.followings)"""
    followers = await store.page_relation(b.user_id, Relation.FOLLOWERS, 0, 100)
    followings = await store.page_relation(a.user_id, Relation.FOLLOWINGS, 0, 100)
    return (
        a.user_id in {u.user_id for u in followers},
        b.user_id in {u.user_id for u in followings},
    )


async def test_follow_then_unfollow(store, seed):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    graph = FollowGraphManager(store)

    assert await graph.toggle_follow(alice.user_id, bob.user_id) is FollowStatus.ADDED
    assert await _views(store, alice, bob) == (True, True)

    assert await graph.toggle_follow(alice.user_id, bob.user_id) is FollowStatus.REMOVED
    assert await _views(store, alice, bob) == (False, False)


@pytest.mark.parametrize("already_following", [False, True])
@pytest.mark.parametrize("times", [1, 2, 3, 4, 5])
async def test_toggle_parity_keeps_views_symmetric(store, seed, db, times, already_following):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    if already_following:
        db.add(Follow(follower_id=alice.user_id, followee_id=bob.user_id))
        await db.flush()
    graph = FollowGraphManager(store)

    for _ in range(times):
        await graph.toggle_follow(alice.user_id, bob.user_id)

    # an even number of toggles restores the starting state
    follows = already_following != (times % 2 == 1)
    assert await _views(store, alice, bob) == (follows, follows)
    # the reverse direction is untouched
    assert await _views(store, bob, alice) == (False, False)


async def test_following_is_directed(store, seed):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    graph = FollowGraphManager(store)

    await graph.toggle_follow(alice.user_id, bob.user_id)
    assert await graph.toggle_follow(bob.user_id, alice.user_id) is FollowStatus.ADDED

    assert await store.count_relation(alice.user_id, Relation.FOLLOWERS) == 1
    assert await store.count_relation(alice.user_id, Relation.FOLLOWINGS) == 1


async def test_self_follow_rejected(store, seed):
    alice = await seed.user("alice")
    with pytest.raises(InvalidArgument):
        await FollowGraphManager(store).toggle_follow(alice.user_id, alice.user_id)


@pytest.mark.parametrize("bad_id", ["", "not-an-id", "1234", None])
async def test_malformed_ids_rejected(store, seed, bad_id):
    alice = await seed.user("alice")
    graph = FollowGraphManager(store)
    with pytest.raises(InvalidArgument):
        await graph.toggle_follow(alice.user_id, bad_id)
    with pytest.raises(InvalidArgument):
        await graph.toggle_follow(bad_id, alice.user_id)


async def test_missing_target_or_actor(store, seed):
    alice = await seed.user("alice")
    graph = FollowGraphManager(store)
    ghost = str(uuid.uuid4())

    with pytest.raises(NotFound):
        await graph.toggle_follow(alice.user_id, ghost)
    with pytest.raises(NotFound):
        await graph.toggle_follow(ghost, alice.user_id)
    assert await store.count_relation(alice.user_id, Relation.FOLLOWINGS) == 0


class _LyingStorage(SqlStorage):
    async def is_following(self, follower_id, followee_id):
        return False


async def test_toggle_verifies_resulting_edge(db, seed):
    alice = await seed.user("alice")
    bob = await seed.user("bob")
    with pytest.raises(InconsistentState):
        await FollowGraphManager(_LyingStorage(db)).toggle_follow(alice.user_id, bob.user_id)


class _DisconnectedSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))


async def test_storage_errors_surface_as_storage_failure():
    store = SqlStorage(_DisconnectedSession())
    with pytest.raises(StorageFailure) as excinfo:
        await FollowGraphManager(store).toggle_follow(str(uuid.uuid4()), str(uuid.uuid4()))
    assert isinstance(excinfo.value.__cause__, OperationalError)
