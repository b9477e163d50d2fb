import random
import uuid

import pytest
from sqlalchemy import func, select

from soundgraph.engine.errors import InvalidArgument, NotFound
from soundgraph.engine.history import HistoryProfiler
from soundgraph.engine.playlists import PlaylistGenerator
from soundgraph.engine.store import VISIBILITY_AUTO
from soundgraph.models import Playlist


def _generator(store, rng=None):
    return PlaylistGenerator(store, HistoryProfiler(store), rng=rng or random.Random(7))


async def _listener_with_plays(seed, categories):
    artist = await seed.user("artist")
    listener = await seed.user("listener")
    audios = []
    for category in categories:
        audio = await seed.audio(artist, category)
        await seed.play(listener, audio)
        audios.append(audio)
    return listener, audios


async def test_mix_takes_every_track_of_a_small_history(store, seed):
    listener, audios = await _listener_with_plays(seed, ["rock"] * 5)
    # replays do not count twice
    await seed.play(listener, audios[0])
    await seed.play(listener, audios[3])

    await _generator(store).generate_for_user(listener.user_id)

    mix = await store.find_playlist(listener.user_id, "Mix20")
    assert mix.visibility == VISIBILITY_AUTO
    assert len(mix.items) == 5
    assert set(mix.items) == {a.audio_id for a in audios}


async def test_mix_is_capped_and_never_repeats(store, seed):
    listener, audios = await _listener_with_plays(seed, ["rock"] * 30)

    await _generator(store).generate_for_user(listener.user_id)

    mix = await store.find_playlist(listener.user_id, "Mix20")
    assert len(mix.items) == 20
    assert len(set(mix.items)) == 20
    assert set(mix.items) <= {a.audio_id for a in audios}


async def test_same_seed_same_mix(store, seed):
    listener, _ = await _listener_with_plays(seed, ["rock"] * 25)

    await _generator(store, random.Random(99)).generate_for_user(listener.user_id)
    first = (await store.find_playlist(listener.user_id, "Mix20")).items
    await _generator(store, random.Random(99)).generate_for_user(listener.user_id)
    second = (await store.find_playlist(listener.user_id, "Mix20")).items

    assert first == second


async def test_mix_is_upserted_not_duplicated(store, seed, db):
    listener, _ = await _listener_with_plays(seed, ["rock"] * 3)
    generator = _generator(store)

    first = await generator.generate_for_user(listener.user_id)
    second = await generator.generate_for_user(listener.user_id)

    count = await db.scalar(
        select(func.count()).select_from(Playlist).where(Playlist.owner_id == listener.user_id)
    )
    assert count == 1
    assert first[-1].id == second[-1].id
    assert second[-1].title == "Mix20"
    assert second[-1].items_count == 3


async def test_no_history_no_mix_entry(store, seed):
    newcomer = await seed.user("newcomer")
    await seed.curated("rock")

    shelf = await _generator(store).generate_for_user(newcomer.user_id)

    assert [p.title for p in shelf] == ["rock"]
    assert await store.find_playlist(newcomer.user_id, "Mix20") is None


async def test_stale_mix_is_kept_when_history_is_gone(store, seed):
    user = await seed.user("listener")
    await seed.playlist(user, "Mix20", ["old-1", "old-2"], visibility=VISIBILITY_AUTO, auto_key="Mix20")

    shelf = await _generator(store).generate_for_user(user.user_id)

    assert [(p.title, p.items_count) for p in shelf] == [("Mix20", 2)]
    assert (await store.find_playlist(user.user_id, "Mix20")).items == ["old-1", "old-2"]


async def test_user_playlist_with_mix_title_is_not_the_mix(store, seed):
    listener, _ = await _listener_with_plays(seed, ["rock"])
    await seed.playlist(listener, "Mix20", ["mine-1", "mine-2", "mine-3"])

    shelf = await _generator(store).generate_for_user(listener.user_id)

    assert shelf[-1].items_count == 1
    count = await store.db.scalar(
        select(func.count()).select_from(Playlist).where(Playlist.owner_id == listener.user_id)
    )
    assert count == 2


async def test_curated_sample_matches_taste(store, seed):
    listener, _ = await _listener_with_plays(seed, ["rock", "jazz"])
    for title in ["rock", "jazz", "pop", "rock", "classical"]:
        await seed.curated(title, items=4)

    shelf = await _generator(store).generate_for_user(listener.user_id)

    curated, mix = shelf[:-1], shelf[-1]
    assert sorted(p.title for p in curated) == ["jazz", "rock", "rock"]
    assert all(p.items_count == 4 for p in curated)
    assert mix.title == "Mix20"


async def test_curated_sample_is_capped_and_distinct(store, seed):
    newcomer = await seed.user("newcomer")
    created = [await seed.curated(f"genre-{i}") for i in range(7)]

    shelf = await _generator(store).generate_for_user(newcomer.user_id)

    assert len(shelf) == 4
    assert len({p.id for p in shelf}) == 4
    assert {p.id for p in shelf} <= {c.playlist_id for c in created}


async def test_no_matching_curated_playlists(store, seed):
    listener, _ = await _listener_with_plays(seed, ["ambient"])
    await seed.curated("rock")

    shelf = await _generator(store).generate_for_user(listener.user_id)

    assert [p.title for p in shelf] == ["Mix20"]


async def test_unknown_or_malformed_user(store):
    with pytest.raises(NotFound):
        await _generator(store).generate_for_user(str(uuid.uuid4()))
    with pytest.raises(InvalidArgument):
        await _generator(store).generate_for_user("42")


async def test_padded_category_matches_curated_title(store, seed):
    listener, _ = await _listener_with_plays(seed, [" lo-fi "])
    await seed.curated(" lo-fi ")
    await seed.curated("lo-fi")

    shelf = await _generator(store).generate_for_user(listener.user_id)

    assert [p.title for p in shelf] == [" lo-fi ", "Mix20"]
