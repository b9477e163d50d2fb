"""
Auto-generated playlists for a listener's home shelf.

  1. Personal mix: a random sample (without replacement) of up to
     `mix_size` distinct tracks from the listener's history, written to the
     single auto playlist titled `mix_title`. No history means no write; an
     earlier mix is left as it was.
  2. Curated sample: up to `curated_sample_size` curated playlists whose
     title matches one of the listener's categories (any curated playlist
     when nothing can be inferred).

The shelf is the curated sample followed by the mix, if the listener has one.
Randomness comes from an injected `random.Random` so callers (and tests)
control reproducibility.
"""
import logging
import random
from typing import Optional

from opentelemetry import trace

from soundgraph.engine.errors import NotFound
from soundgraph.engine.history import HistoryProfiler
from soundgraph.engine.store import VISIBILITY_AUTO, PlaylistRecord, Storage
from soundgraph.engine.validation import require_id
from soundgraph.schemas import PlaylistSummary
from soundgraph.telemetry import MIX_PLAYLISTS_GENERATED_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _summary(playlist: PlaylistRecord) -> PlaylistSummary:
    return PlaylistSummary(
        id=playlist.playlist_id,
        title=playlist.title,
        items_count=playlist.items_count,
    )


class PlaylistGenerator:
    def __init__(
        self,
        store: Storage,
        profiler: HistoryProfiler,
        rng: Optional[random.Random] = None,
        mix_title: str = "Mix20",
        mix_size: int = 20,
        curated_sample_size: int = 4,
    ):
        self.store = store
        self.profiler = profiler
        self.rng = rng or random.Random()
        self.mix_title = mix_title
        self.mix_size = mix_size
        self.curated_sample_size = curated_sample_size

    async def refresh_mix(self, user_id: str) -> Optional[PlaylistRecord]:
        """Rewrite the personal mix from history. Returns None if there is no history."""
        played = await self.profiler.played_audio_ids(user_id)
        if not played:
            return None

        items = self.rng.sample(played, min(self.mix_size, len(played)))
        mix = await self.store.upsert_playlist(user_id, self.mix_title, items, VISIBILITY_AUTO)
        MIX_PLAYLISTS_GENERATED_TOTAL.inc()
        logger.info("Mix %r for %s refreshed with %d items", self.mix_title, user_id, len(items))
        return mix

    async def sample_curated(self, user_id: str) -> list[PlaylistSummary]:
        categories = await self.profiler.infer_categories(user_id)
        candidates = await self.store.curated_playlists(categories or None)
        picked = self.rng.sample(candidates, min(self.curated_sample_size, len(candidates)))
        return [_summary(p) for p in picked]

    async def generate_for_user(self, user_id: str) -> list[PlaylistSummary]:
        user_id = require_id(user_id, "user id")

        with tracer.start_as_current_span("generate_playlists") as span:
            span.set_attribute("user.id", user_id)
            if await self.store.get_user(user_id) is None:
                raise NotFound("User not found!")

            await self.refresh_mix(user_id)
            shelf = await self.sample_curated(user_id)
            span.set_attribute("playlists.curated", len(shelf))

            # Re-read so a mix written by an earlier call still shows up
            mix = await self.store.find_playlist(user_id, self.mix_title)
            span.set_attribute("playlists.has_mix", mix is not None)
            if mix is not None:
                shelf.append(_summary(mix))

        return shelf
