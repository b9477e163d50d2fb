"""
Personalised content recommendations.

  Known listener with history │ most liked content in the categories they
                              │ have played
  ────────────────────────────┼──────────────────────────────────────────────
  Anonymous / no history      │ most liked content overall

Ties on like count are broken by audio id so results are reproducible.
"""
import logging
import time
from typing import Optional

from opentelemetry import trace

from soundgraph.engine.errors import NotFound
from soundgraph.engine.history import HistoryProfiler
from soundgraph.engine.store import AudioRecord, Storage
from soundgraph.engine.validation import require_id
from soundgraph.schemas import OwnerSummary, RecommendedAudio
from soundgraph.telemetry import RECOMMENDATION_LATENCY, RECOMMENDATION_REQUESTS_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _project(audio: AudioRecord) -> RecommendedAudio:
    return RecommendedAudio(
        id=audio.audio_id,
        title=audio.title,
        category=audio.category,
        about=audio.about,
        file=audio.file_url,
        poster=audio.poster_url,
        owner=OwnerSummary(id=audio.owner_id, name=audio.owner_name),
    )


class RecommendationEngine:
    def __init__(self, store: Storage, profiler: HistoryProfiler, limit: int = 10):
        self.store = store
        self.profiler = profiler
        self.limit = limit

    async def recommend(self, actor_id: Optional[str] = None) -> list[RecommendedAudio]:
        start_time = time.perf_counter()

        if actor_id is not None:
            actor_id = require_id(actor_id, "user id")

        with tracer.start_as_current_span("recommend") as span:
            categories: frozenset[str] = frozenset()
            if actor_id is not None:
                span.set_attribute("user.id", actor_id)
                if await self.store.get_user(actor_id) is None:
                    raise NotFound("User not found!")
                categories = await self.profiler.infer_categories(actor_id)

            strategy = "personal" if categories else "global"
            span.set_attribute("recommend.strategy", strategy)
            span.set_attribute("recommend.categories", sorted(categories))

            audios = await self.store.top_content(categories or None, self.limit)
            span.set_attribute("recommend.returned", len(audios))

        RECOMMENDATION_REQUESTS_TOTAL.labels(strategy=strategy).inc()
        RECOMMENDATION_LATENCY.observe(time.perf_counter() - start_time)
        if strategy == "global":
            logger.debug("No taste signal for %s, serving global popularity", actor_id or "anonymous")

        return [_project(a) for a in audios]
