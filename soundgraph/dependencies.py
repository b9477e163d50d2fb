"""
FastAPI dependency wiring for the engine components.

FastAPI caches a dependency within one request, so every component built
for a request shares the same SqlStorage (and therefore the same session
and transaction).
"""
import random

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from soundgraph.config import settings
from soundgraph.database import get_db
from soundgraph.engine.follow_graph import FollowGraphManager
from soundgraph.engine.graph_pager import GraphPager
from soundgraph.engine.history import HistoryProfiler
from soundgraph.engine.playlists import PlaylistGenerator
from soundgraph.engine.profiles import ProfileDirectory
from soundgraph.engine.recommendations import RecommendationEngine
from soundgraph.engine.store import Storage
from soundgraph.storage import SqlStorage

_rng = random.Random()


def get_rng() -> random.Random:
    return _rng


def get_storage(db: AsyncSession = Depends(get_db)) -> Storage:
    return SqlStorage(db)


def get_profiler(store: Storage = Depends(get_storage)) -> HistoryProfiler:
    return HistoryProfiler(store, lookback_days=settings.history_lookback_days)


def get_follow_graph(store: Storage = Depends(get_storage)) -> FollowGraphManager:
    return FollowGraphManager(store)


def get_graph_pager(store: Storage = Depends(get_storage)) -> GraphPager:
    return GraphPager(store, max_page_size=settings.max_page_size)


def get_profile_directory(store: Storage = Depends(get_storage)) -> ProfileDirectory:
    return ProfileDirectory(store, max_page_size=settings.max_page_size)


def get_recommendation_engine(
    store: Storage = Depends(get_storage),
    profiler: HistoryProfiler = Depends(get_profiler),
) -> RecommendationEngine:
    return RecommendationEngine(store, profiler, limit=settings.recommendation_limit)


def get_playlist_generator(
    store: Storage = Depends(get_storage),
    profiler: HistoryProfiler = Depends(get_profiler),
    rng: random.Random = Depends(get_rng),
) -> PlaylistGenerator:
    return PlaylistGenerator(
        store,
        profiler,
        rng=rng,
        mix_title=settings.mix_title,
        mix_size=settings.mix_size,
        curated_sample_size=settings.curated_sample_size,
    )
