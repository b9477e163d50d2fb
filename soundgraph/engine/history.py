"""Taste inference from listening history."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from soundgraph.engine.store import Storage

logger = logging.getLogger(__name__)


class HistoryProfiler:
    def __init__(self, store: Storage, lookback_days: Optional[int] = None):
        self.store = store
        self.lookback_days = lookback_days

    def _since(self) -> Optional[datetime]:
        if not self.lookback_days:
            return None
        # Stored timestamps are naive UTC
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        return now - timedelta(days=self.lookback_days)

    async def infer_categories(self, user_id: str) -> frozenset[str]:
        """
        Distinct categories of everything `user_id` has played.

        Empty for a user without history; callers treat that as "use the
        global fallback", not as an error.
        """
        history = await self.store.get_history(user_id, since=self._since())
        # Kept verbatim: they are matched against Audio.category and curated titles as stored
        categories = frozenset(
            entry.category for entry in history if entry.category and entry.category.strip()
        )
        logger.debug("Inferred %d categories for %s", len(categories), user_id)
        return categories

    async def played_audio_ids(self, user_id: str) -> list[str]:
        """Distinct audio ids `user_id` has played, in order of first play."""
        history = await self.store.get_history(user_id)
        return list(dict.fromkeys(entry.audio_id for entry in history))
