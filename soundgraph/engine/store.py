"""
Storage contract consumed by the engine.

The engine only ever talks to a `Storage`; `soundgraph.storage.SqlStorage`
is the production implementation. Records are plain frozen dataclasses so
nothing ORM-bound (lazy attributes, sessions) leaks into engine code.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"
VISIBILITY_AUTO = "auto"


class Relation(str, Enum):
    FOLLOWERS = "followers"
    FOLLOWINGS = "followings"


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    name: str
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class AudioRecord:
    audio_id: str
    title: str
    about: Optional[str]
    category: str
    file_url: str
    poster_url: Optional[str]
    owner_id: str
    owner_name: str
    like_count: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class HistoryRecord:
    audio_id: str
    category: str
    played_at: Optional[datetime] = None


@dataclass(frozen=True)
class PlaylistRecord:
    playlist_id: str
    title: str
    items: list[str] = field(default_factory=list)
    visibility: Optional[str] = None
    owner_id: Optional[str] = None

    @property
    def items_count(self) -> int:
        return len(self.items)


class Storage(ABC):
    """Async persistence interface for users, the follow graph, content and playlists."""

    # ── Users / follow graph ───────────────────────────────────────────────

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def toggle_relation(self, follower_id: str, followee_id: str) -> bool:
        """
        Atomically flip the follower → followee edge.

        Returns True if the edge was added, False if it was removed. Both
        adjacency views must change together or not at all.
        """

    @abstractmethod
    async def is_following(self, follower_id: str, followee_id: str) -> bool:
        ...

    @abstractmethod
    async def count_relation(self, owner_id: str, relation: Relation) -> int:
        ...

    @abstractmethod
    async def page_relation(
        self, owner_id: str, relation: Relation, skip: int, limit: int
    ) -> list[UserRecord]:
        """Profiles on one side of `owner_id`'s edges, in a stable order."""

    # ── Content ────────────────────────────────────────────────────────────

    @abstractmethod
    async def top_content(
        self, categories: Optional[frozenset[str]], limit: int
    ) -> list[AudioRecord]:
        """Most liked content, optionally restricted to `categories`."""

    @abstractmethod
    async def query_content(self, owner_id: str, skip: int, limit: int) -> list[AudioRecord]:
        """Content uploaded by `owner_id`, newest first."""

    # ── History ────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_history(
        self, user_id: str, since: Optional[datetime] = None
    ) -> list[HistoryRecord]:
        """Play events of `user_id` in play order."""

    # ── Playlists ──────────────────────────────────────────────────────────

    @abstractmethod
    async def upsert_playlist(
        self, owner_id: str, title: str, items: list[str], visibility: str
    ) -> PlaylistRecord:
        """Create or overwrite the single upserted playlist keyed by (owner_id, title)."""

    @abstractmethod
    async def find_playlist(self, owner_id: str, title: str) -> Optional[PlaylistRecord]:
        """The playlist previously written by `upsert_playlist` for (owner_id, title)."""

    @abstractmethod
    async def list_playlists(
        self, owner_id: str, visibility: str, skip: int, limit: int
    ) -> list[PlaylistRecord]:
        ...

    @abstractmethod
    async def curated_playlists(
        self, titles: Optional[frozenset[str]] = None
    ) -> list[PlaylistRecord]:
        """Curated playlists, restricted to `titles` when given."""
