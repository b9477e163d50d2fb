"""
SQLAlchemy implementation of the engine's Storage contract.

Every method runs on the request's AsyncSession, so all reads and writes of
one engine call share a single transaction; the router commits it. Reads
select plain columns and build records from rows, which keeps ORM objects
(and their lazy-loading attributes) out of the engine.
"""
import functools
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from soundgraph.engine.errors import StorageFailure
from soundgraph.engine.store import (
    AudioRecord,
    HistoryRecord,
    PlaylistRecord,
    Relation,
    Storage,
    UserRecord,
)
from soundgraph.models import Audio, CuratedPlaylist, Follow, PlayHistory, Playlist, User

logger = logging.getLogger(__name__)


def _translate_errors(fn):
    """Re-raise SQLAlchemy errors as StorageFailure, keeping the cause."""

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except IntegrityError as exc:
            logger.warning("Write conflict in %s: %s", fn.__name__, exc.orig)
            raise StorageFailure(f"Write conflict in {fn.__name__}") from exc
        except SQLAlchemyError as exc:
            logger.error("Storage error in %s: %s", fn.__name__, exc)
            raise StorageFailure(f"Storage unavailable ({fn.__name__})") from exc

    return wrapper


def _audio_columns():
    return select(
        Audio.audio_id,
        Audio.title,
        Audio.about,
        Audio.category,
        Audio.file_url,
        Audio.poster_url,
        Audio.owner_id,
        User.name.label("owner_name"),
        Audio.like_count,
        Audio.created_at,
    ).join(User, User.user_id == Audio.owner_id)


def _audio_record(row) -> AudioRecord:
    return AudioRecord(
        audio_id=row.audio_id,
        title=row.title,
        about=row.about,
        category=row.category,
        file_url=row.file_url,
        poster_url=row.poster_url,
        owner_id=row.owner_id,
        owner_name=row.owner_name,
        like_count=row.like_count,
        created_at=row.created_at,
    )


class SqlStorage(Storage):
    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Users / follow graph ───────────────────────────────────────────────

    @_translate_errors
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        row = (
            await self.db.execute(
                select(User.user_id, User.name, User.avatar_url).where(
                    User.user_id == user_id
                )
            )
        ).one_or_none()
        if row is None:
            return None
        return UserRecord(user_id=row.user_id, name=row.name, avatar_url=row.avatar_url)

    @_translate_errors
    async def toggle_relation(self, follower_id: str, followee_id: str) -> bool:
        """
        Read the edge under a row lock, then delete or insert it.

        The single row is both adjacency views, so one DELETE / INSERT inside
        the request transaction updates followers and followings together.
        Two concurrent "absent → add" toggles collide on the primary key and
        the loser surfaces as StorageFailure instead of a duplicate edge.
        """
        edge = (
            await self.db.execute(
                select(Follow)
                .where(
                    Follow.follower_id == follower_id,
                    Follow.followee_id == followee_id,
                )
                .with_for_update()
            )
        ).scalar_one_or_none()

        if edge is not None:
            await self.db.delete(edge)
            await self.db.flush()
            return False

        self.db.add(Follow(follower_id=follower_id, followee_id=followee_id))
        await self.db.flush()
        return True

    @_translate_errors
    async def is_following(self, follower_id: str, followee_id: str) -> bool:
        found = await self.db.scalar(
            select(func.count())
            .select_from(Follow)
            .where(
                Follow.follower_id == follower_id,
                Follow.followee_id == followee_id,
            )
        )
        return bool(found)

    @_translate_errors
    async def count_relation(self, owner_id: str, relation: Relation) -> int:
        owner_col = Follow.followee_id if relation is Relation.FOLLOWERS else Follow.follower_id
        count = await self.db.scalar(
            select(func.count()).select_from(Follow).where(owner_col == owner_id)
        )
        return int(count or 0)

    @_translate_errors
    async def page_relation(
        self, owner_id: str, relation: Relation, skip: int, limit: int
    ) -> list[UserRecord]:
        if limit == 0:
            return []

        if relation is Relation.FOLLOWERS:
            owner_col, other_col = Follow.followee_id, Follow.follower_id
        else:
            owner_col, other_col = Follow.follower_id, Follow.followee_id

        # Explicit order: when the edge was created, then the related user's id
        rows = await self.db.execute(
            select(User.user_id, User.name, User.avatar_url)
            .join(Follow, other_col == User.user_id)
            .where(owner_col == owner_id)
            .order_by(Follow.created_at.asc(), other_col.asc())
            .offset(skip)
            .limit(limit)
        )
        return [
            UserRecord(user_id=r.user_id, name=r.name, avatar_url=r.avatar_url)
            for r in rows.all()
        ]

    # ── Content ────────────────────────────────────────────────────────────

    @_translate_errors
    async def top_content(
        self, categories: Optional[frozenset[str]], limit: int
    ) -> list[AudioRecord]:
        stmt = _audio_columns()
        if categories:
            stmt = stmt.where(Audio.category.in_(sorted(categories)))
        stmt = stmt.order_by(Audio.like_count.desc(), Audio.audio_id.asc()).limit(limit)
        rows = await self.db.execute(stmt)
        return [_audio_record(r) for r in rows.all()]

    @_translate_errors
    async def query_content(self, owner_id: str, skip: int, limit: int) -> list[AudioRecord]:
        if limit == 0:
            return []
        rows = await self.db.execute(
            _audio_columns()
            .where(Audio.owner_id == owner_id)
            .order_by(Audio.created_at.desc(), Audio.audio_id.asc())
            .offset(skip)
            .limit(limit)
        )
        return [_audio_record(r) for r in rows.all()]

    # ── History ────────────────────────────────────────────────────────────

    @_translate_errors
    async def get_history(
        self, user_id: str, since: Optional[datetime] = None
    ) -> list[HistoryRecord]:
        stmt = select(PlayHistory.audio_id, PlayHistory.category, PlayHistory.played_at).where(
            PlayHistory.owner_id == user_id
        )
        if since is not None:
            stmt = stmt.where(PlayHistory.played_at >= since)
        rows = await self.db.execute(
            stmt.order_by(PlayHistory.played_at.asc(), PlayHistory.history_id.asc())
        )
        return [
            HistoryRecord(audio_id=r.audio_id, category=r.category, played_at=r.played_at)
            for r in rows.all()
        ]

    # ── Playlists ──────────────────────────────────────────────────────────

    @_translate_errors
    async def upsert_playlist(
        self, owner_id: str, title: str, items: list[str], visibility: str
    ) -> PlaylistRecord:
        items = list(items)
        playlist = (
            await self.db.execute(
                select(Playlist)
                .where(Playlist.owner_id == owner_id, Playlist.auto_key == title)
                .with_for_update()
            )
        ).scalar_one_or_none()

        if playlist is None:
            playlist_id = str(uuid.uuid4())
            self.db.add(
                Playlist(
                    playlist_id=playlist_id,
                    owner_id=owner_id,
                    title=title,
                    items=items,
                    visibility=visibility,
                    auto_key=title,
                )
            )
            logger.debug("Created playlist %r for %s", title, owner_id)
        else:
            playlist_id = playlist.playlist_id
            playlist.items = items
            playlist.visibility = visibility

        await self.db.flush()
        return PlaylistRecord(
            playlist_id=playlist_id,
            title=title,
            items=items,
            visibility=visibility,
            owner_id=owner_id,
        )

    @_translate_errors
    async def find_playlist(self, owner_id: str, title: str) -> Optional[PlaylistRecord]:
        row = (
            await self.db.execute(
                select(
                    Playlist.playlist_id, Playlist.title, Playlist.items, Playlist.visibility
                ).where(Playlist.owner_id == owner_id, Playlist.auto_key == title)
            )
        ).one_or_none()
        if row is None:
            return None
        return PlaylistRecord(
            playlist_id=row.playlist_id,
            title=row.title,
            items=list(row.items or []),
            visibility=row.visibility,
            owner_id=owner_id,
        )

    @_translate_errors
    async def list_playlists(
        self, owner_id: str, visibility: str, skip: int, limit: int
    ) -> list[PlaylistRecord]:
        if limit == 0:
            return []
        rows = await self.db.execute(
            select(Playlist.playlist_id, Playlist.title, Playlist.items, Playlist.visibility)
            .where(Playlist.owner_id == owner_id, Playlist.visibility == visibility)
            .order_by(Playlist.created_at.desc(), Playlist.playlist_id.asc())
            .offset(skip)
            .limit(limit)
        )
        return [
            PlaylistRecord(
                playlist_id=r.playlist_id,
                title=r.title,
                items=list(r.items or []),
                visibility=r.visibility,
                owner_id=owner_id,
            )
            for r in rows.all()
        ]

    @_translate_errors
    async def curated_playlists(
        self, titles: Optional[frozenset[str]] = None
    ) -> list[PlaylistRecord]:
        stmt = select(CuratedPlaylist.playlist_id, CuratedPlaylist.title, CuratedPlaylist.items)
        if titles:
            stmt = stmt.where(CuratedPlaylist.title.in_(sorted(titles)))
        rows = await self.db.execute(stmt.order_by(CuratedPlaylist.playlist_id.asc()))
        return [
            PlaylistRecord(playlist_id=r.playlist_id, title=r.title, items=list(r.items or []))
            for r in rows.all()
        ]
