"""
SQLAlchemy ORM models for TiDB.

Tables:
  users              — profile data (name, avatar)
  follows            — social graph edges (follower → followee)
  audios             — content items with their popularity score
  play_history       — one row per play event, written by playback tracking
  playlists          — user playlists, including the per-user auto "Mix"
  curated_playlists  — editorially assembled playlists, titled by category
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from soundgraph.database import Base
from soundgraph.engine.store import VISIBILITY_PUBLIC


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class Follow(Base):
    """
    A single edge serves both adjacency views: the follower's `followings`
    and the followee's `followers`. Adding or removing the row updates both
    sides at once.
    """
    __tablename__ = "follows"

    follower_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), primary_key=True
    )
    followee_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        # Fast lookup "who follows user X?"
        Index("idx_followee", "followee_id", "created_at"),
    )


class Audio(Base):
    __tablename__ = "audios"

    audio_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    about: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    poster_url: Mapped[Optional[str]] = mapped_column(String(500))
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_audios_owner_created", "owner_id", "created_at"),
        Index("idx_audios_category_likes", "category", "like_count"),
        Index("idx_audios_likes", "like_count"),
    )


class PlayHistory(Base):
    __tablename__ = "play_history"

    history_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    audio_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audios.audio_id"), nullable=False
    )
    # Denormalised at play time so taste inference needs no join
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    played_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_history_owner_played", "owner_id", "played_at"),
    )


class Playlist(Base):
    __tablename__ = "playlists"

    playlist_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # Ordered list[str] of audio ids
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    visibility: Mapped[str] = mapped_column(
        String(10), nullable=False, default=VISIBILITY_PUBLIC
    )  # 'public' | 'private' | 'auto'
    # Title of an auto playlist, NULL otherwise. NULLs never collide, so only
    # auto playlists are unique per (owner, title).
    auto_key: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "auto_key", name="uq_playlists_owner_auto"),
        Index("idx_playlists_owner_visibility", "owner_id", "visibility", "created_at"),
    )


class CuratedPlaylist(Base):
    __tablename__ = "curated_playlists"

    playlist_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    # Doubles as the category tag it is matched against
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
