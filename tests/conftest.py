"""
pytest fixtures: an in-memory SQLite database per test, a SqlStorage bound
to it, a Seeder for building users / content / history, and an HTTP client
for the FastAPI app with its DB and randomness dependencies overridden.
"""
import os
import random
from datetime import datetime, timedelta
from typing import Optional

# Keep the OTLP exporter out of test runs; must be set before settings load
os.environ.setdefault("TRACING_ENABLED", "false")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from soundgraph.database import Base, get_db
from soundgraph.dependencies import get_rng
from soundgraph.engine.store import VISIBILITY_PUBLIC
from soundgraph.models import Audio, CuratedPlaylist, PlayHistory, Playlist, User
from soundgraph.storage import SqlStorage

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


class Seeder:
    """Inserts rows the way the owning services would, then flushes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def user(self, name: str = "listener", avatar_url: Optional[str] = None) -> User:
        user = User(name=name, avatar_url=avatar_url, created_at=BASE_TIME)
        self.db.add(user)
        await self.db.flush()
        return user

    async def audio(
        self,
        owner: User,
        category: str = "rock",
        likes: int = 0,
        title: Optional[str] = None,
        audio_id: Optional[str] = None,
        age_hours: int = 0,
    ) -> Audio:
        kwargs = {"audio_id": audio_id} if audio_id else {}
        audio = Audio(
            owner_id=owner.user_id,
            title=title or f"{category} track",
            about=f"about {category}",
            category=category,
            file_url=f"https://cdn.test/{category}.mp3",
            poster_url=f"https://cdn.test/{category}.jpg",
            like_count=likes,
            created_at=BASE_TIME - timedelta(hours=age_hours),
            **kwargs,
        )
        self.db.add(audio)
        await self.db.flush()
        return audio

    async def play(self, user: User, audio: Audio, played_at: Optional[datetime] = None) -> None:
        self.db.add(
            PlayHistory(
                owner_id=user.user_id,
                audio_id=audio.audio_id,
                category=audio.category,
                played_at=played_at or BASE_TIME,
            )
        )
        await self.db.flush()

    async def curated(self, title: str, items: int = 3) -> CuratedPlaylist:
        playlist = CuratedPlaylist(
            title=title,
            items=[f"{title}-{i}" for i in range(items)],
            created_at=BASE_TIME,
        )
        self.db.add(playlist)
        await self.db.flush()
        return playlist

    async def playlist(
        self,
        owner: User,
        title: str,
        items: list[str],
        visibility: str = VISIBILITY_PUBLIC,
        auto_key: Optional[str] = None,
        age_hours: int = 0,
    ) -> Playlist:
        created = BASE_TIME - timedelta(hours=age_hours)
        playlist = Playlist(
            owner_id=owner.user_id,
            title=title,
            items=items,
            visibility=visibility,
            auto_key=auto_key,
            created_at=created,
            updated_at=created,
        )
        self.db.add(playlist)
        await self.db.flush()
        return playlist


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db):
    return SqlStorage(db)


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
async def client(session_factory, rng):
    from soundgraph.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rng] = lambda: rng
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
