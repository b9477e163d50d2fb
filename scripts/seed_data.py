#!/usr/bin/env python3
"""
Seed script — creates a realistic dataset for trying out the engine.

Creates:
  • 10 users
  • A follow graph (each user follows 4 others)
  • 5 audios per user (50 total) spread over a handful of categories
  • Listening history (15-30 plays per user, biased to 1-2 categories)
  • One curated playlist per category

Content, history and curated playlists are owned by other services, so the
script writes straight to the database instead of going through the API:
  python scripts/seed_data.py --database-url mysql+aiomysql://root@localhost:4000/soundgraph

All IDs are printed so you can use them in curl commands.
"""
import argparse
import asyncio
import random
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from soundgraph.config import settings
from soundgraph.database import Base
from soundgraph.engine.store import VISIBILITY_PRIVATE, VISIBILITY_PUBLIC
from soundgraph.models import Audio, CuratedPlaylist, Follow, PlayHistory, Playlist, User

BASE_USERS = [
    ("Alice Chen", "https://cdn.example.com/avatars/alice.jpg"),
    ("Bob Martinez", None),
    ("Carol Singh", "https://cdn.example.com/avatars/carol.jpg"),
    ("Dave Kim", None),
    ("Eve Johnson", "https://cdn.example.com/avatars/eve.jpg"),
    ("Frank Williams", None),
    ("Grace Li", "https://cdn.example.com/avatars/grace.jpg"),
    ("Henry Brown", None),
    ("Iris Davis", "https://cdn.example.com/avatars/iris.jpg"),
    ("Jack Wilson", None),
]

CATEGORIES = ["Arts", "Business", "Education", "Entertainment", "Kids & Family", "Music", "Science"]

SAMPLE_TITLES = [
    "Morning Routine", "Deep Focus", "The Long Interview", "Weekly Roundup",
    "Late Night Jam", "Field Recordings", "Q&A Session", "Behind the Scenes",
    "Story Time", "Acoustic Sketches", "Market Watch", "Lab Notes",
]


async def seed(database_url: str, rng: random.Random) -> None:
    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as db:
        # ── Create users ─────────────────────────────────────────────────
        print("Creating users...")
        users = [User(name=name, avatar_url=avatar) for name, avatar in BASE_USERS]
        db.add_all(users)
        await db.flush()
        user_ids = [u.user_id for u in users]
        for u in users:
            print(f"  ✓ {u.name} ({u.user_id})")

        # ── Create follow graph ───────────────────────────────────────────
        print("\nCreating follow relationships...")
        edges = 0
        for follower_id in user_ids:
            followees = rng.sample([u for u in user_ids if u != follower_id], k=4)
            for followee_id in followees:
                db.add(Follow(follower_id=follower_id, followee_id=followee_id))
                edges += 1
        print(f"  ✓ {edges} follow edges created")

        # ── Create audios ────────────────────────────────────────────────
        print("\nCreating audios...")
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        audios: list[Audio] = []
        for i, owner_id in enumerate(user_ids):
            for j in range(5):
                category = rng.choice(CATEGORIES)
                audio = Audio(
                    owner_id=owner_id,
                    title=f"{rng.choice(SAMPLE_TITLES)} #{i * 5 + j + 1}",
                    about=f"A {category.lower()} episode.",
                    category=category,
                    file_url=f"https://cdn.example.com/audio/{i}-{j}.mp3",
                    poster_url=f"https://cdn.example.com/posters/{i}-{j}.jpg",
                    like_count=rng.randint(0, 250),
                    created_at=now - timedelta(hours=rng.randint(1, 24 * 30)),
                )
                audios.append(audio)
        db.add_all(audios)
        await db.flush()
        print(f"  ✓ {len(audios)} audios created")

        # ── Create listening history ─────────────────────────────────────
        print("\nRecording listening history...")
        plays = 0
        by_category: dict[str, list[Audio]] = {}
        for audio in audios:
            by_category.setdefault(audio.category, []).append(audio)
        for user_id in user_ids:
            # Each listener sticks to 1-2 favourite categories
            favourites = rng.sample(sorted(by_category), k=rng.randint(1, 2))
            pool = [a for c in favourites for a in by_category[c]]
            for _ in range(rng.randint(15, 30)):
                audio = rng.choice(pool)
                db.add(
                    PlayHistory(
                        owner_id=user_id,
                        audio_id=audio.audio_id,
                        category=audio.category,
                        played_at=now - timedelta(minutes=rng.randint(1, 60 * 24 * 14)),
                    )
                )
                plays += 1
        print(f"  ✓ {plays} plays recorded")

        # ── Create playlists ─────────────────────────────────────────────
        print("\nCreating playlists...")
        for category, members in sorted(by_category.items()):
            db.add(
                CuratedPlaylist(
                    title=category,
                    items=[a.audio_id for a in rng.sample(members, k=min(10, len(members)))],
                )
            )
        for user_id in user_ids[:3]:
            picks = rng.sample(audios, k=8)
            db.add(Playlist(owner_id=user_id, title="Favourites", items=[a.audio_id for a in picks],
                            visibility=VISIBILITY_PUBLIC))
            db.add(Playlist(owner_id=user_id, title="Drafts", items=[picks[0].audio_id],
                            visibility=VISIBILITY_PRIVATE))
        print(f"  ✓ {len(by_category)} curated playlists, {3 * 2} user playlists")

        await db.commit()

    await engine.dispose()

    # ── Print summary ─────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    u = user_ids[0]
    print(f"# Recommendations for '{BASE_USERS[0][0]}':")
    print(f"  curl -s 'http://localhost:8000/recommendations/?user_id={u}' | python3 -m json.tool\n")
    print("# Auto-generated playlists (refreshes the Mix20 playlist):")
    print(f"  curl -s 'http://localhost:8000/recommendations/playlists?user_id={u}' | python3 -m json.tool\n")
    print("# Followers, two at a time:")
    print(f"  curl -s 'http://localhost:8000/users/{u}/followers?limit=2&pageNumber=0' | python3 -m json.tool\n")
    print("# Toggle a follow:")
    print("  curl -s -X POST 'http://localhost:8000/users/follow' \\")
    print("    -H 'Content-Type: application/json' \\")
    print(f"    -d '{{\"follower_id\": \"{u}\", \"followee_id\": \"{user_ids[1]}\"}}' | python3 -m json.tool\n")
    print("# Check Jaeger traces: http://localhost:16686")
    print("# Check Prometheus: http://localhost:9090")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the SoundGraph database")
    parser.add_argument("--database-url", default=settings.tidb_url, help="SQLAlchemy async URL")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible dataset")
    args = parser.parse_args()
    asyncio.run(seed(args.database_url, random.Random(args.seed)))
