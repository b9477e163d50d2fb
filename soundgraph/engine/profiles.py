"""Public profile pages: profile card, uploads and public playlists."""
import logging
from typing import Any

from soundgraph.engine.errors import NotFound
from soundgraph.engine.store import VISIBILITY_PUBLIC, Relation, Storage
from soundgraph.engine.validation import DEFAULT_MAX_PAGE_SIZE, page_window, require_id
from soundgraph.schemas import OwnerSummary, PlaylistListing, PublicProfile, UploadedAudio

logger = logging.getLogger(__name__)


class ProfileDirectory:
    def __init__(self, store: Storage, max_page_size: int = DEFAULT_MAX_PAGE_SIZE):
        self.store = store
        self.max_page_size = max_page_size

    async def public_profile(self, profile_id: str) -> PublicProfile:
        profile_id = require_id(profile_id, "profile id")
        user = await self.store.get_user(profile_id)
        if user is None:
            raise NotFound("User not found!")

        return PublicProfile(
            id=user.user_id,
            name=user.name,
            followers=await self.store.count_relation(profile_id, Relation.FOLLOWERS),
            followings=await self.store.count_relation(profile_id, Relation.FOLLOWINGS),
            avatar=user.avatar_url,
        )

    async def uploads(
        self, owner_id: str, limit: Any = 20, page_number: Any = 0
    ) -> list[UploadedAudio]:
        """Audio uploaded by `owner_id`, newest first."""
        owner_id = require_id(owner_id, "profile id")
        skip, limit = page_window(limit, page_number, self.max_page_size)

        audios = await self.store.query_content(owner_id, skip, limit)
        return [
            UploadedAudio(
                id=a.audio_id,
                title=a.title,
                category=a.category,
                about=a.about,
                file=a.file_url,
                poster=a.poster_url,
                date=a.created_at,
                owner=OwnerSummary(id=a.owner_id, name=a.owner_name),
            )
            for a in audios
        ]

    async def public_playlists(
        self, owner_id: str, limit: Any = 20, page_number: Any = 0
    ) -> list[PlaylistListing]:
        owner_id = require_id(owner_id, "profile id")
        skip, limit = page_window(limit, page_number, self.max_page_size)

        playlists = await self.store.list_playlists(owner_id, VISIBILITY_PUBLIC, skip, limit)
        return [
            PlaylistListing(
                id=p.playlist_id,
                title=p.title,
                items_count=p.items_count,
                visibility=p.visibility,
            )
            for p in playlists
        ]
