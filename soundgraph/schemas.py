"""
Pydantic request / response schemas.
Kept separate from ORM models to avoid coupling transport to storage.
Engine components return these shapes; routers wrap them in the
envelopes the clients expect ({"followers": [...]}, {"audios": [...]}, ...).
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────── Users ───────────────────────────────────────

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    avatar_url: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    avatar_url: Optional[str]


class ProfileSummary(BaseModel):
    """A user as shown in follower / following lists."""
    id: str
    name: str
    avatar: Optional[str] = None


class OwnerSummary(BaseModel):
    id: str
    name: str


class PublicProfile(BaseModel):
    id: str
    name: str
    followers: int
    followings: int
    avatar: Optional[str] = None


class ProfileResponse(BaseModel):
    profile: PublicProfile


# ──────────────────────────── Follow graph ────────────────────────────────

class FollowRequest(BaseModel):
    follower_id: str
    followee_id: str


class FollowResponse(BaseModel):
    status: str   # 'added' | 'removed'


class FollowersResponse(BaseModel):
    followers: list[ProfileSummary]


class FollowingsResponse(BaseModel):
    followings: list[ProfileSummary]


# ──────────────────────────── Content ─────────────────────────────────────

class RecommendedAudio(BaseModel):
    id: str
    title: str
    category: str
    about: Optional[str] = None
    file: str
    poster: Optional[str] = None
    owner: OwnerSummary


class UploadedAudio(BaseModel):
    id: str
    title: str
    category: str
    about: Optional[str] = None
    file: str
    poster: Optional[str] = None
    date: Optional[datetime] = None
    owner: OwnerSummary


class RecommendationResponse(BaseModel):
    audios: list[RecommendedAudio]


class UploadsResponse(BaseModel):
    audios: list[UploadedAudio]


# ──────────────────────────── Playlists ───────────────────────────────────

class PlaylistSummary(BaseModel):
    """Entry of the auto-generated playlist shelf."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    items_count: int = Field(alias="itemsCount")


class PlaylistListing(PlaylistSummary):
    visibility: str


class AutoPlaylistsResponse(BaseModel):
    playlist: list[PlaylistSummary]


class PublicPlaylistsResponse(BaseModel):
    playlist: list[PlaylistListing]
