"""
User profile & social graph endpoints:
  POST /users                       — create a user profile
  GET  /users/{id}                  — public profile card
  POST /users/follow                — follow / unfollow (toggle)
  GET  /users/{id}/followers        — paginated followers
  GET  /users/{id}/followings       — paginated followings
  GET  /users/{id}/uploads          — paginated uploads, newest first
  GET  /users/{id}/playlists        — paginated public playlists
"""
import logging

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from soundgraph.config import settings
from soundgraph.database import commit_request, get_db
from soundgraph.dependencies import (
    get_follow_graph,
    get_graph_pager,
    get_profile_directory,
)
from soundgraph.engine.follow_graph import FollowGraphManager
from soundgraph.engine.graph_pager import GraphPager
from soundgraph.engine.profiles import ProfileDirectory
from soundgraph.engine.store import Relation
from soundgraph.engine.validation import MAX_OFFSET
from soundgraph.models import User
from soundgraph.schemas import (
    FollowersResponse,
    FollowingsResponse,
    FollowRequest,
    FollowResponse,
    ProfileResponse,
    PublicPlaylistsResponse,
    UploadsResponse,
    UserCreate,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """
    Register a user profile.

    Accounts are normally provisioned by the auth service; this endpoint
    exists for local development and seeding.
    """
    with tracer.start_as_current_span("create_user"):
        user = User(name=body.name, avatar_url=body.avatar_url)
        db.add(user)
        await commit_request(db)

        logger.info("Created user %s (id=%s)", user.name, user.user_id)
        return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    directory: ProfileDirectory = Depends(get_profile_directory),
):
    return ProfileResponse(profile=await directory.public_profile(user_id))


@router.post("/follow", response_model=FollowResponse)
async def toggle_follow(
    body: FollowRequest,
    graph: FollowGraphManager = Depends(get_follow_graph),
    db: AsyncSession = Depends(get_db),
):
    """
    Follow `followee_id` as `follower_id`, or unfollow if the edge exists.
    Responds with the resulting status: 'added' or 'removed'.
    """
    result = await graph.toggle_follow(body.follower_id, body.followee_id)
    await commit_request(db)
    return FollowResponse(status=result.value)


@router.get("/{user_id}/followers", response_model=FollowersResponse)
async def list_followers(
    user_id: str,
    limit: int = Query(settings.default_page_size, ge=0, le=settings.max_page_size),
    page_number: int = Query(0, ge=0, le=MAX_OFFSET, alias="pageNumber"),
    pager: GraphPager = Depends(get_graph_pager),
):
    followers = await pager.page_checked(user_id, Relation.FOLLOWERS, limit, page_number)
    return FollowersResponse(followers=followers)


@router.get("/{user_id}/followings", response_model=FollowingsResponse)
async def list_followings(
    user_id: str,
    limit: int = Query(settings.default_page_size, ge=0, le=settings.max_page_size),
    page_number: int = Query(0, ge=0, le=MAX_OFFSET, alias="pageNumber"),
    pager: GraphPager = Depends(get_graph_pager),
):
    followings = await pager.page_checked(user_id, Relation.FOLLOWINGS, limit, page_number)
    return FollowingsResponse(followings=followings)


@router.get("/{user_id}/uploads", response_model=UploadsResponse)
async def list_uploads(
    user_id: str,
    limit: int = Query(settings.default_page_size, ge=0, le=settings.max_page_size),
    page_number: int = Query(0, ge=0, le=MAX_OFFSET, alias="pageNumber"),
    directory: ProfileDirectory = Depends(get_profile_directory),
):
    return UploadsResponse(audios=await directory.uploads(user_id, limit, page_number))


@router.get("/{user_id}/playlists", response_model=PublicPlaylistsResponse)
async def list_public_playlists(
    user_id: str,
    limit: int = Query(settings.default_page_size, ge=0, le=settings.max_page_size),
    page_number: int = Query(0, ge=0, le=MAX_OFFSET, alias="pageNumber"),
    directory: ProfileDirectory = Depends(get_profile_directory),
):
    playlists = await directory.public_playlists(user_id, limit, page_number)
    return PublicPlaylistsResponse(playlist=playlists)
