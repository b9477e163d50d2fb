"""
Recommendation endpoints:
  GET /recommendations?user_id=<id>            — top content for a listener
                                                  (user_id optional: anonymous)
  GET /recommendations/playlists?user_id=<id>  — auto-generated playlist shelf
                                                  (refreshes the personal mix)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from soundgraph.database import commit_request, get_db
from soundgraph.dependencies import get_playlist_generator, get_recommendation_engine
from soundgraph.engine.playlists import PlaylistGenerator
from soundgraph.engine.recommendations import RecommendationEngine
from soundgraph.schemas import AutoPlaylistsResponse, RecommendationResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=RecommendationResponse)
async def recommend(
    user_id: Optional[str] = Query(None, description="Listener id; omit for anonymous"),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    return RecommendationResponse(audios=await engine.recommend(user_id))


@router.get("/playlists", response_model=AutoPlaylistsResponse)
async def auto_generated_playlists(
    user_id: str = Query(..., description="ID of the requesting user"),
    generator: PlaylistGenerator = Depends(get_playlist_generator),
    db: AsyncSession = Depends(get_db),
):
    shelf = await generator.generate_for_user(user_id)
    await commit_request(db)
    return AutoPlaylistsResponse(playlist=shelf)
