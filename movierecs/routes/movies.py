# movierecs/routes/movies.py
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from movierecs.deps import get_tmdb
from movierecs.integrations.tmdb import TMDBClient
from movierecs.schemas import ErrorOut, Movie

router = APIRouter(tags=["movies"])

_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    200: {"model": List[Movie]},
    500: {"model": ErrorOut, "description": "Movie provider failure"},
}


@router.get("/movies", responses=_RESPONSES)
async def search_movies(
    query: str = Query("", description="Free-text title search; passed to TMDb as is"),
    page: int = Query(1, ge=1),
    tmdb: TMDBClient = Depends(get_tmdb),
) -> List[Dict[str, Any]]:
    """
    Search TMDb movies. The provider's result list is returned verbatim.
    """
    return await tmdb.search_movies(query, page=page)


@router.get("/recommendations", responses=_RESPONSES)
async def recommendations(
    page: int = Query(1, ge=1),
    tmdb: TMDBClient = Depends(get_tmdb),
) -> List[Dict[str, Any]]:
    """
    TMDb's currently popular movies. Not personalised: no favorites are read.
    """
    return await tmdb.popular_movies(page=page)
