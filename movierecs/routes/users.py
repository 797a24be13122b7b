# movierecs/routes/users.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Path

from movierecs.db.store import FavoritesStore
from movierecs.deps import get_store
from movierecs.schemas import ErrorOut, FavoriteIn, UserOut
from movierecs.security import require_owner

log = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

_ERRORS: Dict[int | str, Dict[str, Any]] = {
    500: {"model": ErrorOut, "description": "Database failure"},
}


@router.post(
    "/{username}/favorites",
    response_model=UserOut,
    responses=_ERRORS,
)
async def add_favorite(
    username: str = Path(..., min_length=1, max_length=64),
    payload: FavoriteIn = Body(...),
    _: Optional[str] = Depends(require_owner),
    store: FavoritesStore = Depends(get_store),
) -> dict:
    """Add a movie to username's favorites, creating the user on first use."""
    user = await store.upsert_favorite(username, payload.movie_id)
    log.info("Favorite %s added for %s", payload.movie_id, username)
    return user


@router.get(
    "/{username}/favorites",
    response_model=UserOut,
    responses={404: {"model": ErrorOut}, **_ERRORS},
)
async def list_favorites(
    username: str = Path(..., min_length=1, max_length=64),
    store: FavoritesStore = Depends(get_store),
) -> dict:
    return await store.get_user(username)


@router.delete(
    "/{username}/favorites/{movie_id}",
    response_model=UserOut,
    responses={404: {"model": ErrorOut}, **_ERRORS},
)
async def remove_favorite(
    username: str = Path(..., min_length=1, max_length=64),
    movie_id: str = Path(..., min_length=1, max_length=64),
    _: Optional[str] = Depends(require_owner),
    store: FavoritesStore = Depends(get_store),
) -> dict:
    user = await store.remove_favorite(username, movie_id)
    log.info("Favorite %s removed for %s", movie_id, username)
    return user
