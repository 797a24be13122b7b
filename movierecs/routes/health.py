# movierecs/routes/health.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from movierecs.db.store import FavoritesStore
from movierecs.deps import get_store, get_tmdb
from movierecs.integrations.tmdb import TMDBClient

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness")
async def health() -> Dict[str, Any]:
    # no external deps
    return {"ok": True}


@router.get("/ready", summary="Readiness")
async def ready(
    store: FavoritesStore = Depends(get_store),
    tmdb: TMDBClient = Depends(get_tmdb),
) -> Dict[str, Any]:
    db_ok = await store.ping()
    tmdb_ok = await tmdb.ping()
    return {"ok": db_ok and tmdb_ok, "db": db_ok, "tmdb": tmdb_ok}
