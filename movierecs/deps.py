# movierecs/deps.py
from __future__ import annotations

from fastapi import Request

from movierecs.core.settings import Settings
from movierecs.db.store import FavoritesStore
from movierecs.integrations.tmdb import TMDBClient

# The lifespan in movierecs.main puts these on app.state; tests assign them directly.


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tmdb(request: Request) -> TMDBClient:
    return request.app.state.tmdb


def get_store(request: Request) -> FavoritesStore:
    return request.app.state.store
