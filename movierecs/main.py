# movierecs/main.py: app factory, lifespan-scoped clients, router mounting

from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from movierecs.core.errors import install_error_handlers
from movierecs.core.settings import Settings, settings as default_settings
from movierecs.db.store import FavoritesStore
from movierecs.integrations.tmdb import TMDBClient

log = logging.getLogger("startup")

ROUTERS = (
    "movierecs.routes.health",
    "movierecs.routes.movies",
    "movierecs.routes.users",
    "movierecs.routes.auth",
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _include(api: APIRouter, router_import: str, attr: str = "router") -> None:
    """
    Import a router module and include it under /api.
    A broken router is logged with its FULL traceback, then re-raised so the
    process does not start half-mounted.
    """
    try:
        mod = __import__(router_import, fromlist=[attr])
        router = getattr(mod, attr)
    except Exception as e:
        log.error("FAILED to mount router: %s", router_import)
        log.error("Reason: %r", e)
        log.error("Traceback:\n%s", traceback.format_exc())
        raise
    api.include_router(router)
    log.info("Mounted router: %s (prefix=%s)", router_import, getattr(router, "prefix", ""))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    cfg: Settings = app.state.settings

    tmdb = TMDBClient.from_settings(cfg)
    store = FavoritesStore.from_url(cfg.async_database_url)
    app.state.tmdb = tmdb
    app.state.store = store

    try:
        if cfg.create_schema:
            await store.create_schema()
        yield
    finally:
        await tmdb.aclose()
        await store.dispose()
        log.info("Released TMDb client and database pool")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    cfg = settings or default_settings
    _configure_logging(cfg.log_level)

    app = FastAPI(
        title="Movie Recommendations API",
        version="1.0.0",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = cfg

    # ───────────────── CORS ─────────────────
    # Bearer tokens travel in the Authorization header, not cookies.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origin_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    api = APIRouter(prefix="/api")
    for name in ROUTERS:
        _include(api, name)
    app.include_router(api)

    if not cfg.require_auth:
        log.warning(
            "REQUIRE_AUTH is off: any caller may change any user's favorites"
        )
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "movierecs.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
