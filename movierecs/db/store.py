# movierecs/db/store.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from movierecs.core.errors import StoreError
from movierecs.db.crud import favorites as favorites_crud
from movierecs.db.crud import users as users_crud
from movierecs.db.models import Base

log = logging.getLogger(__name__)


class FavoritesStore:
    """
    Owns the async engine and session factory for the users/favorites tables.

    Built once at startup and disposed at shutdown. Every public method runs
    in its own session; driver failures surface as StoreError.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.sessions = async_sessionmaker(
            bind=engine,
            expire_on_commit=False,
            autoflush=False,
            class_=AsyncSession,
        )

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "FavoritesStore":
        engine_kwargs.setdefault("pool_pre_ping", True)
        return cls(create_async_engine(url, **engine_kwargs))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.sessions() as db:
                yield db
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Database operation failed: {e}") from e

    async def create_schema(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Schema creation failed: {e}") from e
        log.info("Database schema ensured")

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                res = await conn.execute(text("SELECT 1"))
                return res.scalar() == 1
        except (SQLAlchemyError, OSError) as e:
            log.warning("Database ping failed: %r", e)
            return False

    # ───────────────── favorites ─────────────────

    async def upsert_favorite(self, username: str, movie_id: str) -> Dict[str, Any]:
        async with self.session() as db:
            return await favorites_crud.upsert_favorite(db, username, movie_id)

    async def get_user(self, username: str) -> Dict[str, Any]:
        async with self.session() as db:
            return await favorites_crud.get_user(db, username)

    async def remove_favorite(self, username: str, movie_id: str) -> Dict[str, Any]:
        async with self.session() as db:
            return await favorites_crud.remove_favorite(db, username, movie_id)

    # ───────────────── credentials ─────────────────

    async def register_user(self, username: str, password_hash: str) -> Dict[str, Any]:
        async with self.session() as db:
            return await users_crud.register_user(db, username, password_hash)

    async def get_credential(self, username: str) -> Optional[str]:
        async with self.session() as db:
            return await users_crud.get_credential(db, username)
