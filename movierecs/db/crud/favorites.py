# movierecs/db/crud/favorites.py
from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from movierecs.core.errors import NotFound, StoreError
from movierecs.db.models import FavoriteMovie, User

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def dialect_insert(db: AsyncSession):
    """Pick the INSERT construct that supports ON CONFLICT for the bound dialect."""
    name = db.get_bind().dialect.name
    try:
        return _INSERTS[name]
    except KeyError:
        raise StoreError(f"Unsupported database dialect for upserts: {name}") from None


def serialize(username: str, favorites: List[str]) -> Dict[str, Any]:
    return {"username": username, "favorites": favorites}


async def favorite_ids(db: AsyncSession, user_id: int) -> List[str]:
    rows = await db.execute(
        select(FavoriteMovie.movie_id)
        .where(FavoriteMovie.user_id == user_id)
        .order_by(FavoriteMovie.id)
    )
    return list(rows.scalars().all())


async def user_id_for(db: AsyncSession, username: str) -> int | None:
    res = await db.execute(select(User.id).where(User.username == username))
    return res.scalar_one_or_none()


async def upsert_favorite(db: AsyncSession, username: str, movie_id: str) -> Dict[str, Any]:
    """
    Create the user if missing, then add movie_id to its favorites.

    Both inserts are ON CONFLICT DO NOTHING, so concurrent calls for the same
    username cannot create a second user row nor drop each other's movie.
    A repeat add of the same movie is a no-op.
    """
    insert = dialect_insert(db)

    await db.execute(
        insert(User.__table__)
        .values(username=username)
        .on_conflict_do_nothing(index_elements=["username"])
    )
    user_id = await user_id_for(db, username)
    if user_id is None:
        raise StoreError(f"User row for {username!r} vanished during upsert")

    await db.execute(
        insert(FavoriteMovie.__table__)
        .values(user_id=user_id, movie_id=movie_id)
        .on_conflict_do_nothing(index_elements=["user_id", "movie_id"])
    )
    await db.commit()

    return serialize(username, await favorite_ids(db, user_id))


async def get_user(db: AsyncSession, username: str) -> Dict[str, Any]:
    user_id = await user_id_for(db, username)
    if user_id is None:
        raise NotFound("User not found")
    return serialize(username, await favorite_ids(db, user_id))


async def remove_favorite(db: AsyncSession, username: str, movie_id: str) -> Dict[str, Any]:
    user_id = await user_id_for(db, username)
    if user_id is None:
        raise NotFound("User not found")

    await db.execute(
        delete(FavoriteMovie).where(
            (FavoriteMovie.user_id == user_id) & (FavoriteMovie.movie_id == movie_id)
        )
    )
    await db.commit()
    return serialize(username, await favorite_ids(db, user_id))
