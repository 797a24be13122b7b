# movierecs/db/crud/users.py
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from movierecs.core.errors import Conflict
from movierecs.db.crud.favorites import favorite_ids, serialize
from movierecs.db.models import User


async def _user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.username == username))
    return res.scalar_one_or_none()


async def get_credential(db: AsyncSession, username: str) -> Optional[str]:
    res = await db.execute(select(User.password_hash).where(User.username == username))
    return res.scalar_one_or_none()


async def _claim(db: AsyncSession, user_id: int, username: str, password_hash: str) -> Dict[str, Any]:
    # only a row whose credential is still NULL can be claimed
    res = await db.execute(
        update(User)
        .where((User.id == user_id) & (User.password_hash.is_(None)))
        .values(password_hash=password_hash)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise Conflict("Username already registered")
    await db.commit()
    return serialize(username, await favorite_ids(db, user_id))


async def register_user(db: AsyncSession, username: str, password_hash: str) -> Dict[str, Any]:
    """
    Attach a credential to username.

    A user created implicitly by a favorite add has no credential yet and is
    claimed by the first registration; a user that already has one is a conflict.
    """
    existing = await _user_by_username(db, username)
    if existing is not None:
        return await _claim(db, existing.id, username, password_hash)

    db.add(User(username=username, password_hash=password_hash))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # a favorite add may have created the row since the lookup above
        existing = await _user_by_username(db, username)
        if existing is None:
            raise Conflict("Username already registered") from None
        return await _claim(db, existing.id, username, password_hash)
    return serialize(username, [])
