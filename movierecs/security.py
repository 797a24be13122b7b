# movierecs/security.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Path
from fastapi.security import HTTPAuthorizationCredentials

from movierecs.core.settings import Settings
from movierecs.db.store import FavoritesStore
from movierecs.deps import get_settings, get_store
from movierecs.routes.auth import bearer_scheme, get_current_username


async def require_owner(
    username: str = Path(..., min_length=1, max_length=64),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    store: FavoritesStore = Depends(get_store),
) -> Optional[str]:
    """
    Guard for favorites mutations on /users/{username}/...

    With REQUIRE_AUTH off any caller may mutate any username's favorites and
    this returns None. With it on, the bearer token subject must equal the
    username in the path.
    """
    if not settings.require_auth:
        return None

    current = await get_current_username(creds, settings, store)
    if current != username:
        raise HTTPException(status_code=403, detail="Forbidden")
    return current
