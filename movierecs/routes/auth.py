# movierecs/routes/auth.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from movierecs.core.settings import Settings
from movierecs.db.store import FavoritesStore
from movierecs.deps import get_settings, get_store
from movierecs.schemas import LoginIn, MeOut, RegisterIn, TokenOut, UserOut

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
# auto_error=False so we can return a clean 401 instead of framework 403
bearer_scheme = HTTPBearer(auto_error=False)


# -------- Helpers --------
def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def create_access_token(*, username: str, secret: str, minutes: int) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes)
    payload = {
        "sub": username,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "type": "access",
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> str:
    """Return the username a token was issued for, or raise 401."""
    try:
        data = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    sub = data.get("sub")
    if not sub or data.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return str(sub)


# -------- Core auth dependency --------
async def get_current_username(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    store: FavoritesStore = Depends(get_store),
) -> str:
    if not creds or not creds.scheme or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    username = decode_access_token(creds.credentials, settings.auth_secret)
    if not await store.get_credential(username):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return username


# -------- Routes --------
@router.post("/register", response_model=UserOut, status_code=201, summary="Register")
async def register(
    payload: RegisterIn,
    store: FavoritesStore = Depends(get_store),
) -> dict:
    user = await store.register_user(payload.username, hash_password(payload.password))
    log.info("Registered credential for %s", payload.username)
    return user


@router.post("/login", response_model=TokenOut, summary="Login")
async def login(
    payload: LoginIn,
    settings: Settings = Depends(get_settings),
    store: FavoritesStore = Depends(get_store),
) -> TokenOut:
    hashed = await store.get_credential(payload.username)
    if not hashed or not verify_password(payload.password, hashed):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_access_token(
        username=payload.username,
        secret=settings.auth_secret,
        minutes=settings.access_token_expire_minutes,
    )
    return TokenOut(access_token=token, username=payload.username)


@router.get("/me", response_model=MeOut, summary="Me")
async def me(username: str = Depends(get_current_username)) -> MeOut:
    return MeOut(username=username)
