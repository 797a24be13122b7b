from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Movies ───────────────────────────────────────────────────────────────────

class Movie(BaseModel):
    """Documented subset of a provider movie; every other provider field passes through."""
    model_config = ConfigDict(extra="allow")

    id: int
    title: Optional[str] = None
    poster_path: Optional[str] = None


# ── Favorites ────────────────────────────────────────────────────────────────

class FavoriteIn(BaseModel):
    movie_id: str = Field(alias="movieId", min_length=1, max_length=64)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("movie_id", mode="before")
    @classmethod
    def _coerce_int(cls, v: Union[str, int]) -> str:
        # the frontend may send TMDb ids as JSON numbers
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v


class UserOut(BaseModel):
    username: str
    favorites: List[str]


class ErrorOut(BaseModel):
    error: str


# ── Auth ─────────────────────────────────────────────────────────────────────

class RegisterIn(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=6, max_length=128)


class LoginIn(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=6, max_length=128)


class TokenOut(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    username: str


class MeOut(BaseModel):
    username: str
