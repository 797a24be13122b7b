# movierecs/integrations/tmdb.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from movierecs.core.errors import UpstreamError
from movierecs.core.settings import Settings

log = logging.getLogger(__name__)

TMDB_BASE = "https://api.themoviedb.org/3"


class TMDBClient:
    """
    Thin async client for the TMDb movie endpoints.

    One instance is built at startup and shared by every request; it owns a
    pooled httpx.AsyncClient that must be released with aclose().
    Every call is a single round trip: no retry, no cache.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        bearer_token: Optional[str] = None,
        base: str = TMDB_BASE,
        timeout: float = 10.0,
        language: str = "en-US",
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.bearer_token = bearer_token
        self.base = base.rstrip("/")
        self.language = language
        self._http = http or httpx.AsyncClient(base_url=self.base, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TMDBClient":
        if not settings.tmdb_api_key and not settings.tmdb_bearer_token:
            log.warning("Neither TMDB_API_KEY nor TMDB_BEARER_TOKEN is set; movie routes will fail")
        return cls(
            api_key=settings.tmdb_api_key,
            bearer_token=settings.tmdb_bearer_token,
            base=settings.tmdb_base_url,
            timeout=settings.tmdb_timeout,
            language=settings.tmdb_language,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key or self.bearer_token)

    def _auth(self, params: Dict[str, Any]) -> Dict[str, str]:
        # v4 bearer wins over the v3 key when both are configured
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        elif self.api_key:
            params["api_key"] = self.api_key
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.has_credentials:
            raise UpstreamError("TMDb credentials are not configured on the server")

        params = dict(params or {})
        headers = self._auth(params)
        log.debug("TMDb GET %s params=%s", path, {k: v for k, v in params.items() if k != "api_key"})

        try:
            r = await self._http.get(path, params=params, headers=headers)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise UpstreamError(f"TMDb request to {path} timed out") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"TMDb {path} answered: {e.response.text[:500]}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamError(f"TMDb request to {path} failed: {e!r}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError(f"TMDb {path} returned invalid JSON", status_code=r.status_code) from e
        if not isinstance(data, dict):
            raise UpstreamError(f"TMDb {path} returned an unexpected payload", status_code=r.status_code)
        return data

    @staticmethod
    def _results(data: Dict[str, Any], path: str) -> List[Dict[str, Any]]:
        results = data.get("results")
        if not isinstance(results, list):
            raise UpstreamError(f"TMDb {path} payload has no 'results' list")
        if not all(isinstance(item, dict) for item in results):
            raise UpstreamError(f"TMDb {path} 'results' holds non-object items")
        return results

    async def search_movies(self, query: str, page: int = 1) -> List[Dict[str, Any]]:
        """Provider search results, verbatim."""
        path = "/search/movie"
        data = await self._get(
            path,
            {
                "query": query,
                "page": page,
                "include_adult": "false",
                "language": self.language,
            },
        )
        return self._results(data, path)

    async def popular_movies(self, page: int = 1) -> List[Dict[str, Any]]:
        """Provider's currently popular listing, verbatim."""
        path = "/movie/popular"
        data = await self._get(path, {"page": page, "language": self.language})
        return self._results(data, path)

    async def ping(self) -> bool:
        try:
            await self._get("/configuration")
            return True
        except UpstreamError as e:
            log.warning("TMDb ping failed: %s", e)
            return False

    async def aclose(self) -> None:
        await self._http.aclose()
