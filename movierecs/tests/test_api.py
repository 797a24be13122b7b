# movierecs/tests/test_api.py
import httpx
import pytest

from movierecs.core.errors import StoreError

from .conftest import TMDB_BASE

INCEPTION = {"id": 27205, "title": "Inception", "poster_path": "/abc.jpg"}
POPULAR = [
    {"id": 1, "title": "One", "poster_path": None, "popularity": 99.1},
    {"id": 2, "title": "Two", "poster_path": "/two.jpg", "popularity": 42.0},
]


@pytest.mark.asyncio
async def test_health_and_docs(client: httpx.AsyncClient):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

    r = await client.get("/api/openapi.json")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_ready_reports_each_dependency(client: httpx.AsyncClient, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/configuration").mock(return_value=httpx.Response(500))
    r = await client.get("/api/ready")
    assert r.status_code == 200
    assert r.json() == {"ok": False, "db": True, "tmdb": False}


# ───────────────── movies ─────────────────

@pytest.mark.asyncio
async def test_search_inception_passes_provider_result_through(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/search/movie").mock(
        return_value=httpx.Response(200, json={"page": 1, "results": [INCEPTION], "total_results": 1}),
    )
    r = await client.get("/api/movies", params={"query": "inception"})
    assert r.status_code == 200
    assert r.json() == [INCEPTION]


@pytest.mark.asyncio
async def test_search_empty_query_is_forwarded(client, tmdb_mock):
    route = tmdb_mock.get(f"{TMDB_BASE}/search/movie").mock(
        return_value=httpx.Response(200, json={"results": []}),
    )
    r = await client.get("/api/movies")
    assert r.status_code == 200
    assert r.json() == []
    assert route.calls.last.request.url.params["query"] == ""


@pytest.mark.asyncio
async def test_search_timeout_is_a_single_generic_500(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/search/movie").mock(side_effect=httpx.ReadTimeout)
    r = await client.get("/api/movies", params={"query": "inception"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch movies"}


@pytest.mark.asyncio
async def test_search_hides_upstream_detail(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/search/movie").mock(
        return_value=httpx.Response(401, json={"status_message": "Invalid API key: secret-stuff"}),
    )
    r = await client.get("/api/movies", params={"query": "x"})
    assert r.status_code == 500
    assert "secret-stuff" not in r.text


@pytest.mark.asyncio
async def test_search_rejects_bad_page(client):
    r = await client.get("/api/movies", params={"query": "x", "page": 0})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_recommendations_proxy_popular(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/movie/popular").mock(
        return_value=httpx.Response(200, json={"results": POPULAR}),
    )
    r = await client.get("/api/recommendations")
    assert r.status_code == 200
    assert r.json() == POPULAR


@pytest.mark.asyncio
async def test_recommendations_ignore_favorites(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/movie/popular").mock(
        return_value=httpx.Response(200, json={"results": POPULAR}),
    )
    before = (await client.get("/api/recommendations")).json()

    r = await client.post("/api/users/alice/favorites", json={"movieId": "1"})
    assert r.status_code == 200

    after = (await client.get("/api/recommendations")).json()
    assert after == before


@pytest.mark.asyncio
async def test_recommendations_upstream_failure(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/movie/popular").mock(return_value=httpx.Response(503))
    r = await client.get("/api/recommendations")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch movies"}


# ───────────────── favorites ─────────────────

@pytest.mark.asyncio
async def test_add_favorite_scenario(client):
    r = await client.post("/api/users/alice/favorites", json={"movieId": "27205"})
    assert r.status_code == 200
    assert r.json() == {"username": "alice", "favorites": ["27205"]}

    r = await client.post("/api/users/alice/favorites", json={"movieId": "99999"})
    assert r.status_code == 200
    assert r.json() == {"username": "alice", "favorites": ["27205", "99999"]}

    r = await client.get("/api/users/alice/favorites")
    assert r.json() == {"username": "alice", "favorites": ["27205", "99999"]}


@pytest.mark.asyncio
async def test_add_favorite_accepts_numeric_movie_id(client):
    r = await client.post("/api/users/bob/favorites", json={"movieId": 27205})
    assert r.status_code == 200
    assert r.json()["favorites"] == ["27205"]


@pytest.mark.asyncio
async def test_add_favorite_requires_movie_id(client):
    r = await client.post("/api/users/bob/favorites", json={})
    assert r.status_code == 422

    r = await client.post("/api/users/bob/favorites", json={"movieId": ""})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_user_is_404(client):
    r = await client.get("/api/users/ghost/favorites")
    assert r.status_code == 404
    assert r.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_delete_favorite(client):
    await client.post("/api/users/carol/favorites", json={"movieId": "1"})
    await client.post("/api/users/carol/favorites", json={"movieId": "2"})

    r = await client.delete("/api/users/carol/favorites/1")
    assert r.status_code == 200
    assert r.json() == {"username": "carol", "favorites": ["2"]}


@pytest.mark.asyncio
async def test_store_failure_is_generic_500(client, store, monkeypatch):
    async def broken(username, movie_id):
        raise StoreError("connection refused")

    monkeypatch.setattr(store, "upsert_favorite", broken)
    r = await client.post("/api/users/alice/favorites", json={"movieId": "1"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to access favorites"}


@pytest.mark.asyncio
async def test_search_non_object_results_is_json_500(client, tmdb_mock):
    tmdb_mock.get(f"{TMDB_BASE}/search/movie").mock(
        return_value=httpx.Response(200, json={"results": [None, 1]}),
    )
    r = await client.get("/api/movies", params={"query": "x"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch movies"}


@pytest.mark.asyncio
async def test_search_invalid_url_is_json_500(client, tmdb, monkeypatch):
    async def bad_url(*args, **kwargs):
        raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    monkeypatch.setattr(tmdb._http, "get", bad_url)
    r = await client.get("/api/movies", params={"query": "x"})
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": "Failed to fetch movies"}


@pytest.mark.asyncio
async def test_unexpected_error_is_json_500(app, store, monkeypatch):
    async def boom(username):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(store, "get_user", boom)
    # the server error middleware re-raises after responding; keep the response
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        r = await ac.get("/api/users/alice/favorites")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
