import os, sys
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from app.exceptions import DomainException, ProblemDetail
from app.rate_limit import limiter
from app.routers import matches, players, teams

app = FastAPI()
app.state.limiter = limiter


@app.exception_handler(DomainException)
async def domain_exception_handler(request, exc):
    problem = ProblemDetail(
        type=exc.type,
        title=exc.title,
        detail=exc.detail,
        status=exc.status_code,
        code=exc.code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(),
        media_type="application/problem+json",
    )


app.include_router(teams.router)
app.include_router(players.router)
app.include_router(matches.router)


@pytest.fixture
def client(monkeypatch):
    async def fake_broadcast(mid, message):
        return None

    monkeypatch.setattr(matches, "broadcast", fake_broadcast)
    return TestClient(app)


def _team(client, name):
    resp = client.post("/teams", json={"name": name})
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]


def _player(client, name, **extra):
    resp = client.post("/players", json={"name": name, **extra})
    assert resp.status_code == 200, resp.text
    return resp.json()


def _play_out(client, winner_id, loser_id, discipline="eight-ball"):
    mid = client.post(
        "/matches",
        json={"discipline": discipline, "playerAId": winner_id, "playerBId": loser_id},
    ).json()["id"]
    if discipline == "eight-ball":
        for _ in range(2):
            client.post(
                f"/matches/{mid}/events",
                json={"type": "GAME", "winnerId": winner_id, "loserPoints": 1},
            )
    else:
        for _ in range(2):
            client.post(
                f"/matches/{mid}/events",
                json={"type": "POCKET", "ball": 9, "playerId": winner_id},
            )
    resp = client.post(f"/matches/{mid}/finalize")
    assert resp.status_code == 200, resp.text
    return mid


def test_create_player_defaults(client):
    data = _player(client, "  Ava  ")
    assert data["name"] == "Ava"
    assert data["rating"] == 500
    assert data["previousRating"] == 500
    assert data["ratingChange"] == 0
    assert data["status"] == "active"
    assert [s["discipline"] for s in data["stats"]] == ["eight-ball", "nine-ball"]
    assert all(s["matchesPlayed"] == 0 for s in data["stats"])


def test_create_player_validation(client):
    assert client.post("/players", json={"name": "   "}).status_code == 422
    assert client.post("/players", json={"name": "Ava", "rating": -1}).status_code == 422

    resp = client.post("/players", json={"name": "Ava", "teamId": "nope"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "team_not_found"


def test_get_missing_player(client):
    resp = client.get("/players/missing")
    assert resp.status_code == 404
    assert resp.json()["code"] == "player_not_found"


def test_rankings_order_and_pagination(client):
    low = _player(client, "Low", rating=350)["id"]
    high = _player(client, "High", rating=700)["id"]
    mid_a = _player(client, "Bea", rating=500)["id"]
    mid_b = _player(client, "Abe", rating=500)["id"]

    ranked = client.get("/players").json()
    assert [p["id"] for p in ranked] == [high, mid_b, mid_a, low]
    assert [p["rank"] for p in ranked] == [1, 2, 3, 4]

    page = client.get("/players", params={"limit": 2, "offset": 2}).json()
    assert [(p["rank"], p["id"]) for p in page] == [(3, mid_a), (4, low)]


def test_rankings_refresh_after_new_player(client):
    _player(client, "Ava")
    assert len(client.get("/players").json()) == 1
    _player(client, "Ben")
    assert len(client.get("/players").json()) == 2


def test_rankings_filter_by_team(client):
    team = _team(client, "Break Masters")
    member = _player(client, "Ava", teamId=team)["id"]
    _player(client, "Ben")

    ranked = client.get("/players", params={"teamId": team}).json()
    assert [p["id"] for p in ranked] == [member]
    assert ranked[0]["teamId"] == team


def test_player_stats_are_per_discipline(client):
    ava = _player(client, "Ava")["id"]
    ben = _player(client, "Ben")["id"]
    _play_out(client, ava, ben, "eight-ball")
    _play_out(client, ben, ava, "nine-ball")

    data = client.get(f"/players/{ava}").json()
    stats = {s["discipline"]: s for s in data["stats"]}
    assert stats["eight-ball"] == {
        "discipline": "eight-ball",
        "matchesPlayed": 1,
        "wins": 1,
        "losses": 0,
    }
    assert stats["nine-ball"]["matchesPlayed"] == 1
    assert stats["nine-ball"]["wins"] == 0
    assert stats["nine-ball"]["losses"] == 1
    assert data["ratingChange"] == data["rating"] - data["previousRating"]


def test_non_string_name_is_a_validation_error(client):
    resp = client.post("/players", json={"name": 123})
    assert resp.status_code == 422
    assert "name must be a string" in resp.text


def test_rankings_computed_before_a_clear_are_not_cached(client, monkeypatch, session_loop):
    from app.cache import rankings_cache

    _player(client, "Ava")
    real_get = rankings_cache.get

    async def get_then_finalize_elsewhere(key):
        # a finalize commits and clears the cache while this listing runs
        await rankings_cache.clear()
        return None

    monkeypatch.setattr(rankings_cache, "get", get_then_finalize_elsewhere)
    assert len(client.get("/players").json()) == 1
    monkeypatch.setattr(rankings_cache, "get", real_get)

    assert session_loop.run_until_complete(rankings_cache.get((None, 50, 0))) is None
    client.get("/players")
    assert session_loop.run_until_complete(rankings_cache.get((None, 50, 0))) is not None
