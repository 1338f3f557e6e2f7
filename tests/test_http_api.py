from __future__ import annotations

import random

import pytest
from fastapi.testclient import TestClient

from scanloot.game.catalog import generate_collectables
from scanloot.game.rarity import DEFAULT_RARITY_TIERS, assign_session_chances
from scanloot.main import create_app
from scanloot.game.achievements import generate_achievements
from scanloot.modules.achievements import achievement_service
from scanloot.repositories import achievements_repo, catalog_repo, items_repo


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def catalog():
    rng = random.Random(1)
    catalog_repo.put_rarities(list(DEFAULT_RARITY_TIERS))
    collectables = generate_collectables(assign_session_chances(DEFAULT_RARITY_TIERS, rng), 40, rng)
    catalog_repo.put_collectables(collectables)
    return collectables


def _signup(client, email: str) -> tuple[str, dict]:
    r = client.post("/api/auth/signup", json={"email": email, "password": "password123"})
    assert r.status_code == 201, r.text
    body = r.json()
    return body["player"]["id"], {"Authorization": f"Bearer {body['token']}"}


def _assert_problem(r, status: int) -> dict:
    assert r.status_code == status
    assert r.headers.get("content-type", "").startswith("application/problem+json")
    body = r.json()
    assert body["status"] == status
    assert body.get("requestId")
    return body


def test_health_and_request_id(client):
    r = client.get("/", headers={"X-Request-Id": "abc-123"})
    assert r.status_code == 200
    assert r.json()["status"] == "running"
    assert r.headers.get("X-Request-Id") == "abc-123"
    assert client.get("/").headers.get("X-Request-Id")


def test_unknown_route_is_problem_json(client):
    _assert_problem(client.get("/api/nope", headers=_signup(client, "a@example.com")[1]), 404)


def test_protected_routes_need_a_token(client):
    body = _assert_problem(client.get("/api/auth/me"), 401)
    assert body["title"] == "Unauthorized"
    _assert_problem(client.get("/api/items/me", headers={"Authorization": "Bearer not-a-jwt"}), 401)


def test_signup_login_me(client):
    pid, headers = _signup(client, "ada@example.com")
    _assert_problem(client.post("/api/auth/signup", json={"email": "ada@example.com", "password": "x1234567"}), 409)
    _assert_problem(client.post("/api/auth/signup", json={}), 400)

    r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "password123"})
    assert r.status_code == 200
    assert r.json()["player"]["id"] == pid
    _assert_problem(client.post("/api/auth/login", json={"email": "ada@example.com", "password": "bad-pass"}), 401)

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["email"] == "ada@example.com"
    assert "passwordHash" not in me


def test_player_profiles_are_public_only(client):
    pid, headers = _signup(client, "ada@example.com")
    r = client.get(f"/api/players/{pid}", headers=headers)
    assert set(r.json()) == {"id", "username", "totalScans"}
    _assert_problem(client.get("/api/players/nobody", headers=headers), 404)

    r = client.patch("/api/players/me", json={"username": "loot_goblin"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["username"] == "loot_goblin"


def test_catalog_routes_are_public(client, catalog):
    rarities = client.get("/api/rarities").json()
    assert [r["id"] for r in rarities] == [t.id for t in DEFAULT_RARITY_TIERS]
    assert rarities[0]["displayChance"] == "22% - 28%"
    assert len(client.get("/api/collectables").json()) == len(catalog)


def test_scan_rolls_an_item_and_counts_it(client, catalog):
    pid, headers = _signup(client, "ada@example.com")
    r = client.post("/api/scan", json={"barcode": "0123456789012"}, headers=headers)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["item"]["playerId"] == pid
    assert 1 <= body["item"]["quality"] <= 100
    assert body["collectable"]["id"] == body["item"]["collectableId"]
    assert body["totalScans"] == 1

    client.post("/api/scan", headers=headers)
    mine = client.get("/api/items/me", headers=headers).json()
    assert len(mine) == 2
    assert client.get(f"/api/players/{pid}", headers=headers).json()["totalScans"] == 2
    assert client.get(f"/api/items/{mine[0]['id']}", headers=headers).status_code == 200
    _assert_problem(client.get("/api/items/missing", headers=headers), 404)


def test_scan_with_empty_catalog_is_a_bad_request(client):
    _, headers = _signup(client, "ada@example.com")
    _assert_problem(client.post("/api/scan", headers=headers), 400)


def test_trade_flow_over_http(client, catalog):
    p1, h1 = _signup(client, "p1@example.com")
    p2, h2 = _signup(client, "p2@example.com")
    client.post("/api/scan", headers=h1)
    client.post("/api/scan", headers=h2)
    item1 = items_repo.list_player_items(player_id=p1)[0].id
    item2 = items_repo.list_player_items(player_id=p2)[0].id

    r = client.post(
        "/api/trades",
        json={"toPlayerId": p2, "offeredItemIds": [item1], "requestedItemIds": [item2]},
        headers=h1,
    )
    assert r.status_code == 201, r.text
    trade_id = r.json()["id"]

    _assert_problem(
        client.post("/api/trades", json={"toPlayerId": p2, "offeredItemIds": [], "requestedItemIds": [item2]}, headers=h1),
        400,
    )
    _assert_problem(client.post(f"/api/trades/{trade_id}/accept", headers=h1), 403)

    details = client.get(f"/api/trades/{trade_id}", headers=h2).json()
    assert details["fromPlayer"]["playerId"] == p1

    r = client.post(f"/api/trades/{trade_id}/accept", headers=h2)
    assert r.status_code == 200
    assert r.json()["status"] == "COMPLETED"
    assert items_repo.get_item(item_id=item1).player_id == p2
    assert items_repo.get_item(item_id=item2).player_id == p1

    body = _assert_problem(client.post(f"/api/trades/{trade_id}/reject", headers=h2), 409)
    assert body["extensions"]["status"] == "COMPLETED"

    mine = client.get("/api/trades/me", headers=h1).json()
    assert [t["id"] for t in mine["sentTrades"]] == [trade_id]
    assert mine["receivedTrades"] == []


def test_achievement_endpoints(client):
    pid, headers = _signup(client, "ach@example.com")
    achievements = generate_achievements(6, random.Random(2))
    achievements_repo.put_achievements(achievements)
    achievement_service.grant_achievements(player_id=pid, achievement_ids=[achievements[3].id])

    body = client.get("/api/achievements", headers=headers).json()
    assert body["total"] == 6
    assert {a["id"] for a in body["achievements"]} == {a.id for a in achievements}

    one = client.get(f"/api/achievements/{achievements[0].id}", headers=headers).json()
    assert one["name"] == achievements[0].name
    _assert_problem(client.get("/api/achievements/missing", headers=headers), 404)

    mine = client.get(f"/api/players/{pid}/achievements", headers=headers).json()
    assert [a["id"] for a in mine["achievements"]] == [achievements[3].id]
    _assert_problem(client.get("/api/players/nobody/achievements", headers=headers), 404)
    _assert_problem(client.get("/api/achievements"), 401)
