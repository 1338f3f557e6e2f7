from __future__ import annotations

import random

import pytest

from conftest import ScriptedRng
from scanloot.db.collections import ACHIEVEMENTS, PLAYERS
from scanloot.errors import NotFoundError
from scanloot.game.achievements import ACHIEVEMENT_KINDS, award_sample, generate_achievements
from scanloot.game.models import Achievement, Player
from scanloot.modules.achievements import achievement_service
from scanloot.repositories import achievements_repo, players_repo


def _achievement(aid: str, kind: str = "first_scan", name: str = "Scanner Beginner") -> Achievement:
    return Achievement(id=aid, kind=kind, name=name, description="", created_at="2024-01-01T00:00:00Z")


@pytest.fixture
def player():
    return players_repo.create_player(
        Player(id="P1", email="p1@example.com", username="user-p1", created_at="2024-01-01T00:00:00Z")
    )


def test_generated_achievements_cover_game_events():
    achievements = generate_achievements(300, random.Random(4))
    assert len(achievements) == 300
    assert len({a.id for a in achievements}) == 300
    assert {a.kind for a in achievements} == set(ACHIEVEMENT_KINDS)
    assert all(a.name and a.description and a.created_at.endswith("Z") for a in achievements)


def test_threshold_kinds_use_their_range():
    # First draw picks the kind (scan_streak is index 1 of 15), second the threshold.
    [streak] = generate_achievements(1, ScriptedRng(1 / 15 + 0.001, 0.0))
    assert streak.kind == "scan_streak"
    assert streak.name == "3-Day Scanning Streak"

    [streak] = generate_achievements(1, ScriptedRng(1 / 15 + 0.001, 0.9999))
    assert streak.name == "14-Day Scanning Streak"


def test_award_sample_has_no_repeats():
    achievements = generate_achievements(10, random.Random(1))
    rng = random.Random(8)
    for _ in range(50):
        picked = award_sample(achievements, rng)
        assert len(picked) == len(set(picked)) <= 5
    assert award_sample([], rng) == []


def test_repo_roundtrip_and_order(mem_store):
    achievements_repo.put_achievements([_achievement("a2", "trade_count", "Wheeler Dealer #3"), _achievement("a1")])
    assert len(mem_store.scan(ACHIEVEMENTS)) == 2
    assert [a.id for a in achievements_repo.list_achievements()] == ["a1", "a2"]
    assert achievements_repo.get_achievement(achievement_id="a2").kind == "trade_count"
    assert achievements_repo.get_achievement(achievement_id="  ") is None
    assert [a.id for a in achievements_repo.get_achievements(["a2", "gone", "a1", "a2"])] == ["a2", "a1"]


def test_grant_adds_only_new_known_ids(player, mem_store):
    achievements_repo.put_achievements([_achievement("a1"), _achievement("a2")])

    assert achievement_service.grant_achievements(player_id="P1", achievement_ids=["a1", "a1"]) == ["a1"]
    assert achievement_service.grant_achievements(player_id="P1", achievement_ids=["a1", "a2"]) == ["a2"]
    assert mem_store.get(PLAYERS, {"id": "P1"})["achievements"] == ["a1", "a2"]

    with pytest.raises(NotFoundError):
        achievement_service.grant_achievements(player_id="P1", achievement_ids=["nope"])
    assert players_repo.get_player(player_id="P1").achievement_ids == ["a1", "a2"]


def test_player_achievements_listing(player):
    achievements_repo.put_achievements([_achievement("a1")])
    assert achievement_service.list_player_achievements(player_id="P1") == {"achievements": [], "total": 0}

    achievement_service.grant_achievements(player_id="P1", achievement_ids=["a1"])
    out = achievement_service.list_player_achievements(player_id="P1")
    assert out["total"] == 1
    assert out["achievements"][0]["id"] == "a1"

    with pytest.raises(NotFoundError):
        achievement_service.list_player_achievements(player_id="nobody")


def test_unknown_achievement_is_not_found():
    with pytest.raises(NotFoundError):
        achievement_service.get_achievement(achievement_id="missing")
