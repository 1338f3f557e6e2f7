from __future__ import annotations

import random
import statistics
from collections import Counter

import pytest
from structlog.testing import capture_logs

from conftest import ScriptedRng
from scanloot.errors import RarityNotFound, ValidationError
from scanloot.game.catalog import generate_collectables
from scanloot.game.models import Collectable, Player, RarityTier
from scanloot.game.rarity import DEFAULT_RARITY_TIERS, assign_session_chances, tiers_by_id
from scanloot.game.roller import calc_chance, generate_items, roll_collectable, roll_item, roll_quality


def _collectable(cid: str, rarity_id: int) -> Collectable:
    return Collectable(id=cid, name=cid, description="", rarity_id=rarity_id, created_at="2024-01-01T00:00:00Z")


@pytest.fixture
def catalog():
    rng = random.Random(11)
    return generate_collectables(assign_session_chances(DEFAULT_RARITY_TIERS, rng), 120, rng)


def test_quality_and_chance_stay_in_bounds(catalog):
    rng = random.Random(99)
    tiers = tiers_by_id(DEFAULT_RARITY_TIERS)
    by_id = {c.id: c for c in catalog}
    for _ in range(5_000):
        item = roll_item("p1", catalog, DEFAULT_RARITY_TIERS, rng)
        tier = tiers[by_id[item.collectable_id].rarity_id]
        assert 1 <= item.quality <= 100
        assert tier.min_chance <= item.chance <= tier.max_chance
        assert item.player_id == "p1"


def test_quality_extremes():
    assert roll_quality(ScriptedRng(0.0)) == 1
    assert roll_quality(ScriptedRng(0.9999999)) == 100


def test_quality_is_skewed_low():
    rng = random.Random(7)
    qualities = [roll_quality(rng) for _ in range(10_000)]
    # P(q == 1) is just over 0.5, so the sample median sits at 1 or 2.
    assert statistics.median(qualities) <= 2
    # P(q >= 50) = 1 - 0.49 ** (1 / 6.66), about 0.102
    assert 0.08 <= sum(q >= 50 for q in qualities) / len(qualities) <= 0.12


def test_chance_rises_with_quality():
    tier = RarityTier(1, "Uncommon", "#fff", 0.1, 0.2)
    low = calc_chance(tier, 1, ScriptedRng(0.0))
    high = calc_chance(tier, 100, ScriptedRng(0.0))
    assert tier.min_chance <= low < high <= tier.max_chance


def test_chance_for_fixed_range_is_exact():
    tier = RarityTier(0, "Fixed", "#fff", 0.5, 0.5)
    assert calc_chance(tier, 57, random.Random(1)) == 0.5


def test_five_to_one_collectable_split():
    tiers = [RarityTier(0, "A", "#fff", 0.5, 0.5), RarityTier(1, "B", "#000", 0.1, 0.1)]
    collectables = [_collectable("c0", 0), _collectable("c1", 1)]
    rng = random.Random(2024)
    counts = Counter(roll_item("p", collectables, tiers, rng).collectable_id for _ in range(1000))
    assert 790 <= counts["c0"] <= 875
    assert counts["c0"] + counts["c1"] == 1000


def test_missing_rarity_is_fatal_for_the_roll():
    with pytest.raises(RarityNotFound) as ei:
        roll_item("p", [_collectable("orphan", 99)], DEFAULT_RARITY_TIERS, random.Random(0))
    assert ei.value.details["rarityId"] == 99


def test_unknown_rarity_weighs_one_against_real_tiers():
    # Tier midpoint 0.5 vs. the fallback weight 1: the orphan takes 2/3 of the wheel.
    tiers = [RarityTier(0, "A", "#fff", 0.5, 0.5)]
    collectables = [_collectable("c0", 0), _collectable("orphan", 99)]

    with capture_logs() as logs:
        assert roll_collectable(collectables, tiers, ScriptedRng(0.3)).id == "c0"
        assert roll_collectable(collectables, tiers, ScriptedRng(0.34)).id == "orphan"

    warnings = [e for e in logs if e["event"] == "collectable_unknown_rarity"]
    assert warnings
    assert warnings[0]["log_level"] == "warning"
    assert warnings[0]["collectable_id"] == "orphan"
    assert warnings[0]["rarity_id"] == 99

    rng = random.Random(3)
    counts = Counter(roll_collectable(collectables, tiers, rng).id for _ in range(3000))
    assert 0.62 <= counts["orphan"] / 3000 <= 0.71


def test_empty_catalog_is_rejected():
    with pytest.raises(ValidationError):
        roll_item("p", [], DEFAULT_RARITY_TIERS, random.Random(0))


def test_generate_items_tolerates_missing_rarity():
    players = [Player(id="p1", email="a@b.co", username="a", created_at="")]
    items = generate_items(players, [_collectable("orphan", 99)], DEFAULT_RARITY_TIERS, 5, random.Random(0))
    assert len(items) == 5
    assert all(i.chance == 0.0 and i.player_id == "p1" for i in items)


def test_generate_items_spreads_owners(catalog):
    players = [Player(id=f"p{i}", email=f"p{i}@x.io", username=f"p{i}", created_at="") for i in range(4)]
    items = generate_items(players, catalog, DEFAULT_RARITY_TIERS, 400, random.Random(5))
    assert {i.player_id for i in items} == {p.id for p in players}
    assert all(i.found_at.endswith("Z") for i in items)


def test_generate_items_without_players_is_empty(catalog):
    assert generate_items([], catalog, DEFAULT_RARITY_TIERS, 10) == []
