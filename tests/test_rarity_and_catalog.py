from __future__ import annotations

import random
from collections import Counter

import pytest

from conftest import ScriptedRng
from scanloot.game.catalog import generate_collectables
from scanloot.game.models import RarityTier
from scanloot.game.rarity import DEFAULT_RARITY_TIERS, assign_session_chances, format_chance


def test_default_tiers_are_ordered_and_valid():
    ids = [t.id for t in DEFAULT_RARITY_TIERS]
    assert ids == list(range(len(DEFAULT_RARITY_TIERS)))
    for t in DEFAULT_RARITY_TIERS:
        assert 0 <= t.min_chance <= t.max_chance <= 1


def test_rarity_tier_rejects_inverted_range():
    with pytest.raises(ValueError):
        RarityTier(99, "Broken", "#000000", 0.5, 0.1)


def test_session_chance_is_drawn_within_each_range():
    session = assign_session_chances(DEFAULT_RARITY_TIERS, random.Random(3))
    assert [s.id for s in session] == [t.id for t in DEFAULT_RARITY_TIERS]
    for s, t in zip(session, DEFAULT_RARITY_TIERS):
        assert t.min_chance <= s.chance <= t.max_chance


def test_session_chance_interpolates_with_the_draw():
    tier = RarityTier(0, "Common", "#fff", 0.2, 0.4)
    (s,) = assign_session_chances([tier], ScriptedRng(0.5))
    assert s.chance == pytest.approx(0.3)


@pytest.mark.parametrize("total", [len(DEFAULT_RARITY_TIERS), 50, 200])
def test_catalog_covers_every_tier(total):
    session = assign_session_chances(DEFAULT_RARITY_TIERS, random.Random(total))
    catalog = generate_collectables(session, total, random.Random(total + 1))
    assert len(catalog) == total
    assert {c.rarity_id for c in catalog} == {t.id for t in DEFAULT_RARITY_TIERS}
    assert len({c.id for c in catalog}) == total


def test_small_total_returns_only_the_guaranteed_set():
    session = assign_session_chances(DEFAULT_RARITY_TIERS, random.Random(0))
    catalog = generate_collectables(session, 3, random.Random(0))
    assert len(catalog) == len(DEFAULT_RARITY_TIERS)


def test_catalog_fill_favours_common_tiers():
    session = assign_session_chances(DEFAULT_RARITY_TIERS, random.Random(5))
    catalog = generate_collectables(session, 2000, random.Random(6))
    counts = Counter(c.rarity_id for c in catalog)
    assert counts[0] > counts[5] > counts[13]


def test_format_chance():
    assert format_chance(0.25) == "25%"
    assert format_chance(0.000025) == "0.0025%"
