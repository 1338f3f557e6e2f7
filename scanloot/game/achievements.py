"""
Achievement definitions for seed data.

Each definition is drawn from one kind of game event (scanning, owning,
trading, ...). Kinds with a threshold pick it at random, so repeated kinds
still read differently.
"""

from __future__ import annotations

import uuid
from typing import Callable

from .flavor import choice, collectable_name
from .models import Achievement, now_iso
from .rng import RandomSource, default_rng


def _between(lo: int, hi: int, rng: RandomSource) -> int:
    return lo + min(hi - lo, int(rng.random() * (hi - lo + 1)))


def _first_scan(rng: RandomSource) -> tuple[str, str]:
    return "Scanner Beginner", "Scan your very first item and add it to your inventory."


def _scan_streak(rng: RandomSource) -> tuple[str, str]:
    days = _between(3, 14, rng)
    return f"{days}-Day Scanning Streak", f"Scan at least one new code every day for {days} days in a row."


def _own_items(rng: RandomSource) -> tuple[str, str]:
    n = _between(10, 250, rng)
    return f"Pack Rat {n}", f"Own {n} items in your inventory."


def _collect_rarity(rng: RandomSource) -> tuple[str, str]:
    tier = choice(("Rare", "Epic", "Legendary", "Mythic", "Exotic", "Divine"), rng)
    return f"{tier} Collector", f"Obtain your first {tier.lower()} collectable."


def _full_catalogue(rng: RandomSource) -> tuple[str, str]:
    return "Catalogue Completionist", "Collect one of every collectable item available in the game."


def _first_trade(rng: RandomSource) -> tuple[str, str]:
    return "First Exchange", "Complete your first successful trade with another player."


def _trade_count(rng: RandomSource) -> tuple[str, str]:
    n = _between(3, 30, rng)
    return f"Wheeler Dealer #{n}", f"Complete {n} trades with any players."


def _active_trader(rng: RandomSource) -> tuple[str, str]:
    n = _between(2, 8, rng)
    return f"Trade Session Frenzy ({n})", f"Initiate or accept {n} trades in a single play session."


def _trade_partners(rng: RandomSource) -> tuple[str, str]:
    n = _between(3, 15, rng)
    return f"Networker ({n} Partners)", f"Trade with {n} unique people."


def _big_quality(rng: RandomSource) -> tuple[str, str]:
    q = _between(80, 100, rng)
    return "Top Quality Find", f"Obtain an item with quality rating of {q} or better."


def _inventory_quality(rng: RandomSource) -> tuple[str, str]:
    q = _between(300, 1500, rng)
    return "Treasure Hoard", f"Reach a combined item quality of {q} across your entire inventory."


def _legendary_luck(rng: RandomSource) -> tuple[str, str]:
    return "Legendary Luck", "Find a legendary item from a scan."


def _player_level(rng: RandomSource) -> tuple[str, str]:
    level = choice(("5", "10", "15", "25", "50", "100"), rng)
    return f"Level {level} Milestone", f"Reach player level {level}."


def _profile_custom(rng: RandomSource) -> tuple[str, str]:
    return "Fashion Statement", "Customize your player profile with a new username."


def _misc_fun(rng: RandomSource) -> tuple[str, str]:
    verb = choice(("Polish", "Juggle", "Befriend", "Outwit", "Serenade", "Rescue"), rng)
    thing = collectable_name(rng)
    return f"{verb} the {thing}", f"Do something unexpected with a {thing.lower()} for a surprise!"


ACHIEVEMENT_KINDS: dict[str, Callable[[RandomSource], tuple[str, str]]] = {
    "first_scan": _first_scan,
    "scan_streak": _scan_streak,
    "own_items": _own_items,
    "collect_rarity": _collect_rarity,
    "full_catalogue": _full_catalogue,
    "first_trade": _first_trade,
    "trade_count": _trade_count,
    "active_trader": _active_trader,
    "trade_partners": _trade_partners,
    "big_quality": _big_quality,
    "inventory_quality": _inventory_quality,
    "legendary_luck": _legendary_luck,
    "player_level": _player_level,
    "profile_custom": _profile_custom,
    "misc_fun": _misc_fun,
}


def generate_achievements(count: int, rng: RandomSource | None = None) -> list[Achievement]:
    rng = rng or default_rng()
    kinds = tuple(ACHIEVEMENT_KINDS)
    created_at = now_iso()
    out: list[Achievement] = []
    for _ in range(max(0, int(count))):
        kind = choice(kinds, rng)
        name, description = ACHIEVEMENT_KINDS[kind](rng)
        out.append(
            Achievement(
                id=str(uuid.uuid4()),
                kind=kind,
                name=name,
                description=description,
                created_at=created_at,
            )
        )
    return out


def award_sample(achievements: list[Achievement], rng: RandomSource, *, max_count: int = 5) -> list[str]:
    """A random subset of achievement ids (no repeats) for one seeded player."""
    if not achievements:
        return []
    want = _between(0, min(max_count, len(achievements)), rng)
    pool = [a.id for a in achievements]
    picked: list[str] = []
    for _ in range(want):
        picked.append(pool.pop(min(len(pool) - 1, int(rng.random() * len(pool)))))
    return picked
