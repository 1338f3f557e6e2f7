from __future__ import annotations

from typing import Iterable

from .models import RarityTier, SessionTier
from .rng import RandomSource, default_rng

# Canonical rarity table, most common first. Chances are per-scan find rates.
DEFAULT_RARITY_TIERS: tuple[RarityTier, ...] = (
    RarityTier(0, "Common", "#9CA3AF", 0.22, 0.28),  # 1 in 4.5-3.6
    RarityTier(1, "Uncommon", "#10B981", 0.18, 0.23),  # 1 in 5.6-4.3
    RarityTier(2, "Rare", "#3B82F6", 0.13, 0.17),  # 1 in 7.7-5.9
    RarityTier(3, "Epic", "#8B5CF6", 0.09, 0.13),  # 1 in 11.1-7.7
    RarityTier(4, "Legendary", "#F59E0B", 0.06, 0.09),  # 1 in 16.7-11.1
    RarityTier(5, "Fabled", "#B91C1C", 0.03, 0.06),  # 1 in 33.3-16.7
    RarityTier(6, "Mythic", "#EF4444", 0.013, 0.03),  # 1 in 76.9-33.3
    RarityTier(7, "Divine", "#EC4899", 0.006, 0.013),  # 1 in 166.7-76.9
    RarityTier(8, "Astral", "#818CF8", 0.001, 0.003),  # 1 in 1000-333.3
    RarityTier(9, "Celestial", "#14B8A6", 0.0006, 0.0015),  # 1 in 1667-667
    RarityTier(10, "Transcendent", "#F97316", 0.0003, 0.00065),  # 1 in 3333-1538
    RarityTier(11, "Ethereal", "#6366F1", 0.00014, 0.00032),  # 1 in 7142-3125
    RarityTier(12, "Primordial", "#84CC16", 0.00006, 0.00015),  # 1 in 16667-6667
    RarityTier(13, "Arcane", "#DB2777", 0.000025, 0.000065),  # 1 in 40000-15385
)


def tiers_by_id(tiers: Iterable[RarityTier]) -> dict[int, RarityTier]:
    return {t.id: t for t in tiers}


def assign_session_chances(
    tiers: Iterable[RarityTier],
    rng: RandomSource | None = None,
) -> list[SessionTier]:
    """Draw one concrete chance per tier, uniformly within its configured range."""
    rng = rng or default_rng()
    out: list[SessionTier] = []
    for tier in tiers:
        chance = tier.min_chance + rng.random() * (tier.max_chance - tier.min_chance)
        out.append(
            SessionTier(
                id=tier.id,
                name=tier.name,
                color=tier.color,
                chance=chance,
                min_chance=tier.min_chance,
                max_chance=tier.max_chance,
            )
        )
    return out


def format_chance(value: float) -> str:
    """Render a probability as a percentage without trailing zeros ("0.0025%")."""
    pct = value * 100
    if pct >= 1:
        return f"{int(pct)}%"
    return f"{pct:.8f}".rstrip("0").rstrip(".") + "%"
