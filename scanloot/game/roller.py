from __future__ import annotations

import math
import uuid
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ..errors import RarityNotFound, ValidationError
from ..observability.logging import get_logger
from .models import Collectable, Item, Player, RarityTier, now_iso
from .rarity import tiers_by_id
from .rng import RandomSource, default_rng
from .weighted import weighted_pick

log = get_logger("item_roller")

# quality = floor(100 * U^k) + 1. Larger k pushes mass toward quality 1;
# with k = 6.66 the median quality is 1 and about 10% of rolls reach 50+.
QUALITY_SKEW_EXPONENT = 6.66

# Jitter added on top of the interpolated chance, as a fraction of the tier range.
CHANCE_JITTER_FRACTION = 1e-8
CHANCE_DECIMALS = 18

# Weight used when a collectable points at a tier that does not exist.
UNKNOWN_RARITY_WEIGHT = 1.0


def roll_quality(rng: RandomSource) -> int:
    q = math.floor(100 * rng.random() ** QUALITY_SKEW_EXPONENT) + 1
    return max(1, min(100, q))


def calc_chance(rarity: RarityTier, quality: int, rng: RandomSource) -> float:
    """
    Interpolate the find chance within the tier's range by quality.

    A sub-unit random offset spreads items of equal quality across the range
    and a tiny jitter keeps chance values from colliding exactly. The result
    never leaves [minChance, maxChance].
    """
    lo, hi = rarity.min_chance, rarity.max_chance
    span = hi - lo
    scaled = min(1.0, max(0.0, (quality + rng.random()) / 101))
    base = lo + span * scaled
    max_noise = min(hi - base, span * CHANCE_JITTER_FRACTION)
    chance = round(base + rng.random() * max(0.0, max_noise), CHANCE_DECIMALS)
    return min(hi, max(lo, chance))


def _collectable_weight(collectable: Collectable, tiers: dict[int, RarityTier]) -> float:
    tier = tiers.get(collectable.rarity_id)
    if tier is None:
        log.warning(
            "collectable_unknown_rarity",
            collectable_id=collectable.id,
            rarity_id=collectable.rarity_id,
        )
        return UNKNOWN_RARITY_WEIGHT
    return tier.average_chance


def roll_collectable(
    collectables: Sequence[Collectable],
    rarities: Sequence[RarityTier],
    rng: RandomSource,
) -> Collectable:
    """Pick a catalog entry, weighted by the midpoint of its tier's chance range."""
    if not collectables:
        raise ValidationError("No collectables in catalog")
    tiers = tiers_by_id(rarities)
    return weighted_pick(collectables, lambda c: _collectable_weight(c, tiers), rng)


def roll_item(
    player_id: str,
    collectables: Sequence[Collectable],
    rarities: Sequence[RarityTier],
    rng: RandomSource | None = None,
    *,
    found_at: str | None = None,
) -> Item:
    rng = rng or default_rng()
    collectable = roll_collectable(collectables, rarities, rng)
    rarity = tiers_by_id(rarities).get(collectable.rarity_id)
    if rarity is None:
        raise RarityNotFound(
            f"Rarity {collectable.rarity_id} not found for collectable {collectable.id}",
            details={"collectableId": collectable.id, "rarityId": collectable.rarity_id},
        )

    quality = roll_quality(rng)
    return Item(
        id=str(uuid.uuid4()),
        player_id=str(player_id),
        collectable_id=collectable.id,
        quality=quality,
        chance=calc_chance(rarity, quality, rng),
        found_at=found_at or now_iso(),
    )


def generate_items(
    players: Sequence[Player],
    collectables: Sequence[Collectable],
    rarities: Sequence[RarityTier],
    count: int,
    rng: RandomSource | None = None,
) -> list[Item]:
    """
    Bulk-generate items for seeding/dev data.

    Owners are drawn uniformly from `players` and found times are spread over
    the last week. Unlike `roll_item`, a collectable whose tier is missing
    still yields an item (with chance 0.0) so a partially broken catalog can
    be seeded and inspected.
    """
    rng = rng or default_rng()
    if not collectables or not players:
        return []

    tiers = tiers_by_id(rarities)
    now = datetime.now(timezone.utc)
    week_s = 7 * 24 * 60 * 60
    items: list[Item] = []
    for _ in range(int(count)):
        player = players[min(len(players) - 1, int(rng.random() * len(players)))]
        found_at = (now - timedelta(seconds=rng.random() * week_s)).isoformat().replace("+00:00", "Z")
        collectable = roll_collectable(collectables, rarities, rng)
        rarity = tiers.get(collectable.rarity_id)
        quality = roll_quality(rng)
        if rarity is None:
            log.warning("seed_item_without_rarity", collectable_id=collectable.id)
            chance = 0.0
        else:
            chance = calc_chance(rarity, quality, rng)
        items.append(
            Item(
                id=str(uuid.uuid4()),
                player_id=player.id,
                collectable_id=collectable.id,
                quality=quality,
                chance=chance,
                found_at=found_at,
            )
        )
    return items
