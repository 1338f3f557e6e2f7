from __future__ import annotations

import uuid
from typing import Sequence

from .flavor import collectable_description, collectable_name
from .models import Collectable, SessionTier, now_iso
from .rng import RandomSource, default_rng
from .weighted import weighted_pick


def _new_collectable(tier: SessionTier, rng: RandomSource) -> Collectable:
    return Collectable(
        id=str(uuid.uuid4()),
        name=collectable_name(rng),
        description=collectable_description(tier.name, rng),
        rarity_id=tier.id,
        created_at=now_iso(),
    )


def generate_collectables(
    session_tiers: Sequence[SessionTier],
    total_count: int,
    rng: RandomSource | None = None,
) -> list[Collectable]:
    """
    Build a catalog of `total_count` collectables for one generation session.

    Every tier gets one guaranteed collectable first. The remainder is filled
    by weighted roulette over the tiers, weighted by the midpoint of each
    tier's configured range rather than the session draw, so catalog
    composition does not depend on this session's luck. When `total_count`
    does not exceed the tier count only the guaranteed set is returned.
    """
    rng = rng or default_rng()
    collectables = [_new_collectable(tier, rng) for tier in session_tiers]

    remaining = max(0, int(total_count) - len(session_tiers))
    if remaining and session_tiers:
        for _ in range(remaining):
            tier = weighted_pick(session_tiers, lambda t: t.average_chance, rng)
            collectables.append(_new_collectable(tier, rng))

    return collectables
