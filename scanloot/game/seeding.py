"""Sample players and trades for development data."""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Sequence

from .models import Item, Player, Trade, TradeStatus
from .rng import RandomSource, default_rng

MAX_BUNDLE = 5


def _randint(rng: RandomSource, lo: int, hi: int) -> int:
    """Uniform int in [lo, hi]."""
    return lo + min(hi - lo, int(rng.random() * (hi - lo + 1)))


def _sample(pool: Sequence[str], k: int, rng: RandomSource) -> list[str]:
    # Partial Fisher-Yates driven by the injected rng.
    ids = list(pool)
    for i in range(min(k, len(ids))):
        j = _randint(rng, i, len(ids) - 1)
        ids[i], ids[j] = ids[j], ids[i]
    return ids[:k]


def _iso_days_ago(days: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat().replace("+00:00", "Z")


def generate_trades(
    players: Sequence[Player],
    items: Sequence[Item],
    count: int,
    rng: RandomSource | None = None,
) -> list[Trade]:
    """
    Build up to `count` PENDING trades between random pairs of item owners.

    Each side bundles 1-5 of its own items. Items may appear in several
    trades, like overlapping real offers. Gives up after 3x `count` attempts.
    """
    rng = rng or default_rng()
    by_owner: dict[str, list[str]] = defaultdict(list)
    for it in items:
        by_owner[it.player_id].append(it.id)
    owners = [p.id for p in players if by_owner.get(p.id)]
    if len(owners) < 2:
        return []

    trades: list[Trade] = []
    attempts = 0
    while len(trades) < count and attempts < count * 3:
        attempts += 1
        from_idx = _randint(rng, 0, len(owners) - 1)
        to_idx = _randint(rng, 0, len(owners) - 2)
        if to_idx >= from_idx:
            to_idx += 1
        from_id, to_id = owners[from_idx], owners[to_idx]

        offered = _sample(by_owner[from_id], _randint(rng, 1, MAX_BUNDLE), rng)
        requested = _sample(by_owner[to_id], _randint(rng, 1, MAX_BUNDLE), rng)
        trades.append(
            Trade(
                id=str(uuid.uuid4()),
                from_player_id=from_id,
                to_player_id=to_id,
                offered_item_ids=offered,
                requested_item_ids=requested,
                status=TradeStatus.PENDING,
                created_at=_iso_days_ago(rng.random() * 7),
            )
        )
    return trades
