"""
Seed a development dataset: rarities, a generated catalog, players,
achievements, items and sample trades.

    python scripts/seed.py --players 10 --collectables 150 --items 300 --trades 40 --achievements 25 --seed 7

Every seeded player logs in with the password `password123`. Trades are
created PENDING and about 40% are then settled through the normal accept
path, so item ownership and conflict cancellation stay consistent.
"""

from __future__ import annotations

import argparse
import random
from collections import Counter

from scanloot.errors import ConflictError, GameError
from scanloot.game.achievements import award_sample, generate_achievements
from scanloot.game.catalog import generate_collectables
from scanloot.game.models import Player
from scanloot.game.rarity import DEFAULT_RARITY_TIERS, assign_session_chances, format_chance
from scanloot.game.roller import generate_items
from scanloot.game.seeding import generate_trades
from scanloot.modules.accounts import account_service
from scanloot.modules.achievements import achievement_service
from scanloot.modules.trading import trade_service
from scanloot.observability.logging import configure_logging, get_logger
from scanloot.repositories import achievements_repo, catalog_repo, items_repo, players_repo, trades_repo
from scanloot.settings import settings

SEED_PASSWORD = "password123"
COMPLETED_FRACTION = 0.4

log = get_logger("seed")


def seed_players(count: int, rng: random.Random) -> list[Player]:
    players: list[Player] = []
    for i in range(1, count + 1):
        email = f"player{i}@example.com"
        try:
            out = account_service.register_player(email=email, password=SEED_PASSWORD, rng=rng)
            player = players_repo.get_player(player_id=out["player"]["id"])
        except ConflictError:
            log.info("seed_player_exists", email=email)
            player = players_repo.get_player_by_email(email=email)
        if player is not None:
            players.append(player)
    return players


def settle_some(trades, rng: random.Random) -> Counter:
    outcome: Counter = Counter()
    for trade in trades:
        if rng.random() >= COMPLETED_FRACTION:
            continue
        try:
            trade_service.accept_trade(trade_id=trade.id, caller_id=trade.to_player_id)
            outcome["completed"] += 1
        except GameError as e:
            # Earlier settlements may already have cancelled or invalidated it.
            outcome[type(e).__name__] += 1
    return outcome


def log_distribution(collectables) -> None:
    tiers = {t.id: t for t in DEFAULT_RARITY_TIERS}
    counts = Counter(c.rarity_id for c in collectables)
    total = max(1, len(collectables))
    for tier_id in sorted(counts):
        tier = tiers.get(tier_id)
        log.info(
            "catalog_rarity",
            rarity=tier.name if tier else tier_id,
            count=counts[tier_id],
            share=format_chance(counts[tier_id] / total),
            configured=f"{format_chance(tier.min_chance)} - {format_chance(tier.max_chance)}" if tier else None,
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed ScanLoot development data")
    parser.add_argument("--players", type=int, default=10)
    parser.add_argument("--collectables", type=int, default=150)
    parser.add_argument("--items", type=int, default=300)
    parser.add_argument("--trades", type=int, default=40)
    parser.add_argument("--achievements", type=int, default=25)
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for a reproducible dataset")
    args = parser.parse_args()

    configure_logging(level=settings.log_level)
    rng = random.Random(args.seed)

    catalog_repo.put_rarities(list(DEFAULT_RARITY_TIERS))
    session = assign_session_chances(DEFAULT_RARITY_TIERS, rng)
    collectables = generate_collectables(session, args.collectables, rng)
    catalog_repo.put_collectables(collectables)
    log_distribution(collectables)

    players = seed_players(args.players, rng)
    achievements = generate_achievements(args.achievements, rng)
    achievements_repo.put_achievements(achievements)
    granted = 0
    for player in players:
        granted += len(
            achievement_service.grant_achievements(player_id=player.id, achievement_ids=award_sample(achievements, rng))
        )

    items = generate_items(players, collectables, DEFAULT_RARITY_TIERS, args.items, rng)
    for item in items:
        items_repo.create_item(item)

    trades = generate_trades(players, items, args.trades, rng)
    for trade in trades:
        trades_repo.create_trade(trade)
    outcome = settle_some(trades, rng)

    log.info(
        "seed_done",
        rarities=len(DEFAULT_RARITY_TIERS),
        collectables=len(collectables),
        players=len(players),
        achievements=len(achievements),
        achievements_granted=granted,
        items=len(items),
        trades=len(trades),
        settlement=dict(outcome),
        backend=settings.normalized_storage_backend,
    )


if __name__ == "__main__":
    main()
