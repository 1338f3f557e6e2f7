from __future__ import annotations

from typing import Any

from ...errors import NotFoundError
from ...game.models import Item
from ...game.rng import RandomSource
from ...game.roller import roll_item
from ...observability.logging import get_logger
from ...repositories import catalog_repo, items_repo, players_repo

log = get_logger("scan_service")


def scan(*, player_id: str, barcode: str | None = None, rng: RandomSource | None = None) -> dict[str, Any]:
    """
    Roll one item for the player, store it and count the scan.

    The item is written before the counter is bumped; a lost counter
    increment never loses an item.
    """
    if players_repo.get_player(player_id=player_id) is None:
        raise NotFoundError("Player not found", details={"playerId": player_id})

    item: Item = roll_item(
        player_id,
        catalog_repo.list_collectables(),
        catalog_repo.list_rarities(),
        rng,
    )
    items_repo.create_item(item)
    player = players_repo.increment_total_scans(player_id=player_id)

    collectable = catalog_repo.get_collectable(collectable_id=item.collectable_id)
    log.info(
        "item_rolled",
        player_id=player_id,
        item_id=item.id,
        collectable_id=item.collectable_id,
        quality=item.quality,
        barcode=barcode,
    )
    return {
        "item": item.to_record(),
        "collectable": collectable.to_record() if collectable else None,
        "totalScans": player.total_scans if player else None,
    }
