from __future__ import annotations

from typing import Iterable

from ..db import store
from ..db.collections import ITEMS
from ..game.models import Item


def get_item(*, item_id: str) -> Item | None:
    iid = str(item_id or "").strip()
    if not iid:
        return None
    rec = store.get_store().get(ITEMS, {"id": iid})
    return Item.from_record(rec) if rec else None


def get_items(item_ids: Iterable[str]) -> dict[str, Item]:
    """Fetch items by id; missing ids are simply absent from the result."""
    out: dict[str, Item] = {}
    s = store.get_store()
    for iid in item_ids:
        if iid in out:
            continue
        rec = s.get(ITEMS, {"id": iid})
        if rec:
            out[iid] = Item.from_record(rec)
    return out


def list_player_items(*, player_id: str) -> list[Item]:
    recs = store.get_store().query(ITEMS, "PlayerIndex", "playerId", str(player_id))
    items = [Item.from_record(r) for r in recs]
    # Newest finds first.
    items.sort(key=lambda i: i.found_at, reverse=True)
    return items


def list_items() -> list[Item]:
    return [Item.from_record(r) for r in store.get_store().scan(ITEMS)]


def create_item(item: Item) -> Item:
    store.get_store().put(ITEMS, item.to_record(), if_not_exists=True)
    return item
