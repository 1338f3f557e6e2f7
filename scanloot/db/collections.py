from __future__ import annotations

from typing import Any

PLAYERS = "Players"
RARITIES = "Rarities"
COLLECTABLES = "Collectables"
ITEMS = "Items"
TRADES = "Trades"
TRADE_ITEM_REFS = "TradeItemRefs"
ACHIEVEMENTS = "Achievements"

# Primary key attributes per collection (partition key first).
KEY_FIELDS: dict[str, tuple[str, ...]] = {
    PLAYERS: ("id",),
    RARITIES: ("id",),
    COLLECTABLES: ("id",),
    ITEMS: ("id",),
    TRADES: ("id",),
    TRADE_ITEM_REFS: ("itemId", "tradeId"),
    ACHIEVEMENTS: ("id",),
}

# Secondary indexes: index name -> partition key attribute.
INDEXES: dict[str, dict[str, str]] = {
    PLAYERS: {"EmailIndex": "email", "UsernameIndex": "username"},
    ITEMS: {"PlayerIndex": "playerId"},
    TRADES: {"FromPlayerIndex": "fromPlayerId", "ToPlayerIndex": "toPlayerId"},
}

# Key attributes stored as DynamoDB numbers; everything else keyed is a string.
NUMERIC_KEYS: dict[str, set[str]] = {
    RARITIES: {"id"},
}


def key_fields(collection: str) -> tuple[str, ...]:
    try:
        return KEY_FIELDS[collection]
    except KeyError:
        raise ValueError(f"unknown collection: {collection}") from None


def key_of(collection: str, record: dict[str, Any]) -> dict[str, Any]:
    """Extract the primary key of `record` for `collection`."""
    out: dict[str, Any] = {}
    for f in key_fields(collection):
        if record.get(f) is None:
            raise ValueError(f"{collection} record is missing key attribute {f!r}")
        out[f] = record[f]
    return out


def index_field(collection: str, index_name: str | None, field: str) -> str:
    """
    Resolve the attribute a query conditions on.

    `index_name=None` queries the table's own partition key.
    """
    if index_name is None:
        pk = key_fields(collection)[0]
        if field != pk:
            raise ValueError(f"{collection} base-table queries must use {pk!r}, not {field!r}")
        return pk
    declared = INDEXES.get(collection, {}).get(index_name)
    if declared is None:
        raise ValueError(f"{collection} has no index {index_name!r}")
    if declared != field:
        raise ValueError(f"{collection}.{index_name} is keyed on {declared!r}, not {field!r}")
    return declared
