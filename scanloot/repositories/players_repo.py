from __future__ import annotations

from typing import Any

from ..db import store
from ..db.collections import PLAYERS
from ..db.dynamodb.errors import DdbConflict
from ..game.models import Player


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def get_player(*, player_id: str) -> Player | None:
    pid = str(player_id or "").strip()
    if not pid:
        return None
    rec = store.get_store().get(PLAYERS, {"id": pid})
    return Player.from_record(rec) if rec else None


def get_player_by_email(*, email: str) -> Player | None:
    em = normalize_email(email)
    if not em:
        return None
    recs = store.get_store().query(PLAYERS, "EmailIndex", "email", em)
    return Player.from_record(recs[0]) if recs else None


def get_player_by_username(*, username: str) -> Player | None:
    name = str(username or "").strip()
    if not name:
        return None
    recs = store.get_store().query(PLAYERS, "UsernameIndex", "username", name)
    return Player.from_record(recs[0]) if recs else None


def list_players() -> list[Player]:
    recs = store.get_store().scan(PLAYERS)
    players = [Player.from_record(r) for r in recs]
    players.sort(key=lambda p: p.created_at)
    return players


def create_player(player: Player) -> Player:
    store.get_store().put(PLAYERS, player.to_record(), if_not_exists=True)
    return player


def update_player(*, player_id: str, changes: dict[str, Any]) -> Player | None:
    rec = store.get_store().update(PLAYERS, {"id": player_id}, changes)
    return Player.from_record(rec) if rec else None


def increment_total_scans(*, player_id: str) -> Player | None:
    """
    Bump `totalScans` with a compare-and-set on the previous value so two
    concurrent scans never lose a count.
    """
    s = store.get_store()
    for _ in range(5):
        rec = s.get(PLAYERS, {"id": player_id})
        if rec is None:
            return None
        current = int(rec.get("totalScans") or 0)
        try:
            out = s.update(
                PLAYERS,
                {"id": player_id},
                {"totalScans": current + 1},
                expected={"totalScans": rec.get("totalScans", 0)} if "totalScans" in rec else None,
            )
        except DdbConflict:
            continue
        return Player.from_record(out) if out else None
    raise DdbConflict(
        message="totalScans update kept conflicting",
        operation="UpdateItem",
        table_name=PLAYERS,
        key={"id": player_id},
    )
