from __future__ import annotations

from typing import Any

from ..db import store
from ..db.collections import TRADE_ITEM_REFS, TRADES
from ..db.store import WriteOp
from ..game.models import Trade, TradeStatus


def get_trade(*, trade_id: str) -> Trade | None:
    tid = str(trade_id or "").strip()
    if not tid:
        return None
    rec = store.get_store().get(TRADES, {"id": tid})
    return Trade.from_record(rec) if rec else None


def list_trades_for_player(*, player_id: str) -> list[Trade]:
    """Trades where the player is either side, newest first."""
    s = store.get_store()
    by_id: dict[str, Trade] = {}
    for index_name, field in (("FromPlayerIndex", "fromPlayerId"), ("ToPlayerIndex", "toPlayerId")):
        for rec in s.query(TRADES, index_name, field, str(player_id)):
            t = Trade.from_record(rec)
            by_id[t.id] = t
    return sorted(by_id.values(), key=lambda t: t.created_at, reverse=True)


# ---- item -> pending trade index ----


def ref_record(*, item_id: str, trade_id: str) -> dict[str, Any]:
    return {"itemId": item_id, "tradeId": trade_id}


def ref_put_ops(trade: Trade) -> list[WriteOp]:
    return [WriteOp.put(TRADE_ITEM_REFS, ref_record(item_id=iid, trade_id=trade.id)) for iid in trade.item_ids]


def trade_ids_referencing(*, item_id: str) -> list[str]:
    recs = store.get_store().query(TRADE_ITEM_REFS, None, "itemId", str(item_id))
    return [str(r["tradeId"]) for r in recs if r.get("tradeId")]


def create_trade(trade: Trade) -> Trade:
    """Write the trade and its item refs in one transaction."""
    ops = [WriteOp.put(TRADES, trade.to_record(), if_not_exists=True)]
    if trade.status is TradeStatus.PENDING:
        ops.extend(ref_put_ops(trade))
    store.get_store().transact(ops)
    return trade


def status_change_op(trade: Trade, *, status: TradeStatus, resolved_at: str) -> WriteOp:
    """Conditional PENDING -> `status` update for use inside a transaction."""
    return WriteOp.update(
        TRADES,
        {"id": trade.id},
        {"status": status.value, "resolvedAt": resolved_at},
        expected={"status": TradeStatus.PENDING.value},
    )


def delete_refs(trade: Trade) -> None:
    """
    Drop a resolved trade's item refs.

    Runs after the status change has committed. A leftover ref only points at
    a non-PENDING trade, which readers skip.
    """
    s = store.get_store()
    for iid in trade.item_ids:
        s.delete(TRADE_ITEM_REFS, ref_record(item_id=iid, trade_id=trade.id))


def resolve_trade(trade: Trade, *, status: TradeStatus, resolved_at: str) -> Trade | None:
    """
    Conditionally move a pending trade to a terminal status.

    Raises DdbConflict if the trade is no longer PENDING. Item refs are left
    for the caller to drop with `delete_refs` once this has committed.
    """
    rec = store.get_store().update(
        TRADES,
        {"id": trade.id},
        {"status": status.value, "resolvedAt": resolved_at},
        expected={"status": TradeStatus.PENDING.value},
    )
    return Trade.from_record(rec) if rec else None
