"""
Trade state machine.

    PENDING -> COMPLETED | REJECTED | CANCELLED

Terminal states are final. Settlement (`accept_trade`) is one conditional
store transaction: every item update is conditioned on its expected current
owner and the trade update on `status = PENDING`, so either the whole swap
commits or nothing changes. After a successful settlement every other
pending trade that references a moved item is cancelled.

Work after a committed status change (conflict cancellation, item-ref
cleanup) is best-effort: a storage failure there is logged and the
committed result is still returned.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Sequence

from ...db import store
from ...db.collections import ITEMS
from ...db.dynamodb.errors import DdbConflict, DdbError
from ...db.store import WriteOp
from ...errors import ForbiddenError, InvalidStateError, NotFoundError, OwnershipError, ValidationError
from ...game.models import Item, Trade, TradeStatus, now_iso
from ...observability.logging import get_logger
from ...repositories import items_repo, players_repo, trades_repo

log = get_logger("trade_service")

# One trade update plus one conditional update per item must fit in a single
# DynamoDB transaction (100 operations).
MAX_TRADE_ITEMS = 99


@dataclass(slots=True)
class Settlement:
    trade: Trade
    cancelled_trade_ids: list[str] = field(default_factory=list)


def _clean_ids(raw: Any, *, name: str) -> list[str]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ValidationError(f"{name} must be a non-empty array", details={"field": name})
    out: list[str] = []
    for v in raw:
        s = str(v).strip() if isinstance(v, (str, int)) else ""
        if not s:
            raise ValidationError(f"{name} contains an invalid item id", details={"field": name})
        out.append(s)
    return out


def _check_ownership(items: dict[str, Item], ids: Sequence[str], owner_id: str) -> list[str]:
    """Ids in `ids` that are missing or not owned by `owner_id`."""
    return [iid for iid in ids if iid not in items or items[iid].player_id != owner_id]


def _require_ownership(trade: Trade) -> dict[str, Item]:
    items = items_repo.get_items(trade.item_ids)
    bad_offered = _check_ownership(items, trade.offered_item_ids, trade.from_player_id)
    bad_requested = _check_ownership(items, trade.requested_item_ids, trade.to_player_id)
    if bad_offered:
        raise OwnershipError(
            "Some offered items are not owned by the sender",
            details={"itemIds": bad_offered, "expectedOwner": trade.from_player_id},
        )
    if bad_requested:
        raise OwnershipError(
            "Some requested items are not owned by the recipient",
            details={"itemIds": bad_requested, "expectedOwner": trade.to_player_id},
        )
    return items


def _load(trade_id: str) -> Trade:
    trade = trades_repo.get_trade(trade_id=trade_id)
    if trade is None:
        raise NotFoundError("Trade not found", details={"tradeId": trade_id})
    return trade


def _require_pending(trade: Trade) -> None:
    if trade.status.is_terminal:
        raise InvalidStateError(
            f"Trade is already {trade.status.value}",
            details={"tradeId": trade.id, "status": trade.status.value},
        )


def _require_party(trade: Trade, caller_id: str, expected: str, role: str) -> None:
    if str(caller_id or "") != expected:
        raise ForbiddenError(f"Only the trade {role} can do this", details={"tradeId": trade.id})


def create_trade(
    *,
    from_player_id: str,
    to_player_id: Any,
    offered_item_ids: Any,
    requested_item_ids: Any,
) -> Trade:
    to_pid = str(to_player_id or "").strip() if isinstance(to_player_id, (str, int)) else ""
    if not to_pid:
        raise ValidationError("toPlayerId is required", details={"field": "toPlayerId"})
    if to_pid == from_player_id:
        raise ValidationError("Cannot trade with yourself", details={"field": "toPlayerId"})

    offered = _clean_ids(offered_item_ids, name="offeredItemIds")
    requested = _clean_ids(requested_item_ids, name="requestedItemIds")
    all_ids = [*offered, *requested]
    if len(set(all_ids)) != len(all_ids):
        raise ValidationError("Item ids must be unique within a trade")
    if len(all_ids) > MAX_TRADE_ITEMS:
        raise ValidationError(
            f"A trade may reference at most {MAX_TRADE_ITEMS} items",
            details={"count": len(all_ids)},
        )

    if players_repo.get_player(player_id=to_pid) is None:
        raise NotFoundError("Player not found", details={"playerId": to_pid})

    trade = Trade(
        id=str(uuid.uuid4()),
        from_player_id=from_player_id,
        to_player_id=to_pid,
        offered_item_ids=offered,
        requested_item_ids=requested,
        status=TradeStatus.PENDING,
        created_at=now_iso(),
    )
    _require_ownership(trade)
    trades_repo.create_trade(trade)
    log.info(
        "trade_created",
        trade_id=trade.id,
        from_player_id=trade.from_player_id,
        to_player_id=trade.to_player_id,
        offered=len(offered),
        requested=len(requested),
    )
    return trade


def _settlement_ops(trade: Trade, resolved_at: str) -> list[WriteOp]:
    ops: list[WriteOp] = []
    for iid in trade.offered_item_ids:
        ops.append(
            WriteOp.update(
                ITEMS,
                {"id": iid},
                {"playerId": trade.to_player_id},
                expected={"playerId": trade.from_player_id},
            )
        )
    for iid in trade.requested_item_ids:
        ops.append(
            WriteOp.update(
                ITEMS,
                {"id": iid},
                {"playerId": trade.from_player_id},
                expected={"playerId": trade.to_player_id},
            )
        )
    ops.append(trades_repo.status_change_op(trade, status=TradeStatus.COMPLETED, resolved_at=resolved_at))
    return ops


def cancel_conflicting_trades(*, item_ids: Sequence[str], exclude_trade_id: str) -> list[str]:
    """
    Cancel every other PENDING trade referencing one of `item_ids`.

    Each cancellation is conditional on the trade still being PENDING; a trade
    that moved on in the meantime is left alone.
    """
    seen: set[str] = {exclude_trade_id}
    cancelled: list[str] = []
    resolved_at = now_iso()
    for iid in item_ids:
        for tid in trades_repo.trade_ids_referencing(item_id=iid):
            if tid in seen:
                continue
            seen.add(tid)
            other = trades_repo.get_trade(trade_id=tid)
            if other is None or other.status is not TradeStatus.PENDING:
                continue
            try:
                trades_repo.resolve_trade(other, status=TradeStatus.CANCELLED, resolved_at=resolved_at)
            except DdbConflict:
                log.info("conflicting_trade_already_resolved", trade_id=tid)
                continue
            except DdbError as e:
                log.warning("conflicting_trade_cancel_failed", trade_id=tid, error=str(e))
                continue
            cancelled.append(tid)
            _drop_refs(other)
    return cancelled


def _drop_refs(trade: Trade) -> None:
    try:
        trades_repo.delete_refs(trade)
    except DdbError as e:
        log.warning("trade_cleanup_failed", trade_id=trade.id, step="delete_refs", error=str(e))


def accept_trade(*, trade_id: str, caller_id: str) -> Settlement:
    trade = _load(trade_id)
    _require_party(trade, caller_id, trade.to_player_id, "recipient")
    _require_pending(trade)
    _require_ownership(trade)

    resolved_at = now_iso()
    try:
        store.get_store().transact(_settlement_ops(trade, resolved_at))
    except DdbConflict as e:
        # Something changed between the read above and the write: either the
        # trade left PENDING or an item changed hands.
        current = _load(trade_id)
        _require_pending(current)
        raise OwnershipError(
            "Trade items changed owner before settlement",
            details={"tradeId": trade_id},
        ) from e

    # The swap is committed from here on.
    try:
        cancelled = cancel_conflicting_trades(item_ids=trade.item_ids, exclude_trade_id=trade.id)
    except DdbError as e:
        log.warning("trade_cleanup_failed", trade_id=trade.id, step="cancel_conflicts", error=str(e))
        cancelled = []
    _drop_refs(trade)

    trade.status = TradeStatus.COMPLETED
    trade.resolved_at = resolved_at
    log.info(
        "trade_accepted",
        trade_id=trade.id,
        items_moved=len(trade.item_ids),
        cancelled_trade_ids=cancelled,
    )
    return Settlement(trade=trade, cancelled_trade_ids=cancelled)


def _finish(trade: Trade, status: TradeStatus) -> Trade:
    resolved_at = now_iso()
    try:
        trades_repo.resolve_trade(trade, status=status, resolved_at=resolved_at)
    except DdbConflict as e:
        _require_pending(_load(trade.id))
        raise InvalidStateError("Trade state changed concurrently", details={"tradeId": trade.id}) from e
    _drop_refs(trade)
    trade.status = status
    trade.resolved_at = resolved_at
    log.info("trade_resolved", trade_id=trade.id, status=status.value)
    return trade


def reject_trade(*, trade_id: str, caller_id: str) -> Trade:
    trade = _load(trade_id)
    _require_party(trade, caller_id, trade.to_player_id, "recipient")
    _require_pending(trade)
    return _finish(trade, TradeStatus.REJECTED)


def cancel_trade(*, trade_id: str, caller_id: str) -> Trade:
    trade = _load(trade_id)
    _require_party(trade, caller_id, trade.from_player_id, "sender")
    _require_pending(trade)
    return _finish(trade, TradeStatus.CANCELLED)


def _player_ref(player_id: str) -> dict[str, Any]:
    p = players_repo.get_player(player_id=player_id)
    return {"playerId": player_id, "username": p.username if p else None}


def get_trade_with_details(*, trade_id: str) -> dict[str, Any]:
    """Trade record plus the referenced items and both players' usernames."""
    trade = _load(trade_id)
    items = items_repo.get_items(trade.item_ids)
    out = trade.to_record()
    out["offeredItems"] = [items[i].to_record() for i in trade.offered_item_ids if i in items]
    out["requestedItems"] = [items[i].to_record() for i in trade.requested_item_ids if i in items]
    out["fromPlayer"] = _player_ref(trade.from_player_id)
    out["toPlayer"] = _player_ref(trade.to_player_id)
    return out


def list_player_trades(*, player_id: str) -> dict[str, list[dict[str, Any]]]:
    trades = trades_repo.list_trades_for_player(player_id=player_id)
    return {
        "sentTrades": [t.to_record() for t in trades if t.from_player_id == player_id],
        "receivedTrades": [t.to_record() for t in trades if t.to_player_id == player_id],
    }
