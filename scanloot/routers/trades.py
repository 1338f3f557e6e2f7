from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth.tokens import VerifiedPlayer
from ..modules.trading import trade_service
from .deps import current_player

router = APIRouter(tags=["trades"])


class TradeRequest(BaseModel):
    toPlayerId: Any = None
    offeredItemIds: Any = None
    requestedItemIds: Any = None


@router.get("/trades/me")
def my_trades(player: VerifiedPlayer = Depends(current_player)):
    return trade_service.list_player_trades(player_id=player.player_id)


@router.get("/trades/{trade_id}")
def get_trade(trade_id: str):
    return trade_service.get_trade_with_details(trade_id=trade_id)


@router.post("/trades", status_code=201)
def create_trade(body: TradeRequest, player: VerifiedPlayer = Depends(current_player)):
    trade = trade_service.create_trade(
        from_player_id=player.player_id,
        to_player_id=body.toPlayerId,
        offered_item_ids=body.offeredItemIds,
        requested_item_ids=body.requestedItemIds,
    )
    return trade.to_record()


@router.post("/trades/{trade_id}/accept")
def accept_trade(trade_id: str, player: VerifiedPlayer = Depends(current_player)):
    settlement = trade_service.accept_trade(trade_id=trade_id, caller_id=player.player_id)
    return {**settlement.trade.to_record(), "cancelledTradeIds": settlement.cancelled_trade_ids}


@router.post("/trades/{trade_id}/reject")
def reject_trade(trade_id: str, player: VerifiedPlayer = Depends(current_player)):
    return trade_service.reject_trade(trade_id=trade_id, caller_id=player.player_id).to_record()


@router.post("/trades/{trade_id}/cancel")
def cancel_trade(trade_id: str, player: VerifiedPlayer = Depends(current_player)):
    return trade_service.cancel_trade(trade_id=trade_id, caller_id=player.player_id).to_record()
