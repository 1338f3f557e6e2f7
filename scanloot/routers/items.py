from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.tokens import VerifiedPlayer
from ..errors import NotFoundError
from ..repositories import items_repo
from .deps import current_player

router = APIRouter(tags=["items"])


@router.get("/items")
def list_items():
    return [i.to_record() for i in items_repo.list_items()]


@router.get("/items/me")
def my_items(player: VerifiedPlayer = Depends(current_player)):
    return [i.to_record() for i in items_repo.list_player_items(player_id=player.player_id)]


@router.get("/items/{item_id}")
def get_item(item_id: str):
    item = items_repo.get_item(item_id=item_id)
    if item is None:
        raise NotFoundError("Item not found", details={"itemId": item_id})
    return item.to_record()
