from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth.tokens import VerifiedPlayer
from ..modules.accounts import account_service
from ..modules.achievements import achievement_service
from ..repositories import items_repo, players_repo
from .deps import current_player

router = APIRouter(tags=["players"])


class PlayerUpdate(BaseModel):
    username: Any = None


@router.get("/players")
def list_players():
    return [p.to_profile() for p in players_repo.list_players()]


@router.patch("/players/me")
def update_me(body: PlayerUpdate, player: VerifiedPlayer = Depends(current_player)):
    return account_service.update_username(player_id=player.player_id, username=body.username).to_public()


@router.get("/players/{player_id}")
def get_player(player_id: str):
    return account_service.get_player(player_id=player_id).to_profile()


@router.get("/players/{player_id}/items")
def get_player_items(player_id: str):
    account_service.get_player(player_id=player_id)
    return [i.to_record() for i in items_repo.list_player_items(player_id=player_id)]


@router.get("/players/{player_id}/achievements")
def get_player_achievements(player_id: str):
    return achievement_service.list_player_achievements(player_id=player_id)
