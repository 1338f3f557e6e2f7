from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth.tokens import VerifiedPlayer
from ..modules.accounts import account_service
from .deps import current_player

router = APIRouter(tags=["auth"])


class Credentials(BaseModel):
    # Loosely typed so missing/odd values surface as 400s from the service.
    email: Any = None
    password: Any = None


@router.post("/signup", status_code=201)
def signup(body: Credentials):
    return account_service.register_player(email=body.email, password=body.password)


@router.post("/login")
def login(body: Credentials):
    return account_service.login_player(email=body.email, password=body.password)


@router.get("/me")
def me(player: VerifiedPlayer = Depends(current_player)):
    return account_service.get_player(player_id=player.player_id).to_public()
