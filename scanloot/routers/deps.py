from __future__ import annotations

from fastapi import Request

from ..auth.tokens import VerifiedPlayer
from ..errors import AuthError


def current_player(request: Request) -> VerifiedPlayer:
    player = getattr(request.state, "player", None)
    if player is None:
        raise AuthError("Authentication required")
    return player
