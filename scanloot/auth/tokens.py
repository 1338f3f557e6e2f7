from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from ..errors import AuthError
from ..settings import settings

ALGORITHM = "HS256"


@dataclass(frozen=True)
class VerifiedPlayer:
    player_id: str
    email: str | None
    claims: dict[str, Any]


@lru_cache(maxsize=1)
def _dev_secret() -> str:
    # Only reachable outside production (require_in_production enforces JWT_SECRET).
    return secrets.token_urlsafe(32)


def _secret() -> str:
    return settings.jwt_secret or _dev_secret()


def issue_token(*, player_id: str, email: str | None, now: int | None = None) -> str:
    iat = int(now if now is not None else time.time())
    claims: dict[str, Any] = {
        "playerId": str(player_id),
        "email": email,
        "iat": iat,
        "exp": iat + int(settings.jwt_ttl_days) * 24 * 60 * 60,
    }
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def verify_bearer_token(token: str) -> VerifiedPlayer:
    if not token:
        raise AuthError("Missing token")
    try:
        claims = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise AuthError("Token expired") from e
    except JWTError as e:
        raise AuthError("Invalid token") from e

    pid = str(claims.get("playerId") or "").strip()
    if not pid:
        raise AuthError("Invalid token")

    email = claims.get("email")
    return VerifiedPlayer(player_id=pid, email=str(email) if email is not None else None, claims=claims)
