from __future__ import annotations

import re
import uuid
from typing import Any

from ...auth.passwords import hash_password, verify_password
from ...auth.tokens import issue_token
from ...errors import AuthError, ConflictError, NotFoundError, ValidationError
from ...game.flavor import pronounceable_word
from ...game.models import Player, now_iso
from ...game.rng import RandomSource, default_rng
from ...observability.logging import get_logger
from ...repositories import players_repo

log = get_logger("account_service")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]{3,32}$")
MIN_PASSWORD_LEN = 6


def generate_username(rng: RandomSource | None = None) -> str:
    """Friendly `word-word-N` handle, e.g. `kolat-mire-42`."""
    rng = rng or default_rng()
    number = min(2000, int(rng.random() * 2001))
    return f"{pronounceable_word(3, 7, rng)}-{pronounceable_word(3, 7, rng)}-{number}"


def _auth_payload(player: Player) -> dict[str, Any]:
    return {"player": player.to_public(), "token": issue_token(player_id=player.id, email=player.email)}


def register_player(*, email: Any, password: Any, rng: RandomSource | None = None) -> dict[str, Any]:
    em = players_repo.normalize_email(email) if isinstance(email, str) else ""
    if not em or not isinstance(password, str) or not password:
        raise ValidationError("Email and password are required")
    if not _EMAIL_RE.match(em):
        raise ValidationError("Invalid email address", details={"field": "email"})
    if len(password) < MIN_PASSWORD_LEN:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LEN} characters",
            details={"field": "password"},
        )
    if players_repo.get_player_by_email(email=em) is not None:
        raise ConflictError("User already exists", details={"field": "email"})

    username = generate_username(rng)
    for _ in range(5):
        if players_repo.get_player_by_username(username=username) is None:
            break
        username = generate_username(rng)

    player = Player(
        id=str(uuid.uuid4()),
        email=em,
        username=username,
        created_at=now_iso(),
        total_scans=0,
        password_hash=hash_password(password),
    )
    players_repo.create_player(player)
    log.info("player_registered", player_id=player.id)
    return _auth_payload(player)


def login_player(*, email: Any, password: Any) -> dict[str, Any]:
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise ValidationError("Email and password are required")
    player = players_repo.get_player_by_email(email=email)
    if player is None or not verify_password(password, player.password_hash):
        log.info("login_failed")
        raise AuthError("Invalid credentials")
    log.info("player_logged_in", player_id=player.id)
    return _auth_payload(player)


def get_player(*, player_id: str) -> Player:
    player = players_repo.get_player(player_id=player_id)
    if player is None:
        raise NotFoundError("Player not found", details={"playerId": player_id})
    return player


def update_username(*, player_id: str, username: Any) -> Player:
    name = username.strip() if isinstance(username, str) else ""
    if not _USERNAME_RE.match(name):
        raise ValidationError(
            "Username must be 3-32 letters, digits, '-' or '_'",
            details={"field": "username"},
        )
    current = get_player(player_id=player_id)
    if current.username == name:
        return current
    taken = players_repo.get_player_by_username(username=name)
    if taken is not None and taken.id != player_id:
        raise ConflictError("Username already in use", details={"field": "username"})

    updated = players_repo.update_player(player_id=player_id, changes={"username": name})
    if updated is None:
        raise NotFoundError("Player not found", details={"playerId": player_id})
    log.info("username_updated", player_id=player_id)
    return updated
