from __future__ import annotations

from typing import Any, Iterable

from ...errors import NotFoundError
from ...game.models import Achievement
from ...observability.logging import get_logger
from ...repositories import achievements_repo, players_repo
from ..accounts.account_service import get_player

log = get_logger("achievement_service")


def _listing(achievements: list[Achievement]) -> dict[str, Any]:
    return {"achievements": [a.to_record() for a in achievements], "total": len(achievements)}


def list_achievements() -> dict[str, Any]:
    return _listing(achievements_repo.list_achievements())


def get_achievement(*, achievement_id: str) -> Achievement:
    achievement = achievements_repo.get_achievement(achievement_id=achievement_id)
    if achievement is None:
        raise NotFoundError("Achievement not found", details={"achievementId": achievement_id})
    return achievement


def list_player_achievements(*, player_id: str) -> dict[str, Any]:
    """A player's earned achievements; ids that no longer resolve are skipped."""
    player = get_player(player_id=player_id)
    return _listing(achievements_repo.get_achievements(player.achievement_ids))


def grant_achievements(*, player_id: str, achievement_ids: Iterable[str]) -> list[str]:
    """
    Add achievements to a player's earned list and return the ids newly added.

    Unknown achievement ids raise NotFoundError; ids the player already holds
    are ignored.
    """
    player = get_player(player_id=player_id)
    new_ids: list[str] = []
    for aid in achievement_ids:
        if aid in player.achievement_ids or aid in new_ids:
            continue
        get_achievement(achievement_id=aid)
        new_ids.append(aid)
    if not new_ids:
        return []

    players_repo.update_player(player_id=player.id, changes={"achievements": [*player.achievement_ids, *new_ids]})
    log.info("achievements_granted", player_id=player.id, achievement_ids=new_ids)
    return new_ids
