from __future__ import annotations

from typing import Iterable

from ..db import store
from ..db.collections import ACHIEVEMENTS
from ..game.models import Achievement


def get_achievement(*, achievement_id: str) -> Achievement | None:
    aid = str(achievement_id or "").strip()
    if not aid:
        return None
    rec = store.get_store().get(ACHIEVEMENTS, {"id": aid})
    return Achievement.from_record(rec) if rec else None


def get_achievements(achievement_ids: Iterable[str]) -> list[Achievement]:
    """Achievements in the order given; unknown or repeated ids are skipped."""
    s = store.get_store()
    seen: set[str] = set()
    out: list[Achievement] = []
    for aid in achievement_ids:
        if aid in seen:
            continue
        seen.add(aid)
        rec = s.get(ACHIEVEMENTS, {"id": aid})
        if rec:
            out.append(Achievement.from_record(rec))
    return out


def list_achievements() -> list[Achievement]:
    achievements = [Achievement.from_record(r) for r in store.get_store().scan(ACHIEVEMENTS)]
    achievements.sort(key=lambda a: (a.kind, a.name, a.id))
    return achievements


def put_achievements(achievements: Iterable[Achievement]) -> None:
    s = store.get_store()
    for a in achievements:
        s.put(ACHIEVEMENTS, a.to_record())
