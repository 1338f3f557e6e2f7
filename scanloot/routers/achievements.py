from __future__ import annotations

from fastapi import APIRouter

from ..modules.achievements import achievement_service

router = APIRouter(tags=["achievements"])


@router.get("/achievements")
def list_achievements():
    return achievement_service.list_achievements()


@router.get("/achievements/{achievement_id}")
def get_achievement(achievement_id: str):
    return achievement_service.get_achievement(achievement_id=achievement_id).to_record()
