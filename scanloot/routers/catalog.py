from __future__ import annotations

from fastapi import APIRouter

from ..game.rarity import format_chance
from ..repositories import catalog_repo

router = APIRouter(tags=["catalog"])


@router.get("/rarities")
def list_rarities():
    out = []
    for tier in catalog_repo.list_rarities():
        rec = tier.to_record()
        rec["displayChance"] = f"{format_chance(tier.min_chance)} - {format_chance(tier.max_chance)}"
        out.append(rec)
    return out


@router.get("/collectables")
def list_collectables():
    return [c.to_record() for c in catalog_repo.list_collectables()]
