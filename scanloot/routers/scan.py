from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth.tokens import VerifiedPlayer
from ..modules.scanning import scan_service
from .deps import current_player

router = APIRouter(tags=["scan"])


class ScanRequest(BaseModel):
    barcode: str | None = None


@router.post("/scan", status_code=201)
def scan(body: ScanRequest | None = None, player: VerifiedPlayer = Depends(current_player)):
    return scan_service.scan(player_id=player.player_id, barcode=body.barcode if body else None)
