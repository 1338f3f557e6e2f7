from __future__ import annotations

from fastapi import APIRouter

from .. import __version__
from ..settings import settings

router = APIRouter()


@router.get("/", tags=["health"])
def health():
    return {
        "message": "ScanLoot API",
        "version": __version__,
        "status": "running",
        "environment": settings.normalized_environment,
        "storage": settings.normalized_storage_backend,
    }
