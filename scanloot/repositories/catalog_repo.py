"""
Rarity table and collectable catalog.

Both are written once by the seed script and read on every scan, so reads
go through a short-lived per-process TTL cache.
"""

from __future__ import annotations

from cachetools import TTLCache

from ..db import store
from ..db.collections import COLLECTABLES, RARITIES
from ..game.models import Collectable, RarityTier
from ..settings import settings

_CACHE: TTLCache[str, tuple] = TTLCache(maxsize=4, ttl=max(1, int(settings.catalog_cache_ttl_seconds)))


def clear_cache() -> None:
    _CACHE.clear()


def list_rarities(*, use_cache: bool = True) -> list[RarityTier]:
    cached = _CACHE.get(RARITIES) if use_cache else None
    if cached is not None:
        return list(cached)
    tiers = [RarityTier.from_record(r) for r in store.get_store().scan(RARITIES)]
    tiers.sort(key=lambda t: t.id)
    _CACHE[RARITIES] = tuple(tiers)
    return tiers


def list_collectables(*, use_cache: bool = True) -> list[Collectable]:
    cached = _CACHE.get(COLLECTABLES) if use_cache else None
    if cached is not None:
        return list(cached)
    collectables = [Collectable.from_record(r) for r in store.get_store().scan(COLLECTABLES)]
    collectables.sort(key=lambda c: (c.rarity_id, c.name, c.id))
    _CACHE[COLLECTABLES] = tuple(collectables)
    return collectables


def get_collectable(*, collectable_id: str) -> Collectable | None:
    rec = store.get_store().get(COLLECTABLES, {"id": str(collectable_id)})
    return Collectable.from_record(rec) if rec else None


def put_rarities(tiers: list[RarityTier]) -> None:
    s = store.get_store()
    for tier in tiers:
        s.put(RARITIES, tier.to_record())
    _CACHE.pop(RARITIES, None)


def put_collectables(collectables: list[Collectable]) -> None:
    s = store.get_store()
    for c in collectables:
        s.put(COLLECTABLES, c.to_record())
    _CACHE.pop(COLLECTABLES, None)
