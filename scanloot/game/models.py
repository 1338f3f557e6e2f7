from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class RarityTier:
    id: int
    name: str
    color: str
    min_chance: float
    max_chance: float

    def __post_init__(self) -> None:
        if not 0 <= self.min_chance <= self.max_chance <= 1:
            raise ValueError(
                f"rarity {self.id} needs 0 <= minChance <= maxChance <= 1, "
                f"got {self.min_chance}..{self.max_chance}"
            )

    @property
    def average_chance(self) -> float:
        return (self.min_chance + self.max_chance) / 2

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "minChance": self.min_chance,
            "maxChance": self.max_chance,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "RarityTier":
        return cls(
            id=int(rec["id"]),
            name=str(rec.get("name") or ""),
            color=str(rec.get("color") or ""),
            min_chance=float(rec["minChance"]),
            max_chance=float(rec["maxChance"]),
        )


@dataclass(frozen=True, slots=True)
class SessionTier:
    """One concrete chance per tier, fixed for a single catalog-generation run."""

    id: int
    name: str
    color: str
    chance: float
    min_chance: float
    max_chance: float

    @property
    def average_chance(self) -> float:
        return (self.min_chance + self.max_chance) / 2


@dataclass(frozen=True, slots=True)
class Collectable:
    id: str
    name: str
    description: str
    rarity_id: int
    created_at: str

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "rarityId": self.rarity_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Collectable":
        return cls(
            id=str(rec["id"]),
            name=str(rec.get("name") or ""),
            description=str(rec.get("description") or ""),
            rarity_id=int(rec["rarityId"]),
            created_at=str(rec.get("createdAt") or ""),
        )


@dataclass(frozen=True, slots=True)
class Item:
    id: str
    player_id: str
    collectable_id: str
    quality: int
    chance: float
    found_at: str

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "playerId": self.player_id,
            "collectableId": self.collectable_id,
            "quality": self.quality,
            "chance": self.chance,
            "foundAt": self.found_at,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Item":
        return cls(
            id=str(rec["id"]),
            player_id=str(rec["playerId"]),
            collectable_id=str(rec["collectableId"]),
            quality=int(rec["quality"]),
            chance=float(rec["chance"]),
            found_at=str(rec.get("foundAt") or ""),
        )


class TradeStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not TradeStatus.PENDING


@dataclass(slots=True)
class Trade:
    id: str
    from_player_id: str
    to_player_id: str
    offered_item_ids: list[str]
    requested_item_ids: list[str]
    status: TradeStatus
    created_at: str
    resolved_at: str | None = None

    @property
    def item_ids(self) -> list[str]:
        return [*self.offered_item_ids, *self.requested_item_ids]

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "id": self.id,
            "fromPlayerId": self.from_player_id,
            "toPlayerId": self.to_player_id,
            "offeredItemIds": list(self.offered_item_ids),
            "requestedItemIds": list(self.requested_item_ids),
            "status": self.status.value,
            "createdAt": self.created_at,
        }
        if self.resolved_at:
            rec["resolvedAt"] = self.resolved_at
        return rec

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Trade":
        return cls(
            id=str(rec["id"]),
            from_player_id=str(rec["fromPlayerId"]),
            to_player_id=str(rec["toPlayerId"]),
            offered_item_ids=[str(x) for x in rec.get("offeredItemIds") or []],
            requested_item_ids=[str(x) for x in rec.get("requestedItemIds") or []],
            status=TradeStatus(str(rec.get("status") or "PENDING").upper()),
            created_at=str(rec.get("createdAt") or ""),
            resolved_at=rec.get("resolvedAt") or None,
        )


@dataclass(frozen=True, slots=True)
class Achievement:
    id: str
    kind: str
    name: str
    description: str
    created_at: str

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Achievement":
        return cls(
            id=str(rec["id"]),
            kind=str(rec.get("kind") or ""),
            name=str(rec.get("name") or ""),
            description=str(rec.get("description") or ""),
            created_at=str(rec.get("createdAt") or ""),
        )


@dataclass(slots=True)
class Player:
    id: str
    email: str
    username: str
    created_at: str
    total_scans: int = 0
    achievement_ids: list[str] = field(default_factory=list)
    password_hash: str | None = field(default=None, repr=False)

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "totalScans": self.total_scans,
            "achievements": list(self.achievement_ids),
            "createdAt": self.created_at,
        }
        if self.password_hash:
            rec["passwordHash"] = self.password_hash
        return rec

    def to_public(self) -> dict[str, Any]:
        rec = self.to_record()
        rec.pop("passwordHash", None)
        return rec

    def to_profile(self) -> dict[str, Any]:
        # What other players may see.
        return {"id": self.id, "username": self.username, "totalScans": self.total_scans}

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> "Player":
        return cls(
            id=str(rec["id"]),
            email=str(rec.get("email") or ""),
            username=str(rec.get("username") or ""),
            created_at=str(rec.get("createdAt") or ""),
            total_scans=int(rec.get("totalScans") or 0),
            achievement_ids=[str(x) for x in rec.get("achievements") or []],
            password_hash=rec.get("passwordHash") or None,
        )
