from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass(slots=True)
class GameError(Exception):
    """Base error for game/trade operations.

    Caught by a FastAPI exception handler and rendered into RFC7807
    problem-details responses. `details` ends up in the problem's
    extensions.
    """

    message: str
    details: dict[str, Any] = field(default_factory=dict)

    status_code: ClassVar[int] = 500
    title: ClassVar[str] = "Internal Server Error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class ValidationError(GameError):
    status_code: ClassVar[int] = 400
    title: ClassVar[str] = "Bad Request"


@dataclass(slots=True)
class NotFoundError(GameError):
    status_code: ClassVar[int] = 404
    title: ClassVar[str] = "Not Found"


@dataclass(slots=True)
class OwnershipError(GameError):
    status_code: ClassVar[int] = 409
    title: ClassVar[str] = "Ownership Mismatch"


@dataclass(slots=True)
class InvalidStateError(GameError):
    status_code: ClassVar[int] = 409
    title: ClassVar[str] = "Invalid Trade State"

    @property
    def status(self) -> str | None:
        s = self.details.get("status")
        return str(s) if s is not None else None


@dataclass(slots=True)
class ConflictError(GameError):
    status_code: ClassVar[int] = 409
    title: ClassVar[str] = "Conflict"


@dataclass(slots=True)
class RarityNotFound(GameError):
    # Data-integrity fault: the catalog references a tier that does not exist.
    status_code: ClassVar[int] = 500
    title: ClassVar[str] = "Rarity Not Found"


@dataclass(slots=True)
class AuthError(GameError):
    status_code: ClassVar[int] = 401
    title: ClassVar[str] = "Unauthorized"


@dataclass(slots=True)
class ForbiddenError(AuthError):
    status_code: ClassVar[int] = 403
    title: ClassVar[str] = "Forbidden"
