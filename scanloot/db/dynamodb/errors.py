from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class DdbError(Exception):
    """Base error for store operations.

    Raised by both the DynamoDB and the in-memory store so callers handle one
    error family. Caught by a FastAPI exception handler and rendered into
    RFC7807 problem-details responses.
    """

    message: str
    operation: str | None = None
    table_name: str | None = None
    key: dict[str, Any] | None = None
    aws_request_id: str | None = None
    retryable: bool = False
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class DdbConflict(DdbError):
    """A conditional write (or one leg of a transaction) did not hold.

    For transactions, `reasons` carries one cancellation code per operation in
    request order ("None" for the legs that were fine).
    """

    reasons: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DdbValidation(DdbError):
    pass


@dataclass(slots=True)
class DdbThrottled(DdbError):
    pass


@dataclass(slots=True)
class DdbUnavailable(DdbError):
    pass


@dataclass(slots=True)
class DdbInternal(DdbError):
    pass


def http_status_for(exc: DdbError) -> tuple[int, str]:
    # Stable HTTP semantics for storage-layer errors.
    if isinstance(exc, DdbValidation):
        return 400, "Bad Request"
    if isinstance(exc, DdbConflict):
        return 409, "Conflict"
    if isinstance(exc, (DdbThrottled, DdbUnavailable)):
        return 503, "Service Unavailable"
    return 500, "Storage Error"
