"""
Persistence gateway.

Core game/trade logic talks to a `Store`: a generic key-value store with
get/put/update/delete, secondary-index queries, full scans and
all-or-nothing transactions. Records are plain dicts with camelCase keys.

Conditional writes take `expected`: a mapping of attribute -> value that must
hold on the stored record for the write to apply. A failed condition raises
`DdbConflict` on every backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Literal, Protocol

from ..settings import settings

WriteKind = Literal["put", "update", "delete"]


@dataclass(slots=True)
class WriteOp:
    kind: WriteKind
    collection: str
    key: dict[str, Any] = field(default_factory=dict)
    record: dict[str, Any] | None = None
    changes: dict[str, Any] | None = None
    expected: dict[str, Any] | None = None
    if_not_exists: bool = False

    @classmethod
    def put(cls, collection: str, record: dict[str, Any], *, if_not_exists: bool = False) -> "WriteOp":
        return cls(kind="put", collection=collection, record=dict(record), if_not_exists=if_not_exists)

    @classmethod
    def update(
        cls,
        collection: str,
        key: dict[str, Any],
        changes: dict[str, Any],
        *,
        expected: dict[str, Any] | None = None,
    ) -> "WriteOp":
        return cls(kind="update", collection=collection, key=dict(key), changes=dict(changes), expected=expected)

    @classmethod
    def delete(cls, collection: str, key: dict[str, Any]) -> "WriteOp":
        return cls(kind="delete", collection=collection, key=dict(key))


class Store(Protocol):
    def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None: ...

    def put(self, collection: str, record: dict[str, Any], *, if_not_exists: bool = False) -> None: ...

    def update(
        self,
        collection: str,
        key: dict[str, Any],
        changes: dict[str, Any],
        *,
        expected: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None: ...

    def delete(self, collection: str, key: dict[str, Any]) -> None: ...

    def query(self, collection: str, index_name: str | None, field: str, value: Any) -> list[dict[str, Any]]: ...

    def scan(self, collection: str) -> list[dict[str, Any]]: ...

    def transact(self, ops: list[WriteOp]) -> None: ...


@lru_cache(maxsize=1)
def _configured_store() -> Store:
    if settings.normalized_storage_backend == "memory":
        from .memory import MemoryStore

        return MemoryStore()

    from .dynamodb.store import DynamoStore

    return DynamoStore()


def get_store() -> Store:
    return _configured_store()
