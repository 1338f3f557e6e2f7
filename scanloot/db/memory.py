from __future__ import annotations

import copy
import threading
from typing import Any

from .collections import index_field, key_fields, key_of
from .dynamodb.errors import DdbConflict, DdbValidation
from .store import WriteOp

_MAX_TRANSACTION_OPS = 100


def _key_tuple(collection: str, key: dict[str, Any]) -> tuple[Any, ...]:
    fields = key_fields(collection)
    missing = [f for f in fields if key.get(f) is None]
    if missing:
        raise DdbValidation(message=f"key is missing {missing}", operation="Key", table_name=collection, key=key)
    return tuple(key[f] for f in fields)


def _matches(record: dict[str, Any] | None, expected: dict[str, Any] | None) -> bool:
    if not expected:
        return True
    if record is None:
        return False
    return all(record.get(k) == v for k, v in expected.items())


class MemoryStore:
    """
    In-process store with DynamoDB-like semantics.

    Used for local development (STORAGE_BACKEND=memory) and unit tests.
    Records are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._data: dict[str, dict[tuple[Any, ...], dict[str, Any]]] = {}

    def _table(self, collection: str) -> dict[tuple[Any, ...], dict[str, Any]]:
        key_fields(collection)
        return self._data.setdefault(collection, {})

    def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            rec = self._table(collection).get(_key_tuple(collection, key))
            return copy.deepcopy(rec) if rec is not None else None

    def put(self, collection: str, record: dict[str, Any], *, if_not_exists: bool = False) -> None:
        self.transact([WriteOp.put(collection, record, if_not_exists=if_not_exists)])

    def update(
        self,
        collection: str,
        key: dict[str, Any],
        changes: dict[str, Any],
        *,
        expected: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        with self._lock:
            if expected is None and self._table(collection).get(_key_tuple(collection, key)) is None:
                return None
            self.transact([WriteOp.update(collection, key, changes, expected=expected)])
            return self.get(collection, key)

    def delete(self, collection: str, key: dict[str, Any]) -> None:
        self.transact([WriteOp.delete(collection, key)])

    def query(self, collection: str, index_name: str | None, field: str, value: Any) -> list[dict[str, Any]]:
        attr = index_field(collection, index_name, field)
        with self._lock:
            return [copy.deepcopy(r) for r in self._table(collection).values() if r.get(attr) == value]

    def scan(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._table(collection).values()]

    def transact(self, ops: list[WriteOp]) -> None:
        if len(ops) > _MAX_TRANSACTION_OPS:
            raise DdbValidation(message="too many operations in one transaction", operation="TransactWriteItems")

        with self._lock:
            targets: list[tuple[str, tuple[Any, ...]]] = []
            for op in ops:
                key = key_of(op.collection, op.record) if op.kind == "put" else op.key
                target = (op.collection, _key_tuple(op.collection, key or {}))
                if target in targets:
                    # DynamoDB rejects two operations on the same item in one transaction.
                    raise DdbValidation(
                        message="transaction touches the same record twice",
                        operation="TransactWriteItems",
                        table_name=op.collection,
                        key=key,
                    )
                targets.append(target)

            reasons: list[str] = []
            for op, (collection, kt) in zip(ops, targets):
                current = self._table(collection).get(kt)
                ok = True
                if op.kind == "put" and op.if_not_exists:
                    ok = current is None
                elif op.kind == "update":
                    ok = current is not None and _matches(current, op.expected)
                elif op.expected:
                    ok = _matches(current, op.expected)
                reasons.append("None" if ok else "ConditionalCheckFailed")

            if "ConditionalCheckFailed" in reasons:
                raise DdbConflict(
                    message="conditional check failed",
                    operation="TransactWriteItems" if len(ops) > 1 else ops[0].kind.capitalize() + "Item",
                    table_name=ops[0].collection if len(ops) == 1 else None,
                    reasons=reasons,
                )

            for op, (collection, kt) in zip(ops, targets):
                table = self._table(collection)
                if op.kind == "put":
                    table[kt] = copy.deepcopy(op.record or {})
                elif op.kind == "update":
                    table[kt].update(copy.deepcopy(op.changes or {}))
                else:
                    table.pop(kt, None)
