from __future__ import annotations

from decimal import Decimal
from typing import Any

from boto3.dynamodb.conditions import Key

from ...settings import settings
from ..collections import index_field, key_of
from ..store import WriteOp
from .errors import DdbConflict
from .table import DynamoTable, get_table


def to_ddb(value: Any) -> Any:
    # boto3 refuses Python floats; go through str() to keep the shortest repr.
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_ddb(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_ddb(v) for v in value]
    return value


def from_ddb(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_ddb(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [from_ddb(v) for v in value]
    return value


def _update_parts(
    changes: dict[str, Any],
    expected: dict[str, Any] | None,
    key: dict[str, Any],
) -> tuple[str, dict[str, str], dict[str, Any], str]:
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    sets: list[str] = []
    for i, (attr, val) in enumerate(changes.items()):
        names[f"#f{i}"] = attr
        values[f":v{i}"] = to_ddb(val)
        sets.append(f"#f{i} = :v{i}")

    conds: list[str] = []
    for i, attr in enumerate(key):
        names[f"#k{i}"] = attr
        conds.append(f"attribute_exists(#k{i})")
    for i, (attr, val) in enumerate((expected or {}).items()):
        names[f"#c{i}"] = attr
        values[f":c{i}"] = to_ddb(val)
        conds.append(f"#c{i} = :c{i}")

    return "SET " + ", ".join(sets), names, values, " AND ".join(conds)


def _expected_condition(expected: dict[str, Any]) -> tuple[str, dict[str, str], dict[str, Any]]:
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    conds: list[str] = []
    for i, (attr, val) in enumerate(expected.items()):
        names[f"#c{i}"] = attr
        values[f":c{i}"] = to_ddb(val)
        conds.append(f"#c{i} = :c{i}")
    return " AND ".join(conds), names, values


class DynamoStore:
    """Store backed by one DynamoDB table per collection."""

    def __init__(self) -> None:
        self._tables: dict[str, DynamoTable] = {}

    def table(self, collection: str) -> DynamoTable:
        t = self._tables.get(collection)
        if t is None:
            t = get_table(settings.table_name(collection))
            self._tables[collection] = t
        return t

    def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None:
        it = self.table(collection).get_item(key=to_ddb(key))
        return from_ddb(it) if it else None

    def put(self, collection: str, record: dict[str, Any], *, if_not_exists: bool = False) -> None:
        cond = None
        names = None
        if if_not_exists:
            pk = next(iter(key_of(collection, record)))
            cond = "attribute_not_exists(#pk)"
            names = {"#pk": pk}
        self.table(collection).put_item(
            item=to_ddb(record),
            condition_expression=cond,
            expression_attribute_names=names,
        )

    def update(
        self,
        collection: str,
        key: dict[str, Any],
        changes: dict[str, Any],
        *,
        expected: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        expr, names, values, cond = _update_parts(changes, expected, key)
        try:
            attrs = self.table(collection).update_item(
                key=to_ddb(key),
                update_expression=expr,
                expression_attribute_names=names,
                expression_attribute_values=values,
                condition_expression=cond,
            )
        except DdbConflict:
            # Without an explicit expectation the only condition is existence.
            if expected is None:
                return None
            raise
        return from_ddb(attrs) if attrs else None

    def delete(self, collection: str, key: dict[str, Any]) -> None:
        self.table(collection).delete_item(key=to_ddb(key))

    def query(self, collection: str, index_name: str | None, field: str, value: Any) -> list[dict[str, Any]]:
        attr = index_field(collection, index_name, field)
        items = self.table(collection).query_all(
            key_condition_expression=Key(attr).eq(to_ddb(value)),
            index_name=index_name,
        )
        return [from_ddb(it) for it in items]

    def scan(self, collection: str) -> list[dict[str, Any]]:
        return [from_ddb(it) for it in self.table(collection).scan_all()]

    def transact(self, ops: list[WriteOp]) -> None:
        if not ops:
            return
        items: list[dict[str, Any]] = []
        for op in ops:
            t = self.table(op.collection)
            if op.kind == "put":
                record = op.record or {}
                cond = names = None
                if op.if_not_exists:
                    cond = "attribute_not_exists(#pk)"
                    names = {"#pk": next(iter(key_of(op.collection, record)))}
                items.append({"Put": t.tx_put(item=to_ddb(record), condition_expression=cond, expression_attribute_names=names)})
            elif op.kind == "update":
                expr, names, values, cond = _update_parts(op.changes or {}, op.expected, op.key)
                items.append(
                    {
                        "Update": t.tx_update(
                            key=to_ddb(op.key),
                            update_expression=expr,
                            expression_attribute_names=names,
                            expression_attribute_values=values,
                            condition_expression=cond,
                        )
                    }
                )
            else:
                if op.expected:
                    cond, names, values = _expected_condition(op.expected)
                    items.append(
                        {
                            "Delete": t.tx_delete(
                                key=to_ddb(op.key),
                                condition_expression=cond,
                                expression_attribute_names=names,
                                expression_attribute_values=values,
                            )
                        }
                    )
                else:
                    items.append({"Delete": t.tx_delete(key=to_ddb(op.key))})

        self.table(ops[0].collection).transact_items(items)
