from __future__ import annotations

from typing import Any

from boto3.dynamodb.types import TypeSerializer

from .client import dynamodb_client, table_resource
from .retry import RetryPolicy, ddb_call

_serializer = TypeSerializer()

# Transactions are retried harder than single writes: contention between
# settlements surfaces as TransactionConflict.
TRANSACTION_RETRY = RetryPolicy(max_attempts=8, base_delay_s=0.08, max_delay_s=2.0)


def serialize(item: dict[str, Any]) -> dict[str, Any]:
    """Resource-shape dict -> client AttributeValue shape ({'S': ...})."""
    return {k: _serializer.serialize(v) for k, v in item.items()}


def _expression_kwargs(
    *,
    condition: str | None = None,
    names: dict[str, str] | None = None,
    values: dict[str, Any] | None = None,
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if condition:
        out["ConditionExpression"] = condition
    if names:
        out["ExpressionAttributeNames"] = names
    if values:
        out["ExpressionAttributeValues"] = values
    return out


class DynamoTable:
    """One DynamoDB table, with every call routed through `ddb_call`."""

    def __init__(self, *, table_name: str):
        self.table_name = str(table_name)
        self._table = table_resource(self.table_name)
        self._client = dynamodb_client()

    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any] | None:
        resp = ddb_call(
            "GetItem",
            lambda: self._table.get_item(Key=key, ConsistentRead=True),
            table_name=self.table_name,
            key=key,
        )
        return resp.get("Item")

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
    ) -> None:
        kwargs = _expression_kwargs(condition=condition_expression, names=expression_attribute_names)
        ddb_call("PutItem", lambda: self._table.put_item(Item=item, **kwargs), table_name=self.table_name)

    def delete_item(self, *, key: dict[str, Any]) -> None:
        ddb_call("DeleteItem", lambda: self._table.delete_item(Key=key), table_name=self.table_name, key=key)

    def update_item(
        self,
        *,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_names: dict[str, str] | None,
        expression_attribute_values: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any] | None:
        kwargs = _expression_kwargs(
            condition=condition_expression,
            names=expression_attribute_names,
            values=expression_attribute_values,
        )
        resp = ddb_call(
            "UpdateItem",
            lambda: self._table.update_item(
                Key=key,
                UpdateExpression=update_expression,
                ReturnValues="ALL_NEW",
                **kwargs,
            ),
            table_name=self.table_name,
            key=key,
        )
        return resp.get("Attributes")

    def _paginate(self, operation: str, fn, **kwargs: Any) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        while True:
            resp = ddb_call(operation, lambda: fn(**kwargs), table_name=self.table_name)
            out.extend(resp.get("Items") or [])
            lek = resp.get("LastEvaluatedKey")
            if not lek:
                return out
            kwargs["ExclusiveStartKey"] = lek

    def query_all(self, *, key_condition_expression: Any, index_name: str | None = None) -> list[dict[str, Any]]:
        kwargs: dict[str, Any] = {"KeyConditionExpression": key_condition_expression}
        if index_name:
            kwargs["IndexName"] = index_name
        return self._paginate("Query", self._table.query, **kwargs)

    def scan_all(self) -> list[dict[str, Any]]:
        # Catalog-sized tables only.
        return self._paginate("Scan", self._table.scan)

    # --- transactions (client shape) ---

    def transact_items(self, items: list[dict[str, Any]]) -> None:
        # Cancellation reasons line up with `items`.
        if not items:
            return
        ddb_call(
            "TransactWriteItems",
            lambda: self._client.transact_write_items(TransactItems=items),
            table_name=self.table_name,
            retry_policy=TRANSACTION_RETRY,
        )

    def tx_put(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return {
            "TableName": self.table_name,
            "Item": serialize(item),
            **_expression_kwargs(condition=condition_expression, names=expression_attribute_names),
        }

    def tx_delete(
        self,
        *,
        key: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return {
            "TableName": self.table_name,
            "Key": serialize(key),
            **_expression_kwargs(
                condition=condition_expression,
                names=expression_attribute_names,
                values=serialize(expression_attribute_values) if expression_attribute_values else None,
            ),
        }

    def tx_update(
        self,
        *,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_names: dict[str, str] | None,
        expression_attribute_values: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        return {
            "TableName": self.table_name,
            "Key": serialize(key),
            "UpdateExpression": update_expression,
            **_expression_kwargs(
                condition=condition_expression,
                names=expression_attribute_names,
                values=serialize(expression_attribute_values),
            ),
        }


def get_table(table_name: str) -> DynamoTable:
    return DynamoTable(table_name=table_name)
