from __future__ import annotations

from decimal import Decimal

import pytest

from scanloot.db.collections import ITEMS, TRADES
from scanloot.db.dynamodb import store as dynamo_store
from scanloot.db.dynamodb.errors import (
    DdbConflict,
    DdbError,
    DdbInternal,
    DdbThrottled,
    DdbUnavailable,
    DdbValidation,
    http_status_for,
)
from scanloot.db.dynamodb.table import DynamoTable
from scanloot.db.store import WriteOp


class RecordingTable(DynamoTable):
    """DynamoTable with the AWS calls replaced by a call log."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        self.calls: list[tuple[str, dict]] = []
        self.raise_on_update: Exception | None = None

    def transact_items(self, items, *, retry_policy=None):
        self.calls.append(("transact", {"items": items}))
        return {"ok": True}

    def update_item(self, **kwargs):
        self.calls.append(("update", kwargs))
        if self.raise_on_update is not None:
            raise self.raise_on_update
        return {"id": "i1", "chance": Decimal("0.125"), "quality": Decimal("7")}


@pytest.fixture
def tables(monkeypatch):
    made: dict[str, RecordingTable] = {}

    def fake_get_table(name: str) -> RecordingTable:
        return made.setdefault(name, RecordingTable(name))

    monkeypatch.setattr(dynamo_store, "get_table", fake_get_table)
    return made


def test_float_and_decimal_conversion():
    assert dynamo_store.to_ddb({"chance": 0.1, "ok": True, "ids": [1.5]}) == {
        "chance": Decimal("0.1"),
        "ok": True,
        "ids": [Decimal("1.5")],
    }
    assert dynamo_store.from_ddb({"q": Decimal("7"), "c": Decimal("0.25")}) == {"q": 7, "c": 0.25}


def test_settlement_transaction_is_conditioned_on_owner_and_status(tables):
    s = dynamo_store.DynamoStore()
    s.transact(
        [
            WriteOp.update(ITEMS, {"id": "i1"}, {"playerId": "P2"}, expected={"playerId": "P1"}),
            WriteOp.update(TRADES, {"id": "t1"}, {"status": "COMPLETED"}, expected={"status": "PENDING"}),
        ]
    )

    (kind, call), = tables["Items"].calls
    assert kind == "transact"
    item_op, trade_op = (x["Update"] for x in call["items"])
    assert item_op["TableName"] == "Items"
    assert item_op["UpdateExpression"] == "SET #f0 = :v0"
    assert item_op["ConditionExpression"] == "attribute_exists(#k0) AND #c0 = :c0"
    assert item_op["ExpressionAttributeNames"] == {"#f0": "playerId", "#k0": "id", "#c0": "playerId"}
    assert item_op["ExpressionAttributeValues"] == {":v0": {"S": "P2"}, ":c0": {"S": "P1"}}
    assert trade_op["TableName"] == "Trades"
    assert trade_op["ExpressionAttributeValues"][":c0"] == {"S": "PENDING"}


def test_update_without_expectation_returns_none_for_missing_records(tables):
    s = dynamo_store.DynamoStore()
    assert s.update(ITEMS, {"id": "i1"}, {"quality": 7}) == {"id": "i1", "chance": 0.125, "quality": 7}

    tables["Items"].raise_on_update = DdbConflict(message="conditional check failed")
    assert s.update(ITEMS, {"id": "i1"}, {"quality": 7}) is None
    with pytest.raises(DdbConflict):
        s.update(ITEMS, {"id": "i1"}, {"quality": 7}, expected={"quality": 3})


@pytest.mark.parametrize(
    "exc, status",
    [
        (DdbValidation(message="bad"), 400),
        (DdbConflict(message="cond"), 409),
        (DdbThrottled(message="slow", retryable=True), 503),
        (DdbUnavailable(message="gone"), 503),
        (DdbInternal(message="boom"), 500),
        (DdbError(message="plain"), 500),
    ],
)
def test_storage_errors_map_to_http_status(exc, status):
    assert http_status_for(exc)[0] == status


def test_missing_conditional_target_is_a_conflict(mem_store):
    # A missing record is None from get; a conditional write against it fails the condition.
    assert mem_store.get(TRADES, {"id": "nope"}) is None
    with pytest.raises(DdbConflict):
        mem_store.update(TRADES, {"id": "nope"}, {"status": "CANCELLED"}, expected={"status": "PENDING"})
