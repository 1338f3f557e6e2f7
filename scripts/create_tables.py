"""
Create the DynamoDB tables (and GSIs) the API expects.

Idempotent: existing tables are left alone. Intended for DynamoDB Local:

    DYNAMODB_ENDPOINT=http://localhost:8000 python scripts/create_tables.py
"""

from __future__ import annotations

import argparse
from typing import Any

from botocore.exceptions import ClientError

from scanloot.db.collections import INDEXES, KEY_FIELDS, NUMERIC_KEYS
from scanloot.db.dynamodb.client import dynamodb_client
from scanloot.observability.logging import configure_logging, get_logger
from scanloot.settings import settings

log = get_logger("create_tables")


def table_definition(collection: str) -> dict[str, Any]:
    numeric = NUMERIC_KEYS.get(collection, set())
    keys = KEY_FIELDS[collection]
    indexes = INDEXES.get(collection, {})

    attrs = {*keys, *indexes.values()}
    definition: dict[str, Any] = {
        "TableName": settings.table_name(collection),
        "BillingMode": "PAY_PER_REQUEST",
        "AttributeDefinitions": [
            {"AttributeName": a, "AttributeType": "N" if a in numeric else "S"} for a in sorted(attrs)
        ],
        "KeySchema": [
            {"AttributeName": a, "KeyType": "HASH" if i == 0 else "RANGE"} for i, a in enumerate(keys)
        ],
    }
    if indexes:
        definition["GlobalSecondaryIndexes"] = [
            {
                "IndexName": name,
                "KeySchema": [{"AttributeName": attr, "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
            for name, attr in sorted(indexes.items())
        ]
    return definition


def create_tables(*, wait: bool = True) -> list[str]:
    client = dynamodb_client()
    created: list[str] = []
    for collection in KEY_FIELDS:
        definition = table_definition(collection)
        name = definition["TableName"]
        try:
            client.create_table(**definition)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ResourceInUseException":
                log.info("table_exists", table=name)
                continue
            raise
        created.append(name)
        log.info("table_created", table=name)

    if wait:
        waiter = client.get_waiter("table_exists")
        for name in created:
            waiter.wait(TableName=name)
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Create ScanLoot DynamoDB tables")
    parser.add_argument("--no-wait", action="store_true", help="Do not wait for tables to become ACTIVE")
    args = parser.parse_args()

    configure_logging(level=settings.log_level)
    created = create_tables(wait=not args.no_wait)
    log.info("create_tables_done", created=created, endpoint=settings.dynamodb_endpoint)


if __name__ == "__main__":
    main()
