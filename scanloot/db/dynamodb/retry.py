from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from ...observability.logging import get_logger
from .errors import (
    DdbConflict,
    DdbError,
    DdbInternal,
    DdbThrottled,
    DdbUnavailable,
    DdbValidation,
)

T = TypeVar("T")

log = get_logger("ddb")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 6
    base_delay_s: float = 0.05
    max_delay_s: float = 1.5


_RETRYABLE_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "InternalServerError",
    "ServiceUnavailable",
    # Can be returned directly by TransactWriteItems under contention.
    "TransactionConflictException",
}

# Transaction cancellation reasons worth another attempt. A failed condition
# is never one of them: it means the data changed underneath us.
_TRANSACTION_RETRYABLE_REASONS = {
    "TransactionConflict",
    "ThrottlingError",
    "ProvisionedThroughputExceeded",
}


def _sleep_backoff(policy: RetryPolicy, attempt: int) -> None:
    # Full jitter exponential backoff.
    cap = policy.max_delay_s
    base = policy.base_delay_s
    exp = min(cap, base * (2 ** max(0, attempt - 1)))
    time.sleep(random.random() * exp)


def _aws_request_id_from_client_error(e: ClientError) -> str | None:
    return ((e.response or {}).get("ResponseMetadata") or {}).get("RequestId")


def _err_code_from_client_error(e: ClientError) -> str | None:
    return ((e.response or {}).get("Error") or {}).get("Code")


def _cancellation_reasons(e: ClientError) -> list[str]:
    reasons = (e.response or {}).get("CancellationReasons") or []
    return [str((r or {}).get("Code") or "None") for r in reasons]


def _is_retryable_client_error(e: ClientError) -> bool:
    code = _err_code_from_client_error(e) or ""

    if code in _RETRYABLE_CODES:
        return True

    if code == "TransactionCanceledException":
        reasons = _cancellation_reasons(e)
        if "ConditionalCheckFailed" in reasons:
            return False
        return any(r in _TRANSACTION_RETRYABLE_REASONS for r in reasons)

    return False


def _map_botocore_error(
    *,
    operation: str,
    table_name: str | None,
    key: dict[str, Any] | None,
    exc: Exception,
) -> DdbError:
    ctx: dict[str, Any] = {"operation": operation, "table_name": table_name, "key": key, "cause": exc}

    if isinstance(exc, BotoCoreError):
        return DdbUnavailable(message="DynamoDB client error", retryable=True, **ctx)
    if not isinstance(exc, ClientError):
        return DdbInternal(message="Unexpected DynamoDB error", **ctx)

    code = _err_code_from_client_error(exc) or ""
    ctx["aws_request_id"] = _aws_request_id_from_client_error(exc)

    if code == "ConditionalCheckFailedException":
        return DdbConflict(message="DynamoDB conditional check failed", **ctx)
    if code == "TransactionCanceledException":
        reasons = _cancellation_reasons(exc)
        if "ConditionalCheckFailed" in reasons:
            return DdbConflict(message="DynamoDB transaction condition failed", reasons=reasons, **ctx)
    if code in ("ValidationException", "ParamValidationError"):
        return DdbValidation(message="DynamoDB request validation failed", **ctx)
    if code in ("AccessDeniedException", "UnrecognizedClientException", "ResourceNotFoundException"):
        return DdbUnavailable(message=f"DynamoDB table unavailable ({code})", **ctx)
    if _is_retryable_client_error(exc):
        return DdbThrottled(message="DynamoDB request throttled or unavailable", retryable=True, **ctx)
    return DdbInternal(message=f"DynamoDB request failed ({code or 'ClientError'})", **ctx)


def ddb_call(
    operation: str,
    fn: Callable[[], T],
    *,
    table_name: str | None = None,
    key: dict[str, Any] | None = None,
    retry_policy: RetryPolicy | None = None,
) -> T:
    """
    Run one DynamoDB call, retrying throttling and contention with full-jitter
    backoff. Failures surface as the `DdbError` family.
    """
    policy = retry_policy or RetryPolicy()
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except (ClientError, BotoCoreError) as e:
            mapped = _map_botocore_error(operation=operation, table_name=table_name, key=key, exc=e)
            if not mapped.retryable or attempt >= max(1, policy.max_attempts):
                raise mapped from e
            log.warning("ddb_retry", operation=operation, table=table_name, attempt=attempt, error=mapped.message)
            _sleep_backoff(policy, attempt)
