"""Helpers shared by the DynamoDB repositories."""

import logging
from collections.abc import Callable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from food_delivery_ledger.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

# Errors that mean the store could not serve the request (throttling, timeouts,
# connection failures, missing tables). Conditional check failures are handled
# separately by the callers that issue conditional writes.
STORE_ERRORS = (ClientError, BotoCoreError)


def error_code(error: Exception) -> str:
    """Extract the DynamoDB error code from a ClientError, or '' for anything else."""
    if isinstance(error, ClientError):
        return str(error.response.get("Error", {}).get("Code", ""))
    return ""


def collect_pages(operation: Callable[..., dict[str, Any]], **kwargs: Any) -> list[dict[str, Any]]:
    """Run a query or scan until every page has been read.

    Args:
        operation: Bound ``Table.query`` or ``Table.scan``
        **kwargs: Arguments passed to every call

    Returns:
        list: All items across pages
    """
    items: list[dict[str, Any]] = []
    while True:
        response = operation(**kwargs)
        items.extend(response.get("Items", []))

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def unavailable(action: str, error: Exception) -> BackendUnavailableError:
    """Log a store failure and build the error to raise for it."""
    logger.error(f"Failed to {action}: {error}")
    return BackendUnavailableError(f"Backing store unavailable while trying to {action}")
