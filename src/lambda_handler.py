"""AWS Lambda handler for API Gateway requests.

The FastAPI application is built once per container during cold start and
served through the Mangum ASGI adapter on every invocation.
"""

import logging
import os
from typing import Any

from mangum import Mangum

logger = logging.getLogger(__name__)

_mangum_handler: Mangum | None = None


def get_mangum_handler() -> Mangum:
    """Create or retrieve the cached Mangum adapter.

    Returns:
        Mangum adapter wrapping the FastAPI application
    """
    global _mangum_handler

    if _mangum_handler is not None:
        return _mangum_handler

    # main builds the application at import time outside test mode
    from main import app

    _mangum_handler = Mangum(app, lifespan="off")
    return _mangum_handler


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Serve an API Gateway event through the FastAPI application.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    logger.info(f"Received Lambda invocation, request_id: {context.aws_request_id}")

    try:
        result: dict[str, Any] = get_mangum_handler()(event, context)
        return result

    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {
            "statusCode": 500,
            "body": "Internal server error",
        }


# Warm the handler during cold start (skip in test mode)
if os.getenv("ENVIRONMENT") != "test":
    get_mangum_handler()
