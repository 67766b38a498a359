"""Main application entry point for the order ledger service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from botocore.config import Config
from fastapi import FastAPI

from food_delivery_ledger.handlers.api_handler import create_app
from food_delivery_ledger.observability import configure_logging, setup_observability
from food_delivery_ledger.repositories.catalog_repositories import (
    MenuItemRepository,
    RestaurantRepository,
)
from food_delivery_ledger.repositories.order_repositories import OrderRepository
from food_delivery_ledger.services.identity_client import IdentityClient
from food_delivery_ledger.services.menu_management_service import MenuManagementService
from food_delivery_ledger.services.order_ledger import CheckoutPolicy, OrderLedger

logger = logging.getLogger(__name__)


def get_backend_timeout() -> float:
    """Timeout in seconds applied to every backing store and auth call."""
    return float(os.getenv("BACKEND_TIMEOUT_SECONDS", "5"))


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Calls are bounded by BACKEND_TIMEOUT_SECONDS and are not retried, so a slow
    store surfaces as an error instead of a hang.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")
    timeout = get_backend_timeout()
    config = Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )

    if endpoint_url:
        # Local DynamoDB - use environment variables or defaults for credentials
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "dummy"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "dummy"),
            config=config,
        )
    else:
        logger.info(f"Using AWS DynamoDB in region {region}")
        # Production - boto3 will use default credential chain (IAM role, env vars, etc.)
        return boto3.resource("dynamodb", region_name=region, config=config)


def get_checkout_policy() -> CheckoutPolicy:
    """Read CHECKOUT_PRICE_POLICY.

    Raises:
        ValueError: If the value is not a known policy
    """
    value = os.getenv("CHECKOUT_PRICE_POLICY", CheckoutPolicy.LOCK_ON_ADD.value).strip().lower()
    try:
        return CheckoutPolicy(value)
    except ValueError as e:
        allowed = ", ".join(p.value for p in CheckoutPolicy)
        raise ValueError(f"CHECKOUT_PRICE_POLICY must be one of: {allowed}") from e


def parse_keys(value: str) -> list[str]:
    """Split a comma-separated key list, dropping blanks."""
    return [key.strip() for key in value.split(",") if key.strip()]


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the DynamoDB resource and repositories
    3. Creates the identity client
    4. Creates services
    5. Creates the FastAPI app
    6. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing order ledger service...")

    dynamodb_resource = get_dynamodb_resource()

    restaurants_table = os.getenv("DYNAMODB_RESTAURANTS_TABLE", "restaurants")
    menu_items_table = os.getenv("DYNAMODB_MENU_ITEMS_TABLE", "menu_items")
    orders_table = os.getenv("DYNAMODB_ORDERS_TABLE", "orders")
    order_items_table = os.getenv("DYNAMODB_ORDER_ITEMS_TABLE", "order_items")

    restaurant_repository = RestaurantRepository(
        dynamodb_resource=dynamodb_resource, table_name=restaurants_table
    )
    menu_item_repository = MenuItemRepository(
        dynamodb_resource=dynamodb_resource, table_name=menu_items_table
    )
    order_repository = OrderRepository(
        dynamodb_resource=dynamodb_resource,
        orders_table_name=orders_table,
        order_items_table_name=order_items_table,
    )

    logger.info(
        f"Repositories configured - restaurants: {restaurants_table}, "
        f"menu items: {menu_items_table}, orders: {orders_table}, "
        f"order items: {order_items_table}"
    )

    auth_base_url = os.getenv("AUTH_BASE_URL")
    auth_api_key = os.getenv("AUTH_API_KEY")

    if not auth_base_url or not auth_api_key:
        raise ValueError("AUTH_BASE_URL and AUTH_API_KEY must be set in environment")

    identity_client = IdentityClient(
        base_url=auth_base_url, api_key=auth_api_key, timeout_seconds=get_backend_timeout()
    )

    logger.info(f"Identity client configured - URL: {auth_base_url}")

    checkout_policy = get_checkout_policy()
    order_ledger = OrderLedger(
        restaurant_repository=restaurant_repository,
        menu_item_repository=menu_item_repository,
        order_repository=order_repository,
        checkout_policy=checkout_policy,
    )
    menu_service = MenuManagementService(menu_item_repository=menu_item_repository)

    logger.info(f"Services initialized with checkout policy {checkout_policy.value}")

    vendor_keys = parse_keys(os.getenv("VENDOR_API_KEYS", ""))
    courier_keys = parse_keys(os.getenv("COURIER_API_KEYS", ""))

    if not vendor_keys and not courier_keys:
        logger.warning("No staff API keys configured - vendor and courier endpoints will reject all calls")

    app = create_app(
        order_ledger=order_ledger,
        menu_service=menu_service,
        identity_client=identity_client,
        vendor_keys=vendor_keys,
        courier_keys=courier_keys,
    )

    setup_observability(app)

    logger.info("Order ledger service initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
