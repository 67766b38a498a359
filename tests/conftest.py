"""Shared pytest fixtures and configuration for all tests."""

import os

# main.py and lambda_handler.py only build the real application outside test mode
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import UTC, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from food_delivery_ledger.models.catalog_models import MenuItem, Restaurant  # noqa: E402
from food_delivery_ledger.models.identity_models import CallerIdentity  # noqa: E402
from food_delivery_ledger.models.order_models import Order, OrderStatus  # noqa: E402


@pytest.fixture
def mock_restaurant_id() -> str:
    """Fixture providing a standard test restaurant ID."""
    return "rest_123456"


@pytest.fixture
def caller() -> CallerIdentity:
    """Fixture providing a signed-in customer."""
    return CallerIdentity(user_id="user_42", email="diner@example.com")


@pytest.fixture
def sample_restaurants() -> list[Restaurant]:
    """Fixture providing restaurants in rating order."""
    return [
        Restaurant(
            id="rest_123456",
            name="Green Garden Cafe",
            description="Healthy bowls and salads",
            image_url="https://example.com/garden.jpg",
            rating=Decimal("4.8"),
            delivery_time="20-25 min",
            category="Healthy",
        ),
        Restaurant(
            id="rest_654321",
            name="Wood Fire Kitchen",
            description="Artisan pizzas",
            image_url="https://example.com/pizza.jpg",
            rating=Decimal("4.5"),
            delivery_time="30-35 min",
            category="Pizza",
        ),
    ]


@pytest.fixture
def sample_menu_items() -> list[MenuItem]:
    """Fixture providing two available menu items for the same restaurant."""
    return [
        MenuItem(
            id="item_a",
            restaurant_id="rest_123456",
            name="Farm Fresh Salad Bowl",
            description="Mixed greens with organic vegetables and house dressing",
            price=Decimal("180"),
            category="Salads",
            available=True,
        ),
        MenuItem(
            id="item_b",
            restaurant_id="rest_123456",
            name="Quinoa Power Bowl",
            description="Protein-rich quinoa with roasted vegetables",
            price=Decimal("220"),
            category="Healthy",
            available=True,
        ),
    ]


@pytest.fixture
def make_order():
    """Factory fixture building orders in a given status."""

    def _make(status: OrderStatus = OrderStatus.PENDING, **overrides) -> Order:
        now = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        data = {
            "id": "order_1",
            "user_id": "user_42",
            "restaurant_id": "rest_123456",
            "total_amount": Decimal("580"),
            "status": status,
            "delivery_address": "456 Home Lane, Sector 18",
            "phone_number": "+91 98765 43210",
            "created_at": now,
            "updated_at": now,
        }
        data.update(overrides)
        return Order(**data)

    return _make
