"""Order lifecycle models.

These models represent orders, their line items, and the status state machine
shared by the customer, vendor, and delivery partner clients.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderStatus(str, Enum):
    """Enumeration of order status values."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed out of this status."""
        return self in TERMINAL_STATUSES


# Forward sequence; each status may only move to the one after it.
STATUS_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.PICKED_UP,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    current: frozenset({successor, OrderStatus.CANCELLED})
    for current, successor in zip(STATUS_SEQUENCE, STATUS_SEQUENCE[1:])
}
ALLOWED_TRANSITIONS[OrderStatus.DELIVERED] = frozenset()
ALLOWED_TRANSITIONS[OrderStatus.CANCELLED] = frozenset()


def can_transition(current: OrderStatus, next_status: OrderStatus) -> bool:
    """Check whether an order may move from ``current`` to ``next_status``.

    Args:
        current: The order's present status
        next_status: The requested status

    Returns:
        bool: True if the transition is allowed
    """
    return next_status in ALLOWED_TRANSITIONS[current]


class Order(BaseModel):
    """A placed order.

    Stored in DynamoDB with ``id`` as partition key. Only ``status``,
    ``updated_at`` and, once a delivery partner picks the order up,
    ``courier_id`` change after creation.
    """

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique order identifier")
    user_id: str = Field(..., description="Identity of the customer who placed the order")
    restaurant_id: str = Field(..., description="Restaurant the order was placed with")
    total_amount: Decimal = Field(..., description="Sum of item price x quantity", ge=0)
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="Lifecycle status")
    delivery_address: str = Field(..., description="Free text delivery address", min_length=1)
    phone_number: str = Field(..., description="Contact phone number", min_length=1)
    courier_id: str | None = Field(None, description="Delivery partner who picked the order up")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "user_id": self.user_id,
            "restaurant_id": self.restaurant_id,
            "total_amount": self.total_amount,
            "status": self.status.value,
            "delivery_address": self.delivery_address,
            "phone_number": self.phone_number,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.courier_id is not None:
            item["courier_id"] = self.courier_id
        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=item["id"],
            user_id=item["user_id"],
            restaurant_id=item["restaurant_id"],
            total_amount=Decimal(str(item["total_amount"])),
            status=OrderStatus(item["status"]),
            delivery_address=item["delivery_address"],
            phone_number=item["phone_number"],
            courier_id=item.get("courier_id"),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )


class OrderItem(BaseModel):
    """A line of a placed order.

    Stored in DynamoDB with (order_id, id) as composite key so every item is
    scoped to exactly one order. ``price`` is the unit price at checkout time.
    """

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique order item identifier")
    order_id: str = Field(..., description="Order this item belongs to")
    menu_item_id: str = Field(..., description="Menu item that was ordered")
    quantity: int = Field(..., description="Number of units ordered", ge=1)
    price: Decimal = Field(..., description="Unit price captured at checkout", ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        """Validate that quantity is at least one."""
        if v < 1:
            raise ValueError("quantity must be at least 1")
        return v

    @property
    def line_total(self) -> Decimal:
        """Price multiplied by quantity."""
        return self.price * self.quantity

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "order_id": self.order_id,
            "id": self.id,
            "menu_item_id": self.menu_item_id,
            "quantity": self.quantity,
            "price": self.price,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "OrderItem":
        """Create OrderItem from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            OrderItem: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "order_id": item["order_id"],
            "menu_item_id": item["menu_item_id"],
            "quantity": int(item["quantity"]),
            "price": Decimal(str(item["price"])),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        return cls(**data)


class OrderHistoryItem(BaseModel):
    """Order item joined with the menu item name, for history views."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    menu_item_id: str
    menu_item_name: str
    quantity: int
    price: Decimal


class OrderHistoryEntry(BaseModel):
    """Order joined with restaurant details and named items."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    order: Order
    restaurant_name: str
    restaurant_image_url: str
    items: list[OrderHistoryItem]


class RestaurantOrderSummary(BaseModel):
    """Dashboard counters for a restaurant's orders."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    restaurant_id: str
    pending_count: int = 0
    in_progress_count: int = 0
    completed_count: int = 0
    cancelled_count: int = 0
    earnings: Decimal = Decimal("0")


class CourierSummary(BaseModel):
    """Dashboard counters for one delivery partner."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    courier_id: str
    active_count: int = 0
    delivered_count: int = 0
    delivered_value: Decimal = Decimal("0")
