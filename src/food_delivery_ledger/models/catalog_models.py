"""Catalog data models.

Restaurants and menu items as stored in DynamoDB. Restaurants are read-only
from the ledger's point of view; menu items are authored by vendors through
the menu management service.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MENU_CATEGORY = "Main"


class Restaurant(BaseModel):
    """Restaurant model."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the restaurant")
    name: str = Field(..., description="Restaurant name")
    description: str = Field(default="", description="Restaurant description")
    image_url: str = Field(default="", description="URL to restaurant image")
    rating: Decimal = Field(default=Decimal("0"), description="Informational rating")
    delivery_time: str = Field(default="", description="Delivery time label, e.g. '25-30 min'")
    category: str = Field(default="", description="Cuisine category label")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "rating": self.rating,
            "delivery_time": self.delivery_time,
            "category": self.category,
        }

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Restaurant":
        """Create Restaurant from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Restaurant: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "name": item["name"],
            "description": item.get("description", ""),
            "image_url": item.get("image_url", ""),
            "rating": Decimal(str(item.get("rating", 0))),
            "delivery_time": item.get("delivery_time", ""),
            "category": item.get("category", ""),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        return cls(**data)

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name or category."""
        needle = term.lower()
        return needle in self.name.lower() or needle in self.category.lower()


class MenuItem(BaseModel):
    """Menu item model."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the menu item")
    restaurant_id: str = Field(..., description="Restaurant this item belongs to")
    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description")
    price: Decimal = Field(..., description="Item price", ge=0)
    image_url: str = Field(default="", description="URL to item image")
    category: str = Field(default=DEFAULT_MENU_CATEGORY, description="Menu section label")
    available: bool = Field(default=True, description="Whether item is currently available")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "image_url": self.image_url,
            "category": self.category,
            "available": self.available,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        """Create MenuItem from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            MenuItem: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "restaurant_id": item["restaurant_id"],
            "name": item["name"],
            "description": item.get("description", ""),
            "price": Decimal(str(item["price"])),
            "image_url": item.get("image_url", ""),
            "category": item.get("category", DEFAULT_MENU_CATEGORY),
            "available": bool(item.get("available", True)),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        return cls(**data)

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on the item name."""
        return term.lower() in self.name.lower()
