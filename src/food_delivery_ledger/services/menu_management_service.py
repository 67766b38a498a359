"""Vendor-side menu authoring."""

import logging
import uuid
from decimal import Decimal

from food_delivery_ledger.errors import InvalidMenuItemError, MenuItemNotFoundError
from food_delivery_ledger.models.catalog_models import DEFAULT_MENU_CATEGORY, MenuItem
from food_delivery_ledger.observability.decorators import traced
from food_delivery_ledger.repositories.catalog_repositories import MenuItemRepository

logger = logging.getLogger(__name__)


class MenuManagementService:
    """Service for creating, toggling and removing a restaurant's menu items.

    Orders keep their own copy of each item's price, so edits here never
    change the total of an order that was already placed.
    """

    def __init__(self, menu_item_repository: MenuItemRepository) -> None:
        """Initialize the MenuManagementService.

        Args:
            menu_item_repository: Repository for menu item persistence
        """
        self.menu_item_repository = menu_item_repository

    async def list_all_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        """List every menu item of a restaurant, including unavailable ones."""
        return self.menu_item_repository.list_for_restaurant(restaurant_id, available_only=False)

    @traced("add_menu_item")
    async def add_menu_item(
        self,
        restaurant_id: str,
        name: str,
        price: Decimal,
        description: str = "",
        category: str | None = None,
        image_url: str = "",
    ) -> MenuItem:
        """Create a new, available menu item.

        Args:
            restaurant_id: Restaurant the item belongs to
            name: Item name (required)
            price: Unit price, must not be negative
            description: Optional description
            category: Menu section; defaults to "Main"
            image_url: Optional image URL

        Returns:
            The created menu item

        Raises:
            InvalidMenuItemError: If name is blank
        """
        if not name or not name.strip():
            raise InvalidMenuItemError("Menu item name is required")

        item = MenuItem(
            id=str(uuid.uuid4()),
            restaurant_id=restaurant_id,
            name=name.strip(),
            description=description,
            price=price,
            category=(category or "").strip() or DEFAULT_MENU_CATEGORY,
            image_url=image_url,
            available=True,
        )
        self.menu_item_repository.save_item(item)

        logger.info(f"Menu item {item.id} added to restaurant {restaurant_id}")
        return item

    async def set_availability(self, item_id: str, available: bool) -> None:
        """Mark a menu item as available or unavailable.

        Raises:
            MenuItemNotFoundError: If the item does not exist
        """
        if not self.menu_item_repository.update_availability(item_id, available):
            raise MenuItemNotFoundError(f"Menu item {item_id} not found")

        logger.info(f"Menu item {item_id} availability set to {available}")

    async def toggle_availability(self, item_id: str) -> MenuItem:
        """Flip a menu item's availability.

        Returns:
            The item with its new availability

        Raises:
            MenuItemNotFoundError: If the item does not exist
        """
        item = self.menu_item_repository.get_item(item_id)
        if item is None:
            raise MenuItemNotFoundError(f"Menu item {item_id} not found")

        await self.set_availability(item_id, not item.available)
        return item.model_copy(update={"available": not item.available})

    async def delete_menu_item(self, item_id: str) -> None:
        """Remove a menu item.

        Raises:
            MenuItemNotFoundError: If the item does not exist
        """
        if not self.menu_item_repository.delete_item(item_id):
            raise MenuItemNotFoundError(f"Menu item {item_id} not found")

        logger.info(f"Menu item {item_id} deleted")
