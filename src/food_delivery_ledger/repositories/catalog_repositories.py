"""DynamoDB repository classes for catalog models.

Lookups that find nothing return None/False; failures talking to the store
are logged and raised as BackendUnavailableError so callers never mistake an
outage for an empty catalog.
"""

import logging
from typing import Any

from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from food_delivery_ledger.models.catalog_models import MenuItem, Restaurant
from food_delivery_ledger.repositories.dynamodb_utils import (
    STORE_ERRORS,
    collect_pages,
    error_code,
    unavailable,
)

logger = logging.getLogger(__name__)


class RestaurantRepository:
    """Repository for restaurant reads.

    Manages restaurant records in DynamoDB with ``id`` as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def list_restaurants(self) -> list[Restaurant]:
        """List every restaurant, highest rated first.

        Returns:
            list: Restaurants ordered by rating descending

        Raises:
            BackendUnavailableError: If the table cannot be scanned
        """
        try:
            items = collect_pages(self.table.scan)
        except STORE_ERRORS as e:
            raise unavailable("list restaurants", e) from e

        restaurants = [Restaurant.from_dynamodb_item(item) for item in items]
        return sorted(restaurants, key=lambda r: r.rating, reverse=True)

    def get_restaurant(self, restaurant_id: str) -> Restaurant | None:
        """Retrieve a restaurant by ID.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            Restaurant if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": restaurant_id})
        except STORE_ERRORS as e:
            raise unavailable("get restaurant", e) from e

        if "Item" not in response:
            return None

        return Restaurant.from_dynamodb_item(response["Item"])


class MenuItemRepository:
    """Repository for menu item CRUD operations.

    Manages menu item records in DynamoDB with ``id`` as partition key and a
    Global Secondary Index on restaurant_id.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def list_for_restaurant(self, restaurant_id: str, available_only: bool = True) -> list[MenuItem]:
        """List menu items for a restaurant, ordered by name.

        Args:
            restaurant_id: Restaurant identifier
            available_only: Skip items whose availability flag is off

        Returns:
            list: MenuItem objects (empty list if none found)
        """
        query_kwargs: dict[str, Any] = {
            "IndexName": "restaurant_id-index",
            "KeyConditionExpression": "restaurant_id = :rid",
            "ExpressionAttributeValues": {":rid": restaurant_id},
        }
        if available_only:
            query_kwargs["FilterExpression"] = "available = :available"
            query_kwargs["ExpressionAttributeValues"] = {":rid": restaurant_id, ":available": True}

        try:
            items = collect_pages(self.table.query, **query_kwargs)
        except STORE_ERRORS as e:
            raise unavailable("list menu items", e) from e

        menu_items = [MenuItem.from_dynamodb_item(item) for item in items]
        return sorted(menu_items, key=lambda m: (m.name.lower(), m.id))

    def get_item(self, item_id: str) -> MenuItem | None:
        """Retrieve a menu item by ID.

        Args:
            item_id: Menu item identifier

        Returns:
            MenuItem if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": item_id})
        except STORE_ERRORS as e:
            raise unavailable("get menu item", e) from e

        if "Item" not in response:
            return None

        return MenuItem.from_dynamodb_item(response["Item"])

    def get_items(self, item_ids: list[str]) -> dict[str, MenuItem]:
        """Retrieve several menu items, keyed by id. Missing ids are omitted."""
        found: dict[str, MenuItem] = {}
        for item_id in dict.fromkeys(item_ids):
            item = self.get_item(item_id)
            if item is not None:
                found[item_id] = item
        return found

    def save_item(self, item: MenuItem) -> None:
        """Create or replace a menu item.

        Args:
            item: MenuItem to save
        """
        try:
            self.table.put_item(Item=item.to_dynamodb_item())
        except STORE_ERRORS as e:
            raise unavailable("save menu item", e) from e

    def update_availability(self, item_id: str, available: bool) -> bool:
        """Set the availability flag on an existing item.

        Args:
            item_id: Menu item identifier
            available: New availability value

        Returns:
            bool: True if updated, False if the item does not exist
        """
        try:
            self.table.update_item(
                Key={"id": item_id},
                UpdateExpression="SET available = :available",
                ConditionExpression="attribute_exists(id)",
                ExpressionAttributeValues={":available": available},
            )
            return True

        except STORE_ERRORS as e:
            if error_code(e) == "ConditionalCheckFailedException":
                return False
            raise unavailable("update menu item availability", e) from e

    def delete_item(self, item_id: str) -> bool:
        """Delete a menu item.

        Args:
            item_id: Menu item identifier

        Returns:
            bool: True if deleted, False if the item does not exist
        """
        try:
            self.table.delete_item(
                Key={"id": item_id},
                ConditionExpression="attribute_exists(id)",
            )
            return True

        except STORE_ERRORS as e:
            if error_code(e) == "ConditionalCheckFailedException":
                return False
            raise unavailable("delete menu item", e) from e
