"""DynamoDB repository for orders and their items.

An order and its items are written as one unit of work. Small orders use a
single TransactWriteItems call; orders with more rows than a transaction can
hold are written sequentially with a compensating delete on failure. Either
way a failed placement leaves no order row behind.
"""

import logging
from datetime import datetime

from boto3.dynamodb.types import TypeSerializer
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from food_delivery_ledger.errors import PlacementFailedError
from food_delivery_ledger.models.order_models import Order, OrderItem, OrderStatus
from food_delivery_ledger.repositories.dynamodb_utils import (
    STORE_ERRORS,
    collect_pages,
    error_code,
    unavailable,
)

logger = logging.getLogger(__name__)

# DynamoDB caps a single transaction at 100 actions.
TRANSACTION_ITEM_LIMIT = 100


class OrderRepository:
    """Repository for order and order item persistence.

    Orders are keyed by ``id`` with Global Secondary Indexes on
    (user_id, created_at), (restaurant_id, created_at), (status, created_at)
    and (courier_id, created_at). The courier index is sparse: only orders a
    delivery partner has picked up carry ``courier_id``.
    Order items are keyed by (order_id, id).
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        orders_table_name: str,
        order_items_table_name: str,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            orders_table_name: Name of the orders table
            order_items_table_name: Name of the order items table
        """
        self.dynamodb = dynamodb_resource
        self.orders_table_name = orders_table_name
        self.order_items_table_name = order_items_table_name
        self.orders_table: Table = dynamodb_resource.Table(orders_table_name)
        self.order_items_table: Table = dynamodb_resource.Table(order_items_table_name)
        self.serializer = TypeSerializer()

    def create_order_with_items(self, order: Order, items: list[OrderItem]) -> None:
        """Persist an order and all of its items as one unit of work.

        Args:
            order: The new order
            items: Its items; every one must carry ``order.id``

        Raises:
            PlacementFailedError: If any write failed. Partial writes have been
                removed before this is raised.
        """
        if any(item.order_id != order.id for item in items):
            raise ValueError("every order item must belong to the order being created")

        try:
            if len(items) + 1 <= TRANSACTION_ITEM_LIMIT:
                self._write_transaction(order, items)
            else:
                self._write_sequentially(order, items)

        except STORE_ERRORS as e:
            logger.error(f"Failed to place order {order.id}: {e}")
            cleanup_complete = self._compensate(order, items)
            raise PlacementFailedError(
                f"Order {order.id} could not be placed",
                order_id=order.id,
                cleanup_complete=cleanup_complete,
            ) from e

        logger.info(f"Order {order.id} written with {len(items)} items")

    def _serialize(self, item: dict) -> dict:
        return {key: self.serializer.serialize(value) for key, value in item.items()}

    def _write_transaction(self, order: Order, items: list[OrderItem]) -> None:
        transact_items = [
            {
                "Put": {
                    "TableName": self.orders_table_name,
                    "Item": self._serialize(order.to_dynamodb_item()),
                    "ConditionExpression": "attribute_not_exists(id)",
                }
            }
        ]
        for item in items:
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.order_items_table_name,
                        "Item": self._serialize(item.to_dynamodb_item()),
                        "ConditionExpression": "attribute_not_exists(id)",
                    }
                }
            )

        self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)

    def _write_sequentially(self, order: Order, items: list[OrderItem]) -> None:
        self.orders_table.put_item(
            Item=order.to_dynamodb_item(),
            ConditionExpression="attribute_not_exists(id)",
        )
        with self.order_items_table.batch_writer() as batch:
            for item in items:
                batch.put_item(Item=item.to_dynamodb_item())

    def _compensate(self, order: Order, items: list[OrderItem]) -> bool:
        """Remove whatever part of a failed placement reached the store.

        The order delete is conditioned on the row being the one this
        placement wrote, so a colliding id can never remove someone else's
        order.

        Returns:
            bool: True if cleanup finished, False if the store rejected it
        """
        try:
            with self.order_items_table.batch_writer() as batch:
                for item in items:
                    batch.delete_item(Key={"order_id": item.order_id, "id": item.id})

            self.orders_table.delete_item(
                Key={"id": order.id},
                ConditionExpression="user_id = :uid AND created_at = :created",
                ExpressionAttributeValues={
                    ":uid": order.user_id,
                    ":created": order.created_at.isoformat(),
                },
            )

        except STORE_ERRORS as e:
            if error_code(e) == "ConditionalCheckFailedException":
                return True
            logger.critical(f"Compensating delete failed for order {order.id}: {e}")
            return False

        logger.warning(f"Rolled back partially written order {order.id}")
        return True

    def get_order(self, order_id: str) -> Order | None:
        """Retrieve an order by ID.

        Args:
            order_id: Order identifier

        Returns:
            Order if found, None otherwise
        """
        try:
            response = self.orders_table.get_item(Key={"id": order_id})
        except STORE_ERRORS as e:
            raise unavailable("get order", e) from e

        if "Item" not in response:
            return None

        return Order.from_dynamodb_item(response["Item"])

    def list_items_for_order(self, order_id: str) -> list[OrderItem]:
        """List the items of one order.

        Args:
            order_id: Order identifier

        Returns:
            list: OrderItem objects (empty list if none found)
        """
        try:
            items = collect_pages(
                self.order_items_table.query,
                KeyConditionExpression="order_id = :oid",
                ExpressionAttributeValues={":oid": order_id},
            )
        except STORE_ERRORS as e:
            raise unavailable("list order items", e) from e

        return [OrderItem.from_dynamodb_item(item) for item in items]

    def update_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        updated_at: datetime,
        courier_id: str | None = None,
    ) -> bool:
        """Move an order to a new status if it still has the expected one.

        Args:
            order_id: Order identifier
            expected_status: Status the caller validated the transition against
            new_status: Status to write
            updated_at: Timestamp of the change
            courier_id: Delivery partner to assign in the same write, if any

        Returns:
            bool: True if updated, False if the order's status had changed or
                the order does not exist
        """
        update_expression = "SET #status = :new_status, updated_at = :updated_at"
        values = {
            ":new_status": new_status.value,
            ":expected_status": expected_status.value,
            ":updated_at": updated_at.isoformat(),
        }
        if courier_id is not None:
            update_expression += ", courier_id = :courier_id"
            values[":courier_id"] = courier_id

        try:
            self.orders_table.update_item(
                Key={"id": order_id},
                UpdateExpression=update_expression,
                ConditionExpression="#status = :expected_status",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues=values,
            )
            return True

        except STORE_ERRORS as e:
            if error_code(e) == "ConditionalCheckFailedException":
                return False
            raise unavailable("update order status", e) from e

    def list_for_user(self, user_id: str) -> list[Order]:
        """List a customer's orders, newest first.

        Args:
            user_id: Identity of the customer

        Returns:
            list: Order objects (empty list if none found)
        """
        try:
            items = collect_pages(
                self.orders_table.query,
                IndexName="user_id-created_at-index",
                KeyConditionExpression="user_id = :uid",
                ExpressionAttributeValues={":uid": user_id},
                ScanIndexForward=False,  # Most recent first
            )
        except STORE_ERRORS as e:
            raise unavailable("list orders for user", e) from e

        return [Order.from_dynamodb_item(item) for item in items]

    def list_for_restaurant(self, restaurant_id: str) -> list[Order]:
        """List a restaurant's orders, newest first.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            list: Order objects (empty list if none found)
        """
        try:
            items = collect_pages(
                self.orders_table.query,
                IndexName="restaurant_id-created_at-index",
                KeyConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
                ScanIndexForward=False,  # Most recent first
            )
        except STORE_ERRORS as e:
            raise unavailable("list orders for restaurant", e) from e

        return [Order.from_dynamodb_item(item) for item in items]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """List all orders currently in a status, oldest first.

        Args:
            status: Status to match

        Returns:
            list: Order objects (empty list if none found)
        """
        try:
            items = collect_pages(
                self.orders_table.query,
                IndexName="status-created_at-index",
                KeyConditionExpression="#status = :status",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={":status": status.value},
                ScanIndexForward=True,  # Longest waiting first
            )
        except STORE_ERRORS as e:
            raise unavailable("list orders by status", e) from e

        return [Order.from_dynamodb_item(item) for item in items]

    def list_for_courier(self, courier_id: str) -> list[Order]:
        """List the orders a delivery partner has picked up, newest first.

        Args:
            courier_id: Staff id of the delivery partner

        Returns:
            list: Order objects (empty list if none found)
        """
        try:
            items = collect_pages(
                self.orders_table.query,
                IndexName="courier_id-created_at-index",
                KeyConditionExpression="courier_id = :cid",
                ExpressionAttributeValues={":cid": courier_id},
                ScanIndexForward=False,  # Most recent first
            )
        except STORE_ERRORS as e:
            raise unavailable("list orders for courier", e) from e

        return [Order.from_dynamodb_item(item) for item in items]
