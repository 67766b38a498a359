"""Order ledger: catalog reads, checkout, and order status advancement.

This is the single place where orders are created and their status changes.
Customer, vendor and delivery partner clients all go through it, so every role
observes the same persisted status.
"""

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from food_delivery_ledger.errors import (
    EmptyOrderError,
    InvalidDeliveryInfoError,
    InvalidTransitionError,
    LedgerError,
    NotPermittedError,
    OrderNotFoundError,
    StaleCartError,
    UnauthenticatedError,
)
from food_delivery_ledger.models.cart import Cart, CartLine
from food_delivery_ledger.models.catalog_models import MenuItem, Restaurant
from food_delivery_ledger.models.identity_models import CallerIdentity, StaffIdentity, StaffRole
from food_delivery_ledger.models.order_models import (
    CourierSummary,
    Order,
    OrderHistoryEntry,
    OrderHistoryItem,
    OrderItem,
    OrderStatus,
    RestaurantOrderSummary,
    can_transition,
)
from food_delivery_ledger.observability import metrics
from food_delivery_ledger.observability.decorators import traced
from food_delivery_ledger.repositories.catalog_repositories import (
    MenuItemRepository,
    RestaurantRepository,
)
from food_delivery_ledger.repositories.order_repositories import OrderRepository

logger = logging.getLogger(__name__)

IN_PROGRESS_STATUSES = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY}
)
EARNING_STATUSES = frozenset({OrderStatus.PICKED_UP, OrderStatus.DELIVERED})

# Statuses each staff role may set. Cancellation is open to both.
STAFF_ROLE_TARGETS: dict[StaffRole, frozenset[OrderStatus]] = {
    StaffRole.VENDOR: frozenset(
        {
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
            OrderStatus.CANCELLED,
        }
    ),
    StaffRole.COURIER: frozenset(
        {OrderStatus.PICKED_UP, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
}


class CheckoutPolicy(str, Enum):
    """How cart prices and availability are treated at checkout.

    LOCK_ON_ADD trusts the price and availability captured when the item was
    added to the cart. REVALIDATE re-reads every menu item and rejects the
    checkout if any line is missing, unavailable, belongs to another
    restaurant, or has changed price.
    """

    LOCK_ON_ADD = "lock_on_add"
    REVALIDATE = "revalidate"


class OrderLedger:
    """Service owning restaurants, menu items, orders and order items."""

    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        menu_item_repository: MenuItemRepository,
        order_repository: OrderRepository,
        checkout_policy: CheckoutPolicy = CheckoutPolicy.LOCK_ON_ADD,
    ) -> None:
        """Initialize the OrderLedger.

        Args:
            restaurant_repository: Repository for restaurant reads
            menu_item_repository: Repository for menu item reads
            order_repository: Repository for order persistence
            checkout_policy: Cart price/availability policy applied at checkout
        """
        self.restaurant_repository = restaurant_repository
        self.menu_item_repository = menu_item_repository
        self.order_repository = order_repository
        self.checkout_policy = checkout_policy

    @traced("list_restaurants")
    async def list_restaurants(self, search: str | None = None) -> list[Restaurant]:
        """List restaurants, highest rated first.

        Args:
            search: Optional case-insensitive filter on name or category

        Returns:
            List of restaurants

        Raises:
            BackendUnavailableError: If the store cannot be reached
        """
        restaurants = self.restaurant_repository.list_restaurants()
        if search:
            restaurants = [r for r in restaurants if r.matches(search)]
        return restaurants

    @traced("list_menu_items")
    async def list_menu_items(self, restaurant_id: str, search: str | None = None) -> list[MenuItem]:
        """List the available menu items of a restaurant.

        Args:
            restaurant_id: Restaurant to list
            search: Optional case-insensitive filter on item name

        Returns:
            List of available menu items, ordered by name

        Raises:
            BackendUnavailableError: If the store cannot be reached
        """
        items = self.menu_item_repository.list_for_restaurant(restaurant_id, available_only=True)
        if search:
            items = [item for item in items if item.matches(search)]
        return items

    @traced("place_order")
    async def place_order(
        self,
        caller: CallerIdentity,
        restaurant_id: str,
        cart: Cart,
        delivery_address: str,
        phone_number: str,
    ) -> Order:
        """Place an order for the contents of a cart.

        Preconditions are checked in order: signed-in caller, non-empty cart,
        then non-blank delivery address and phone number. The total is always
        computed here from the cart lines. On success the cart is cleared.

        Args:
            caller: The signed-in customer
            restaurant_id: Restaurant being ordered from
            cart: Cart lines to order
            delivery_address: Free text delivery address
            phone_number: Contact phone number

        Returns:
            The created order

        Raises:
            UnauthenticatedError: If no caller identity was supplied
            EmptyOrderError: If the cart has no lines
            InvalidDeliveryInfoError: If address or phone is blank
            StaleCartError: If the revalidate policy rejects a line
            PlacementFailedError: If the order could not be written
            BackendUnavailableError: If the store cannot be reached
        """
        try:
            order, items = self._build_order(
                caller, restaurant_id, cart, delivery_address, phone_number
            )
            self.order_repository.create_order_with_items(order, items)
        except LedgerError as e:
            metrics.record_placement_failure(e.code)
            raise

        cart.clear()
        metrics.record_order_placed(restaurant_id, order.total_amount, len(items))
        logger.info(
            f"Order {order.id} placed by {caller.user_id} at restaurant {restaurant_id}, "
            f"total {order.total_amount}"
        )
        return order

    def _build_order(
        self,
        caller: CallerIdentity | None,
        restaurant_id: str,
        cart: Cart,
        delivery_address: str,
        phone_number: str,
    ) -> tuple[Order, list[OrderItem]]:
        if caller is None or not caller.user_id:
            raise UnauthenticatedError("Sign in to place an order")

        if cart.is_empty():
            raise EmptyOrderError("Cannot place an order with an empty cart")

        address = (delivery_address or "").strip()
        phone = (phone_number or "").strip()
        if not address or not phone:
            raise InvalidDeliveryInfoError("Delivery address and phone number are required")

        lines = cart.lines
        if self.checkout_policy == CheckoutPolicy.REVALIDATE:
            self._revalidate(restaurant_id, lines)

        now = datetime.now(UTC)
        order = Order(
            id=str(uuid.uuid4()),
            user_id=caller.user_id,
            restaurant_id=restaurant_id,
            total_amount=sum((line.line_total for line in lines), Decimal("0")),
            status=OrderStatus.PENDING,
            delivery_address=address,
            phone_number=phone,
            created_at=now,
            updated_at=now,
        )
        items = [
            OrderItem(
                id=str(uuid.uuid4()),
                order_id=order.id,
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                price=line.price,
                created_at=now,
            )
            for line in lines
        ]
        return order, items

    def _revalidate(self, restaurant_id: str, lines: list[CartLine]) -> None:
        current = self.menu_item_repository.get_items([line.menu_item_id for line in lines])
        for line in lines:
            item = current.get(line.menu_item_id)
            if item is None or item.restaurant_id != restaurant_id:
                raise StaleCartError(
                    f"Menu item {line.menu_item_id} is no longer on this menu",
                    menu_item_id=line.menu_item_id,
                )
            if not item.available:
                raise StaleCartError(
                    f"{item.name} is currently unavailable", menu_item_id=item.id
                )
            if item.price != line.price:
                raise StaleCartError(
                    f"The price of {item.name} changed from {line.price} to {item.price}",
                    menu_item_id=item.id,
                )

    @traced("advance_status")
    async def advance_status(
        self,
        order_id: str,
        next_status: OrderStatus | str,
        actor: StaffIdentity | None = None,
    ) -> Order:
        """Move an order to the next status in its lifecycle.

        Allowed moves are the immediate forward successor and cancellation
        from any non-terminal status. The write is conditional on the status
        that was validated, so a concurrent change makes this call fail
        instead of skipping a step.

        When ``actor`` is given, vendors may only confirm, prepare, mark ready
        or cancel, and delivery partners may only pick up, deliver or cancel.
        A delivery partner picking an order up is recorded as its courier;
        after that no other delivery partner may move it.

        Args:
            order_id: Order to advance
            next_status: Requested status
            actor: Staff member making the change, if known

        Returns:
            The updated order

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidTransitionError: If the move is not allowed
            NotPermittedError: If the actor's role or assignment forbids the move
            BackendUnavailableError: If the store cannot be reached
        """
        try:
            target = OrderStatus(next_status)
        except ValueError as e:
            raise InvalidTransitionError(f"Unknown order status '{next_status}'") from e

        if actor is not None and target not in STAFF_ROLE_TARGETS[actor.role]:
            raise NotPermittedError(
                f"{actor.role.value.capitalize()} accounts cannot mark orders {target.value}"
            )

        order = self.order_repository.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")

        current = order.status
        if not can_transition(current, target):
            metrics.record_rejected_transition(current.value, target.value)
            raise InvalidTransitionError(
                f"Order {order_id} cannot move from {current.value} to {target.value}"
            )

        courier_id = None
        if actor is not None and actor.role == StaffRole.COURIER:
            if order.courier_id is not None and order.courier_id != actor.staff_id:
                raise NotPermittedError(
                    f"Order {order_id} is assigned to another delivery partner"
                )
            if target == OrderStatus.PICKED_UP:
                courier_id = actor.staff_id

        updated_at = datetime.now(UTC)
        if not self.order_repository.update_status(
            order_id, current, target, updated_at, courier_id=courier_id
        ):
            metrics.record_rejected_transition(current.value, target.value)
            raise InvalidTransitionError(
                f"Order {order_id} changed status concurrently; reload and try again"
            )

        metrics.record_status_transition(current.value, target.value)
        logger.info(f"Order {order_id} moved from {current.value} to {target.value}")

        changes: dict[str, object] = {"status": target, "updated_at": updated_at}
        if courier_id is not None:
            changes["courier_id"] = courier_id
        return order.model_copy(update=changes)

    @traced("get_order_history")
    async def get_order_history(self, caller: CallerIdentity) -> list[OrderHistoryEntry]:
        """List the caller's orders with restaurant and item names, newest first.

        Args:
            caller: The signed-in customer

        Returns:
            List of history entries

        Raises:
            UnauthenticatedError: If no caller identity was supplied
        """
        if caller is None or not caller.user_id:
            raise UnauthenticatedError("Sign in to view your orders")

        orders = self.order_repository.list_for_user(caller.user_id)
        restaurants: dict[str, Restaurant | None] = {}
        menu_names: dict[str, str] = {}
        history = []

        for order in orders:
            if order.restaurant_id not in restaurants:
                restaurants[order.restaurant_id] = self.restaurant_repository.get_restaurant(
                    order.restaurant_id
                )
            restaurant = restaurants[order.restaurant_id]

            items = self.order_repository.list_items_for_order(order.id)
            missing = [i.menu_item_id for i in items if i.menu_item_id not in menu_names]
            for item_id, menu_item in self.menu_item_repository.get_items(missing).items():
                menu_names[item_id] = menu_item.name

            history.append(
                OrderHistoryEntry(
                    order=order,
                    restaurant_name=restaurant.name if restaurant else "",
                    restaurant_image_url=restaurant.image_url if restaurant else "",
                    items=[
                        OrderHistoryItem(
                            menu_item_id=item.menu_item_id,
                            menu_item_name=menu_names.get(item.menu_item_id, ""),
                            quantity=item.quantity,
                            price=item.price,
                        )
                        for item in items
                    ],
                )
            )

        return history

    @traced("list_restaurant_orders")
    async def list_restaurant_orders(
        self,
        restaurant_id: str,
        statuses: set[OrderStatus] | None = None,
    ) -> list[Order]:
        """List a restaurant's orders for the vendor queue, newest first.

        Args:
            restaurant_id: Restaurant whose orders to list
            statuses: Optional set of statuses to keep

        Returns:
            List of orders
        """
        orders = self.order_repository.list_for_restaurant(restaurant_id)
        if statuses:
            orders = [order for order in orders if order.status in statuses]
        return orders

    @traced("list_orders_by_status")
    async def list_orders_by_status(self, status: OrderStatus) -> list[Order]:
        """List orders in one status, longest waiting first.

        Delivery partners use this with READY to find orders awaiting pickup
        and with PICKED_UP to see deliveries in progress.

        Args:
            status: Status to list

        Returns:
            List of orders
        """
        return self.order_repository.list_by_status(status)

    @traced("get_restaurant_summary")
    async def get_restaurant_summary(self, restaurant_id: str) -> RestaurantOrderSummary:
        """Count a restaurant's orders by stage and total its earnings.

        Earnings are the totals of orders that have been handed to a delivery
        partner (picked up or delivered).

        Args:
            restaurant_id: Restaurant to summarize

        Returns:
            The summary
        """
        summary = RestaurantOrderSummary(restaurant_id=restaurant_id)
        for order in self.order_repository.list_for_restaurant(restaurant_id):
            if order.status == OrderStatus.PENDING:
                summary.pending_count += 1
            elif order.status in IN_PROGRESS_STATUSES:
                summary.in_progress_count += 1
            elif order.status in EARNING_STATUSES:
                summary.completed_count += 1
                summary.earnings += order.total_amount
            elif order.status == OrderStatus.CANCELLED:
                summary.cancelled_count += 1
        return summary

    @traced("list_courier_orders")
    async def list_courier_orders(self, courier_id: str) -> list[Order]:
        """List the orders a delivery partner has picked up, newest first.

        Args:
            courier_id: Staff id of the delivery partner

        Returns:
            List of orders, both in progress and finished
        """
        return self.order_repository.list_for_courier(courier_id)

    @traced("get_courier_summary")
    async def get_courier_summary(self, courier_id: str) -> CourierSummary:
        """Count a delivery partner's active and completed deliveries.

        Args:
            courier_id: Staff id of the delivery partner

        Returns:
            The summary; ``delivered_value`` totals the delivered orders
        """
        summary = CourierSummary(courier_id=courier_id)
        for order in self.order_repository.list_for_courier(courier_id):
            if not order.status.is_terminal:
                summary.active_count += 1
            elif order.status == OrderStatus.DELIVERED:
                summary.delivered_count += 1
                summary.delivered_value += order.total_amount
        return summary
