"""Unit tests for the OrderLedger service."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from food_delivery_ledger.errors import (
    BackendUnavailableError,
    EmptyOrderError,
    InvalidDeliveryInfoError,
    InvalidTransitionError,
    NotPermittedError,
    OrderNotFoundError,
    PlacementFailedError,
    StaleCartError,
    UnauthenticatedError,
)
from food_delivery_ledger.models.cart import Cart, CartLine
from food_delivery_ledger.models.catalog_models import MenuItem, Restaurant
from food_delivery_ledger.models.identity_models import CallerIdentity, StaffIdentity, StaffRole
from food_delivery_ledger.models.order_models import OrderItem, OrderStatus
from food_delivery_ledger.services.order_ledger import CheckoutPolicy, OrderLedger


@pytest.fixture
def restaurant_repository(sample_restaurants: list[Restaurant]) -> MagicMock:
    """Mock restaurant repository."""
    repo = MagicMock()
    repo.list_restaurants.return_value = sample_restaurants
    repo.get_restaurant.side_effect = lambda rid: next(
        (r for r in sample_restaurants if r.id == rid), None
    )
    return repo


@pytest.fixture
def menu_item_repository(sample_menu_items: list[MenuItem]) -> MagicMock:
    """Mock menu item repository."""
    repo = MagicMock()
    repo.list_for_restaurant.return_value = sample_menu_items
    repo.get_items.side_effect = lambda ids: {
        item.id: item for item in sample_menu_items if item.id in ids
    }
    return repo


@pytest.fixture
def order_repository() -> MagicMock:
    """Mock order repository."""
    return MagicMock()


@pytest.fixture
def ledger(
    restaurant_repository: MagicMock,
    menu_item_repository: MagicMock,
    order_repository: MagicMock,
) -> OrderLedger:
    """OrderLedger with mocked repositories and the default checkout policy."""
    return OrderLedger(
        restaurant_repository=restaurant_repository,
        menu_item_repository=menu_item_repository,
        order_repository=order_repository,
    )


@pytest.fixture
def full_cart(sample_menu_items: list[MenuItem]) -> Cart:
    """Two salads and one quinoa bowl, totalling 580."""
    salad, bowl = sample_menu_items
    cart = Cart()
    cart.add_item(salad)
    cart.add_item(salad)
    cart.add_item(bowl)
    return cart


@pytest.mark.unit
class TestCatalogReads:
    """Test suite for restaurant and menu listing."""

    @pytest.mark.asyncio
    async def test_list_restaurants(self, ledger: OrderLedger) -> None:
        """Test restaurants come back in repository (rating) order."""
        restaurants = await ledger.list_restaurants()
        assert [r.id for r in restaurants] == ["rest_123456", "rest_654321"]

    @pytest.mark.asyncio
    async def test_list_restaurants_search_matches_category(self, ledger: OrderLedger) -> None:
        """Test search filters on category case-insensitively."""
        restaurants = await ledger.list_restaurants(search="pizza")
        assert [r.name for r in restaurants] == ["Wood Fire Kitchen"]

    @pytest.mark.asyncio
    async def test_list_menu_items_only_available(
        self, ledger: OrderLedger, menu_item_repository: MagicMock
    ) -> None:
        """Test that menu listing asks for available items only."""
        items = await ledger.list_menu_items("rest_123456")

        assert len(items) == 2
        menu_item_repository.list_for_restaurant.assert_called_once_with(
            "rest_123456", available_only=True
        )

    @pytest.mark.asyncio
    async def test_list_menu_items_search(self, ledger: OrderLedger) -> None:
        """Test menu search filters on item name."""
        items = await ledger.list_menu_items("rest_123456", search="QUINOA")
        assert [item.id for item in items] == ["item_b"]

    @pytest.mark.asyncio
    async def test_store_failure_propagates(
        self, ledger: OrderLedger, restaurant_repository: MagicMock
    ) -> None:
        """Test that a store outage is reported rather than shown as no restaurants."""
        restaurant_repository.list_restaurants.side_effect = BackendUnavailableError("down")

        with pytest.raises(BackendUnavailableError):
            await ledger.list_restaurants()


@pytest.mark.unit
class TestPlaceOrder:
    """Test suite for order placement."""

    @pytest.mark.asyncio
    async def test_place_order_success(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        caller: CallerIdentity,
        full_cart: Cart,
    ) -> None:
        """Test placing two salads and a bowl creates one order worth 580 and two items."""
        order = await ledger.place_order(
            caller, "rest_123456", full_cart, "456 Home Lane", "+91 98765 43210"
        )

        assert order.total_amount == Decimal("580")
        assert order.status == OrderStatus.PENDING
        assert order.user_id == "user_42"
        assert order.created_at == order.updated_at

        order_repository.create_order_with_items.assert_called_once()
        written_order, items = order_repository.create_order_with_items.call_args.args
        assert written_order == order
        assert {(i.menu_item_id, i.quantity, i.price) for i in items} == {
            ("item_a", 2, Decimal("180")),
            ("item_b", 1, Decimal("220")),
        }
        assert all(i.order_id == order.id for i in items)
        assert full_cart.is_empty()

    @pytest.mark.asyncio
    async def test_total_ignores_nothing_but_cart_lines(
        self, ledger: OrderLedger, caller: CallerIdentity
    ) -> None:
        """Test that the total is the sum of price times quantity."""
        cart = Cart([CartLine(menu_item_id="item_a", price=Decimal("12.50"), quantity=3)])

        order = await ledger.place_order(caller, "rest_123456", cart, "Addr", "123")

        assert order.total_amount == Decimal("37.50")

    @pytest.mark.asyncio
    async def test_delivery_info_is_trimmed(
        self, ledger: OrderLedger, caller: CallerIdentity, full_cart: Cart
    ) -> None:
        """Test that surrounding whitespace is stripped from address and phone."""
        order = await ledger.place_order(
            caller, "rest_123456", full_cart, "  456 Home Lane ", " 123 "
        )
        assert order.delivery_address == "456 Home Lane"
        assert order.phone_number == "123"

    @pytest.mark.asyncio
    async def test_unauthenticated_checked_first(
        self, ledger: OrderLedger, order_repository: MagicMock
    ) -> None:
        """Test that a missing caller wins over an empty cart and blank address."""
        with pytest.raises(UnauthenticatedError):
            await ledger.place_order(None, "rest_123456", Cart(), "", "")  # type: ignore[arg-type]

        order_repository.create_order_with_items.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_cart_checked_before_delivery_info(
        self, ledger: OrderLedger, order_repository: MagicMock, caller: CallerIdentity
    ) -> None:
        """Test that an empty cart is reported even when the address is blank."""
        with pytest.raises(EmptyOrderError):
            await ledger.place_order(caller, "rest_123456", Cart(), "", "")

        order_repository.create_order_with_items.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("address", "phone"),
        [("", "123"), ("456 Home Lane", ""), ("   ", "123"), ("456 Home Lane", "\t")],
    )
    async def test_blank_delivery_info_rejected(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        caller: CallerIdentity,
        full_cart: Cart,
        address: str,
        phone: str,
    ) -> None:
        """Test that a blank address or phone creates nothing and keeps the cart."""
        with pytest.raises(InvalidDeliveryInfoError):
            await ledger.place_order(caller, "rest_123456", full_cart, address, phone)

        order_repository.create_order_with_items.assert_not_called()
        assert full_cart.item_count == 3

    @pytest.mark.asyncio
    async def test_placement_failure_keeps_cart(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        caller: CallerIdentity,
        full_cart: Cart,
    ) -> None:
        """Test that a failed write surfaces PlacementFailedError and the cart survives."""
        order_repository.create_order_with_items.side_effect = PlacementFailedError(
            "write failed", order_id="order_x"
        )

        with pytest.raises(PlacementFailedError):
            await ledger.place_order(caller, "rest_123456", full_cart, "Addr", "123")

        assert full_cart.item_count == 3

    @pytest.mark.asyncio
    async def test_each_order_gets_a_new_id(
        self, ledger: OrderLedger, caller: CallerIdentity, sample_menu_items: list[MenuItem]
    ) -> None:
        """Test that repeated placements produce distinct orders."""
        first_cart = Cart()
        first_cart.add_item(sample_menu_items[0])
        second_cart = Cart()
        second_cart.add_item(sample_menu_items[0])

        first = await ledger.place_order(caller, "rest_123456", first_cart, "Addr", "123")
        second = await ledger.place_order(caller, "rest_123456", second_cart, "Addr", "123")

        assert first.id != second.id


@pytest.mark.unit
class TestRevalidatePolicy:
    """Test suite for the revalidate checkout policy."""

    @pytest.fixture
    def revalidating_ledger(
        self,
        restaurant_repository: MagicMock,
        menu_item_repository: MagicMock,
        order_repository: MagicMock,
    ) -> OrderLedger:
        """OrderLedger that re-reads menu items at checkout."""
        return OrderLedger(
            restaurant_repository=restaurant_repository,
            menu_item_repository=menu_item_repository,
            order_repository=order_repository,
            checkout_policy=CheckoutPolicy.REVALIDATE,
        )

    @pytest.mark.asyncio
    async def test_current_cart_accepted(
        self, revalidating_ledger: OrderLedger, caller: CallerIdentity, full_cart: Cart
    ) -> None:
        """Test that an up to date cart places normally."""
        order = await revalidating_ledger.place_order(
            caller, "rest_123456", full_cart, "Addr", "123"
        )
        assert order.total_amount == Decimal("580")

    @pytest.mark.asyncio
    async def test_changed_price_rejected(
        self,
        revalidating_ledger: OrderLedger,
        order_repository: MagicMock,
        caller: CallerIdentity,
    ) -> None:
        """Test that a price that moved since the item was added is rejected."""
        cart = Cart([CartLine(menu_item_id="item_a", price=Decimal("150"), quantity=1)])

        with pytest.raises(StaleCartError) as exc_info:
            await revalidating_ledger.place_order(caller, "rest_123456", cart, "Addr", "123")

        assert exc_info.value.menu_item_id == "item_a"
        order_repository.create_order_with_items.assert_not_called()

    @pytest.mark.asyncio
    async def test_unavailable_item_rejected(
        self,
        revalidating_ledger: OrderLedger,
        menu_item_repository: MagicMock,
        sample_menu_items: list[MenuItem],
        caller: CallerIdentity,
    ) -> None:
        """Test that an item switched off after adding is rejected."""
        sold_out = sample_menu_items[1].model_copy(update={"available": False})
        menu_item_repository.get_items.side_effect = None
        menu_item_repository.get_items.return_value = {"item_b": sold_out}
        cart = Cart([CartLine(menu_item_id="item_b", price=Decimal("220"), quantity=1)])

        with pytest.raises(StaleCartError):
            await revalidating_ledger.place_order(caller, "rest_123456", cart, "Addr", "123")

    @pytest.mark.asyncio
    async def test_item_from_other_restaurant_rejected(
        self, revalidating_ledger: OrderLedger, caller: CallerIdentity
    ) -> None:
        """Test that a line for another restaurant's menu is rejected."""
        cart = Cart([CartLine(menu_item_id="item_a", price=Decimal("180"), quantity=1)])

        with pytest.raises(StaleCartError):
            await revalidating_ledger.place_order(caller, "rest_654321", cart, "Addr", "123")

    @pytest.mark.asyncio
    async def test_lock_on_add_does_not_reread(
        self, ledger: OrderLedger, menu_item_repository: MagicMock, caller: CallerIdentity
    ) -> None:
        """Test that the default policy trusts the cart price."""
        cart = Cart([CartLine(menu_item_id="item_a", price=Decimal("150"), quantity=1)])

        order = await ledger.place_order(caller, "rest_123456", cart, "Addr", "123")

        assert order.total_amount == Decimal("150")
        menu_item_repository.get_items.assert_not_called()


VALID_MOVES = [
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
    (OrderStatus.PREPARING, OrderStatus.READY),
    (OrderStatus.READY, OrderStatus.PICKED_UP),
    (OrderStatus.PICKED_UP, OrderStatus.DELIVERED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.READY, OrderStatus.CANCELLED),
    (OrderStatus.PICKED_UP, OrderStatus.CANCELLED),
]

INVALID_MOVES = [
    (OrderStatus.READY, OrderStatus.DELIVERED),
    (OrderStatus.PENDING, OrderStatus.READY),
    (OrderStatus.PREPARING, OrderStatus.CONFIRMED),
    (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    (OrderStatus.CANCELLED, OrderStatus.PENDING),
    (OrderStatus.CONFIRMED, OrderStatus.CONFIRMED),
]


@pytest.mark.unit
class TestAdvanceStatus:
    """Test suite for order status advancement."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("current", "target"), VALID_MOVES)
    async def test_allowed_move(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        make_order,
        current: OrderStatus,
        target: OrderStatus,
    ) -> None:
        """Test that allowed moves are written conditionally and returned."""
        order_repository.get_order.return_value = make_order(current)
        order_repository.update_status.return_value = True

        updated = await ledger.advance_status("order_1", target)

        assert updated.status == target
        assert updated.updated_at > updated.created_at
        args = order_repository.update_status.call_args.args
        assert args[:3] == ("order_1", current, target)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("current", "target"), INVALID_MOVES)
    async def test_rejected_move_leaves_order_unchanged(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        make_order,
        current: OrderStatus,
        target: OrderStatus,
    ) -> None:
        """Test that a disallowed move raises and writes nothing."""
        order_repository.get_order.return_value = make_order(current)

        with pytest.raises(InvalidTransitionError):
            await ledger.advance_status("order_1", target)

        order_repository.update_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_status_given_as_string(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test that a status value string is accepted."""
        order_repository.get_order.return_value = make_order(OrderStatus.READY)
        order_repository.update_status.return_value = True

        updated = await ledger.advance_status("order_1", "picked_up")

        assert updated.status == OrderStatus.PICKED_UP

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(
        self, ledger: OrderLedger, order_repository: MagicMock
    ) -> None:
        """Test that an unknown status string is an invalid transition."""
        with pytest.raises(InvalidTransitionError):
            await ledger.advance_status("order_1", "teleported")

        order_repository.get_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_order(self, ledger: OrderLedger, order_repository: MagicMock) -> None:
        """Test advancing an order that does not exist."""
        order_repository.get_order.return_value = None

        with pytest.raises(OrderNotFoundError):
            await ledger.advance_status("missing", OrderStatus.CONFIRMED)

    @pytest.mark.asyncio
    async def test_concurrent_change_rejected(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test that losing the conditional write is reported as an invalid transition."""
        order_repository.get_order.return_value = make_order(OrderStatus.READY)
        order_repository.update_status.return_value = False

        with pytest.raises(InvalidTransitionError):
            await ledger.advance_status("order_1", OrderStatus.PICKED_UP)


VENDOR = StaffIdentity(staff_id="vendor-1", role=StaffRole.VENDOR)
COURIER = StaffIdentity(staff_id="courier-1", role=StaffRole.COURIER)
OTHER_COURIER = StaffIdentity(staff_id="courier-2", role=StaffRole.COURIER)


@pytest.mark.unit
class TestStaffRoles:
    """Test suite for role and courier assignment checks on status changes."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("actor", "current", "target"),
        [
            (VENDOR, OrderStatus.READY, OrderStatus.PICKED_UP),
            (VENDOR, OrderStatus.PICKED_UP, OrderStatus.DELIVERED),
            (COURIER, OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (COURIER, OrderStatus.CONFIRMED, OrderStatus.PREPARING),
            (COURIER, OrderStatus.PREPARING, OrderStatus.READY),
        ],
    )
    async def test_role_cannot_take_the_other_roles_steps(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        make_order,
        actor: StaffIdentity,
        current: OrderStatus,
        target: OrderStatus,
    ) -> None:
        """Test that each role is limited to its own part of the lifecycle."""
        order_repository.get_order.return_value = make_order(current)

        with pytest.raises(NotPermittedError):
            await ledger.advance_status("order_1", target, actor=actor)

        order_repository.update_status.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor", [VENDOR, COURIER])
    async def test_either_role_may_cancel(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order, actor: StaffIdentity
    ) -> None:
        """Test that cancellation is open to vendors and delivery partners."""
        order_repository.get_order.return_value = make_order(OrderStatus.READY)
        order_repository.update_status.return_value = True

        updated = await ledger.advance_status("order_1", OrderStatus.CANCELLED, actor=actor)

        assert updated.status == OrderStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_pickup_assigns_the_courier(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test that picking an order up records who took it."""
        order_repository.get_order.return_value = make_order(OrderStatus.READY)
        order_repository.update_status.return_value = True

        updated = await ledger.advance_status("order_1", OrderStatus.PICKED_UP, actor=COURIER)

        assert updated.courier_id == "courier-1"
        assert order_repository.update_status.call_args.kwargs["courier_id"] == "courier-1"

    @pytest.mark.asyncio
    async def test_vendor_moves_do_not_assign_a_courier(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test that vendor steps leave the courier unset."""
        order_repository.get_order.return_value = make_order(OrderStatus.PENDING)
        order_repository.update_status.return_value = True

        updated = await ledger.advance_status("order_1", OrderStatus.CONFIRMED, actor=VENDOR)

        assert updated.courier_id is None
        assert order_repository.update_status.call_args.kwargs["courier_id"] is None

    @pytest.mark.asyncio
    async def test_assigned_courier_delivers(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test that the courier who picked the order up can deliver it."""
        order_repository.get_order.return_value = make_order(
            OrderStatus.PICKED_UP, courier_id="courier-1"
        )
        order_repository.update_status.return_value = True

        updated = await ledger.advance_status("order_1", OrderStatus.DELIVERED, actor=COURIER)

        assert updated.status == OrderStatus.DELIVERED
        assert updated.courier_id == "courier-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    async def test_other_courier_cannot_touch_assigned_order(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        make_order,
        target: OrderStatus,
    ) -> None:
        """Test that a second delivery partner cannot finish or cancel someone else's order."""
        order_repository.get_order.return_value = make_order(
            OrderStatus.PICKED_UP, courier_id="courier-1"
        )

        with pytest.raises(NotPermittedError, match="another delivery partner"):
            await ledger.advance_status("order_1", target, actor=OTHER_COURIER)

        order_repository.update_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_role_checked_before_reading_the_order(
        self, ledger: OrderLedger, order_repository: MagicMock
    ) -> None:
        """Test that a forbidden target is refused without a store read."""
        with pytest.raises(NotPermittedError):
            await ledger.advance_status("order_1", OrderStatus.DELIVERED, actor=VENDOR)

        order_repository.get_order.assert_not_called()


@pytest.mark.unit
class TestOrderQueries:
    """Test suite for history, vendor queue and summary reads."""

    @pytest.mark.asyncio
    async def test_order_history_joins_names(
        self,
        ledger: OrderLedger,
        order_repository: MagicMock,
        menu_item_repository: MagicMock,
        make_order,
        caller: CallerIdentity,
    ) -> None:
        """Test that history entries carry restaurant and menu item names."""
        order_repository.list_for_user.return_value = [make_order(OrderStatus.DELIVERED)]
        order_repository.list_items_for_order.return_value = [
            OrderItem(
                id="oi_1", order_id="order_1", menu_item_id="item_a", quantity=2, price=Decimal("180")
            ),
            OrderItem(
                id="oi_2", order_id="order_1", menu_item_id="gone", quantity=1, price=Decimal("5")
            ),
        ]

        history = await ledger.get_order_history(caller)

        assert len(history) == 1
        entry = history[0]
        assert entry.restaurant_name == "Green Garden Cafe"
        assert [(i.menu_item_name, i.quantity) for i in entry.items] == [
            ("Farm Fresh Salad Bowl", 2),
            ("", 1),
        ]
        order_repository.list_for_user.assert_called_once_with("user_42")

    @pytest.mark.asyncio
    async def test_order_history_requires_caller(self, ledger: OrderLedger) -> None:
        """Test that history needs a signed-in caller."""
        with pytest.raises(UnauthenticatedError):
            await ledger.get_order_history(None)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_restaurant_orders_status_filter(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test filtering the vendor queue by status."""
        order_repository.list_for_restaurant.return_value = [
            make_order(OrderStatus.PENDING, id="o1"),
            make_order(OrderStatus.READY, id="o2"),
            make_order(OrderStatus.DELIVERED, id="o3"),
        ]

        orders = await ledger.list_restaurant_orders(
            "rest_123456", statuses={OrderStatus.PENDING, OrderStatus.READY}
        )

        assert [o.id for o in orders] == ["o1", "o2"]

    @pytest.mark.asyncio
    async def test_orders_by_status(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test the delivery queue read."""
        order_repository.list_by_status.return_value = [make_order(OrderStatus.READY)]

        orders = await ledger.list_orders_by_status(OrderStatus.READY)

        assert len(orders) == 1
        order_repository.list_by_status.assert_called_once_with(OrderStatus.READY)

    @pytest.mark.asyncio
    async def test_restaurant_summary(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test stage counts and earnings."""
        order_repository.list_for_restaurant.return_value = [
            make_order(OrderStatus.PENDING, id="o1"),
            make_order(OrderStatus.PREPARING, id="o2"),
            make_order(OrderStatus.READY, id="o3"),
            make_order(OrderStatus.PICKED_UP, id="o4", total_amount=Decimal("100")),
            make_order(OrderStatus.DELIVERED, id="o5", total_amount=Decimal("250")),
            make_order(OrderStatus.CANCELLED, id="o6"),
        ]

        summary = await ledger.get_restaurant_summary("rest_123456")

        assert summary.pending_count == 1
        assert summary.in_progress_count == 2
        assert summary.completed_count == 2
        assert summary.cancelled_count == 1
        assert summary.earnings == Decimal("350")

    @pytest.mark.asyncio
    async def test_courier_orders(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test the per-courier order list read."""
        order_repository.list_for_courier.return_value = [
            make_order(OrderStatus.PICKED_UP, courier_id="courier-1")
        ]

        orders = await ledger.list_courier_orders("courier-1")

        assert [o.courier_id for o in orders] == ["courier-1"]
        order_repository.list_for_courier.assert_called_once_with("courier-1")

    @pytest.mark.asyncio
    async def test_courier_summary(
        self, ledger: OrderLedger, order_repository: MagicMock, make_order
    ) -> None:
        """Test active and delivered counts for one delivery partner."""
        order_repository.list_for_courier.return_value = [
            make_order(OrderStatus.PICKED_UP, id="o1", courier_id="courier-1"),
            make_order(
                OrderStatus.DELIVERED, id="o2", courier_id="courier-1", total_amount=Decimal("120")
            ),
            make_order(
                OrderStatus.DELIVERED, id="o3", courier_id="courier-1", total_amount=Decimal("80")
            ),
            make_order(OrderStatus.CANCELLED, id="o4", courier_id="courier-1"),
        ]

        summary = await ledger.get_courier_summary("courier-1")

        assert summary.courier_id == "courier-1"
        assert summary.active_count == 1
        assert summary.delivered_count == 2
        assert summary.delivered_value == Decimal("200")
