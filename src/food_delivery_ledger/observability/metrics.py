"""Custom metrics for the order ledger."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("order-ledger")

orders_placed_counter = meter.create_counter(
    name="orders_placed_total",
    description="Total number of orders placed",
    unit="1",
)

order_placement_failure_counter = meter.create_counter(
    name="order_placement_failure_total",
    description="Total number of rejected or failed order placements by reason",
    unit="1",
)

order_value_histogram = meter.create_histogram(
    name="order_value",
    description="Total amount of placed orders",
    unit="1",
)

order_item_count_histogram = meter.create_histogram(
    name="order_item_count",
    description="Number of lines in placed orders",
    unit="1",
)

status_transition_counter = meter.create_counter(
    name="order_status_transition_total",
    description="Total number of order status changes by target status",
    unit="1",
)

rejected_transition_counter = meter.create_counter(
    name="order_status_transition_rejected_total",
    description="Total number of refused order status changes",
    unit="1",
)


def record_order_placed(restaurant_id: str, total_amount: Decimal, item_count: int) -> None:
    """Record a successfully placed order.

    Args:
        restaurant_id: Restaurant the order was placed with
        total_amount: Order total
        item_count: Number of order lines
    """
    orders_placed_counter.add(1, {"restaurant_id": restaurant_id})
    order_value_histogram.record(float(total_amount), {"restaurant_id": restaurant_id})
    order_item_count_histogram.record(item_count, {"restaurant_id": restaurant_id})


def record_placement_failure(reason: str) -> None:
    """Record an order placement that did not succeed.

    Args:
        reason: Error code of the failure
    """
    order_placement_failure_counter.add(1, {"reason": reason})


def record_status_transition(from_status: str, to_status: str) -> None:
    """Record an accepted status change.

    Args:
        from_status: Previous status
        to_status: New status
    """
    status_transition_counter.add(1, {"from_status": from_status, "to_status": to_status})


def record_rejected_transition(from_status: str, to_status: str) -> None:
    """Record a refused status change.

    Args:
        from_status: Current status of the order
        to_status: Requested status
    """
    rejected_transition_counter.add(1, {"from_status": from_status, "to_status": to_status})
