"""Exception hierarchy for order ledger operations.

Every failure surfaced to callers derives from LedgerError so the API layer
can translate them into HTTP responses in one place. None of these are retried
automatically; the client decides whether to try again.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""

    code = "ledger_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(LedgerError):
    """Raised when an operation requires a signed-in caller and none is present."""

    code = "unauthenticated"


class AuthenticationFailedError(LedgerError):
    """Raised when the identity provider rejects credentials or a session."""

    code = "authentication_failed"


class EmptyOrderError(LedgerError):
    """Raised when checkout is attempted with no cart lines."""

    code = "empty_order"


class InvalidDeliveryInfoError(LedgerError):
    """Raised when the delivery address or phone number is blank."""

    code = "invalid_delivery_info"


class StaleCartError(LedgerError):
    """Raised when a cart line no longer matches the current menu item."""

    code = "stale_cart"

    def __init__(self, message: str, menu_item_id: str) -> None:
        super().__init__(message)
        self.menu_item_id = menu_item_id


class InvalidTransitionError(LedgerError):
    """Raised when an order status change is not allowed."""

    code = "invalid_transition"


class OrderNotFoundError(LedgerError):
    """Raised when an order id does not exist."""

    code = "order_not_found"


class MenuItemNotFoundError(LedgerError):
    """Raised when a menu item id does not exist."""

    code = "menu_item_not_found"


class PlacementFailedError(LedgerError):
    """Raised when an order could not be written as one unit of work.

    By the time this is raised the partial write has been rolled back, either
    by the store's transaction or by a compensating delete. ``cleanup_complete``
    is False only when the compensating delete itself failed.
    """

    code = "placement_failed"

    def __init__(self, message: str, order_id: str, cleanup_complete: bool = True) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.cleanup_complete = cleanup_complete


class BackendUnavailableError(LedgerError):
    """Raised when the backing store or identity provider cannot be reached."""

    code = "backend_unavailable"


class InvalidCartError(LedgerError):
    """Raised when submitted cart lines contradict each other."""

    code = "invalid_cart"

    def __init__(self, message: str, menu_item_id: str) -> None:
        super().__init__(message)
        self.menu_item_id = menu_item_id


class InvalidMenuItemError(LedgerError):
    """Raised when a vendor submits a menu item with missing details."""

    code = "invalid_menu_item"


class NotPermittedError(LedgerError):
    """Raised when a staff member attempts a step that belongs to another role or courier."""

    code = "not_permitted"
