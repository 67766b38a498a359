"""FastAPI application exposing the order ledger to customer, vendor and courier clients."""

import logging
from decimal import Decimal

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from food_delivery_ledger.auth.api_dependencies import (
    get_bearer_token,
    get_staff_identity_from_header,
)
from food_delivery_ledger.auth.staff_key_validator import StaffKeyValidator
from food_delivery_ledger.errors import (
    AuthenticationFailedError,
    BackendUnavailableError,
    EmptyOrderError,
    InvalidCartError,
    InvalidDeliveryInfoError,
    InvalidMenuItemError,
    InvalidTransitionError,
    LedgerError,
    MenuItemNotFoundError,
    NotPermittedError,
    OrderNotFoundError,
    PlacementFailedError,
    StaleCartError,
    UnauthenticatedError,
)
from food_delivery_ledger.models.cart import Cart, CartLine
from food_delivery_ledger.models.catalog_models import MenuItem, Restaurant
from food_delivery_ledger.models.identity_models import (
    AuthSession,
    CallerIdentity,
    StaffIdentity,
    StaffRole,
)
from food_delivery_ledger.models.order_models import (
    CourierSummary,
    Order,
    OrderHistoryEntry,
    OrderStatus,
    RestaurantOrderSummary,
)
from food_delivery_ledger.services.identity_client import IdentityClient
from food_delivery_ledger.services.menu_management_service import MenuManagementService
from food_delivery_ledger.services.order_ledger import OrderLedger

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[LedgerError], int] = {
    UnauthenticatedError: 401,
    AuthenticationFailedError: 401,
    EmptyOrderError: 400,
    InvalidCartError: 400,
    InvalidDeliveryInfoError: 400,
    InvalidMenuItemError: 400,
    NotPermittedError: 403,
    OrderNotFoundError: 404,
    MenuItemNotFoundError: 404,
    StaleCartError: 409,
    InvalidTransitionError: 409,
    PlacementFailedError: 500,
    BackendUnavailableError: 503,
}


def status_code_for(error: LedgerError) -> int:
    """Map a ledger error to its HTTP status code."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class PlaceOrderRequest(BaseModel):
    """Checkout request carrying the customer's cart."""

    restaurant_id: str
    items: list[CartLine] = Field(default_factory=list)
    delivery_address: str = ""
    phone_number: str = ""


class PlaceOrderResponse(BaseModel):
    """Response model for a placed order."""

    order_id: str
    status: OrderStatus
    total_amount: Decimal


class StatusUpdateRequest(BaseModel):
    """Requested order status."""

    status: str


class AddMenuItemRequest(BaseModel):
    """Vendor request to add a menu item."""

    name: str
    price: Decimal = Field(..., ge=0)
    description: str = ""
    category: str | None = None
    image_url: str = ""


class AvailabilityRequest(BaseModel):
    """Availability change; omit ``available`` to toggle."""

    available: bool | None = None


class Credentials(BaseModel):
    """Email and password for sign up and sign in."""

    email: str
    password: str


def create_app(
    order_ledger: OrderLedger,
    menu_service: MenuManagementService,
    identity_client: IdentityClient,
    vendor_keys: list[str],
    courier_keys: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        order_ledger: Service for catalog reads, checkout and status changes
        menu_service: Service for vendor menu authoring
        identity_client: Client resolving customer access tokens
        vendor_keys: Key entries (``staff_id=key`` or a bare key) granting the vendor role
        courier_keys: Key entries granting the courier role

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Food Delivery Order Ledger API",
        description="Catalog, checkout and order lifecycle for customers, vendors and couriers",
        version="1.0.0",
    )

    # Store services in app state for access in route handlers
    app.state.order_ledger = order_ledger
    app.state.menu_service = menu_service
    app.state.identity_client = identity_client
    app.state.staff_key_validator = StaffKeyValidator(
        vendor_keys=vendor_keys, courier_keys=courier_keys
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        content: dict[str, str] = {"detail": exc.message, "error": exc.code}
        if isinstance(exc, (StaleCartError, InvalidCartError)):
            content["menu_item_id"] = exc.menu_item_id
        return JSONResponse(status_code=status_code, content=content)

    def any_staff(x_api_key: str | None = Header(None)) -> StaffIdentity:
        """Dependency admitting vendors and couriers."""
        return get_staff_identity_from_header(
            x_api_key=x_api_key, validator=app.state.staff_key_validator
        )

    def vendor_only(x_api_key: str | None = Header(None)) -> StaffIdentity:
        """Dependency admitting vendors."""
        return get_staff_identity_from_header(
            x_api_key=x_api_key,
            validator=app.state.staff_key_validator,
            allowed_roles=frozenset({StaffRole.VENDOR}),
        )

    def courier_only(x_api_key: str | None = Header(None)) -> StaffIdentity:
        """Dependency admitting couriers."""
        return get_staff_identity_from_header(
            x_api_key=x_api_key,
            validator=app.state.staff_key_validator,
            allowed_roles=frozenset({StaffRole.COURIER}),
        )

    async def signed_in_caller(authorization: str | None = Header(None)) -> CallerIdentity:
        """Dependency resolving the customer's bearer token."""
        token = get_bearer_token(authorization)
        if token is None:
            raise UnauthenticatedError("Sign in to continue")

        caller: CallerIdentity | None = await app.state.identity_client.get_caller_identity(token)
        if caller is None:
            raise UnauthenticatedError("Session expired or invalid; sign in again")
        return caller

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Catalog

    @app.get("/restaurants", response_model=list[Restaurant], tags=["Catalog"])
    async def list_restaurants(search: str | None = None) -> list[Restaurant]:
        """List restaurants, highest rated first."""
        restaurants: list[Restaurant] = await app.state.order_ledger.list_restaurants(search=search)
        return restaurants

    @app.get("/restaurants/{restaurant_id}/menu", response_model=list[MenuItem], tags=["Catalog"])
    async def list_menu(restaurant_id: str, search: str | None = None) -> list[MenuItem]:
        """List the available menu items of a restaurant."""
        items: list[MenuItem] = await app.state.order_ledger.list_menu_items(
            restaurant_id, search=search
        )
        return items

    # Customer orders

    @app.post("/orders", response_model=PlaceOrderResponse, status_code=201, tags=["Orders"])
    async def place_order(
        request: PlaceOrderRequest,
        caller: CallerIdentity = Depends(signed_in_caller),
    ) -> PlaceOrderResponse:
        """Place an order for the submitted cart."""
        order: Order = await app.state.order_ledger.place_order(
            caller=caller,
            restaurant_id=request.restaurant_id,
            cart=Cart(request.items),
            delivery_address=request.delivery_address,
            phone_number=request.phone_number,
        )
        return PlaceOrderResponse(
            order_id=order.id, status=order.status, total_amount=order.total_amount
        )

    @app.get("/orders", response_model=list[OrderHistoryEntry], tags=["Orders"])
    async def order_history(
        caller: CallerIdentity = Depends(signed_in_caller),
    ) -> list[OrderHistoryEntry]:
        """List the signed-in customer's orders, newest first."""
        history: list[OrderHistoryEntry] = await app.state.order_ledger.get_order_history(caller)
        return history

    @app.post("/orders/{order_id}/status", response_model=Order, tags=["Orders"])
    async def advance_status(
        order_id: str,
        request: StatusUpdateRequest,
        staff: StaffIdentity = Depends(any_staff),
    ) -> Order:
        """Advance an order to its next status, or cancel it."""
        logger.info(f"{staff.staff_id} requested {request.status} for order {order_id}")
        order: Order = await app.state.order_ledger.advance_status(
            order_id, request.status, actor=staff
        )
        return order

    # Vendor

    @app.get(
        "/vendor/restaurants/{restaurant_id}/orders",
        response_model=list[Order],
        tags=["Vendor"],
    )
    async def restaurant_orders(
        restaurant_id: str,
        status: list[OrderStatus] | None = Query(None),
        _staff: StaffIdentity = Depends(vendor_only),
    ) -> list[Order]:
        """List a restaurant's orders, optionally filtered by status."""
        orders: list[Order] = await app.state.order_ledger.list_restaurant_orders(
            restaurant_id, statuses=set(status) if status else None
        )
        return orders

    @app.get(
        "/vendor/restaurants/{restaurant_id}/summary",
        response_model=RestaurantOrderSummary,
        tags=["Vendor"],
    )
    async def restaurant_summary(
        restaurant_id: str,
        _staff: StaffIdentity = Depends(vendor_only),
    ) -> RestaurantOrderSummary:
        """Order counts and earnings for a restaurant."""
        summary: RestaurantOrderSummary = await app.state.order_ledger.get_restaurant_summary(
            restaurant_id
        )
        return summary

    @app.get(
        "/vendor/restaurants/{restaurant_id}/menu-items",
        response_model=list[MenuItem],
        tags=["Vendor"],
    )
    async def all_menu_items(
        restaurant_id: str,
        _staff: StaffIdentity = Depends(vendor_only),
    ) -> list[MenuItem]:
        """List every menu item, including unavailable ones."""
        items: list[MenuItem] = await app.state.menu_service.list_all_menu_items(restaurant_id)
        return items

    @app.post(
        "/vendor/restaurants/{restaurant_id}/menu-items",
        response_model=MenuItem,
        status_code=201,
        tags=["Vendor"],
    )
    async def add_menu_item(
        restaurant_id: str,
        request: AddMenuItemRequest,
        _staff: StaffIdentity = Depends(vendor_only),
    ) -> MenuItem:
        """Add a menu item to a restaurant."""
        item: MenuItem = await app.state.menu_service.add_menu_item(
            restaurant_id=restaurant_id,
            name=request.name,
            price=request.price,
            description=request.description,
            category=request.category,
            image_url=request.image_url,
        )
        return item

    @app.patch("/vendor/menu-items/{item_id}/availability", tags=["Vendor"])
    async def change_availability(
        item_id: str,
        request: AvailabilityRequest,
        _staff: StaffIdentity = Depends(vendor_only),
    ) -> dict[str, str | bool]:
        """Set or toggle a menu item's availability."""
        if request.available is None:
            item: MenuItem = await app.state.menu_service.toggle_availability(item_id)
            available = item.available
        else:
            await app.state.menu_service.set_availability(item_id, request.available)
            available = request.available
        return {"id": item_id, "available": available}

    @app.delete("/vendor/menu-items/{item_id}", status_code=204, tags=["Vendor"])
    async def delete_menu_item(
        item_id: str,
        _staff: StaffIdentity = Depends(vendor_only),
    ) -> None:
        """Remove a menu item."""
        await app.state.menu_service.delete_menu_item(item_id)

    # Delivery partner

    @app.get("/delivery/orders", response_model=list[Order], tags=["Delivery"])
    async def delivery_queue(
        status: OrderStatus = OrderStatus.READY,
        _staff: StaffIdentity = Depends(courier_only),
    ) -> list[Order]:
        """List orders in a status; defaults to orders ready for pickup."""
        orders: list[Order] = await app.state.order_ledger.list_orders_by_status(status)
        return orders

    @app.get("/delivery/me/orders", response_model=list[Order], tags=["Delivery"])
    async def my_deliveries(
        staff: StaffIdentity = Depends(courier_only),
    ) -> list[Order]:
        """List the orders the calling delivery partner has picked up."""
        orders: list[Order] = await app.state.order_ledger.list_courier_orders(staff.staff_id)
        return orders

    @app.get("/delivery/me/summary", response_model=CourierSummary, tags=["Delivery"])
    async def my_delivery_summary(
        staff: StaffIdentity = Depends(courier_only),
    ) -> CourierSummary:
        """Active and completed delivery counts for the calling delivery partner."""
        summary: CourierSummary = await app.state.order_ledger.get_courier_summary(
            staff.staff_id
        )
        return summary

    # Identity delegation

    @app.post("/auth/signup", response_model=CallerIdentity, status_code=201, tags=["Auth"])
    async def sign_up(credentials: Credentials) -> CallerIdentity:
        """Register a customer account."""
        identity: CallerIdentity = await app.state.identity_client.sign_up(
            credentials.email, credentials.password
        )
        return identity

    @app.post("/auth/signin", response_model=AuthSession, tags=["Auth"])
    async def sign_in(credentials: Credentials) -> AuthSession:
        """Sign in and receive an access token."""
        session: AuthSession = await app.state.identity_client.sign_in(
            credentials.email, credentials.password
        )
        return session

    @app.post("/auth/signout", status_code=204, tags=["Auth"])
    async def sign_out(authorization: str | None = Header(None)) -> None:
        """Revoke the current session."""
        token = get_bearer_token(authorization)
        if token is None:
            raise UnauthenticatedError("No session to sign out of")
        await app.state.identity_client.sign_out(token)

    return app
