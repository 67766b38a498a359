"""Shopping cart held by the customer client before checkout."""

from decimal import Decimal

from pydantic import BaseModel, Field

from food_delivery_ledger.errors import InvalidCartError
from food_delivery_ledger.models.catalog_models import MenuItem


class CartLine(BaseModel):
    """A not-yet-persisted selection of a menu item."""

    menu_item_id: str = Field(..., description="Menu item being ordered")
    name: str = Field(default="", description="Menu item name at time of adding")
    price: Decimal = Field(..., description="Unit price carried by the cart", ge=0)
    quantity: int = Field(default=1, description="Number of units", ge=1)

    @property
    def line_total(self) -> Decimal:
        """Price multiplied by quantity."""
        return self.price * self.quantity


class Cart:
    """Ordered collection of cart lines keyed by menu item id.

    Quantities never drop below one: an update that would reach zero removes
    the line instead.
    """

    def __init__(self, lines: list[CartLine] | None = None) -> None:
        """Build a cart from submitted lines.

        Lines repeating a menu item are merged by summing their quantities.

        Raises:
            InvalidCartError: If two lines for the same menu item carry different prices
        """
        self._lines: dict[str, CartLine] = {}
        for line in lines or []:
            existing = self._lines.get(line.menu_item_id)
            if existing is None:
                self._lines[line.menu_item_id] = line.model_copy()
                continue

            if existing.price != line.price:
                raise InvalidCartError(
                    f"Menu item {line.menu_item_id} appears with prices "
                    f"{existing.price} and {line.price}",
                    menu_item_id=line.menu_item_id,
                )
            existing.quantity += line.quantity

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def add_item(self, item: MenuItem) -> CartLine:
        """Add one unit of a menu item, merging with an existing line.

        Args:
            item: Menu item to add

        Returns:
            CartLine: The line after the addition
        """
        existing = self._lines.get(item.id)
        if existing is not None:
            existing.quantity += 1
            return existing

        line = CartLine(menu_item_id=item.id, name=item.name, price=item.price, quantity=1)
        self._lines[item.id] = line
        return line

    def update_quantity(self, menu_item_id: str, change: int) -> CartLine | None:
        """Adjust a line's quantity by ``change``.

        Args:
            menu_item_id: Line to adjust
            change: Signed quantity delta

        Returns:
            The updated line, or None if the line was removed or never existed
        """
        line = self._lines.get(menu_item_id)
        if line is None:
            return None

        new_quantity = line.quantity + change
        if new_quantity <= 0:
            del self._lines[menu_item_id]
            return None

        line.quantity = new_quantity
        return line

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
