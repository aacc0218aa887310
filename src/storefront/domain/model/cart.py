"""Cart aggregate: the client-side shopping cart.

The cart owns its line items and the affiliate the visitor is currently
attributed to.  Totals are derived from the items on every read, so they
can never drift from the line items after a transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, Quantity, numeric_price


@dataclass(frozen=True)
class ServerSpecs:
    cpu: str = ""
    ram: str = ""
    storage: str = ""


@dataclass
class CartItem:
    """A product selected in the storefront.

    ``unit_price`` is the display label shown to the visitor (e.g.
    ``"499 Kč"``); it is trusted as given and never re-validated against
    the catalog on add.
    """

    id: str
    name: str
    unit_price: str
    specs: ServerSpecs = field(default_factory=ServerSpecs)
    billing_product_id: str | None = None
    quantity: Quantity = field(default_factory=lambda: Quantity(1))

    @property
    def line_total(self) -> Money:
        return numeric_price(self.unit_price) * self.quantity.value


@dataclass
class Cart:
    """Aggregate root for the visitor's cart.

    Invariants:
    - at most one line per product ``id``
    - every line holds a quantity of at least 1
    - ``clear()`` never touches the affiliate fields
    """

    items: list[CartItem] = field(default_factory=list)
    affiliate_id: str | None = None
    affiliate_code: str | None = None

    # --- Transitions ----------------------------------------------------------

    def add_item(self, item: CartItem) -> None:
        """Add one unit of ``item``; bumps the quantity if already present."""
        if not item.id:
            raise ValidationError("Cart item requires an id")
        existing = self._find(item.id)
        if existing is not None:
            existing.quantity = Quantity(existing.quantity.value + 1)
            return
        self.items.append(replace(item, quantity=Quantity(1)))

    def remove_item(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set the quantity of a line; zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(item_id)
            return
        existing = self._find(item_id)
        if existing is not None:
            existing.quantity = Quantity(quantity)

    def clear(self) -> None:
        self.items = []

    def set_affiliate(self, affiliate_id: str | None, affiliate_code: str | None) -> None:
        self.affiliate_id = affiliate_id
        self.affiliate_code = affiliate_code

    # --- Computed properties --------------------------------------------------

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def is_empty(self) -> bool:
        return not self.items

    # --- Internal helpers -----------------------------------------------------

    def _find(self, item_id: str) -> CartItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
