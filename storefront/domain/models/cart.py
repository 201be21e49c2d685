from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable

from storefront.domain.money import CENTS, round_money


def cents_to_dollars(amount: int) -> Decimal:
    """Convert an integer minor-unit amount into dollars."""
    return (Decimal(int(amount)) / CENTS).quantize(Decimal("0.01"))


def dollars_to_cents(amount: Decimal) -> int:
    """Convert a dollar amount into integer cents, rounding half up."""
    return int(round_money(Decimal(amount)) * CENTS)


@dataclass
class CartLineItem:
    """
    One line of the client cart, as submitted at checkout.

    The cart itself lives in the frontend; this layer only reads it to
    prepare the checkout payload. ``unit_amount`` is in cents.
    """

    id: str
    name: str
    unit_amount: int
    quantity: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.unit_amount < 0:
            raise ValueError("unit_amount must not be negative")
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")

    @property
    def unit_price(self) -> Decimal:
        return cents_to_dollars(self.unit_amount)

    @property
    def subtotal_amount(self) -> int:
        return self.unit_amount * self.quantity

    @property
    def subtotal(self) -> Decimal:
        return cents_to_dollars(self.subtotal_amount)

    @property
    def is_custom(self) -> bool:
        """Custom cable assemblies carry their configuration in metadata."""
        return bool(self.metadata.get("isCustomCable") or self.metadata.get("cable_type"))


def cart_total(items: Iterable[CartLineItem]) -> Decimal:
    """Total of a cart in dollars."""
    return cents_to_dollars(sum(item.subtotal_amount for item in items))
