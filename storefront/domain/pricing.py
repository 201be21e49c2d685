"""
Price resolution for normalized products.

Turns the different ways a product can be priced (variants, per-foot
cable rates, connector tables, gain options, a flat price) into a single
display value or the "price on request" state.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from storefront.domain.models.product import OptionAttribute, Product, ProductType
from storefront.domain.money import round_money

PRICE_ON_REQUEST_LABEL = "Price on request"


def format_price(amount: Decimal, currency_symbol: str = "$") -> str:
    """Render a single amount, e.g. ``$8.50``."""
    return f"{currency_symbol}{round_money(amount):.2f}"


@dataclass(frozen=True)
class PriceDisplay:
    """Displayable price: a single value, a range, or price on request."""

    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None

    @property
    def on_request(self) -> bool:
        return self.minimum is None

    @property
    def is_range(self) -> bool:
        return not self.on_request and self.maximum is not None and self.maximum != self.minimum

    @property
    def from_price(self) -> Optional[Decimal]:
        return self.minimum

    def format(self, currency_symbol: str = "$") -> str:
        if self.on_request:
            return PRICE_ON_REQUEST_LABEL
        if self.is_range:
            return f"{format_price(self.minimum, currency_symbol)} - {format_price(self.maximum, currency_symbol)}"
        return format_price(self.minimum, currency_symbol)

    def __str__(self) -> str:
        return self.format()

    @classmethod
    def from_amounts(cls, amounts: Iterable[Optional[Decimal]]) -> "PriceDisplay":
        positive = [round_money(a) for a in amounts if a is not None and a > 0]
        if not positive:
            return PRICE_ON_REQUEST
        return cls(minimum=min(positive), maximum=max(positive))


PRICE_ON_REQUEST = PriceDisplay()


def _variant_prices(product: Product) -> List[Optional[Decimal]]:
    return [variant.price for variant in product.variants]


def _cable_prices(product: Product) -> List[Optional[Decimal]]:
    if product.product_type != ProductType.CABLE:
        return []
    return [option.resolve(product.price_per_unit) for option in product.length_options]


def _connector_prices(product: Product) -> List[Optional[Decimal]]:
    if product.product_type != ProductType.CONNECTOR or not product.connector_pricing:
        return []
    positive = [entry.price for entry in product.connector_pricing if entry.price is not None and entry.price > 0]
    return [min(positive)] if positive else []


def _gain_prices(product: Product) -> List[Optional[Decimal]]:
    return [option.resolve() for option in product.gain_options]


_PRECEDENCE = (
    _variant_prices,
    _cable_prices,
    _connector_prices,
    _gain_prices,
    lambda product: [product.price],
)


def resolve_price(product: Product) -> PriceDisplay:
    """
    Compute the display price of a product.

    Rules are tried in order and the first one that produces a positive
    amount wins:

    1. externally priced variants (min/max)
    2. cable length options, ``rate x length`` unless the option is priced
    3. lowest entry of a connector pricing table
    4. gain options (min/max)
    5. flat price

    Args:
        product: Normalized product

    Returns:
        PriceDisplay: Resolved display price, ``PRICE_ON_REQUEST`` when no
        rule yields a positive amount
    """
    for rule in _PRECEDENCE:
        display = PriceDisplay.from_amounts(rule(product))
        if not display.on_request:
            return display
    return PRICE_ON_REQUEST


def highest_price(product: Product) -> Optional[Decimal]:
    """Largest positive amount a product can be sold for, across every pricing rule."""
    amounts = []
    for rule in _PRECEDENCE:
        amounts.extend(rule(product))
    amounts.extend(entry.price for entry in product.connector_pricing)
    if product.option_attribute == OptionAttribute.LENGTH and product.product_type != ProductType.CABLE:
        amounts.extend(option.resolve(product.price_per_unit) for option in product.price_options)
    positive = [a for a in amounts if a is not None and a > 0]
    return round_money(max(positive)) if positive else None
