from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from storefront.domain.money import parse_quantity


class ProductType(str, Enum):
    """Closed set of product kinds the storefront knows how to price."""
    ANTENNA = "antenna"
    CABLE = "cable"
    CONNECTOR = "connector"

    @classmethod
    def parse(cls, value: Any, default: "ProductType" = None) -> "ProductType":
        """Map a loosely typed source value onto a product type."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            candidate = value.strip().lower()
            for member in cls:
                if member.value == candidate:
                    return member
        return default or cls.ANTENNA


class OptionAttribute(str, Enum):
    """The attribute a set of price options varies over."""
    LENGTH = "length"
    GAIN = "gain"


@dataclass(frozen=True)
class CategoryRef:
    """One-way reference to a category by id."""

    id: str
    title: str = ""
    slug: str = ""


@dataclass
class PriceOption:
    """
    A selectable configuration of a product, such as one cable length or
    one antenna gain.

    ``price`` is either given directly or left empty and derived from a
    per-unit rate and the quantity parsed out of ``label``.
    """

    label: str
    price: Optional[Decimal] = None

    def resolve(self, rate: Optional[Decimal] = None) -> Optional[Decimal]:
        """
        Resolve the option's price.

        Args:
            rate: Price per unit used when the option has no direct price

        Returns:
            The positive price, or None when the option cannot be priced
        """
        if self.price is not None and self.price > 0:
            return self.price
        if rate is None or rate <= 0:
            return None
        quantity = parse_quantity(self.label)
        if quantity is None:
            return None
        return rate * quantity


@dataclass
class ConnectorPrice:
    """Price of a connector when fitted to one cable type."""

    counterpart_id: str
    price: Decimal
    counterpart_name: str = ""


@dataclass
class Variant:
    """An externally priced variant of a product."""

    id: str
    title: str
    price: Optional[Decimal] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None


@dataclass
class Product:
    """Backend-agnostic product as consumed by page code."""

    id: str
    name: str
    slug: str
    product_type: ProductType = ProductType.ANTENNA
    source: str = ""
    category: Optional[CategoryRef] = None
    categories: List[CategoryRef] = field(default_factory=list)
    price: Optional[Decimal] = None
    price_per_unit: Optional[Decimal] = None
    option_attribute: Optional[OptionAttribute] = None
    price_options: List[PriceOption] = field(default_factory=list)
    connector_pricing: List[ConnectorPrice] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    sku: Optional[str] = None
    short_description: str = ""
    description: str = ""
    features: List[str] = field(default_factory=list)
    applications: List[str] = field(default_factory=list)
    specifications: Dict[str, Any] = field(default_factory=dict)
    datasheet_image: Optional[str] = None
    datasheet_pdf: Optional[str] = None
    in_stock: bool = True
    published: bool = True

    def has_variants(self) -> bool:
        """Checks if product has externally priced variants."""
        return len(self.variants) > 0

    def in_category(self, slug: str) -> bool:
        """Checks the primary and secondary category references for a slug."""
        if self.category is not None and self.category.slug == slug:
            return True
        return any(ref.slug == slug for ref in self.categories)

    @property
    def gain_options(self) -> List[PriceOption]:
        if self.option_attribute == OptionAttribute.GAIN:
            return self.price_options
        return []

    @property
    def length_options(self) -> List[PriceOption]:
        if self.option_attribute == OptionAttribute.LENGTH:
            return self.price_options
        return []
