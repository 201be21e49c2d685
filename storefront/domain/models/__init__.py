from storefront.domain.models.product import (
    CategoryRef,
    ConnectorPrice,
    OptionAttribute,
    PriceOption,
    Product,
    ProductType,
    Variant,
)
from storefront.domain.models.category import Category
from storefront.domain.models.cable import CableSeries, CableType, Connector
from storefront.domain.models.cart import CartLineItem, cart_total, cents_to_dollars, dollars_to_cents

__all__ = [
    "CableSeries",
    "CableType",
    "Category",
    "CategoryRef",
    "CartLineItem",
    "Connector",
    "ConnectorPrice",
    "OptionAttribute",
    "PriceOption",
    "Product",
    "ProductType",
    "Variant",
    "cart_total",
    "cents_to_dollars",
    "dollars_to_cents",
]
