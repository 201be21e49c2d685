from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from storefront.domain.models import OptionAttribute, Product, ProductType
from storefront.domain.pricing import PriceDisplay, resolve_price


class CategoryRefSchema(BaseModel):
    id: str
    title: str = ""
    slug: str = ""

    class Config:
        from_attributes = True


class PriceOptionSchema(BaseModel):
    label: str
    price: Optional[Decimal] = None

    class Config:
        from_attributes = True


class ConnectorPriceSchema(BaseModel):
    counterpart_id: str
    counterpart_name: str = ""
    price: Decimal

    class Config:
        from_attributes = True


class VariantSchema(BaseModel):
    id: str
    title: str
    price: Optional[Decimal] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None

    class Config:
        from_attributes = True


class PriceDisplaySchema(BaseModel):
    """Resolved display price of a product."""
    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None
    on_request: bool
    display: str

    @classmethod
    def from_display(cls, display: PriceDisplay) -> "PriceDisplaySchema":
        return cls(
            minimum=display.minimum,
            maximum=display.maximum,
            on_request=display.on_request,
            display=display.format(),
        )


class ProductSchema(BaseModel):
    """Normalized product as returned by the API."""
    id: str
    name: str
    slug: str
    product_type: ProductType
    source: str
    category: Optional[CategoryRefSchema] = None
    categories: List[CategoryRefSchema] = []
    price: Optional[Decimal] = None
    price_per_unit: Optional[Decimal] = None
    option_attribute: Optional[OptionAttribute] = None
    price_options: List[PriceOptionSchema] = []
    connector_pricing: List[ConnectorPriceSchema] = []
    variants: List[VariantSchema] = []
    images: List[str] = []
    tags: List[str] = []
    sku: Optional[str] = None
    short_description: str = ""
    description: str = ""
    features: List[str] = []
    applications: List[str] = []
    specifications: Dict[str, Any] = {}
    datasheet_image: Optional[str] = None
    datasheet_pdf: Optional[str] = None
    in_stock: bool = True
    published: bool = True
    price_display: Optional[PriceDisplaySchema] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_domain(cls, product: Product) -> "ProductSchema":
        schema = cls.model_validate(product)
        schema.price_display = PriceDisplaySchema.from_display(resolve_price(product))
        return schema


class CategorySchema(BaseModel):
    """Category with its subcategory tree."""
    id: str
    title: str
    slug: str
    description: str = ""
    image: Optional[str] = None
    product_count: Optional[int] = None
    parent: Optional[CategoryRefSchema] = None
    subcategories: List["CategorySchema"] = []

    class Config:
        from_attributes = True


CategorySchema.model_rebuild()


class StorefrontSchema(BaseModel):
    products: List[ProductSchema]
    categories: List[CategorySchema]


class CatalogStatsSchema(BaseModel):
    count: int
    highest_price: Optional[Decimal] = None


class CartLineItemSchema(BaseModel):
    """One cart line as submitted by the frontend. Amounts are in cents."""
    id: str
    name: str
    unit_amount: int = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    metadata: Dict[str, Any] = {}


class CartSummaryRequest(BaseModel):
    items: List[CartLineItemSchema]


class CartSummaryResponse(BaseModel):
    item_count: int
    total_amount: int
    total: Decimal
    total_display: str
