from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.adapters.interfaces.catalog_source import ProductFilter
from storefront.api.dependencies import get_catalog_service
from storefront.api.schemas import (
    CartSummaryRequest,
    CartSummaryResponse,
    CategorySchema,
    ProductSchema,
    StorefrontSchema,
)
from storefront.domain.models import CartLineItem, cart_total
from storefront.domain.pricing import format_price
from storefront.services.catalog_service import CatalogService

storefront_router = APIRouter()
cart_router = APIRouter()


@storefront_router.get("", response_model=StorefrontSchema, summary="Products and categories for a page")
async def get_storefront(
    category: Optional[str] = Query(None, description="Category slug"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> StorefrontSchema:
    data = await catalog.get_storefront(ProductFilter(category_slug=category) if category else None)
    return StorefrontSchema(
        products=[ProductSchema.from_domain(p) for p in data.products],
        categories=[CategorySchema.model_validate(c) for c in data.categories],
    )


@cart_router.post("/summary", response_model=CartSummaryResponse, summary="Totals for a checkout submission")
async def summarize_cart(payload: CartSummaryRequest) -> CartSummaryResponse:
    """
    Convert cart lines priced in cents into a dollar total.

    The cart lives in the frontend; this only checks and totals it before
    checkout.
    """
    items = [
        CartLineItem(
            id=item.id,
            name=item.name,
            unit_amount=item.unit_amount,
            quantity=item.quantity,
            metadata=item.metadata,
        )
        for item in payload.items
    ]
    total = cart_total(items)
    return CartSummaryResponse(
        item_count=sum(item.quantity for item in items),
        total_amount=sum(item.subtotal_amount for item in items),
        total=total,
        total_display=format_price(total),
    )
