from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.adapters.interfaces.catalog_source import ProductFilter
from storefront.api.dependencies import get_catalog_service
from storefront.api.schemas import CatalogStatsSchema, PriceDisplaySchema, ProductSchema
from storefront.core.exceptions import NotFoundError
from storefront.core.logging import get_logger
from storefront.domain.models import ProductType
from storefront.domain.pricing import resolve_price
from storefront.services.catalog_service import CatalogService

products_router = APIRouter()
logger = get_logger(__name__)


@products_router.get("", response_model=List[ProductSchema], summary="List products")
async def list_products(
    category: Optional[str] = Query(None, description="Category slug"),
    product_type: Optional[ProductType] = Query(None, alias="type"),
    search: Optional[str] = Query(None, min_length=1),
    tag: List[str] = Query([]),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ProductSchema]:
    filters = ProductFilter(category_slug=category, product_type=product_type, search=search, tags=tuple(tag))
    products = await catalog.get_all_products(None if filters.is_empty else filters)
    return [ProductSchema.from_domain(product) for product in products]


@products_router.get("/stats", response_model=CatalogStatsSchema, summary="Product count and highest price")
async def get_product_stats(catalog: CatalogService = Depends(get_catalog_service)) -> CatalogStatsSchema:
    stats = await catalog.get_catalog_stats()
    return CatalogStatsSchema(count=stats.count, highest_price=stats.highest_price)


async def _require_product(slug: str, catalog: CatalogService):
    product = await catalog.get_product_by_slug(slug)
    if product is None:
        raise NotFoundError("Product", slug)
    return product


@products_router.get("/{slug}", response_model=ProductSchema, summary="Get a product by slug")
async def get_product(slug: str, catalog: CatalogService = Depends(get_catalog_service)) -> ProductSchema:
    """
    Product detail endpoint.

    Raises:
        NotFoundError: If no available source has the product
    """
    return ProductSchema.from_domain(await _require_product(slug, catalog))


@products_router.get("/{slug}/price", response_model=PriceDisplaySchema, summary="Display price of a product")
async def get_product_price(slug: str, catalog: CatalogService = Depends(get_catalog_service)) -> PriceDisplaySchema:
    return PriceDisplaySchema.from_display(resolve_price(await _require_product(slug, catalog)))
