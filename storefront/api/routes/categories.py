from typing import List

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_catalog_service
from storefront.api.schemas import CategorySchema, ProductSchema
from storefront.core.exceptions import NotFoundError
from storefront.services.catalog_service import CatalogService

categories_router = APIRouter()


@categories_router.get("", response_model=List[CategorySchema], summary="Category tree")
async def list_categories(catalog: CatalogService = Depends(get_catalog_service)) -> List[CategorySchema]:
    return [CategorySchema.model_validate(c) for c in await catalog.get_categories_with_subcategories()]


@categories_router.get("/{slug}", response_model=CategorySchema, summary="Get a category by slug")
async def get_category(slug: str, catalog: CatalogService = Depends(get_catalog_service)) -> CategorySchema:
    category = await catalog.get_category_by_slug(slug)
    if category is None:
        raise NotFoundError("Category", slug)
    return CategorySchema.model_validate(category)


@categories_router.get("/{slug}/products", response_model=List[ProductSchema], summary="Products in a category")
async def list_category_products(slug: str, catalog: CatalogService = Depends(get_catalog_service)) -> List[ProductSchema]:
    return [ProductSchema.from_domain(p) for p in await catalog.get_products_by_category(slug)]
