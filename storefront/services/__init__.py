from storefront.services.catalog_service import CatalogService, StorefrontData

__all__ = ["CatalogService", "StorefrontData"]
