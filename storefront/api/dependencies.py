from fastapi import Request

from storefront.core.logging import get_logger
from storefront.services.catalog_service import CatalogService

logger = get_logger(__name__)


async def get_catalog_service(request: Request) -> CatalogService:
    """
    Dependency providing the catalog service created at startup.

    Args:
        request: FastAPI request object

    Returns:
        CatalogService: Service shared by every request of the application
    """
    return request.app.state.catalog_service
