from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from storefront import __version__
from storefront.api.dependencies import get_catalog_service
from storefront.core.logging import get_logger
from storefront.services.catalog_service import CatalogService

# Initialize router and logger
health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str
    version: str = __version__
    service: str = "Storefront Catalog Service"


class SourceStatus(BaseModel):
    """Configuration status of one catalog source."""
    name: str
    enabled: bool
    active: bool
    missing: List[str] = []


class SourcesHealthStatus(HealthStatus):
    """Health status with the catalog sources in fallback order."""
    sources: List[SourceStatus]


@health_router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def get_health() -> HealthStatus:
    logger.debug("Health check requested")
    return HealthStatus(status="ok")


@health_router.get(
    "/sources",
    response_model=SourcesHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Catalog source status",
    description="Reports which catalog sources are enabled, in fallback order.",
)
async def get_sources_health(
    catalog: CatalogService = Depends(get_catalog_service),
) -> SourcesHealthStatus:
    """
    Source status endpoint.

    The status is "degraded" when no source is active or a source is
    switched on without the settings it needs.
    """
    sources = [SourceStatus(**entry) for entry in catalog.source_status()]
    degraded = not any(s.active for s in sources) or any(s.missing for s in sources)
    return SourcesHealthStatus(status="degraded" if degraded else "ok", sources=sources)
