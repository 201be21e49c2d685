import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from storefront.adapters.availability import AVAILABILITY_CHECKS, misconfigured_sources, priority_order
from storefront.adapters.factory import AdaptorFactory
from storefront.adapters.interfaces.catalog_source import CatalogSource, ProductFilter
from storefront.core.config import Settings
from storefront.core.logging import get_logger
from storefront.domain.models import Category, Product
from storefront.domain.pricing import highest_price
from storefront.infrastructure.error.fallback import FallbackHandler

logger = get_logger(__name__)


@dataclass
class StorefrontData:
    """Products and categories for one page render."""

    products: List[Product] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)


@dataclass(frozen=True)
class CatalogStats:
    """Summary figures derived from one product listing."""

    count: int = 0
    highest_price: Optional[Decimal] = None


def _highest(products: Sequence[Product]) -> Optional[Decimal]:
    prices = [price for price in map(highest_price, products) if price is not None]
    return max(prices) if prices else None


class CatalogService:
    """
    Single entry point for catalog reads.

    Each call walks the enabled sources in priority order: the first source
    that answers wins and no other source is queried. A source that raises
    or times out is logged and the next one is tried. When all of them
    fail, listings come back empty and single lookups come back as None;
    nothing is raised to the caller.

    A clean "not found" from a reachable source is a final answer. Only
    failures move on to the next source.
    """

    def __init__(
        self,
        sources: Sequence[CatalogSource],
        fallback_handler: Optional[FallbackHandler] = None,
        attempt_timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the service.

        Args:
            sources: Enabled sources, highest priority first
            fallback_handler: Runs the fallback chain
            attempt_timeout: Seconds allowed for one source attempt
            settings: Settings the sources were built from, for status reporting
        """
        self.sources = list(sources)
        self.fallback = fallback_handler or FallbackHandler(logger)
        self.attempt_timeout = attempt_timeout
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings, factory: Optional[AdaptorFactory] = None) -> "CatalogService":
        factory = factory or AdaptorFactory()
        return cls(
            sources=factory.create_sources(settings),
            attempt_timeout=settings.SOURCE_TIMEOUT_SECONDS,
            settings=settings,
        )

    async def _run(
        self,
        operation: str,
        call: Callable[[CatalogSource], Awaitable[Any]],
        default_factory: Callable[[], Any],
    ) -> Any:
        result = await self.fallback.execute(
            operation,
            self.sources,
            call,
            default_factory,
            timeout=self.attempt_timeout,
        )
        return result.value

    async def get_all_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        """All products from the first source that answers, optionally filtered."""
        return await self._run(
            "get_all_products",
            lambda source: source.list_products(filters),
            list,
        )

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        """
        Look up one product.

        Args:
            slug: Product slug

        Returns:
            Optional[Product]: The product, or None when the answering source
            does not have it or no source is available
        """
        if not slug:
            return None
        return await self._run(
            "get_product_by_slug",
            lambda source: source.get_product_by_slug(slug),
            lambda: None,
        )

    async def get_categories_with_subcategories(self) -> List[Category]:
        """Root categories with their subcategories populated."""
        return await self._run(
            "get_categories_with_subcategories",
            lambda source: source.list_categories(),
            list,
        )

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        if not slug:
            return None
        return await self._run(
            "get_category_by_slug",
            lambda source: source.get_category_by_slug(slug),
            lambda: None,
        )

    async def get_products_by_category(self, category_slug: str) -> List[Product]:
        return await self.get_all_products(ProductFilter(category_slug=category_slug))

    async def get_all_products_count(self) -> int:
        return len(await self.get_all_products())

    async def get_highest_price(self) -> Optional[Decimal]:
        """Highest price any product sells for, used to bound price filters."""
        return _highest(await self.get_all_products())

    async def get_catalog_stats(self) -> CatalogStats:
        """Product count and highest price from a single listing."""
        products = await self.get_all_products()
        return CatalogStats(count=len(products), highest_price=_highest(products))

    async def get_storefront(self, filters: Optional[ProductFilter] = None) -> StorefrontData:
        """
        Fetch products and categories for a page in parallel.

        The two reads are independent; each runs its own fallback chain.
        """
        products, categories = await asyncio.gather(
            self.get_all_products(filters),
            self.get_categories_with_subcategories(),
        )
        return StorefrontData(products=products, categories=categories)

    def source_status(self) -> List[Dict[str, Any]]:
        """
        Configuration status of every known source in priority order.

        Returns:
            List of dicts with ``name``, ``enabled``, ``active`` and ``missing``
        """
        if self.settings is None:
            return [{"name": s.name, "enabled": True, "active": True, "missing": []} for s in self.sources]

        active = {source.name for source in self.sources}

        missing = misconfigured_sources(self.settings)
        return [
            {
                "name": name,
                "enabled": AVAILABILITY_CHECKS[name](self.settings),
                "active": name in active,
                "missing": missing.get(name, []),
            }
            for name in priority_order(self.settings)
        ]

    async def aclose(self) -> None:
        """Close every source."""
        for source in self.sources:
            await source.aclose()
