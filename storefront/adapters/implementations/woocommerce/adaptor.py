from typing import Any, Dict, List, Optional

import httpx

from storefront.adapters.availability import SOURCE_WOOCOMMERCE
from storefront.adapters.implementations.woocommerce.normalizer import WooCommerceNormalizer, is_listed
from storefront.adapters.interfaces.catalog_source import CatalogSource, ProductFilter, build_category_tree
from storefront.core.config import Settings
from storefront.core.exceptions import MappingError, SourceUnavailable
from storefront.core.logging import get_logger
from storefront.domain.models import Category, Product
from storefront.infrastructure.auth import BasicAuthHandler
from storefront.infrastructure.http import HttpConnector, RequestConfig

logger = get_logger(__name__)

# Upper bound on pages fetched for one listing
MAX_PAGES = 20


class WooCommerceAdaptor(CatalogSource):
    """Catalog source backed by the WooCommerce REST API (``/wp-json/wc/v3``)."""

    name = SOURCE_WOOCOMMERCE

    def __init__(
        self,
        api_url: str,
        consumer_key: str,
        consumer_secret: str,
        per_page: int = 100,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the adaptor.

        Args:
            api_url: WooCommerce REST base URL
            consumer_key: REST API consumer key
            consumer_secret: REST API consumer secret
            per_page: Products requested per page (WooCommerce caps this at 100)
            config: Retry and timeout settings
            transport: Optional httpx transport, mainly for tests
        """
        self.auth = BasicAuthHandler(self.name, consumer_key, consumer_secret)
        self.connector = HttpConnector(
            self.name,
            api_url,
            headers={"Accept": "application/json"},
            config=config,
            transport=transport,
        )
        self.normalizer = WooCommerceNormalizer()
        self.per_page = max(1, min(per_page, 100))

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "WooCommerceAdaptor":
        return cls(
            api_url=settings.WC_API_URL,
            consumer_key=settings.WC_CONSUMER_KEY,
            consumer_secret=settings.WC_CONSUMER_SECRET,
            per_page=settings.WC_PER_PAGE,
            config=RequestConfig.from_settings(settings),
            transport=transport,
        )

    async def _get(self, path: str, **params: Any) -> Any:
        # Reads authenticate with query parameters
        query = {**self.auth.query_params(), **{k: v for k, v in params.items() if v is not None}}
        return await self.connector.get(path, params=query)

    @staticmethod
    def _as_list(data: Any, what: str) -> List[Dict[str, Any]]:
        if not isinstance(data, list):
            raise SourceUnavailable(SOURCE_WOOCOMMERCE, detail=f"WooCommerce returned an unexpected {what} payload")
        return data

    async def list_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        search = filters.search if filters else None
        records: List[Dict[str, Any]] = []

        for page_number in range(1, MAX_PAGES + 1):
            page = self._as_list(
                await self._get("/products", per_page=self.per_page, page=page_number, search=search),
                "product",
            )
            records.extend(page)
            if len(page) < self.per_page:
                break

        listed = [record for record in records if is_listed(record)]
        products = self.normalize_batch(listed, self.normalizer.normalize_product)
        if filters is not None:
            products = filters.apply(products)
        return products

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        records = self._as_list(await self._get("/products", slug=slug, per_page=1), "product")
        if not records or not is_listed(records[0]):
            return None

        raw = records[0]
        try:
            product = self.normalizer.normalize_product(raw)
        except MappingError as e:
            logger.warning(f"WooCommerce product '{slug}' could not be normalized: {e.detail}", extra={"context": e.context})
            return None

        if raw.get("variations"):
            try:
                variations = self._as_list(
                    await self._get(f"/products/{product.id}/variations", per_page=100),
                    "variation",
                )
                product.variants = self.normalizer.normalize_variations(raw, variations)
            except (SourceUnavailable, MappingError) as e:
                # The product is still usable with its own price
                logger.warning(f"Could not load variations for '{slug}': {e.detail}")

        return product

    async def list_categories(self) -> List[Category]:
        records = self._as_list(await self._get("/products/categories", per_page=100), "category")
        categories = []
        for record in records:
            try:
                categories.append(self.normalizer.normalize_category(record))
            except MappingError as e:
                logger.warning(f"Skipping WooCommerce category: {e.detail}", extra={"context": e.context})
        return build_category_tree(categories)

    async def aclose(self) -> None:
        await self.connector.aclose()
