from typing import Any, Dict, List, Optional

import httpx

from storefront.adapters.availability import SOURCE_MEDUSA
from storefront.adapters.implementations.medusa.normalizer import MedusaNormalizer
from storefront.adapters.implementations.medusa.regions import RegionResolver
from storefront.adapters.interfaces.catalog_source import CatalogSource, ProductFilter, build_category_tree
from storefront.core.config import Settings
from storefront.core.exceptions import MappingError, SourceUnavailable
from storefront.core.logging import get_logger
from storefront.domain.models import Category, Product
from storefront.infrastructure.auth import ApiKeyAuth
from storefront.infrastructure.http import HttpConnector, RequestConfig

logger = get_logger(__name__)

PRODUCT_FIELDS = "*variants.calculated_price,*categories"
# Upper bound on pages fetched for one listing
MAX_PAGES = 20


class MedusaAdaptor(CatalogSource):
    """Catalog source backed by the Medusa store API."""

    name = SOURCE_MEDUSA

    def __init__(
        self,
        base_url: str,
        publishable_key: str,
        default_country: str = "us",
        page_size: int = 100,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the adaptor.

        Args:
            base_url: Medusa backend URL
            publishable_key: Store publishable API key
            default_country: Country used to pick the pricing region
            page_size: Products requested per page
            config: Retry and timeout settings
            transport: Optional httpx transport, mainly for tests

        Raises:
            SourceMisconfigured: If the publishable key is empty
        """
        auth = ApiKeyAuth(self.name, publishable_key, header_name="x-publishable-api-key")
        self.connector = HttpConnector(
            self.name,
            base_url,
            headers={**auth.generate_header(), "Accept": "application/json"},
            config=config,
            transport=transport,
        )
        self.normalizer = MedusaNormalizer()
        self.regions = RegionResolver(self.connector)
        self.default_country = default_country
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "MedusaAdaptor":
        return cls(
            base_url=settings.MEDUSA_BACKEND_URL,
            publishable_key=settings.MEDUSA_PUBLISHABLE_KEY,
            default_country=settings.MEDUSA_DEFAULT_COUNTRY,
            page_size=settings.MEDUSA_PRODUCT_LIMIT,
            config=RequestConfig.from_settings(settings),
            transport=transport,
        )

    async def _product_params(self, **extra: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {"fields": PRODUCT_FIELDS}
        region_id = await self.regions.resolve(self.default_country)
        if region_id:
            params["region_id"] = region_id
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    @staticmethod
    def _products_from(data: Any) -> List[Dict[str, Any]]:
        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            raise SourceUnavailable(SOURCE_MEDUSA, detail="Medusa returned an unexpected product payload")
        return products

    async def list_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        search = filters.search if filters else None
        records: List[Dict[str, Any]] = []
        offset = 0

        for _ in range(MAX_PAGES):
            params = await self._product_params(limit=self.page_size, offset=offset, q=search)
            data = await self.connector.get("/store/products", params=params)
            page = self._products_from(data)
            records.extend(page)

            count = data.get("count")
            offset += len(page)
            if not page or not isinstance(count, int) or offset >= count:
                break

        products = self.normalize_batch(records, self.normalizer.normalize_product)
        if filters is not None:
            products = filters.apply(products)
        return products

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        params = await self._product_params(handle=slug, limit=1)
        data = await self.connector.get("/store/products", params=params)
        records = self._products_from(data)
        if not records:
            return None
        try:
            return self.normalizer.normalize_product(records[0])
        except MappingError as e:
            logger.warning(f"Medusa product '{slug}' could not be normalized: {e.detail}", extra={"context": e.context})
            return None

    async def list_categories(self) -> List[Category]:
        data = await self.connector.get("/store/product-categories", params={"limit": 1000}, allow_not_found=True)
        if data is None:
            # Older Medusa versions
            data = await self.connector.get("/store/categories", params={"limit": 1000})

        raw_categories = []
        if isinstance(data, dict):
            raw_categories = data.get("product_categories") or data.get("categories") or []

        categories = []
        for record in raw_categories:
            try:
                categories.append(self.normalizer.normalize_category(record))
            except MappingError as e:
                logger.warning(f"Skipping Medusa category: {e.detail}", extra={"context": e.context})
        return build_category_tree(categories)

    async def aclose(self) -> None:
        await self.connector.aclose()
