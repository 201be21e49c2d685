import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from storefront.adapters.availability import SOURCE_LOCAL
from storefront.adapters.implementations.local.normalizer import LocalDatasetNormalizer
from storefront.adapters.interfaces.catalog_source import CatalogSource, ProductFilter, build_category_tree
from storefront.core.config import Settings
from storefront.core.exceptions import MappingError, SourceMisconfigured, SourceUnavailable
from storefront.core.logging import get_logger
from storefront.domain.models import CableSeries, CableType, Category, Connector, Product

logger = get_logger(__name__)


class LocalDatasetAdaptor(CatalogSource):
    """
    Catalog source backed by a JSON file shipped with the storefront.

    The file is read once, on first use, and served from memory after
    that. It also holds the cable customizer tables (cable series, cable
    types and connector pricing).
    """

    name = SOURCE_LOCAL

    def __init__(self, dataset_path: Optional[str]):
        self.dataset_path = dataset_path
        self._dataset: Optional[Dict[str, List[Dict[str, Any]]]] = None
        self._normalizer: Optional[LocalDatasetNormalizer] = None

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "LocalDatasetAdaptor":
        return cls(settings.LOCAL_DATASET_PATH)

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if self._dataset is not None:
            return self._dataset

        if not self.dataset_path:
            raise SourceMisconfigured(self.name, missing=["LOCAL_DATASET_PATH"])

        path = Path(self.dataset_path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SourceUnavailable(
                self.name,
                detail=f"Local dataset could not be read from {path}",
                original_exception=e,
            ) from e

        if not isinstance(data, dict):
            raise SourceUnavailable(self.name, detail=f"Local dataset {path} is not a JSON object")

        self._dataset = {
            key: [record for record in data.get(key) or [] if record is not None]
            for key in ("products", "categories", "cableSeries", "cableTypes", "connectors")
        }
        logger.info(
            f"Loaded local dataset with {len(self._dataset['products'])} products "
            f"and {len(self._dataset['categories'])} categories"
        )
        return self._dataset

    def _records(self, key: str) -> List[Dict[str, Any]]:
        return self._load()[key]

    def _collect(self, key: str, normalize) -> list:
        items = []
        for record in self._records(key):
            try:
                items.append(normalize(record))
            except MappingError as e:
                logger.warning(f"Skipping local {key} record: {e.detail}", extra={"context": e.context})
        return items

    @property
    def normalizer(self) -> LocalDatasetNormalizer:
        if self._normalizer is None:
            bootstrap = LocalDatasetNormalizer()
            cable_types = {c.slug: c for c in self._collect("cableTypes", bootstrap.normalize_cable_type)}
            connectors = {c.slug: c for c in self._collect("connectors", bootstrap.normalize_connector)}
            self._normalizer = LocalDatasetNormalizer(cable_types=cable_types, connectors=connectors)
        return self._normalizer

    async def list_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        products = [
            product
            for product in self.normalize_batch(self._records("products"), self.normalizer.normalize_product)
            if product.published
        ]
        if filters is not None:
            products = filters.apply(products)
        return products

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        for record in self._records("products"):
            if isinstance(record, dict) and record.get("slug") == slug:
                try:
                    product = self.normalizer.normalize_product(record)
                except MappingError as e:
                    logger.warning(f"Local product '{slug}' could not be normalized: {e.detail}")
                    return None
                return product if product.published else None
        return None

    async def list_categories(self) -> List[Category]:
        categories = self._collect("categories", self.normalizer.normalize_category)
        counts: Dict[str, int] = {}
        for product in await self.list_products():
            for ref in product.categories:
                counts[ref.slug] = counts.get(ref.slug, 0) + 1
        for category in categories:
            category.product_count = counts.get(category.slug, 0)
        return build_category_tree(categories)

    async def list_cable_series(self) -> List[CableSeries]:
        """Cable series ordered for the cable customizer."""
        series = self._collect("cableSeries", self.normalizer.normalize_cable_series)
        return sorted(series, key=lambda s: s.order)

    async def list_cable_types(self, series_slug: Optional[str] = None) -> List[CableType]:
        """Active cable types, optionally limited to one series."""
        cable_types = [
            cable_type for cable_type in self.normalizer.cable_types.values()
            if cable_type.is_active
            and (series_slug is None or (cable_type.series is not None and cable_type.series.slug == series_slug))
        ]
        return sorted(cable_types, key=lambda c: c.order)

    async def list_connectors(self) -> List[Connector]:
        connectors = [c for c in self.normalizer.connectors.values() if c.is_active]
        return sorted(connectors, key=lambda c: c.order)

    async def get_connector_price(self, connector_slug: str, cable_type_slug: str) -> Optional[Decimal]:
        """
        Price of one connector fitted to one cable type.

        Returns:
            The price, or None when the connector is unknown or has no
            price for that cable type
        """
        connector = self.normalizer.connectors.get(connector_slug)
        if connector is None:
            return None
        return connector.price_for(cable_type_slug)
