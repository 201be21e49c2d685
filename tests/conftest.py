"""Shared fixtures for the storefront test suite."""

import asyncio
import json
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from storefront.adapters.interfaces.catalog_source import CatalogSource, ProductFilter
from storefront.core.config import DEFAULT_DATASET_PATH, Settings
from storefront.domain.models import Category, CategoryRef, Product, ProductType
from storefront.infrastructure.http import RequestConfig

# Every source-related setting, pinned so the process environment cannot leak in
_BASELINE = {
    "USE_MEDUSA": False,
    "MEDUSA_BACKEND_URL": None,
    "MEDUSA_PUBLISHABLE_KEY": None,
    "WOO_ENABLED": False,
    "WC_API_URL": None,
    "WC_CONSUMER_KEY": None,
    "WC_CONSUMER_SECRET": None,
    "LOCAL_DATASET_ENABLED": True,
    "LOCAL_DATASET_PATH": DEFAULT_DATASET_PATH,
    "PREFERRED_SOURCE": None,
    "SOURCE_TIMEOUT_SECONDS": 2.0,
    "MAX_RETRIES": 0,
    "RETRY_BACKOFF_FACTOR": 0,
}


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings from the pinned baseline plus overrides."""
    def _make(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **{**_BASELINE, **overrides})
    return _make


@pytest.fixture
def local_settings(make_settings) -> Settings:
    """Settings with only the bundled dataset enabled."""
    return make_settings()


@pytest.fixture
def fast_config() -> RequestConfig:
    """Request config without retries or backoff."""
    return RequestConfig(max_retries=0, timeout=1.0, backoff_factor=0)


class RecordingTransport:
    """
    Routes requests to a handler and keeps every request it saw.

    ``routes`` maps a URL path suffix to either a response payload or a
    callable taking the request and returning an ``httpx.Response``.
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Longest suffix first so "/products/categories" beats "/products"
        for suffix in sorted(self.routes, key=len, reverse=True):
            if request.url.path.endswith(suffix):
                route = self.routes[suffix]
                if callable(route):
                    return route(request)
                return httpx.Response(200, json=route)
        return httpx.Response(404, json={"message": "not found"})

    def calls_to(self, suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]


@pytest.fixture
def recording_transport() -> Callable[[Dict[str, Any]], RecordingTransport]:
    return RecordingTransport


class FakeSource(CatalogSource):
    """In-memory catalog source whose behaviour is set per test."""

    def __init__(
        self,
        name: str,
        products: Optional[List[Product]] = None,
        categories: Optional[List[Category]] = None,
        error: Optional[Exception] = None,
        delay: float = 0,
    ):
        self.name = name
        self.products = products or []
        self.categories = categories or []
        self.error = error
        self.delay = delay
        self.calls: List[str] = []
        self.closed = False

    async def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def list_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        await self._maybe_fail("list_products")
        return filters.apply(self.products) if filters else list(self.products)

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        await self._maybe_fail("get_product_by_slug")
        return next((p for p in self.products if p.slug == slug), None)

    async def list_categories(self) -> List[Category]:
        await self._maybe_fail("list_categories")
        return list(self.categories)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source() -> Callable[..., FakeSource]:
    return FakeSource


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Build a product with sensible defaults."""
    def _make(slug: str = "test-product", source: str = "fake", **fields: Any) -> Product:
        fields.setdefault("name", slug.replace("-", " ").title())
        fields.setdefault("price", Decimal("10.00"))
        fields.setdefault("product_type", ProductType.ANTENNA)
        return Product(id=slug, slug=slug, source=source, **fields)
    return _make


@pytest.fixture
def make_category() -> Callable[..., Category]:
    def _make(slug: str, parent: Optional[str] = None, **fields: Any) -> Category:
        return Category(
            id=slug,
            title=fields.pop("title", slug.title()),
            slug=slug,
            parent=CategoryRef(id=parent) if parent else None,
            **fields,
        )
    return _make


@pytest.fixture
def dataset_file(tmp_path) -> Callable[[Dict[str, Any]], str]:
    """Write a dataset dict to a temporary JSON file and return its path."""
    def _write(data: Dict[str, Any]) -> str:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(data))
        return str(path)
    return _write
