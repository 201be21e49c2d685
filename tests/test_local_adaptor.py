"""Test the bundled dataset source."""

import asyncio
from decimal import Decimal

import pytest

from storefront.adapters.implementations.local import LocalDatasetAdaptor
from storefront.adapters.interfaces.catalog_source import ProductFilter
from storefront.core.config import DEFAULT_DATASET_PATH
from storefront.core.exceptions import SourceMisconfigured, SourceUnavailable
from storefront.domain.models import OptionAttribute, ProductType
from storefront.domain.pricing import resolve_price


@pytest.fixture
def adaptor():
    return LocalDatasetAdaptor(DEFAULT_DATASET_PATH)


class TestProducts:
    """Test product listing and lookup."""

    def test_lists_every_published_product(self, adaptor):
        products = asyncio.run(adaptor.list_products())
        slugs = {p.slug for p in products}
        assert "example-product" in slugs
        assert "example-cable" in slugs
        assert all(p.source == "local" for p in products)

    def test_product_by_slug(self, adaptor):
        product = asyncio.run(adaptor.get_product_by_slug("example-product"))
        assert product is not None
        assert product.price == Decimal("49.99")
        assert product.category.slug == "antennas"
        assert product.images == ["/images/products/example-product.png"]

    def test_unknown_slug_is_none(self, adaptor):
        assert asyncio.run(adaptor.get_product_by_slug("does-not-exist")) is None

    def test_filters_by_category(self, adaptor):
        products = asyncio.run(adaptor.list_products(ProductFilter(category_slug="connectors")))
        assert {p.slug for p in products} == {"example-connector", "tnc-male-connector"}

    def test_filters_by_type_and_search(self, adaptor):
        cables = asyncio.run(adaptor.list_products(ProductFilter(product_type=ProductType.CABLE)))
        assert [p.slug for p in cables] == ["example-cable"]
        found = asyncio.run(adaptor.list_products(ProductFilter(search="yagi")))
        assert [p.slug for p in found] == ["example-yagi-antenna"]

    def test_gain_options_and_rich_text(self, adaptor):
        product = asyncio.run(adaptor.get_product_by_slug("example-antenna"))
        assert product.option_attribute == OptionAttribute.GAIN
        assert [o.label for o in product.price_options] == ["6 dBi", "8 dBi", "12 dBi"]
        assert product.description == "Directional antenna with selectable gain."
        assert resolve_price(product).format() == "$99.99 - $149.99"

    def test_cable_priced_from_cable_type(self, adaptor):
        """Test that a cable without its own rate uses the cable type's rate."""
        product = asyncio.run(adaptor.get_product_by_slug("example-cable"))
        assert product.price_per_unit == Decimal("1.25")
        assert [o.label for o in product.price_options] == ["10 ft", "25 ft", "50 ft"]
        assert resolve_price(product).format() == "$12.50 - $62.50"

    def test_connector_prices(self, adaptor):
        flat = asyncio.run(adaptor.get_product_by_slug("example-connector"))
        assert resolve_price(flat).format() == "$4.95"
        tabled = asyncio.run(adaptor.get_product_by_slug("tnc-male-connector"))
        assert resolve_price(tabled).format() == "$3.95"

    def test_unpriced_product_is_on_request(self, adaptor):
        product = asyncio.run(adaptor.get_product_by_slug("example-yagi-antenna"))
        assert resolve_price(product).on_request
        assert product.in_stock is False


class TestCategories:
    """Test the category tree built from the dataset."""

    def test_tree_and_counts(self, adaptor):
        roots = asyncio.run(adaptor.list_categories())
        by_slug = {c.slug: c for c in roots}
        assert set(by_slug) == {"antennas", "cables", "connectors"}
        antennas = by_slug["antennas"]
        assert [c.slug for c in antennas.subcategories] == ["yagi-antennas"]
        assert antennas.product_count == 2
        assert antennas.subcategories[0].product_count == 1

    def test_category_by_slug_finds_subcategory(self, adaptor):
        category = asyncio.run(adaptor.get_category_by_slug("yagi-antennas"))
        assert category.parent.slug == "antennas"
        assert asyncio.run(adaptor.get_category_by_slug("nope")) is None


class TestCableCustomizer:
    """Test the cable series, cable type and connector tables."""

    def test_connector_price_for_cable_type(self, adaptor):
        assert asyncio.run(adaptor.get_connector_price("tnc-male", "lmr-400")) == Decimal("5.55")
        assert asyncio.run(adaptor.get_connector_price("tnc-male", "rg-8")) is None
        assert asyncio.run(adaptor.get_connector_price("unknown", "lmr-400")) is None

    def test_inactive_entries_are_hidden(self, adaptor):
        cable_types = asyncio.run(adaptor.list_cable_types())
        assert "rg-8" not in {c.slug for c in cable_types}
        connectors = asyncio.run(adaptor.list_connectors())
        assert "n-male" not in {c.slug for c in connectors}

    def test_cable_types_by_series(self, adaptor):
        rg = asyncio.run(adaptor.list_cable_types("rg-series"))
        assert [c.slug for c in rg] == ["rg-58"]

    def test_series_are_ordered(self, adaptor):
        series = asyncio.run(adaptor.list_cable_series())
        assert [s.slug for s in series] == ["rg-series", "lmr-series"]


class TestDatasetFailures:
    """Test how a broken dataset is reported."""

    def test_missing_file_is_unavailable(self, tmp_path):
        adaptor = LocalDatasetAdaptor(str(tmp_path / "missing.json"))
        with pytest.raises(SourceUnavailable):
            asyncio.run(adaptor.list_products())

    def test_no_path_is_misconfigured(self):
        with pytest.raises(SourceMisconfigured):
            asyncio.run(LocalDatasetAdaptor(None).list_products())

    def test_invalid_json_is_unavailable(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SourceUnavailable):
            asyncio.run(LocalDatasetAdaptor(str(path)).list_categories())

    def test_bad_records_are_skipped(self, dataset_file):
        """Test that one malformed record does not fail the listing."""
        path = dataset_file({
            "products": [
                {"id": "ok", "name": "Good", "slug": "good", "price": 5},
                {"id": "no-slug", "name": "Missing slug"},
                {"id": "neg", "name": "Negative", "slug": "negative", "price": -3},
                "not-an-object",
            ],
        })
        products = asyncio.run(LocalDatasetAdaptor(path).list_products())
        assert [p.slug for p in products] == ["good"]

    def test_empty_dataset_lists_nothing(self, dataset_file):
        adaptor = LocalDatasetAdaptor(dataset_file({}))
        assert asyncio.run(adaptor.list_products()) == []
        assert asyncio.run(adaptor.list_categories()) == []

    def test_wrongly_typed_fields_are_skipped(self, dataset_file):
        """Test that a bad cable type or product field only drops that record."""
        path = dataset_file({
            "cableTypes": [
                {"id": "ct1", "name": "LMR-400", "slug": "lmr-400", "pricePerFoot": 1.25, "lengthOptions": [{"length": 10}], "order": 1},
                {"id": "ct2", "name": "LMR-600", "slug": "lmr-600", "pricePerFoot": 2, "order": "first"},
            ],
            "products": [
                {"id": "p1", "name": "One", "slug": "one", "price": 5},
                {"id": "p2", "name": "Two", "slug": "two", "price": 6},
                {"id": "p3", "name": "Three", "slug": "three", "price": 7},
                {"id": "p4", "name": "Four", "slug": "four", "price": 8},
                {"id": "p5", "name": "Cable", "slug": "cable", "productType": "cable", "cableType": {"id": "ct1", "slug": "lmr-400"}},
                {"id": "p6", "name": "Bad Gain", "slug": "bad-gain", "price": 9, "gainOptions": 5},
            ],
        })
        adaptor = LocalDatasetAdaptor(path)
        products = asyncio.run(adaptor.list_products())
        assert [p.slug for p in products] == ["one", "two", "three", "four", "cable"]
        assert resolve_price(products[-1]).format() == "$12.50"
        assert [c.slug for c in asyncio.run(adaptor.list_cable_types())] == ["lmr-400"]
