"""Test the Medusa store API source against a mocked backend."""

import asyncio
from decimal import Decimal

import httpx
import pytest

from storefront.adapters.implementations.medusa import MedusaAdaptor, MedusaNormalizer
from storefront.core.exceptions import MappingError, SourceAuthenticationError, SourceMisconfigured, SourceUnavailable
from storefront.domain.models import OptionAttribute, ProductType
from storefront.domain.pricing import resolve_price

REGIONS = {
    "regions": [
        {"id": "reg_eu", "countries": [{"iso_2": "de"}, {"iso_2": "fr"}]},
        {"id": "reg_us", "countries": [{"iso_2": "us"}]},
    ]
}


def _product(id, handle, title, product_type="antenna", variants=None, **extra):
    record = {
        "id": id,
        "handle": handle,
        "title": title,
        "metadata": {"productType": product_type},
        "variants": variants or [],
        "categories": [],
        "tags": [],
        "images": [],
    }
    record.update(extra)
    return record


def _variant(id, title, cents):
    return {"id": id, "title": title, "sku": f"SKU-{id}", "calculated_price": {"calculated_amount": cents}}


PRODUCTS = [
    _product(
        "prod_1", "omni-antenna", "Omni Antenna",
        variants=[_variant("v1", "6 dBi", 2500), _variant("v2", "9 dBi", 4500)],
        images=[{"url": "https://cdn.example.com/omni.png"}],
        categories=[{"id": "pcat_1", "name": "Antennas", "handle": "antennas"}],
        tags=[{"value": "antenna"}, {"value": "outdoor"}],
        subtitle="Omnidirectional 2.4 GHz",
    ),
    _product(
        "prod_2", "lmr-400-cable", "LMR-400 Cable", product_type="cable",
        variants=[_variant("v3", "10 ft", 1250), _variant("v4", "25 ft", 3125)],
        thumbnail="https://cdn.example.com/lmr.png",
        description="Low loss cable.\nSecond line.",
    ),
    _product("prod_3", "sma-male", "SMA Male", product_type="connector", variants=[_variant("v5", "Default", 495)]),
    _product("prod_4", "unpriced", "Unpriced", variants=[_variant("v6", "Default", 0)]),
    _product("prod_5", "no-variants", "No Variants"),
    {"id": "prod_bad", "title": "Missing handle", "variants": []},
]

CATEGORIES = {
    "product_categories": [
        {"id": "pcat_1", "name": "Antennas", "handle": "antennas", "parent_category_id": None},
        {"id": "pcat_2", "name": "Yagi", "handle": "yagi", "parent_category_id": "pcat_1"},
    ]
}


def _products_route(request: httpx.Request) -> httpx.Response:
    handle = request.url.params.get("handle")
    records = [p for p in PRODUCTS if p.get("handle") == handle] if handle else PRODUCTS
    return httpx.Response(200, json={"products": records, "count": len(records)})


@pytest.fixture
def backend(recording_transport):
    return recording_transport({
        "/store/regions": REGIONS,
        "/store/products": _products_route,
        "/store/product-categories": CATEGORIES,
    })


@pytest.fixture
def adaptor(backend, fast_config):
    return MedusaAdaptor(
        base_url="https://medusa.example.com",
        publishable_key="pk_test",
        default_country="us",
        config=fast_config,
        transport=backend.transport,
    )


class TestListProducts:
    """Test listing and normalizing Medusa products."""

    def test_valid_records_survive(self, adaptor):
        """Test that the record without a handle is skipped, not fatal."""
        products = asyncio.run(adaptor.list_products())
        assert len(products) == 5
        assert "prod_bad" not in {p.id for p in products}
        assert all(p.source == "medusa" for p in products)

    def test_cents_become_dollars(self, adaptor):
        products = {p.slug: p for p in asyncio.run(adaptor.list_products())}
        omni = products["omni-antenna"]
        assert [v.price for v in omni.variants] == [Decimal("25"), Decimal("45")]
        assert resolve_price(omni).format() == "$25.00 - $45.00"
        assert resolve_price(products["sma-male"]).format() == "$4.95"

    def test_zero_price_is_unpriced(self, adaptor):
        products = {p.slug: p for p in asyncio.run(adaptor.list_products())}
        unpriced = products["unpriced"]
        assert unpriced.variants[0].price is None
        assert unpriced.in_stock is False
        assert resolve_price(unpriced).on_request

    def test_images_fall_back_to_thumbnail(self, adaptor):
        products = {p.slug: p for p in asyncio.run(adaptor.list_products())}
        assert products["omni-antenna"].images == ["https://cdn.example.com/omni.png"]
        assert products["lmr-400-cable"].images == ["https://cdn.example.com/lmr.png"]

    def test_options_follow_product_type(self, adaptor):
        products = {p.slug: p for p in asyncio.run(adaptor.list_products())}
        cable = products["lmr-400-cable"]
        assert cable.product_type == ProductType.CABLE
        assert cable.option_attribute == OptionAttribute.LENGTH
        assert [o.label for o in cable.price_options] == ["10 ft", "25 ft"]
        assert cable.short_description == "Low loss cable."
        omni = products["omni-antenna"]
        assert omni.option_attribute == OptionAttribute.GAIN
        assert omni.short_description == "Omnidirectional 2.4 GHz"

    def test_category_names_join_tags(self, adaptor):
        """Test that "Antennas" collapses into the existing "antenna" tag."""
        products = {p.slug: p for p in asyncio.run(adaptor.list_products())}
        assert products["omni-antenna"].tags == ["antenna", "outdoor"]

    def test_requests_carry_key_and_region(self, adaptor, backend):
        asyncio.run(adaptor.list_products())
        request = backend.calls_to("/store/products")[0]
        assert request.headers["x-publishable-api-key"] == "pk_test"
        assert request.url.params["region_id"] == "reg_us"
        assert request.url.params["fields"] == "*variants.calculated_price,*categories"


class TestRegions:
    """Test the country to region lookup."""

    def test_regions_are_listed_once(self, adaptor, backend):
        async def run():
            await adaptor.list_products()
            await adaptor.get_product_by_slug("omni-antenna")
            await adaptor.list_products()

        asyncio.run(run())
        assert len(backend.calls_to("/store/regions")) == 1

    def test_unknown_country_uses_first_region(self, adaptor):
        assert asyncio.run(adaptor.regions.resolve("jp")) == "reg_eu"

    def test_region_failure_degrades_to_no_region(self, recording_transport, fast_config):
        backend = recording_transport({
            "/store/regions": lambda request: httpx.Response(500),
            "/store/products": _products_route,
        })
        adaptor = MedusaAdaptor("https://medusa.example.com", "pk_test", config=fast_config, transport=backend.transport)
        products = asyncio.run(adaptor.list_products())
        assert len(products) == 5
        assert "region_id" not in backend.calls_to("/store/products")[0].url.params


class TestProductBySlug:
    """Test single product lookups."""

    def test_found(self, adaptor, backend):
        product = asyncio.run(adaptor.get_product_by_slug("lmr-400-cable"))
        assert product.id == "prod_2"
        assert backend.calls_to("/store/products")[0].url.params["handle"] == "lmr-400-cable"

    def test_missing_is_none(self, adaptor):
        assert asyncio.run(adaptor.get_product_by_slug("nothing-here")) is None


class TestCategories:
    """Test the Medusa category tree."""

    def test_tree(self, adaptor):
        roots = asyncio.run(adaptor.list_categories())
        assert [c.slug for c in roots] == ["antennas"]
        assert roots[0].subcategories[0].slug == "yagi"
        assert roots[0].subcategories[0].parent.slug == "antennas"

    def test_older_category_route(self, recording_transport, fast_config):
        """Test that a 404 on the product-categories route falls back to /store/categories."""
        backend = recording_transport({"/store/categories": CATEGORIES})
        adaptor = MedusaAdaptor("https://medusa.example.com", "pk_test", config=fast_config, transport=backend.transport)
        roots = asyncio.run(adaptor.list_categories())
        assert [c.slug for c in roots] == ["antennas"]
        assert len(backend.calls_to("/store/categories")) == 1


class TestFailures:
    """Test that backend failures surface as source errors."""

    def test_server_error(self, recording_transport, fast_config):
        backend = recording_transport({"/store/products": lambda request: httpx.Response(503)})
        adaptor = MedusaAdaptor("https://medusa.example.com", "pk_test", config=fast_config, transport=backend.transport)
        with pytest.raises(SourceUnavailable):
            asyncio.run(adaptor.list_products())

    def test_rejected_key(self, recording_transport, fast_config):
        backend = recording_transport({"/store/products": lambda request: httpx.Response(401)})
        adaptor = MedusaAdaptor("https://medusa.example.com", "pk_bad", config=fast_config, transport=backend.transport)
        with pytest.raises(SourceAuthenticationError):
            asyncio.run(adaptor.get_product_by_slug("omni-antenna"))

    def test_unexpected_payload(self, recording_transport, fast_config):
        backend = recording_transport({"/store/products": {"items": []}})
        adaptor = MedusaAdaptor("https://medusa.example.com", "pk_test", config=fast_config, transport=backend.transport)
        with pytest.raises(SourceUnavailable):
            asyncio.run(adaptor.list_products())

    def test_missing_key_is_misconfigured(self):
        with pytest.raises(SourceMisconfigured):
            MedusaAdaptor("https://medusa.example.com", "")


class TestNormalizer:
    """Test record level mapping rules."""

    def test_negative_price_is_rejected(self):
        record = _product("p", "p", "P", variants=[_variant("v", "Default", -100)])
        with pytest.raises(MappingError):
            MedusaNormalizer().normalize_product(record)

    def test_sku_from_options(self):
        variant = {"id": "v", "title": "Default", "options": [{"option": {"title": "SKU"}, "value": "ABC-1"}]}
        product = MedusaNormalizer().normalize_product(_product("p", "p", "P", variants=[variant]))
        assert product.sku == "ABC-1"


class TestMalformedRecords:
    """Test that wrongly typed fields only cost the record they appear in."""

    def _adaptor(self, recording_transport, fast_config, records):
        backend = recording_transport({
            "/store/regions": REGIONS,
            "/store/products": {"products": records, "count": len(records)},
        })
        return MedusaAdaptor("https://medusa.example.com", "pk_test", config=fast_config, transport=backend.transport)

    def test_non_text_description_is_skipped(self, recording_transport, fast_config):
        records = PRODUCTS[:5] + [_product("prod_6", "bad-description", "Bad Description", description=42)]
        products = asyncio.run(self._adaptor(recording_transport, fast_config, records).list_products())
        assert len(products) == 5
        assert "bad-description" not in {p.slug for p in products}

    def test_non_list_tags_are_skipped(self, recording_transport, fast_config):
        records = PRODUCTS[:5] + [_product("prod_7", "bad-tags", "Bad Tags", tags=7)]
        products = asyncio.run(self._adaptor(recording_transport, fast_config, records).list_products())
        assert len(products) == 5

    def test_malformed_categories_are_skipped(self, recording_transport, fast_config):
        broken = {"id": "pcat_3", "name": "Broken", "handle": "broken", "parent_category": "pcat_1"}
        categories = {"product_categories": CATEGORIES["product_categories"] + ["oops", broken]}
        backend = recording_transport({"/store/product-categories": categories})
        adaptor = MedusaAdaptor("https://medusa.example.com", "pk_test", config=fast_config, transport=backend.transport)
        roots = asyncio.run(adaptor.list_categories())
        assert [c.slug for c in roots] == ["antennas", "broken"]

    def test_type_errors_become_mapping_errors(self):
        with pytest.raises(MappingError) as exc_info:
            MedusaNormalizer().normalize_product(_product("p", "p", "P", tags=7))
        assert exc_info.value.context["record_id"] == "p"

    def test_non_dict_variant_options_are_ignored(self):
        variant = {"id": "v", "title": "Default", "options": ["SKU", None, {"option": "SKU", "value": "X"}]}
        product = MedusaNormalizer().normalize_product(_product("p", "p", "P", variants=[variant]))
        assert product.sku is None
        assert product.variants[0].title == "Default"
