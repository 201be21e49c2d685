import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.adapters.availability import SOURCE_WOOCOMMERCE
from storefront.adapters.interfaces.normalizer import (
    DataNormalizer,
    as_string_list,
    dedupe_tags,
    is_http_url,
    maps_record,
    strip_html,
)
from storefront.core.exceptions import MappingError
from storefront.domain.models import (
    Category,
    CategoryRef,
    OptionAttribute,
    PriceOption,
    Product,
    ProductType,
    Variant,
)
from storefront.domain.money import to_decimal

_GAIN_RE = re.compile(r"(\d+(?:\.\d+)?)\s*dBi", re.IGNORECASE)
_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")

HIDDEN_VISIBILITY = {"hidden", "search"}
HIDDEN_STATUS = {"private", "draft"}


def is_listed(raw: Dict[str, Any]) -> bool:
    """
    Whether a WooCommerce product belongs in the storefront.

    Hidden or search-only products, private or draft products, and
    products with no category or in "uncategorized" are left out.
    """
    if not isinstance(raw, dict):
        # Let the normalizer report it as a malformed record
        return True
    visibility = str(raw.get("catalog_visibility") or "").lower()
    if visibility in HIDDEN_VISIBILITY or raw.get("status") in HIDDEN_STATUS:
        return False
    categories = raw.get("categories") or []
    if not categories:
        return False
    return not any(isinstance(c, dict) and c.get("slug") == "uncategorized" for c in categories)


def _meta(raw: Dict[str, Any]) -> Dict[str, Any]:
    meta = {}
    for entry in raw.get("meta_data") or []:
        if isinstance(entry, dict) and entry.get("key"):
            meta[entry["key"]] = entry.get("value")
    return meta


def _lines(value: Any) -> List[str]:
    if isinstance(value, str):
        return [strip_html(line) for line in value.splitlines() if strip_html(line)]
    return as_string_list(value)


def _has_parent(parent: Any) -> bool:
    """Top-level WooCommerce categories have parent 0, "0", empty or missing."""
    if parent is None or isinstance(parent, bool):
        return False
    if isinstance(parent, int):
        return parent != 0
    if isinstance(parent, str):
        return parent.strip() not in ("", "0")
    return False


class WooCommerceNormalizer(DataNormalizer[Dict[str, Any]]):
    """
    Maps WooCommerce REST records onto domain models.

    Prices arrive as decimal strings in dollars. Names and short
    descriptions may contain HTML, which is stripped.
    """

    source = SOURCE_WOOCOMMERCE

    @maps_record
    def normalize_product(self, raw_data: Dict[str, Any]) -> Product:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        slug = self.require(raw, "slug", record_id)
        name = strip_html(raw.get("name"))
        if not name:
            raise MappingError(self.source, detail="Record is missing required field 'name'", record_id=record_id, field="name")

        meta = _meta(raw)
        product_type = ProductType.parse(meta.get("productType"))
        categories = [
            CategoryRef(id=str(c["id"]), title=strip_html(c.get("name")), slug=c.get("slug") or "")
            for c in raw.get("categories") or []
            if isinstance(c, dict) and c.get("id") is not None
        ]

        product = Product(
            id=record_id,
            name=name,
            slug=slug,
            product_type=product_type,
            source=self.source,
            category=categories[0] if categories else None,
            categories=categories,
            price=self._price(raw, record_id),
            price_per_unit=to_decimal(meta.get("pricePerFoot")),
            images=[img["src"] for img in raw.get("images") or [] if isinstance(img, dict) and is_http_url(img.get("src"))],
            tags=dedupe_tags(t.get("name") for t in raw.get("tags") or [] if isinstance(t, dict)),
            sku=raw.get("sku") or None,
            short_description=strip_html(raw.get("short_description") or meta.get("subtitle") or meta.get("shortDescription")),
            description=strip_html(raw.get("description")),
            features=_lines(meta.get("features")),
            applications=_lines(meta.get("applications")),
            specifications=meta.get("specifications") if isinstance(meta.get("specifications"), dict) else {},
            datasheet_image=self._url(meta.get("datasheetImage") or meta.get("datasheet_image")),
            datasheet_pdf=self._url(meta.get("datasheetPdf") or meta.get("datasheet_pdf")),
            in_stock=raw.get("stock_status", "instock") == "instock",
            published=raw.get("status", "publish") == "publish",
        )

        if meta.get("lengthOptions") or product_type == ProductType.CABLE:
            product.option_attribute = OptionAttribute.LENGTH
            product.price_options = self._options(meta.get("lengthOptions"), ("length", "value", "label"))
        elif meta.get("gainOptions"):
            product.option_attribute = OptionAttribute.GAIN
            product.price_options = self._options(meta.get("gainOptions"), ("gain", "title", "label"))

        return product

    @maps_record
    def normalize_variations(self, raw_product: Dict[str, Any], variations: List[Dict[str, Any]]) -> List[Variant]:
        """
        Map the variations of one product to variants, sorted by gain.

        Variants with a dBi value come first in ascending gain; the rest
        keep WooCommerce's menu order.
        """
        product_name = strip_html(raw_product.get("name"))
        keyed = []
        for variation in variations or []:
            if not isinstance(variation, dict) or variation.get("id") is None:
                continue
            title = self._variation_title(variation, product_name)
            price = None
            for key in ("price", "regular_price", "sale_price"):
                price = to_decimal(variation.get(key))
                if price is not None:
                    break
            variant = Variant(
                id=str(variation["id"]),
                title=title,
                price=price if price is not None and price > 0 else None,
                sku=variation.get("sku") or None,
                inventory_quantity=variation.get("stock_quantity"),
            )
            gain = self._gain_value(title, variation)
            keyed.append(((0, gain, 0) if gain is not None else (1, Decimal(0), variation.get("menu_order") or 0), variant))
        keyed.sort(key=lambda item: item[0])
        return [variant for _, variant in keyed]

    @maps_record
    def normalize_category(self, raw_data: Dict[str, Any]) -> Category:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        parent = raw.get("parent")
        image = raw.get("image")
        return Category(
            id=record_id,
            title=strip_html(raw.get("name")) or record_id,
            slug=self.require(raw, "slug", record_id),
            description=strip_html(raw.get("description")),
            image=image.get("src") if isinstance(image, dict) and is_http_url(image.get("src")) else None,
            product_count=raw.get("count") if isinstance(raw.get("count"), int) else None,
            parent=CategoryRef(id=str(parent).strip()) if _has_parent(parent) else None,
        )

    def _price(self, raw: Dict[str, Any], record_id: str) -> Optional[Decimal]:
        for key in ("sale_price", "price", "regular_price"):
            value = raw.get(key)
            if value in (None, ""):
                continue
            amount = to_decimal(value)
            if amount is None or amount < 0:
                raise MappingError(self.source, detail=f"Invalid amount in '{key}'", record_id=record_id, field=key)
            return amount
        return None

    def _options(self, raw_options: Any, label_keys) -> List[PriceOption]:
        options = []
        for raw in raw_options if isinstance(raw_options, list) else []:
            if isinstance(raw, dict):
                label = next((str(raw[k]) for k in label_keys if raw.get(k) not in (None, "")), "")
                price = to_decimal(raw.get("price"))
            else:
                label, price = str(raw), None
            if label:
                options.append(PriceOption(label=label, price=price if price is not None and price > 0 else None))
        return options

    @staticmethod
    def _url(value: Any) -> Optional[str]:
        return value if is_http_url(value) else None

    @staticmethod
    def _variation_title(variation: Dict[str, Any], product_name: str) -> str:
        attributes = [
            f"{attr['name']}: {attr['option']}"
            for attr in variation.get("attributes") or []
            if isinstance(attr, dict) and attr.get("name") and attr.get("option")
        ]
        if attributes:
            return ", ".join(attributes)
        name = strip_html(variation.get("name"))
        if name and name != product_name:
            return name
        return product_name

    @staticmethod
    def _gain_value(title: str, variation: Dict[str, Any]) -> Optional[Decimal]:
        match = _GAIN_RE.search(title)
        if match:
            return Decimal(match.group(1))
        for attr in variation.get("attributes") or []:
            if isinstance(attr, dict) and "gain" in (str(attr.get("name", "")).lower(), str(attr.get("slug", "")).lower()):
                number = _NUMBER_RE.search(str(attr.get("option") or ""))
                if number:
                    return Decimal(number.group(1))
        return None
