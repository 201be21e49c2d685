from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.adapters.availability import SOURCE_LOCAL
from storefront.adapters.interfaces.normalizer import DataNormalizer, as_string_list, maps_record
from storefront.core.exceptions import MappingError
from storefront.domain.models import (
    CableSeries,
    CableType,
    Category,
    CategoryRef,
    Connector,
    ConnectorPrice,
    OptionAttribute,
    PriceOption,
    Product,
    ProductType,
)
from storefront.domain.money import to_decimal


def _ref(raw: Any) -> Optional[CategoryRef]:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    return CategoryRef(
        id=str(raw["id"]),
        title=str(raw.get("title") or raw.get("name") or ""),
        slug=str(raw.get("slug") or raw["id"]),
    )


def _image(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, dict):
        return raw.get("image") or raw.get("url") or None
    return None


def _plain_text(raw: Any) -> str:
    """Flatten plain strings or rich-text blocks into text."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, list):
        parts = []
        for block in raw:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict):
                parts.append("".join(str(child.get("text", "")) for child in block.get("children", []) if isinstance(child, dict)))
        return "\n".join(part for part in parts if part).strip()
    return ""


def _length_label(raw: Any) -> str:
    label = str(raw).strip()
    # Bare numbers in the dataset are feet
    if label.replace(".", "", 1).isdigit():
        return f"{label} ft"
    return label


class LocalDatasetNormalizer(DataNormalizer[Dict[str, Any]]):
    """
    Maps records of the bundled JSON dataset onto domain models.

    Prices in the dataset are already dollars. Cable and connector products
    are completed from the cable-type and connector tables.
    """

    source = SOURCE_LOCAL

    def __init__(self, cable_types: Dict[str, CableType] = None, connectors: Dict[str, Connector] = None):
        self.cable_types = cable_types or {}
        self.connectors = connectors or {}

    @maps_record
    def normalize_product(self, raw_data: Dict[str, Any]) -> Product:
        raw = self.ensure_record(raw_data)
        record_id = raw.get("id") or raw.get("slug")
        slug = self.require(raw, "slug", record_id)
        name = self.require(raw, "name", record_id)

        product_type = ProductType.parse(raw.get("productType"))
        category = _ref(raw.get("category"))

        product = Product(
            id=str(record_id),
            name=name,
            slug=slug,
            product_type=product_type,
            source=self.source,
            category=category,
            categories=[category] if category else [],
            price=self._positive(raw.get("price"), record_id, "price"),
            sku=raw.get("sku"),
            tags=as_string_list(raw.get("tags")),
            short_description=_plain_text(raw.get("shortDescription")),
            description=_plain_text(raw.get("description")),
            features=as_string_list(raw.get("features")),
            applications=as_string_list(raw.get("applications")),
            specifications=raw.get("specifications") if isinstance(raw.get("specifications"), dict) else {},
            datasheet_image=raw.get("datasheetImage"),
            datasheet_pdf=raw.get("datasheetPdf"),
            images=self._images(raw),
            in_stock=bool(raw.get("inStock", True)),
            published=bool(raw.get("status", raw.get("isActive", True))),
        )

        if product_type == ProductType.CABLE:
            self._apply_cable_pricing(product, raw)
        elif product_type == ProductType.CONNECTOR:
            self._apply_connector_pricing(product, raw)
        elif raw.get("gainOptions"):
            product.option_attribute = OptionAttribute.GAIN
            product.price_options = [
                PriceOption(label=f"{option.get('gain')} dBi", price=self._positive(option.get("price"), record_id, "gainOptions"))
                for option in raw["gainOptions"]
                if isinstance(option, dict) and option.get("gain") is not None
            ]

        return product

    @maps_record
    def normalize_category(self, raw_data: Dict[str, Any]) -> Category:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        return Category(
            id=record_id,
            title=str(raw.get("title") or raw.get("name") or record_id),
            slug=self.require(raw, "slug", record_id),
            description=raw.get("description") or "",
            image=_image(raw.get("image")),
            parent=_ref(raw.get("parent")),
        )

    @maps_record
    def normalize_cable_series(self, raw_data: Dict[str, Any]) -> CableSeries:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        return CableSeries(
            id=record_id,
            name=str(raw.get("name") or record_id),
            slug=self.require(raw, "slug", record_id),
            order=int(raw.get("order") or 0),
        )

    @maps_record
    def normalize_cable_type(self, raw_data: Dict[str, Any]) -> CableType:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        rate = to_decimal(raw.get("pricePerFoot"))
        if rate is None or rate < 0:
            raise MappingError(self.source, detail="Cable type has no usable pricePerFoot", record_id=record_id, field="pricePerFoot")
        return CableType(
            id=record_id,
            name=str(raw.get("name") or record_id),
            slug=self.require(raw, "slug", record_id),
            price_per_foot=rate,
            series=_ref(raw.get("series")),
            length_options=[
                _length_label(option.get("length"))
                for option in raw.get("lengthOptions") or []
                if isinstance(option, dict) and option.get("length") is not None
            ],
            image=_image(raw.get("image")),
            order=int(raw.get("order") or 0),
            is_active=bool(raw.get("isActive", True)),
        )

    @maps_record
    def normalize_connector(self, raw_data: Dict[str, Any]) -> Connector:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        pricing = []
        for entry in raw.get("pricing") or []:
            cable = _ref(entry.get("cableType")) if isinstance(entry, dict) else None
            price = to_decimal(entry.get("price")) if isinstance(entry, dict) else None
            if cable is None or price is None or price < 0:
                continue
            pricing.append(ConnectorPrice(counterpart_id=cable.slug, counterpart_name=cable.title, price=price))
        return Connector(
            id=record_id,
            name=str(raw.get("name") or record_id),
            slug=self.require(raw, "slug", record_id),
            pricing=pricing,
            image=_image(raw.get("image")),
            order=int(raw.get("order") or 0),
            is_active=bool(raw.get("isActive", True)),
        )

    def _positive(self, value: Any, record_id: Any, field: str) -> Optional[Decimal]:
        if value is None:
            return None
        amount = to_decimal(value)
        if amount is None or amount < 0:
            raise MappingError(self.source, detail=f"Invalid amount in '{field}'", record_id=record_id, field=field)
        return amount

    def _images(self, raw: Dict[str, Any]) -> List[str]:
        candidates = []
        for key in ("images", "previewImages", "thumbnails"):
            candidates.extend(raw.get(key) or [])
        for key in ("cableImage", "connectorImage"):
            candidates.append(raw.get(key))
        images = []
        for candidate in candidates:
            url = _image(candidate)
            if url and url not in images:
                images.append(url)
        return images

    def _apply_cable_pricing(self, product: Product, raw: Dict[str, Any]) -> None:
        cable_ref = _ref(raw.get("cableType"))
        cable_type = self.cable_types.get(cable_ref.slug) if cable_ref else None

        rate = to_decimal(raw.get("pricePerFoot"))
        if rate is None and cable_type is not None:
            rate = cable_type.price_per_foot
        product.price_per_unit = rate

        options = [
            PriceOption(
                label=_length_label(option.get("length")),
                price=self._positive(option.get("price"), product.id, "lengthOptions"),
            )
            for option in raw.get("lengthOptions") or []
            if isinstance(option, dict) and option.get("length") is not None
        ]
        if not options and cable_type is not None:
            options = [PriceOption(label=label) for label in cable_type.length_options]

        product.option_attribute = OptionAttribute.LENGTH
        product.price_options = options

    def _apply_connector_pricing(self, product: Product, raw: Dict[str, Any]) -> None:
        connector_ref = _ref(raw.get("connector"))
        connector = self.connectors.get(connector_ref.slug) if connector_ref else None
        if connector is not None:
            product.connector_pricing = list(connector.pricing)
        flat = self._positive(raw.get("connectorPrice"), product.id, "connectorPrice")
        if flat is not None:
            product.price = flat
