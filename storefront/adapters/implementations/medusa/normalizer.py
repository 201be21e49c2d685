from typing import Any, Dict, List

from storefront.adapters.availability import SOURCE_MEDUSA
from storefront.adapters.interfaces.normalizer import DataNormalizer, as_string_list, dedupe_tags, first_line, maps_record
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
from storefront.domain.money import CENTS, parse_quantity, to_decimal


def _lines(value: Any) -> List[str]:
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    return as_string_list(value)


class MedusaNormalizer(DataNormalizer[Dict[str, Any]]):
    """
    Maps Medusa store API records onto domain models.

    Medusa reports calculated variant prices in cents; they are converted
    to dollars here so nothing downstream sees minor units.
    """

    source = SOURCE_MEDUSA

    @maps_record
    def normalize_product(self, raw_data: Dict[str, Any]) -> Product:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        slug = self.require(raw, "handle", record_id)
        name = self.require(raw, "title", record_id)
        metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}
        description = raw.get("description")
        if description is not None and not isinstance(description, str):
            raise MappingError(self.source, detail="Description is not text", record_id=record_id, field="description")

        product_type = ProductType.parse(metadata.get("productType"))
        categories = self._category_refs(raw.get("categories"))
        variants = [self._variant(v, record_id) for v in raw.get("variants") or [] if isinstance(v, dict)]

        product = Product(
            id=record_id,
            name=name,
            slug=slug,
            product_type=product_type,
            source=self.source,
            category=categories[0] if categories else None,
            categories=categories,
            price=to_decimal(metadata.get("price")),
            price_per_unit=to_decimal(metadata.get("pricePerFoot")),
            variants=variants,
            images=self._images(raw),
            tags=self._tags(raw, product_type, categories),
            sku=variants[0].sku if variants else None,
            short_description=self._subtitle(raw, metadata),
            description=(description or "").strip(),
            features=_lines(metadata.get("features")),
            applications=_lines(metadata.get("applications")),
            specifications=metadata.get("specifications") if isinstance(metadata.get("specifications"), dict) else {},
            datasheet_image=metadata.get("datasheetImage"),
            datasheet_pdf=metadata.get("datasheetPdf"),
            in_stock=any(v.price is not None for v in variants),
            published=True,
        )

        if product_type == ProductType.CABLE:
            product.option_attribute = OptionAttribute.LENGTH
            product.price_options = [
                PriceOption(label=v.title, price=v.price) for v in variants if v.title
            ]
        elif product_type == ProductType.ANTENNA:
            product.option_attribute = OptionAttribute.GAIN
            product.price_options = [
                PriceOption(label=label, price=v.price)
                for v, label in ((v, self._gain_label(v, raw)) for v in variants)
                if label
            ]

        return product

    @maps_record
    def normalize_category(self, raw_data: Dict[str, Any]) -> Category:
        raw = self.ensure_record(raw_data)
        record_id = self.require(raw, "id")
        parent_id = raw.get("parent_category_id")
        if not parent_id and isinstance(raw.get("parent_category"), dict):
            parent_id = raw["parent_category"].get("id")
        return Category(
            id=record_id,
            title=str(raw.get("name") or record_id),
            slug=self.require(raw, "handle", record_id),
            description=raw.get("description") or "",
            parent=CategoryRef(id=str(parent_id)) if parent_id else None,
        )

    def _variant(self, raw: Dict[str, Any], record_id: str) -> Variant:
        calculated = raw.get("calculated_price")
        amount = to_decimal(calculated.get("calculated_amount")) if isinstance(calculated, dict) else None
        if amount is not None and amount < 0:
            raise MappingError(self.source, detail="Negative variant price", record_id=record_id, field="calculated_price")

        sku = raw.get("sku") or None
        if not sku:
            for option in raw.get("options") or []:
                if not isinstance(option, dict):
                    continue
                option_type = option.get("option") if isinstance(option.get("option"), dict) else {}
                title = str(option_type.get("title") or "")
                if title.lower() == "sku":
                    sku = option.get("value") or None

        return Variant(
            id=str(raw.get("id") or ""),
            title=str(raw.get("title") or "").strip(),
            price=amount / CENTS if amount else None,
            sku=sku,
            inventory_quantity=raw.get("inventory_quantity"),
        )

    def _gain_label(self, variant: Variant, raw_product: Dict[str, Any]) -> str:
        if variant.title:
            return variant.title
        for raw_variant in raw_product.get("variants") or []:
            if not isinstance(raw_variant, dict) or str(raw_variant.get("id")) != variant.id:
                continue
            for option in raw_variant.get("options") or []:
                value = option.get("value") if isinstance(option, dict) else None
                if isinstance(value, str) and "dbi" in value.lower():
                    quantity = parse_quantity(value)
                    return f"{quantity} dBi" if quantity is not None else value
        return ""

    def _category_refs(self, raw: Any) -> List[CategoryRef]:
        refs = []
        for category in raw or []:
            if isinstance(category, dict) and category.get("id"):
                refs.append(CategoryRef(
                    id=str(category["id"]),
                    title=category.get("name") or "",
                    slug=category.get("handle") or "",
                ))
        return refs

    def _images(self, raw: Dict[str, Any]) -> List[str]:
        images = [img["url"] for img in raw.get("images") or [] if isinstance(img, dict) and img.get("url")]
        if not images and raw.get("thumbnail"):
            images = [raw["thumbnail"]]
        return images

    def _tags(self, raw: Dict[str, Any], product_type: ProductType, categories: List[CategoryRef]) -> List[str]:
        tags = [tag.get("value") for tag in raw.get("tags") or [] if isinstance(tag, dict)]
        if product_type != ProductType.CABLE:
            tags.extend(ref.title for ref in categories)
        return dedupe_tags(tags)

    def _subtitle(self, raw: Dict[str, Any], metadata: Dict[str, Any]) -> str:
        for candidate in (raw.get("subtitle"), metadata.get("subtitle"), metadata.get("shortDescription")):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return first_line(raw.get("description"))
