from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from storefront.core.exceptions import MappingError
from storefront.core.logging import get_logger
from storefront.domain.models import Category, Product, ProductType

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductFilter:
    """Criteria accepted by ``CatalogSource.list_products``."""

    category_slug: Optional[str] = None
    product_type: Optional[ProductType] = None
    search: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.category_slug or self.product_type or self.search or self.tags)

    def matches(self, product: Product) -> bool:
        """Check a normalized product against every criterion."""
        if self.category_slug and not product.in_category(self.category_slug):
            return False
        if self.product_type and product.product_type != self.product_type:
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystack = " ".join([product.name, product.short_description, " ".join(product.tags)]).lower()
            if needle not in haystack:
                return False
        if self.tags:
            product_tags = {tag.lower() for tag in product.tags}
            if not all(tag.lower() in product_tags for tag in self.tags):
                return False
        return True

    def apply(self, products: Iterable[Product]) -> List[Product]:
        return [product for product in products if self.matches(product)]


class CatalogSource(ABC):
    """
    Abstract base interface for catalog sources.

    Every backend that can supply products and categories implements this
    contract. Implementations translate backend records into the
    normalized ``Product`` and ``Category`` shapes and report transport
    problems as ``SourceUnavailable``.

    Rules shared by every implementation:

    - zero results is an empty list, never an error
    - a missing product or category is ``None``, never an error
    - a record that cannot be normalized is skipped and logged, it does
      not fail the batch
    """

    #: Source name used for routing, logging and the ``Product.source`` field
    name: str = ""

    @abstractmethod
    async def list_products(self, filters: Optional[ProductFilter] = None) -> List[Product]:
        """
        Fetch and normalize products.

        Args:
            filters: Optional criteria narrowing the listing

        Returns:
            List[Product]: Normalized products, possibly empty

        Raises:
            SourceUnavailable: On transport, auth or timeout failure
        """
        pass

    @abstractmethod
    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        """
        Fetch one product by its URL slug.

        Args:
            slug: Product slug

        Returns:
            Optional[Product]: The product, or None if the source has no such slug

        Raises:
            SourceUnavailable: On transport, auth or timeout failure
        """
        pass

    @abstractmethod
    async def list_categories(self) -> List[Category]:
        """
        Fetch the category tree.

        Returns:
            List[Category]: Root categories with subcategories populated

        Raises:
            SourceUnavailable: On transport, auth or timeout failure
        """
        pass

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        """
        Find one category, with its subcategories, by slug.

        Sources with a cheaper lookup may override this.
        """
        for root in await self.list_categories():
            found = root.find(slug)
            if found is not None:
                return found
        return None

    async def aclose(self) -> None:
        """Release network resources held by the source."""
        return None

    def normalize_batch(self, records: Sequence[Any], normalize) -> List[Product]:
        """
        Normalize a batch of raw records, skipping the ones that fail.

        Args:
            records: Raw backend records
            normalize: Callable mapping one record to a Product

        Returns:
            List[Product]: Every record that normalized cleanly
        """
        products: List[Product] = []
        skipped = 0
        for record in records:
            try:
                products.append(normalize(record))
            except MappingError as e:
                skipped += 1
                logger.warning(
                    f"Skipping {self.name} record: {e.detail}",
                    extra={"context": e.context}
                )
        if skipped:
            logger.info(f"{self.name}: normalized {len(products)} products, skipped {skipped}")
        return products


def build_category_tree(categories: Sequence[Category]) -> List[Category]:
    """
    Assemble flat categories into a tree by joining on parent id.

    Categories whose parent is missing, unknown or themselves become
    roots. A parent link that would close a cycle is dropped and the
    category is treated as a root, so no category ever ends up in its own
    subtree.

    Args:
        categories: Flat categories, each with an optional ``parent`` ref

    Returns:
        List[Category]: Root categories in input order
    """
    by_id: Dict[str, Category] = {}
    for category in categories:
        category.subcategories = []
        by_id.setdefault(category.id, category)

    def parent_of(category: Category) -> Optional[Category]:
        if category.parent is None or not category.parent.id:
            return None
        if category.parent.id == category.id:
            return None
        return by_id.get(category.parent.id)

    def closes_cycle(category: Category) -> bool:
        seen = {category.id}
        node = parent_of(category)
        while node is not None:
            if node.id in seen:
                return True
            seen.add(node.id)
            node = parent_of(node)
        return False

    roots: List[Category] = []
    for category in by_id.values():
        parent = parent_of(category)
        if parent is None or closes_cycle(category):
            if category.parent is not None:
                logger.debug(f"Category '{category.slug}' has an unusable parent, treating as root")
            category.parent = None
            roots.append(category)
        else:
            category.parent = parent.as_ref()
            parent.subcategories.append(category)
    return roots
