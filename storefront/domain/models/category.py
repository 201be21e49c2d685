from dataclasses import dataclass, field
from typing import List, Optional

from storefront.domain.models.product import CategoryRef


@dataclass
class Category:
    """
    Normalized product category.

    The parent is kept as a ``CategoryRef`` rather than an object link, so
    the tree only points downwards through ``subcategories``.
    """

    id: str
    title: str
    slug: str
    description: str = ""
    image: Optional[str] = None
    product_count: Optional[int] = None
    parent: Optional[CategoryRef] = None
    subcategories: List["Category"] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def as_ref(self) -> CategoryRef:
        """Reference to this category for use on products and children."""
        return CategoryRef(id=self.id, title=self.title, slug=self.slug)

    def walk(self):
        """Yield this category and every descendant, depth first."""
        yield self
        for child in self.subcategories:
            yield from child.walk()

    def find(self, slug: str) -> Optional["Category"]:
        """Find a category by slug in this subtree."""
        for node in self.walk():
            if node.slug == slug:
                return node
        return None
