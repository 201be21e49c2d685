from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from storefront.domain.models.product import CategoryRef, ConnectorPrice


@dataclass
class CableSeries:
    """Family of cable types, e.g. the LMR series."""

    id: str
    name: str
    slug: str
    order: int = 0


@dataclass
class CableType:
    """A cable that can be cut to length and priced per foot."""

    id: str
    name: str
    slug: str
    price_per_foot: Decimal
    series: Optional[CategoryRef] = None
    length_options: List[str] = field(default_factory=list)
    image: Optional[str] = None
    order: int = 0
    is_active: bool = True


@dataclass
class Connector:
    """A connector whose price depends on the cable type it is fitted to."""

    id: str
    name: str
    slug: str
    pricing: List[ConnectorPrice] = field(default_factory=list)
    image: Optional[str] = None
    order: int = 0
    is_active: bool = True

    def price_for(self, cable_type_slug: str) -> Optional[Decimal]:
        for entry in self.pricing:
            if entry.counterpart_id == cable_type_slug:
                return entry.price
        return None
