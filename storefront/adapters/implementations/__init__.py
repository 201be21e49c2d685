"""
Catalog source implementations, one package per backend.
"""

from storefront.adapters.availability import SOURCE_LOCAL, SOURCE_MEDUSA, SOURCE_WOOCOMMERCE
from storefront.adapters.implementations.local import LocalDatasetAdaptor
from storefront.adapters.implementations.medusa import MedusaAdaptor
from storefront.adapters.implementations.woocommerce import WooCommerceAdaptor

# Mapping of source names to their implementation classes
ADAPTOR_IMPLEMENTATIONS = {
    SOURCE_MEDUSA: MedusaAdaptor,
    SOURCE_WOOCOMMERCE: WooCommerceAdaptor,
    SOURCE_LOCAL: LocalDatasetAdaptor,
}

__all__ = [
    "LocalDatasetAdaptor",
    "MedusaAdaptor",
    "WooCommerceAdaptor",
    "ADAPTOR_IMPLEMENTATIONS",
]
