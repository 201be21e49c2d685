from storefront.adapters.implementations.woocommerce.adaptor import WooCommerceAdaptor
from storefront.adapters.implementations.woocommerce.normalizer import WooCommerceNormalizer, is_listed

__all__ = ["WooCommerceAdaptor", "WooCommerceNormalizer", "is_listed"]
