from storefront.adapters.implementations.medusa.adaptor import MedusaAdaptor
from storefront.adapters.implementations.medusa.normalizer import MedusaNormalizer
from storefront.adapters.implementations.medusa.regions import RegionResolver

__all__ = ["MedusaAdaptor", "MedusaNormalizer", "RegionResolver"]
