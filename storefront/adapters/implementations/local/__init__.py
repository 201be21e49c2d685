from storefront.adapters.implementations.local.adaptor import LocalDatasetAdaptor
from storefront.adapters.implementations.local.normalizer import LocalDatasetNormalizer

__all__ = ["LocalDatasetAdaptor", "LocalDatasetNormalizer"]
