"""
Interfaces package for catalog sources.

Contains the abstract contracts every catalog source and normalizer
implements, plus the helpers they share.
"""

from .catalog_source import CatalogSource, ProductFilter, build_category_tree
from .normalizer import DataNormalizer, as_string_list, dedupe_tags, first_line, is_http_url, maps_record, strip_html

__all__ = [
    # Source contract
    "CatalogSource",
    "ProductFilter",
    "build_category_tree",

    # Normalizer contract and helpers
    "DataNormalizer",
    "as_string_list",
    "dedupe_tags",
    "first_line",
    "is_http_url",
    "maps_record",
    "strip_html",
]
