"""
Storefront catalog data layer.

Normalizes products and categories from the commerce platform, the legacy
shop and the bundled local dataset into one shape, with ordered fallback
between sources.
"""

__version__ = "0.1.0"
