"""
Catalog source adaptors.

One adaptor per backend, all implementing ``CatalogSource``, plus the
availability checks and the registry/factory that put them in fallback
order.
"""
