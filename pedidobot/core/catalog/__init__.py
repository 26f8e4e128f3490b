"""
Catalog module: product model and lookup over the local cache.
"""

from pedidobot.core.catalog.models import CatalogRefreshError, Product
from pedidobot.core.catalog.lookup import CatalogLookup

__all__ = [
    "CatalogRefreshError",
    "Product",
    "CatalogLookup",
]
