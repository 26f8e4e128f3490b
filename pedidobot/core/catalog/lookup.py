"""
Catalog lookup - finds products in the local catalog cache.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pedidobot.config import settings
from pedidobot.core.catalog.models import CatalogRefreshError, Product
from pedidobot.utils.text import normalize_text

if TYPE_CHECKING:
    from pedidobot.data.loaders.catalog_loader import CatalogLoader

logger = logging.getLogger(__name__)


class CatalogLookup:
    """Read-only search over the cached product list."""

    def __init__(
        self,
        cache_path: Optional[Path] = None,
        loader: Optional["CatalogLoader"] = None,
    ):
        self.cache_path = cache_path or settings.catalog_cache_path
        self.loader = loader
        self._products: list[Product] = []
        self._loaded_mtime: Optional[float] = None

    async def find(self, query: str) -> Optional[Product]:
        """
        Find the first product matching the query.

        Matching is a case- and accent-insensitive substring test against
        name, description and ID of each product, in catalog order.

        Returns:
            Matched product, or None when nothing matches or the catalog
            is unavailable
        """
        needle = normalize_text(query).strip()
        if not needle:
            return None

        products = await self._get_products()
        for product in products:
            for value in (product.name, product.description, product.id):
                if needle in normalize_text(value):
                    logger.debug(f"Query '{query}' matched product {product.id}")
                    return product
        return None

    async def _get_products(self) -> list[Product]:
        """Load products, refreshing the cache once if the file is missing."""
        if not self.cache_path.exists():
            if self.loader is None:
                logger.warning(f"Catalog cache {self.cache_path} not found and no source configured")
                return []
            logger.info("Catalog cache not found. Fetching from source...")
            try:
                await self.loader.refresh()
            except CatalogRefreshError as e:
                logger.error(f"Catalog refresh failed: {e}")
                return []

        try:
            mtime = self.cache_path.stat().st_mtime
            if mtime != self._loaded_mtime:
                with open(self.cache_path, "r", encoding="utf-8") as f:
                    self._products = [Product.from_dict(item) for item in json.load(f)]
                self._loaded_mtime = mtime
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to read catalog cache {self.cache_path}: {e}")
            return []

        return self._products
