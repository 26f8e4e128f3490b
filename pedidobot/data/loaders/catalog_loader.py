"""
Catalog loader - refreshes the local catalog cache from the spreadsheet source.
"""

import io
import json
import logging
import re
from pathlib import Path
from typing import Optional

import httpx
import pandas as pd

from pedidobot.config import settings
from pedidobot.core.catalog.models import CatalogRefreshError, Product
from pedidobot.data.parsers import CatalogSheetParser, parse_file

logger = logging.getLogger(__name__)

SPREADSHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9-_]+)")


class CatalogLoader:
    """Writes the catalog cache from Google Sheets or a local file."""

    def __init__(
        self,
        cache_path: Optional[Path] = None,
        spreadsheet_url: Optional[str] = None,
        sheet_name: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.cache_path = cache_path or settings.catalog_cache_path
        self.spreadsheet_url = spreadsheet_url or settings.spreadsheet_url
        self.sheet_name = sheet_name or settings.spreadsheet_sheet
        self.timeout = timeout
        self.parser = CatalogSheetParser()

    def export_url(self) -> str:
        """CSV export URL of the configured sheet."""
        if not self.spreadsheet_url:
            raise CatalogRefreshError("SPREADSHEET_URL is not configured")
        match = SPREADSHEET_ID_PATTERN.search(self.spreadsheet_url)
        if not match:
            raise CatalogRefreshError(f"Cannot extract spreadsheet ID from {self.spreadsheet_url}")
        return (
            f"https://docs.google.com/spreadsheets/d/{match.group(1)}"
            f"/gviz/tq?tqx=out:csv&sheet={self.sheet_name}"
        )

    async def refresh(self) -> list[Product]:
        """
        Download the sheet and replace the local cache.

        Raises:
            CatalogRefreshError: If the sheet cannot be fetched or parsed
        """
        url = self.export_url()
        logger.info(f"Fetching catalog from {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url)
                response.raise_for_status()
            df = pd.read_csv(io.StringIO(response.text), dtype=object)
            products = self.parser.parse_dataframe(df)
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogRefreshError(f"Catalog refresh failed: {e}") from e

        try:
            self.write_cache(products)
        except OSError as e:
            raise CatalogRefreshError(f"Catalog cache write failed: {e}") from e
        return products

    def load_file(self, file_path: str | Path) -> list[Product]:
        """Replace the cache with products parsed from a local CSV/XLSX file."""
        products = parse_file(file_path)
        self.write_cache(products)
        return products

    def write_cache(self, products: list[Product]) -> None:
        """Write products to the cache file (whole-file replace)."""
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.cache_path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump([p.to_dict() for p in products], f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.cache_path)
        logger.info(f"Catalog cache written: {len(products)} products -> {self.cache_path}")

