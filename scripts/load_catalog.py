#!/usr/bin/env python3
"""
Script to load the product catalog into the local cache.

Usage:
    python scripts/load_catalog.py                      # from SPREADSHEET_URL
    python scripts/load_catalog.py path/to/catalog.xlsx
    python scripts/load_catalog.py path/to/catalog.csv --cache data/catalog.json
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pedidobot.data.loaders.catalog_loader import CatalogLoader, CatalogRefreshError
from pedidobot.utils.text import format_money


async def main(file_path: str | None = None, cache_path: str | None = None) -> None:
    """Load catalog from a local file or from the spreadsheet."""
    loader = CatalogLoader(cache_path=Path(cache_path) if cache_path else None)

    print("-" * 50)
    try:
        if file_path:
            path = Path(file_path)
            if not path.exists():
                print(f"Error: File not found: {path}")
                sys.exit(1)
            print(f"Loading catalog from: {path}")
            products = loader.load_file(path)
        else:
            print(f"Loading catalog from: {loader.export_url()}")
            products = await loader.refresh()
    except (CatalogRefreshError, ValueError) as e:
        print(f"❌ Error loading catalog: {e}")
        sys.exit(1)

    print(f"✅ Successfully loaded {len(products)} products into {loader.cache_path}")
    for product in products[:10]:
        print(f"   {product.id}: {product.name} - {format_money(product.price_minor)}")
    if len(products) > 10:
        print(f"   ... and {len(products) - 10} more")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load product catalog into the local cache")
    parser.add_argument("file", nargs="?", help="Path to catalog file (CSV or XLSX)", default=None)
    parser.add_argument("--cache", "-c", help="Cache file to write", default=None)

    args = parser.parse_args()
    asyncio.run(main(args.file, args.cache))
