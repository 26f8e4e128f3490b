"""
Catalog parsers for different file formats.
"""

from pathlib import Path

from pedidobot.core.catalog.models import Product
from pedidobot.data.parsers.sheet_parser import CatalogSheetParser, parse_catalog_file


def parse_file(file_path: str | Path) -> list[Product]:
    """
    Parse catalog file based on extension.

    Args:
        file_path: Path to CSV or XLSX file

    Returns:
        List of products in file order

    Raises:
        ValueError: If file format is not supported
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if suffix in [".csv", ".xlsx", ".xls"]:
        return parse_catalog_file(file_path)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")


__all__ = [
    "CatalogSheetParser",
    "parse_catalog_file",
    "parse_file",
]
