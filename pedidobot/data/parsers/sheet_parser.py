"""
Catalog sheet parser.
Extracts products from the spreadsheet export (CSV) or a local XLSX copy.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from pedidobot.core.catalog.models import Product
from pedidobot.utils.text import normalize_text, to_minor

logger = logging.getLogger(__name__)


class CatalogSheetParser:
    """Parser for the catalog sheet ("Articulos")."""

    # Normalized header -> product field
    COLUMN_ALIASES = {
        "id": "id",
        "codigo": "id",
        "nombre": "name",
        "name": "name",
        "descripcion": "description",
        "description": "description",
        "precio": "price",
        "price": "price",
        "stock": "stock",
        "imagenurl": "image_url",
        "imagen": "image_url",
        "imageurl": "image_url",
    }

    def parse(self, file_path: str | Path) -> list[Product]:
        """
        Parse a catalog file.

        Args:
            file_path: Path to a CSV or XLSX file with a header row

        Returns:
            Products in sheet order
        """
        file_path = Path(file_path)
        if file_path.suffix.lower() == ".csv":
            df = pd.read_csv(file_path, dtype=object)
        else:
            df = pd.read_excel(file_path, dtype=object)
        return self.parse_dataframe(df)

    def parse_dataframe(self, df: pd.DataFrame) -> list[Product]:
        """Parse products from a DataFrame whose columns are the sheet headers."""
        columns = {}
        for column in df.columns:
            key = normalize_text(column).replace(" ", "").replace("_", "")
            field = self.COLUMN_ALIASES.get(key)
            if field and field not in columns:
                columns[field] = column

        if "name" not in columns and "id" not in columns:
            raise ValueError(f"Catalog sheet has no name/ID column: {list(df.columns)}")

        products: list[Product] = []
        for _, row in df.iterrows():
            product = self._parse_row(row, columns)
            if product:
                products.append(product)

        logger.info(f"Parsed {len(products)} catalog products")
        return products

    def _parse_row(self, row: pd.Series, columns: dict) -> Product | None:
        """Parse a single row; rows without name and ID are skipped."""
        def cell(field: str):
            column = columns.get(field)
            if column is None:
                return None
            value = row[column]
            return None if pd.isna(value) else value

        product_id = self._parse_id(cell("id"))
        name = self._parse_str(cell("name"))
        if not product_id and not name:
            return None

        return Product(
            id=product_id,
            name=name,
            description=self._parse_str(cell("description")),
            price_minor=to_minor(cell("price")),
            stock=self._parse_stock(cell("stock")),
            image_url=self._parse_str(cell("image_url")),
        )

    def _parse_id(self, value) -> Optional[str]:
        """IDs come back as floats from numeric columns ("101.0")."""
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        text = str(value).strip()
        if text.endswith(".0") and text[:-2].isdigit():
            text = text[:-2]
        return text or None

    def _parse_str(self, value) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def _parse_stock(self, value) -> Optional[int]:
        if value is None:
            return None
        try:
            return int(float(str(value).replace(",", ".")))
        except ValueError:
            return None


def parse_catalog_file(file_path: str | Path) -> list[Product]:
    """Convenience function to parse a catalog file."""
    parser = CatalogSheetParser()
    return parser.parse(file_path)
