"""
Catalog product model.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Product:
    """Single catalog item as cached locally."""
    id: Optional[str]
    name: Optional[str]
    description: Optional[str] = None
    price_minor: Optional[int] = None
    stock: Optional[int] = None
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price_minor": self.price_minor,
            "stock": self.stock,
            "image_url": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Restore from a cached dictionary."""
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            description=data.get("description"),
            price_minor=data.get("price_minor"),
            stock=data.get("stock"),
            image_url=data.get("image_url"),
        )


class CatalogRefreshError(Exception):
    """Raised when the catalog source cannot be read."""
