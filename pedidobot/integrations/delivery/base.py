"""
Base interface for delivery cost providers.
The cost formula lives in an external service; this is only the boundary.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class DeliveryQuote:
    """Delivery cost for one address."""

    cost_minor: int
    map_image_path: Optional[Path] = None
    distance_km: Optional[float] = None


class DeliveryQuoteError(Exception):
    """Raised when the delivery cost cannot be computed."""


class BaseDeliveryClient(ABC):
    """Abstract base class for delivery cost providers."""

    @abstractmethod
    async def quote(self, address: str, neighborhood: str, city: str) -> DeliveryQuote:
        """
        Compute the delivery cost of an address.

        Args:
            address: Street address
            neighborhood: Neighborhood ("barrio")
            city: City

        Returns:
            DeliveryQuote with cost and optional map image

        Raises:
            DeliveryQuoteError: If the service fails or the address is not found
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass
