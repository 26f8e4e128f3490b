"""
Delivery cost provider factory.
"""

from functools import lru_cache

from pedidobot.integrations.delivery.base import BaseDeliveryClient, DeliveryQuote, DeliveryQuoteError
from pedidobot.integrations.delivery.http import HttpDeliveryClient


@lru_cache(maxsize=1)
def get_delivery_client() -> BaseDeliveryClient:
    """Get cached default delivery cost provider."""
    return HttpDeliveryClient()


__all__ = [
    "BaseDeliveryClient",
    "DeliveryQuote",
    "DeliveryQuoteError",
    "HttpDeliveryClient",
    "get_delivery_client",
]
