"""
HTTP delivery cost provider.
Calls the location service (POST /calculate) and downloads the map image it renders.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from pedidobot.config import settings
from pedidobot.integrations.delivery.base import BaseDeliveryClient, DeliveryQuote, DeliveryQuoteError
from pedidobot.utils.text import to_minor

logger = logging.getLogger(__name__)


class HttpDeliveryClient(BaseDeliveryClient):
    """Delivery cost provider backed by the location HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        maps_dir: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.delivery_api_url).rstrip("/")
        self.timeout = timeout or settings.delivery_timeout_seconds
        self.maps_dir = maps_dir or settings.media_dir / "maps"
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        """Create HTTP client."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def quote(self, address: str, neighborhood: str, city: str) -> DeliveryQuote:
        """Request a quote; the map image is optional and never fails the quote."""
        payload = {"direccion": address, "barrio": neighborhood, "ciudad": city}
        logger.info(f"Requesting delivery quote for: {address}, {neighborhood}, {city}")

        async with self._get_client() as client:
            try:
                response = await client.post("/calculate", json=payload)
                response.raise_for_status()
                result = response.json()
            except httpx.HTTPStatusError as e:
                raise DeliveryQuoteError(
                    f"Status: {e.response.status_code}, body: {e.response.text[:200]}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise DeliveryQuoteError(str(e)) from e

            cost_minor = to_minor(result.get("costo")) if isinstance(result, dict) else None
            if cost_minor is None or cost_minor < 0:
                raise DeliveryQuoteError(f"Invalid cost in response: {result}")

            map_path = None
            image = result.get("imagen")
            if image:
                map_path = await self._download_map(client, image)

        return DeliveryQuote(
            cost_minor=cost_minor,
            map_image_path=map_path,
            distance_km=result.get("distancia"),
        )

    async def _download_map(self, client: httpx.AsyncClient, image_url: str) -> Optional[Path]:
        """Save the rendered map locally so it can be sent as a photo."""
        try:
            response = await client.get(image_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to download map image {image_url}: {e}")
            return None

        path = self.maps_dir / f"map_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}.png"
        try:
            self.maps_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(response.content)
        except OSError as e:
            logger.error(f"Failed to save map image to {path}: {e}")
            return None
        logger.debug(f"Map image saved to {path}")
        return path

    @property
    def name(self) -> str:
        return "http"
