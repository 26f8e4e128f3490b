"""
Startup assets: catalog PDF and payment QR, plus cleanup of generated media.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx

from pedidobot.config import settings

logger = logging.getLogger(__name__)


async def download_asset(client: httpx.AsyncClient, url: str, destination: Path) -> bool:
    """
    Download one file, replacing the previous copy only on success.

    Returns:
        True if the file was saved
    """
    logger.info(f"Downloading {destination.name} from {url}")
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to download {destination.name}: {e}")
        return False

    destination.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = destination.with_suffix(destination.suffix + ".tmp")
    tmp_path.write_bytes(response.content)
    tmp_path.replace(destination)
    logger.info(f"Saved {destination} ({len(response.content)} bytes)")
    return True


async def download_assets(
    catalog_pdf_url: Optional[str] = None,
    qr_image_url: Optional[str] = None,
    timeout: float = 60.0,
) -> dict[str, bool]:
    """Fetch the catalog PDF and QR image; never raises."""
    targets = {
        "catalog_pdf": (catalog_pdf_url or settings.catalog_pdf_url, settings.catalog_pdf_path),
        "qr_image": (qr_image_url or settings.qr_image_url, settings.qr_image_path),
    }
    results = {}

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        for name, (url, destination) in targets.items():
            if not url:
                logger.warning(f"No URL configured for {name}, keeping local copy if any")
                results[name] = False
                continue
            results[name] = await download_asset(client, url, destination)

    return results


def clean_folder(folder: Path) -> int:
    """Delete the files directly inside a folder. Returns the number deleted."""
    if not folder.exists():
        folder.mkdir(parents=True, exist_ok=True)
        return 0

    deleted = 0
    for path in folder.iterdir():
        if not path.is_file():
            continue
        try:
            path.unlink()
            deleted += 1
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")

    if deleted:
        logger.info(f"Cleaned {deleted} file(s) from {folder}")
    return deleted
