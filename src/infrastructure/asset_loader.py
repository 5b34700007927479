"""
Asset Loader Module

Fetches remote images (the office logo used as the form watermark).
"""

from typing import Optional

import requests

from infrastructure.logger import get_logger

logger = get_logger("AssetLoader")

# PNG, JPEG and GIF signatures
_IMAGE_SIGNATURES = (b'\x89PNG\r\n\x1a\n', b'\xff\xd8\xff', b'GIF87a', b'GIF89a')


def looks_like_image(data: bytes) -> bool:
    return any(data.startswith(sig) for sig in _IMAGE_SIGNATURES)


def fetch_image(
    url: str,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None
) -> Optional[bytes]:
    """
    Download image bytes.

    Returns:
        The image bytes, or None if the URL is empty, the request fails or
        the response is not an image. Failures are logged, never raised.
    """
    if not url:
        return None

    http = session or requests
    try:
        res = http.get(url, timeout=timeout, allow_redirects=True)
        res.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Could not load image {url}: {e}")
        return None

    data = res.content or b""
    if not looks_like_image(data):
        logger.warning(f"Response from {url} is not an image, skipping")
        return None

    logger.debug(f"Loaded image {url} ({len(data)} bytes)")
    return data
