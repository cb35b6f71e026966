"""
QR code images, image uploads and image URL resolution.
"""

import logging
from typing import Optional

import httpx

from dashboard.core.config import get_settings
from dashboard.core.exceptions import ApiValidationError
from dashboard.services.api.client import Resource

logger = logging.getLogger(__name__)


def get_image_url(path: Optional[str], base_url: Optional[str] = None) -> str:
    """
    Resolve an image path returned by the backend to an absolute URL.

    Absolute ``http(s)://`` URLs pass through; relative paths are joined to
    the backend base URL; empty input gives ``""``.
    """
    if not path:
        return ""
    if path.startswith("http://") or path.startswith("https://"):
        return path
    base = (base_url or get_settings().backend_api_url).rstrip("/")
    return f"{base}{'' if path.startswith('/') else '/'}{path}"


class QrCodesApi(Resource):
    """
    Raw QR code responses.

    The backend serves PNG bytes; callers inspect the content type
    themselves, so responses are returned without envelope decoding.
    """

    async def restaurant_image(self, restaurant_id: int) -> httpx.Response:
        return await self.client.send(
            "GET", f"/qrcodes/restaurant/{restaurant_id}", authenticated=False
        )

    async def restaurant_download(self, restaurant_id: int) -> httpx.Response:
        return await self.client.send(
            "GET", f"/qrcodes/restaurant/{restaurant_id}/download", authenticated=False
        )

    async def table_image(self, restaurant_id: int, table_id: int) -> httpx.Response:
        return await self.client.send(
            "GET", f"/qrcodes/restaurant/{restaurant_id}/table/{table_id}", authenticated=False
        )

    async def table_download(self, restaurant_id: int, table_id: int) -> httpx.Response:
        return await self.client.send(
            "GET",
            f"/qrcodes/restaurant/{restaurant_id}/table/{table_id}/download",
            authenticated=False,
        )


class UploadsApi(Resource):

    async def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        """
        Upload an image (multipart field ``image``).

        Returns:
            str: Image path or URL as stored by the backend

        Raises:
            ApiValidationError: The file is not an image
        """
        if not content_type.startswith("image/"):
            raise ApiValidationError(f"Unsupported file type: {content_type}")

        data = await self.client.post(
            "/uploads/images", files={"image": (filename, content, content_type)}
        )
        url = data.get("url", "") if isinstance(data, dict) else ""
        logger.info(f"Image uploaded: {filename} ({len(content)} bytes) -> {url}")
        return url
