"""
QR code proxy routes.

The browser cannot call the backend's QR endpoints directly, so these
routes fetch the PNG server-side and pass it through. Any image answer is
returned as-is with status 200; anything else becomes a JSON error with the
backend's status.
"""

import logging
from typing import Awaitable, Optional

import httpx
from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from dashboard.core.exceptions import NetworkError
from dashboard.services.api import get_backend_api

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qrcode", tags=["QR Codes"])

FETCH_ERROR = "Failed to fetch QR code"
DOWNLOAD_ERROR = "Failed to download QR code"


async def proxy_qr(
    call: Awaitable[httpx.Response],
    error_message: str,
    filename: Optional[str] = None,
) -> Response:
    """
    Pass a backend QR answer through.

    Args:
        call: Pending backend request
        error_message: Error text when the answer is not an image
        filename: Attachment name; set for download variants
    """
    try:
        upstream = await call
    except NetworkError as exc:
        logger.error(f"QR code proxy failed: {exc}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    content_type = upstream.headers.get("content-type", "")
    if "image/" in content_type:
        headers = {}
        if filename:
            headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        return Response(content=upstream.content, media_type=content_type, headers=headers)

    logger.warning(f"QR code proxy got {upstream.status_code} ({content_type or 'no content type'})")
    return JSONResponse({"error": error_message}, status_code=upstream.status_code)


@router.get("/restaurant/{restaurant_id}")
async def restaurant_qr(restaurant_id: int) -> Response:
    return await proxy_qr(get_backend_api().qrcodes.restaurant_image(restaurant_id), FETCH_ERROR)


@router.get("/restaurant/{restaurant_id}/download")
async def restaurant_qr_download(restaurant_id: int) -> Response:
    return await proxy_qr(
        get_backend_api().qrcodes.restaurant_download(restaurant_id),
        DOWNLOAD_ERROR,
        filename=f"qr-restaurant-{restaurant_id}.png",
    )


@router.get("/restaurant/{restaurant_id}/table/{table_id}")
async def table_qr(restaurant_id: int, table_id: int) -> Response:
    return await proxy_qr(get_backend_api().qrcodes.table_image(restaurant_id, table_id), FETCH_ERROR)


@router.get("/restaurant/{restaurant_id}/table/{table_id}/download")
async def table_qr_download(restaurant_id: int, table_id: int) -> Response:
    return await proxy_qr(
        get_backend_api().qrcodes.table_download(restaurant_id, table_id),
        DOWNLOAD_ERROR,
        filename=f"qr-table-{table_id}.png",
    )
