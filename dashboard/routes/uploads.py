"""
Image upload route (restaurant photos, dish images).
"""

from fastapi import APIRouter, Depends, File, UploadFile

from dashboard.dependencies import DashboardContext, require_auth
from dashboard.schemas import ToastResponse

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])


@router.post("/image", response_model=ToastResponse)
async def upload_image(
    image: UploadFile = File(...),
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    """Forward the file to the backend; ``data`` holds the stored path and its absolute URL."""
    content = await image.read()
    path = await ctx.api.uploads.upload_image(
        image.filename or "image",
        content,
        image.content_type or "application/octet-stream",
    )
    return ctx.toast("image.uploaded", {"path": path, "url": ctx.api.image_url(path)})
