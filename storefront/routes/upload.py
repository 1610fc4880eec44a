"""Image upload route"""

import logging
import mimetypes
import os
import re
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..core.config import settings
from ..models.user import Identity
from ..security.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Upload"])

_EXTENSION = re.compile(r"^\.[a-z0-9]{1,8}$")


def _extension_for(filename: str, content_type: str) -> str:
    ext = os.path.splitext(os.path.basename(filename or ""))[1].lower()
    if _EXTENSION.match(ext):
        return ext
    return mimetypes.guess_extension(content_type) or ""


@router.post("", status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    identity: Identity = Depends(require_admin),
):
    """
    Store an uploaded product image.

    Only ``image/*`` content is accepted, up to the configured size cap.
    Returns the public URL the image is served from.
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    limit = settings.max_upload_bytes
    contents = await file.read(limit + 1)
    if len(contents) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {limit // (1024 * 1024)}MB",
        )

    filename = f"{uuid.uuid4().hex}{_extension_for(file.filename, content_type)}"
    os.makedirs(settings.upload_dir, exist_ok=True)
    with open(os.path.join(settings.upload_dir, filename), "wb") as f:
        f.write(contents)

    logger.info(f"Stored upload {filename} ({len(contents)} bytes) from {identity.user_id}")
    return {"url": f"/uploads/{filename}", "filename": filename, "size": len(contents)}
