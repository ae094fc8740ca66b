import io
from typing import Optional, Tuple

from fastapi import HTTPException
from PIL import Image, UnidentifiedImageError

from phindex.config import PROFILE_IMAGE_MAX_BYTES, PROFILE_IMAGE_MAX_W, PROFILE_IMAGE_MAX_H

ALLOWED_MIMES = {"image/png", "image/jpeg", "image/webp"}


def sniff_image_dims(data: bytes) -> Optional[Tuple[int, int]]:
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            return int(im.width), int(im.height)
    except (UnidentifiedImageError, OSError):
        return None


def validate_profile_image(blob: bytes, content_type: Optional[str]) -> Tuple[int, int]:
    """Check type, size and dimensions of an uploaded photo; returns (width, height)."""
    if content_type not in ALLOWED_MIMES:
        raise HTTPException(status_code=400, detail="Unsupported image type.")
    if not blob:
        raise HTTPException(status_code=400, detail="Empty file.")
    if len(blob) > PROFILE_IMAGE_MAX_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"Image too large (max {PROFILE_IMAGE_MAX_BYTES // 1024} KB).",
        )

    dims = sniff_image_dims(blob)
    if dims is None:
        raise HTTPException(status_code=400, detail="File is not a readable image.")

    width, height = dims
    if width > PROFILE_IMAGE_MAX_W or height > PROFILE_IMAGE_MAX_H:
        raise HTTPException(
            status_code=400,
            detail=f"Image dimensions too large (max {PROFILE_IMAGE_MAX_W}×{PROFILE_IMAGE_MAX_H}).",
        )
    return width, height
