"""
Purpose:
- Input boundary for uploads: only images get through to the caption model.
- Checks the declared MIME type first, then lets Pillow confirm the bytes decode.
"""

from __future__ import annotations
from io import BytesIO
from typing import Optional
from PIL import Image
from ..core.errors import UnsupportedImageError, UploadTooLargeError
from ..workflow.state import UploadedImage

# MIME types the caption model takes inline
CAPTION_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"})

# Pillow formats that are really another container
_FORMAT_MIME = {"MPO": "image/jpeg"}

def is_image_mime(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")

def _mime_for(fmt: Optional[str], declared: str) -> str:
    """
    Prefer the decoded format when the caption model understands it;
    otherwise keep what the browser declared.
    """
    declared = declared.lower()
    detected = _FORMAT_MIME.get(fmt or "") or Image.MIME.get(fmt or "")
    if detected in CAPTION_MIME_TYPES:
        return detected
    return declared

def load_upload(raw: bytes, content_type: Optional[str], filename: Optional[str] = None,
                max_bytes: Optional[int] = None) -> UploadedImage:
    """
    Validate an uploaded file and wrap it as an UploadedImage.
    Raises UnsupportedImageError for non-images, UploadTooLargeError past max_bytes.
    """
    if not is_image_mime(content_type):
        raise UnsupportedImageError(f"Only image files are accepted (got {content_type or 'unknown type'}).")
    if not raw:
        raise UnsupportedImageError("Uploaded file is empty.")
    if max_bytes is not None and len(raw) > max_bytes:
        raise UploadTooLargeError(f"Uploaded file is larger than {max_bytes} bytes.")

    try:
        with Image.open(BytesIO(raw)) as img:
            img.verify()
            fmt = img.format
            width, height = img.size
    except Exception as e:
        raise UnsupportedImageError(f"Uploaded file is not a readable image: {e}") from e

    mime = _mime_for(fmt, content_type)
    return UploadedImage(data=raw, mime_type=mime, filename=filename, width=width, height=height)
