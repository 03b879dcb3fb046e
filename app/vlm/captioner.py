"""
Purpose:
- Small interface for image captioning.
- Gemini is the default backend; Qwen runs locally; the stub keeps the UI usable
  without any model.

Notes:
- Backends take the uploaded bytes + MIME type and an instruction string and
  return the description text.
"""

from __future__ import annotations
from typing import Protocol
from io import BytesIO
from PIL import Image
from ..workflow.state import UploadedImage

class Captioner(Protocol):
    name: str

    async def caption(self, image: UploadedImage, instruction: str) -> str:
        ...

def caption_image_stub(img: Image.Image) -> str:
    """
    Very simple placeholder captioner used when no model is configured.
    """
    w, h = img.size
    return f"Photo ({w}x{h}); captioning model not configured."

class StubCaptioner:
    name = "stub"

    def __init__(self, reason: str | None = None):
        # why we ended up on the stub, surfaced by /healthz
        self._reason = reason

    async def caption(self, image: UploadedImage, instruction: str) -> str:
        with Image.open(BytesIO(image.data)) as img:
            return caption_image_stub(img)
