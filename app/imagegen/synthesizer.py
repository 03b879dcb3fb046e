"""
Purpose:
- Interface for text-to-image backends: one prompt + one aspect ratio -> one image.
- The stub draws a placeholder JPEG with the requested shape so the gallery can
  be exercised offline.
"""

from __future__ import annotations
from io import BytesIO
from typing import Protocol
from PIL import Image, ImageDraw
from ..workflow.ratios import AspectRatio
from ..workflow.state import GeneratedImage

class ImageSynthesizer(Protocol):
    name: str

    async def generate(self, prompt: str, aspect_ratio: AspectRatio) -> GeneratedImage:
        ...

def _placeholder_size(aspect_ratio: AspectRatio, long_side: int) -> tuple[int, int]:
    w, h = aspect_ratio.width_height
    if w >= h:
        return long_side, round(long_side * h / w)
    return round(long_side * w / h), long_side

class StubSynthesizer:
    name = "stub"

    def __init__(self, reason: str | None = None, long_side: int = 512, mime_type: str = "image/jpeg"):
        self._reason = reason
        self.long_side = long_side
        self.mime_type = mime_type

    def render(self, prompt: str, aspect_ratio: AspectRatio) -> bytes:
        size = _placeholder_size(aspect_ratio, self.long_side)
        img = Image.new("RGB", size, color=(51, 64, 154))
        draw = ImageDraw.Draw(img)
        draw.text((12, 12), aspect_ratio.value, fill=(230, 233, 239))
        draw.text((12, 32), prompt[:60], fill=(170, 179, 208))
        buf = BytesIO()
        img.save(buf, format=self.mime_type.split("/")[-1].upper(), quality=85)
        return buf.getvalue()

    async def generate(self, prompt: str, aspect_ratio: AspectRatio) -> GeneratedImage:
        return GeneratedImage(
            aspect_ratio=aspect_ratio,
            data=self.render(prompt, aspect_ratio),
            mime_type=self.mime_type,
        )
