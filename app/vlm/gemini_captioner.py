"""
Gemini vision captioner: sends the image inline next to the instruction and
returns the model's text.
"""

from __future__ import annotations
import logging
from google import genai
from google.genai import types
from ..core.errors import CaptionError
from ..workflow.state import UploadedImage

logger = logging.getLogger(__name__)

class GeminiCaptioner:
    name = "gemini"

    def __init__(self, client: genai.Client, model: str):
        self._client = client
        self.model = model

    async def caption(self, image: UploadedImage, instruction: str) -> str:
        part = types.Part.from_bytes(data=image.data, mime_type=image.mime_type)
        logger.debug("caption request model=%s bytes=%d", self.model, len(image.data))
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=[part, instruction],
        )
        text = response.text
        if not text:
            raise CaptionError("caption model returned no text")
        return text
