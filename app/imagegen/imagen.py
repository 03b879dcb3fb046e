"""
Imagen backend: one generate_images call per aspect ratio.
"""

from __future__ import annotations
import logging
from google import genai
from google.genai import types
from ..core.errors import GenerationError
from ..workflow.ratios import AspectRatio
from ..workflow.state import GeneratedImage

logger = logging.getLogger(__name__)

class ImagenSynthesizer:
    name = "gemini"

    # one image per ratio; the gallery shows exactly one entry per request
    number_of_images = 1

    def __init__(self, client: genai.Client, model: str, *, output_mime_type: str = "image/jpeg"):
        self._client = client
        self.model = model
        self.output_mime_type = output_mime_type

    def _config(self, aspect_ratio: AspectRatio) -> types.GenerateImagesConfig:
        return types.GenerateImagesConfig(
            number_of_images=self.number_of_images,
            output_mime_type=self.output_mime_type,
            aspect_ratio=aspect_ratio.value,
        )

    async def generate(self, prompt: str, aspect_ratio: AspectRatio) -> GeneratedImage:
        logger.debug("imagen request model=%s ratio=%s", self.model, aspect_ratio.value)
        response = await self._client.aio.models.generate_images(
            model=self.model,
            prompt=prompt,
            config=self._config(aspect_ratio),
        )
        generated = response.generated_images or []
        if not generated or generated[0].image is None or not generated[0].image.image_bytes:
            raise GenerationError(f"no image returned for {aspect_ratio.value}")
        image = generated[0].image
        return GeneratedImage(
            aspect_ratio=aspect_ratio,
            data=image.image_bytes,
            mime_type=image.mime_type or self.output_mime_type,
        )
