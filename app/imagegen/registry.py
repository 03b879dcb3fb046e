"""
Purpose:
- Pick the image backend named in settings; stub when no key is configured.
"""

from __future__ import annotations
from typing import Optional
from google import genai
from ..core.settings import Settings
from .synthesizer import ImageSynthesizer, StubSynthesizer
from .imagen import ImagenSynthesizer

def get_synthesizer(cfg: Settings, client: Optional[genai.Client]) -> ImageSynthesizer:
    backend = cfg.image_backend.lower()

    if backend == "stub":
        return StubSynthesizer(mime_type=cfg.output_mime_type)

    if backend == "gemini":
        if client is None:
            return StubSynthesizer(
                reason="gemini backend selected but no API key configured",
                mime_type=cfg.output_mime_type,
            )
        return ImagenSynthesizer(
            client,
            model=cfg.image_model,
            output_mime_type=cfg.output_mime_type,
        )

    raise ValueError(f"Unsupported image backend: {backend}")
