"""
Purpose:
- Pick the caption backend named in settings.
- Falls back to the stub (with the reason attached) when the backend can't load.
"""

from __future__ import annotations
import logging
from typing import Optional
from google import genai
from ..core.settings import Settings
from .captioner import Captioner, StubCaptioner
from .gemini_captioner import GeminiCaptioner

logger = logging.getLogger(__name__)

def get_captioner(cfg: Settings, client: Optional[genai.Client]) -> Captioner:
    backend = cfg.caption_backend.lower()

    if backend == "stub":
        return StubCaptioner()

    if backend == "gemini":
        if client is None:
            return StubCaptioner(reason="gemini backend selected but no API key configured")
        return GeminiCaptioner(client, model=cfg.caption_model)

    if backend == "qwen":
        try:
            from .qwen_captioner import QwenCaptioner, QwenConfig
            return QwenCaptioner(QwenConfig.from_settings(cfg))
        except Exception as e:
            logger.exception("Qwen captioner failed to load; using stub")
            return StubCaptioner(reason=str(e))

    raise ValueError(f"Unsupported caption backend: {backend}")
