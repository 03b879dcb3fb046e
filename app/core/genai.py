"""
Purpose:
- Build the google-genai client once from the configured API key.
- Callers pass the client into the caption / image adapters.
"""

from __future__ import annotations
from google import genai
from .settings import Settings

def build_genai_client(cfg: Settings) -> genai.Client:
    if not cfg.gemini_api_key:
        raise RuntimeError("No API key configured (set GEMINI_API_KEY or API_KEY).")
    return genai.Client(api_key=cfg.gemini_api_key)
