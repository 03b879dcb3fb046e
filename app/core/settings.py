"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- Keeps model ids, backends and host/port tunable without code changes.
"""

from typing import Optional
from pathlib import Path
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CAPTION_INSTRUCTION = (
    "Describe this image for a text-to-image AI. Be detailed and focus on the "
    "visual elements, style, and composition."
)

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # API host/port
    host: str = Field(default="0.0.0.0", description="Bind address for FastAPI/Uvicorn")
    port: int = Field(default=8000, description="Port for FastAPI/Uvicorn")

    # CORS
    cors_allow_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed origins for browser apps"
    )

    # Hosted model credential; any of these env names works
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
    )

    # ---- Captioning ----
    caption_backend: str = Field(default="gemini", description='"gemini" | "qwen" | "stub"')
    caption_model: str = Field(default="gemini-2.5-flash")
    caption_instruction: str = Field(default=DEFAULT_CAPTION_INSTRUCTION)

    # ---- Image synthesis ----
    image_backend: str = Field(default="gemini", description='"gemini" | "stub"')
    image_model: str = Field(default="imagen-4.0-generate-001")
    output_mime_type: str = Field(default="image/jpeg")

    # ---- Uploads / sessions ----
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, description="Reject uploads larger than this")
    max_sessions: int = Field(default=256, ge=1, description="In-memory sessions kept before evicting the oldest")

    # ---- Qwen captioner config (optional local backend) ----
    qwen_model_id: str = Field(default="Qwen/Qwen2.5-VL-3B-Instruct")
    qwen_device: str = Field(default="auto")       # "auto" | "cuda" | "cpu"
    qwen_max_new_tokens: int = Field(default=256)
    qwen_temperature: float = Field(default=0.2)
    qwen_top_p: float = Field(default=0.9)
    qwen_offload_folder: Path = Field(default=Path("./data/qwen_offload"))
    qwen_gpu_max_gb: float = Field(default=15.0)   # cap GPU usage; leave headroom
    qwen_cpu_max_gb: float = Field(default=80.0)

    # Logging
    log_level: str = Field(default="INFO")
    log_level_overrides: dict[str, str] = Field(
        default={"httpx": "WARNING", "google_genai": "WARNING"},
        description="Per-logger levels applied on top of log_level",
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)

settings = Settings()
