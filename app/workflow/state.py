"""
Purpose:
- Plain data for one browser session: uploaded image, prompt, ratio selection,
  results and the phase of the upload -> caption -> generate workflow.
- Nothing here is persisted; a session dies with the process.
"""

from __future__ import annotations
import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
from .ratios import AspectRatio

class Phase(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    GENERATING = "generating"
    DISPLAYING = "displaying"
    ERROR = "error"

BUSY_PHASES = frozenset({Phase.ANALYZING, Phase.GENERATING})

@dataclass(frozen=True)
class UploadedImage:
    data: bytes
    mime_type: str
    filename: Optional[str] = None
    width: int = 0
    height: int = 0

@dataclass(frozen=True)
class GeneratedImage:
    aspect_ratio: AspectRatio
    data: bytes
    mime_type: str = "image/jpeg"

    def data_url(self) -> str:
        b64 = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{b64}"

    @property
    def filename(self) -> str:
        ext = self.mime_type.split("/")[-1]
        return f"generated-{self.aspect_ratio.slug}.{ext}"

@dataclass
class WorkflowState:
    phase: Phase = Phase.IDLE
    image: Optional[UploadedImage] = None
    prompt: str = ""
    selected: List[AspectRatio] = field(default_factory=list)
    results: List[GeneratedImage] = field(default_factory=list)
    error: Optional[str] = None
    loading_message: str = ""
    fullscreen: Optional[int] = None

    @property
    def busy(self) -> bool:
        return self.phase in BUSY_PHASES

    @property
    def can_generate(self) -> bool:
        return bool(self.prompt.strip()) and bool(self.selected) and not self.busy
