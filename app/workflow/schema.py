"""
Purpose:
- Pydantic models for the session API so the UI contract is self-documenting.
"""

from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional
from .ratios import AspectRatio
from .state import WorkflowState

class AspectRatioOption(BaseModel):
    value: str
    label: str
    selected: bool = False

class UploadView(BaseModel):
    filename: Optional[str] = None
    mime_type: str
    width: int
    height: int
    preview_url: str

class GalleryItem(BaseModel):
    index: int
    aspect_ratio: str
    label: str
    css_ratio: float = Field(..., description="width / height, for the <img> aspect-ratio style")
    src: str = Field(..., description="data: URL with the base64 image")
    filename: str
    download_url: str

class SessionView(BaseModel):
    ok: bool = True
    session_id: str
    phase: str
    busy: bool
    loading_message: str = ""
    error: Optional[str] = None
    upload: Optional[UploadView] = None
    prompt: str = ""
    aspect_ratios: List[AspectRatioOption] = []
    selected: List[str] = []
    can_generate: bool = False
    results: List[GalleryItem] = []
    fullscreen: Optional[int] = None

    @classmethod
    def build(cls, session_id: str, state: WorkflowState) -> "SessionView":

        base = f"/api/v1/sessions/{session_id}"
        upload = None
        if state.image is not None:
            upload = UploadView(
                filename=state.image.filename,
                mime_type=state.image.mime_type,
                width=state.image.width,
                height=state.image.height,
                preview_url=f"{base}/upload",
            )
        return cls(
            session_id=session_id,
            phase=state.phase.value,
            busy=state.busy,
            loading_message=state.loading_message,
            error=state.error,
            upload=upload,
            prompt=state.prompt,
            aspect_ratios=[
                AspectRatioOption(value=r.value, label=r.label, selected=r in state.selected)
                for r in AspectRatio
            ],
            selected=[r.value for r in state.selected],
            can_generate=state.can_generate,
            results=[
                GalleryItem(
                    index=i,
                    aspect_ratio=img.aspect_ratio.value,
                    label=img.aspect_ratio.label,
                    css_ratio=img.aspect_ratio.ratio,
                    src=img.data_url(),
                    filename=img.filename,
                    download_url=f"{base}/images/{i}/download",
                )
                for i, img in enumerate(state.results)
            ],
            fullscreen=state.fullscreen,
        )

class PromptIn(BaseModel):
    prompt: str = Field(..., description="Edited description sent to the image model")

class CaptionOut(BaseModel):
    ok: bool = True
    caption: Optional[str] = None
    filename: Optional[str] = None
    error: Optional[str] = None
