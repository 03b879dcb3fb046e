"""
Purpose:
- /caption: one-shot caption of an upload, no session involved.
- Uses whichever caption backend the app was built with.
"""

import logging
from fastapi import APIRouter, Depends, UploadFile, File
from ..core.settings import Settings
from ..services.uploads import load_upload
from ..vlm.captioner import Captioner
from ..workflow.schema import CaptionOut
from .deps import get_captioner, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/vlm", tags=["vlm"])

@router.post("/caption", response_model=CaptionOut)
async def caption(
    image: UploadFile = File(...),
    captioner: Captioner = Depends(get_captioner),
    cfg: Settings = Depends(get_settings),
):
    raw = await image.read()
    uploaded = load_upload(raw, image.content_type, image.filename, max_bytes=cfg.max_upload_bytes)
    try:
        cap = await captioner.caption(uploaded, cfg.caption_instruction)
        return CaptionOut(caption=cap, filename=image.filename)
    except Exception as e:
        logger.exception("one-shot caption failed")
        return CaptionOut(ok=False, error=f"caption-failed: {e!r}", filename=image.filename)
