"""
Purpose:
- Session endpoints the browser page drives: upload, edit prompt, toggle ratios,
  generate, fullscreen, download.
- Every response is the full SessionView so the page just re-renders.
- WorkflowError subclasses are turned into {"ok": false, ...} by main.py.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from ..core.settings import Settings
from ..services.uploads import load_upload
from ..workflow.ratios import AspectRatio, catalog
from ..workflow.schema import PromptIn, SessionView
from ..workflow.sessions import SessionStore
from .deps import get_sessions, get_settings

router = APIRouter(prefix="/api/v1", tags=["sessions"])

@router.get("/aspect-ratios")
def aspect_ratios():
    return {"ok": True, "aspect_ratios": catalog()}

@router.post("/sessions", response_model=SessionView, status_code=201)
def create_session(store: SessionStore = Depends(get_sessions)):
    sid, wf = store.create()
    return SessionView.build(sid, wf.state)

@router.get("/sessions/{session_id}", response_model=SessionView)
def get_session(session_id: str, store: SessionStore = Depends(get_sessions)):
    return SessionView.build(session_id, store.get(session_id).state)

@router.post("/sessions/{session_id}/upload", response_model=SessionView)
async def upload_image(
    session_id: str,
    image: UploadFile = File(...),
    store: SessionStore = Depends(get_sessions),
    cfg: Settings = Depends(get_settings),
):
    wf = store.get(session_id)
    raw = await image.read()
    uploaded = load_upload(raw, image.content_type, image.filename, max_bytes=cfg.max_upload_bytes)
    state = await wf.upload(uploaded)
    view = SessionView.build(session_id, state)
    view.ok = state.error is None
    return view

@router.get("/sessions/{session_id}/upload")
def upload_preview(session_id: str, store: SessionStore = Depends(get_sessions)):
    image = store.get(session_id).state.image
    if image is None:
        return Response(status_code=404)
    return Response(content=image.data, media_type=image.mime_type)

@router.put("/sessions/{session_id}/prompt", response_model=SessionView)
def set_prompt(session_id: str, payload: PromptIn, store: SessionStore = Depends(get_sessions)):
    state = store.get(session_id).set_prompt(payload.prompt)
    return SessionView.build(session_id, state)

@router.post("/sessions/{session_id}/aspect-ratios/{ratio}/toggle", response_model=SessionView)
def toggle_aspect_ratio(session_id: str, ratio: str, store: SessionStore = Depends(get_sessions)):
    wf = store.get(session_id)
    state = wf.toggle_aspect_ratio(AspectRatio.parse(ratio))
    return SessionView.build(session_id, state)

@router.post("/sessions/{session_id}/generate", response_model=SessionView)
async def generate(session_id: str, store: SessionStore = Depends(get_sessions)):
    state = await store.get(session_id).generate()
    view = SessionView.build(session_id, state)
    view.ok = state.error is None
    return view

@router.post("/sessions/{session_id}/fullscreen/{index}", response_model=SessionView)
def open_fullscreen(session_id: str, index: int, store: SessionStore = Depends(get_sessions)):
    state = store.get(session_id).open_fullscreen(index)
    return SessionView.build(session_id, state)

@router.delete("/sessions/{session_id}/fullscreen", response_model=SessionView)
def close_fullscreen(session_id: str, store: SessionStore = Depends(get_sessions)):
    state = store.get(session_id).close_fullscreen()
    return SessionView.build(session_id, state)

@router.get("/sessions/{session_id}/images/{index}/download")
def download_image(session_id: str, index: int, store: SessionStore = Depends(get_sessions)):
    img = store.get(session_id).result(index)
    return Response(
        content=img.data,
        media_type=img.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{img.filename}"'},
    )
