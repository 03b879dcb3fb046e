"""
Purpose:
- FastAPI application factory and router mounts.
- Builds the caption / image backends once and shares them through app.state;
  tests pass fakes straight into create_app().
- Uvicorn will serve this on settings.host:settings.port.
"""

import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from .core.errors import WorkflowError
from .core.genai import build_genai_client
from .core.logging import configure_logging
from .core.settings import Settings, settings as default_settings
from .imagegen.registry import get_synthesizer
from .imagegen.synthesizer import ImageSynthesizer
from .vlm.captioner import Captioner
from .vlm.registry import get_captioner
from .workflow.machine import ImageWorkflow
from .workflow.schema import SessionView
from .workflow.sessions import SessionStore
from .api.health import router as health_router
from .api.pages import STATIC_DIR, router as pages_router
from .api.sessions import router as sessions_router
from .api.vlm import router as vlm_router

logger = logging.getLogger(__name__)

def _session_id(request: Request) -> Optional[str]:
    return request.path_params.get("session_id")

async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    sid = _session_id(request)
    state = None
    store: SessionStore = request.app.state.sessions
    if sid and sid in store:
        state = SessionView.build(sid, store.get(sid).state).model_dump()
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.message, "state": state},
    )

def create_app(
    cfg: Optional[Settings] = None,
    captioner: Optional[Captioner] = None,
    synthesizer: Optional[ImageSynthesizer] = None,
) -> FastAPI:
    cfg = cfg or default_settings
    configure_logging(cfg)

    if captioner is None or synthesizer is None:
        client = build_genai_client(cfg) if cfg.has_api_key else None
        captioner = captioner or get_captioner(cfg, client)
        synthesizer = synthesizer or get_synthesizer(cfg, client)

    app = FastAPI(title="Multi-Resolution Image Generator", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = cfg
    app.state.captioner = captioner
    app.state.synthesizer = synthesizer
    app.state.sessions = SessionStore(
        lambda: ImageWorkflow(captioner, synthesizer, instruction=cfg.caption_instruction),
        max_sessions=cfg.max_sessions,
    )
    app.add_exception_handler(WorkflowError, workflow_error_handler)

    app.include_router(health_router)
    app.include_router(pages_router)
    app.include_router(sessions_router)
    app.include_router(vlm_router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    logger.info("captioner=%s synthesizer=%s", captioner.name, synthesizer.name)
    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
