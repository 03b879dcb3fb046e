# Common language: Environment/ops probe that surfaces version pins, configured
# models and which caption / image backends are live (or why we fell back).

from fastapi import APIRouter, Request
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except Exception:
        return "not-installed"

def _backend_status(backend) -> dict:
    return {
        "backend": getattr(backend, "name", backend.__class__.__name__),
        "model": getattr(backend, "model", None),
        "load_warning": getattr(backend, "_reason", None),
    }

@router.get("/healthz")
def healthz(request: Request):
    state = request.app.state
    cfg = state.settings
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic": _ver("pydantic"),
            "pydantic_settings": _ver("pydantic_settings"),
            "google_genai": _ver("google.genai"),
            "PIL": _ver("PIL"),
        },
        "config": {
            "caption_model": cfg.caption_model,
            "image_model": cfg.image_model,
            "output_mime_type": cfg.output_mime_type,
            "env_keys_present": {"GEMINI_API_KEY": cfg.has_api_key},
        },
        "captioner": _backend_status(state.captioner),
        "synthesizer": _backend_status(state.synthesizer),
        "sessions": len(state.sessions),
    }
