"""
Purpose:
- FastAPI dependencies that pull the shared objects off app.state.
"""

from fastapi import Request
from ..core.settings import Settings
from ..workflow.sessions import SessionStore
from ..vlm.captioner import Captioner

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions

def get_captioner(request: Request) -> Captioner:
    return request.app.state.captioner
