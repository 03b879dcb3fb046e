"""
Purpose:
- In-process map of session id -> ImageWorkflow.
- Bounded: the least recently used session is dropped past `max_sessions`.
- Never written anywhere; a restart forgets everything.
"""

from __future__ import annotations
import logging
import secrets
from collections import OrderedDict
from typing import Callable
from ..core.errors import UnknownSessionError
from .machine import ImageWorkflow

logger = logging.getLogger(__name__)

class SessionStore:
    def __init__(self, factory: Callable[[], ImageWorkflow], max_sessions: int = 256):
        self._factory = factory
        self._max = max_sessions
        self._sessions: "OrderedDict[str, ImageWorkflow]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self) -> tuple[str, ImageWorkflow]:
        sid = secrets.token_urlsafe(16)
        wf = self._factory()
        self._sessions[sid] = wf
        while len(self._sessions) > self._max:
            old, _ = self._sessions.popitem(last=False)
            logger.info("evicted session %s", old[:6])
        return sid, wf

    def get(self, session_id: str) -> ImageWorkflow:
        try:
            wf = self._sessions[session_id]
        except KeyError:
            raise UnknownSessionError("Session not found; reload the page to start over.") from None
        self._sessions.move_to_end(session_id)
        return wf
