"""
Purpose:
- Exception types raised by the workflow and the model adapters.
- API layer maps WorkflowError subclasses to HTTP status codes via `status_code`.
"""

from __future__ import annotations


class ServiceError(Exception):
    """A hosted (or local) model call failed. Wraps the provider exception."""


class CaptionError(ServiceError):
    pass


class GenerationError(ServiceError):
    pass


class WorkflowError(Exception):
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BusyError(WorkflowError):
    status_code = 409


class InvalidActionError(WorkflowError):
    status_code = 409


class GenerationGateError(WorkflowError):
    status_code = 400


class UnsupportedImageError(WorkflowError):
    status_code = 415


class UnknownSessionError(WorkflowError):
    status_code = 404


class UnknownAspectRatioError(WorkflowError):
    status_code = 404


class UploadTooLargeError(WorkflowError):
    status_code = 413
