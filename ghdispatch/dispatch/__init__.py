"""Dispatch GitHub Actions workflows and await their runs."""

from __future__ import annotations

from .artifacts import ArtifactExtractionError, ExtractedJSON, extract_json
from .config import DispatchPollingConfig
from .credentials import TOKEN_ENV_VARS, resolve_token
from .errors import (
    DispatchCancelledError,
    DispatchError,
    DispatchRequestError,
    DispatchTimeoutError,
    MissingCredentialError,
    RunNotFoundError,
)
from .models import DispatchRequest, DispatchResult
from .observability import DispatchEventLogger, DispatchEventType
from .orchestrator import DispatchOrchestrator, dispatch_workflow, select_dispatched_run

__all__ = [
    "TOKEN_ENV_VARS",
    "ArtifactExtractionError",
    "DispatchCancelledError",
    "DispatchError",
    "DispatchEventLogger",
    "DispatchEventType",
    "DispatchOrchestrator",
    "DispatchPollingConfig",
    "DispatchRequest",
    "DispatchRequestError",
    "DispatchResult",
    "DispatchTimeoutError",
    "ExtractedJSON",
    "MissingCredentialError",
    "RunNotFoundError",
    "dispatch_workflow",
    "extract_json",
    "resolve_token",
    "select_dispatched_run",
]
