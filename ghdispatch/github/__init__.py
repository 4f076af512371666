"""GitHub Actions REST client primitives."""

from __future__ import annotations

from .client import GitHubActionsClient, GitHubActionsRestClient, GitHubRestConfig
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import ArtifactDescriptor, WorkflowRun, WorkflowRunStatus

__all__ = [
    "ArtifactDescriptor",
    "GitHubAPIError",
    "GitHubActionsClient",
    "GitHubActionsRestClient",
    "GitHubConfigError",
    "GitHubResponseShapeError",
    "GitHubRestConfig",
    "WorkflowRun",
    "WorkflowRunStatus",
]
