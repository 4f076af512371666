"""Typed models for GitHub Actions REST payloads."""

from __future__ import annotations

import datetime as dt
import enum

import msgspec


class WorkflowRunStatus(enum.StrEnum):
    """Workflow run statuses reported by the Actions API."""

    REQUESTED = "requested"
    QUEUED = "queued"
    PENDING = "pending"
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class WorkflowRun(msgspec.Struct, frozen=True, kw_only=True):
    """Snapshot of one workflow run.

    ``status`` and ``conclusion`` are kept as raw strings so values GitHub adds
    later still decode; compare against :class:`WorkflowRunStatus`.
    """

    id: int
    status: str
    created_at: dt.datetime
    head_branch: str | None = None
    conclusion: str | None = None
    html_url: str | None = None
    event: str | None = None

    @property
    def is_completed(self) -> bool:
        """Return True once the run has reached a terminal state."""
        return self.status == WorkflowRunStatus.COMPLETED


class ArtifactDescriptor(msgspec.Struct, frozen=True, kw_only=True):
    """Metadata for an artifact uploaded by a workflow run."""

    id: int
    name: str
    size_in_bytes: int = 0
    expired: bool = False


class WorkflowRunsPage(msgspec.Struct, kw_only=True):
    """Body of the list-workflow-runs endpoint."""

    workflow_runs: list[WorkflowRun]
    total_count: int = 0


class ArtifactsPage(msgspec.Struct, kw_only=True):
    """Body of the list-run-artifacts endpoint."""

    artifacts: list[ArtifactDescriptor]
    total_count: int = 0
