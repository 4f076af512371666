"""Structured phase-transition events for workflow dispatches.

Every event is emitted through femtologging as ``[event.type] key=value ...``
so log aggregators can parse dispatch progress without a custom formatter.
Progress is logged at INFO; degraded artifact extraction at WARNING.
"""

from __future__ import annotations

import enum
import typing as typ

from ghdispatch.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from ghdispatch.github.models import WorkflowRun

    from .models import DispatchRequest

logger = get_logger(__name__)


class DispatchEventType(enum.StrEnum):
    """Structured log event types for dispatch phases."""

    DISPATCH_ISSUED = "dispatch.issued"
    DISPATCH_NOT_WAITING = "dispatch.not_waiting"
    RUN_PENDING = "run.pending"
    RUN_FOUND = "run.found"
    RUN_POLLED = "run.polled"
    RUN_COMPLETED = "run.completed"
    ARTIFACT_MISSING = "artifact.missing"
    ARTIFACT_NO_JSON = "artifact.no_json"
    ARTIFACT_PARSED = "artifact.parsed"
    ARTIFACT_FAILED = "artifact.failed"


class DispatchEventLogger:
    """Emit structured dispatch events via femtologging."""

    def log_dispatch_issued(self, request: DispatchRequest) -> None:
        """Log that the workflow_dispatch trigger was accepted."""
        log_info(
            logger,
            "[%s] repo_slug=%s workflow_id=%s ref=%s input_count=%d",
            DispatchEventType.DISPATCH_ISSUED,
            request.repo_slug,
            request.workflow_id,
            request.ref,
            len(request.inputs),
        )

    def log_not_waiting(self, request: DispatchRequest) -> None:
        """Log that the caller did not ask to wait for completion."""
        log_info(
            logger,
            "[%s] repo_slug=%s workflow_id=%s",
            DispatchEventType.DISPATCH_NOT_WAITING,
            request.repo_slug,
            request.workflow_id,
        )

    def log_run_pending(
        self, request: DispatchRequest, attempt: int, max_attempts: int
    ) -> None:
        """Log a discovery attempt that found no matching run yet."""
        log_info(
            logger,
            "[%s] repo_slug=%s ref=%s attempt=%d max_attempts=%d",
            DispatchEventType.RUN_PENDING,
            request.repo_slug,
            request.ref,
            attempt,
            max_attempts,
        )

    def log_run_found(self, request: DispatchRequest, run: WorkflowRun) -> None:
        """Log the run selected for the dispatch."""
        log_info(
            logger,
            "[%s] repo_slug=%s run_id=%d created_at=%s html_url=%s",
            DispatchEventType.RUN_FOUND,
            request.repo_slug,
            run.id,
            run.created_at.isoformat(),
            run.html_url,
        )

    def log_run_polled(
        self, run: WorkflowRun, attempt: int, interval_s: float
    ) -> None:
        """Log a completion poll that observed a non-terminal status."""
        log_info(
            logger,
            "[%s] run_id=%d attempt=%d status=%s next_poll_in_s=%.1f",
            DispatchEventType.RUN_POLLED,
            run.id,
            attempt,
            run.status,
            interval_s,
        )

    def log_run_completed(self, run: WorkflowRun, attempts: int) -> None:
        """Log the terminal conclusion of the run."""
        log_info(
            logger,
            "[%s] run_id=%d conclusion=%s attempts=%d",
            DispatchEventType.RUN_COMPLETED,
            run.id,
            run.conclusion,
            attempts,
        )

    def log_artifact_missing(self, run_id: int, artifact_name: str) -> None:
        """Warn that the requested artifact is not attached to the run."""
        log_warning(
            logger,
            "[%s] run_id=%d artifact_name=%s",
            DispatchEventType.ARTIFACT_MISSING,
            run_id,
            artifact_name,
        )

    def log_artifact_no_json(self, run_id: int, artifact_name: str) -> None:
        """Warn that the artifact archive holds no JSON entry."""
        log_warning(
            logger,
            "[%s] run_id=%d artifact_name=%s",
            DispatchEventType.ARTIFACT_NO_JSON,
            run_id,
            artifact_name,
        )

    def log_artifact_parsed(
        self, run_id: int, artifact_name: str, entry_name: str
    ) -> None:
        """Log that the artifact JSON was parsed into outputs."""
        log_info(
            logger,
            "[%s] run_id=%d artifact_name=%s entry=%s",
            DispatchEventType.ARTIFACT_PARSED,
            run_id,
            artifact_name,
            entry_name,
        )

    def log_artifact_failed(
        self, run_id: int, artifact_name: str, error: BaseException
    ) -> None:
        """Warn that fetching or parsing the artifact failed."""
        log_warning(
            logger,
            "[%s] run_id=%d artifact_name=%s error_type=%s error_message=%s",
            DispatchEventType.ARTIFACT_FAILED,
            run_id,
            artifact_name,
            type(error).__name__,
            str(error),
        )
