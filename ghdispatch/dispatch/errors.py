"""Errors surfaced by workflow dispatch operations."""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for dispatch failures surfaced to callers."""


class DispatchRequestError(DispatchError, ValueError):
    """Raised when a dispatch request is missing or has malformed fields."""

    @classmethod
    def empty_field(cls, field: str) -> DispatchRequestError:
        """Return an error for a required field that is blank."""
        return cls(f"{field} must be a non-empty string")

    @classmethod
    def invalid_workflow_id(cls, workflow_id: object) -> DispatchRequestError:
        """Return an error for a workflow id that is neither a name nor an id."""
        return cls(
            "workflow_id must be a workflow file name or a positive integer id, "
            f"got: {workflow_id!r}"
        )

    @classmethod
    def invalid_input(cls, key: object) -> DispatchRequestError:
        """Return an error for a workflow input that is not string to string."""
        return cls(f"workflow inputs must map strings to strings, got key: {key!r}")


class MissingCredentialError(DispatchError):
    """Raised when no GitHub token is supplied or found in the environment."""

    @classmethod
    def not_found(cls, env_vars: tuple[str, ...]) -> MissingCredentialError:
        """Return an error naming the environment variables that were checked."""
        names = ", ".join(env_vars)
        return cls(
            f"A GitHub token must be provided in the request or via one of: {names}"
        )


class RunNotFoundError(DispatchError):
    """Raised when no run for the dispatch appears within the discovery budget."""

    def __init__(self, message: str, *, attempts: int) -> None:
        """Initialise with a message and the number of list calls made."""
        self.attempts = attempts
        super().__init__(message)

    @classmethod
    def for_ref(
        cls, workflow_id: str | int, ref: str, attempts: int
    ) -> RunNotFoundError:
        """Return an error for a run that never appeared on ``ref``."""
        return cls(
            f"Unable to find a workflow_dispatch run of {workflow_id} on {ref} "
            f"after {attempts} attempts",
            attempts=attempts,
        )


class DispatchTimeoutError(DispatchError):
    """Raised when a run does not complete within the polling budget."""

    def __init__(self, message: str, *, run_id: int, attempts: int) -> None:
        """Initialise with a message, the run id and the poll count."""
        self.run_id = run_id
        self.attempts = attempts
        super().__init__(message)

    @classmethod
    def for_run(
        cls, run_id: int, attempts: int, last_status: str
    ) -> DispatchTimeoutError:
        """Return an error for a run still unfinished after ``attempts`` polls."""
        return cls(
            f"Timed out waiting for workflow run {run_id} to complete after "
            f"{attempts} attempts (last status: {last_status})",
            run_id=run_id,
            attempts=attempts,
        )


class DispatchCancelledError(DispatchError):
    """Raised when the caller's cancellation signal interrupts a poll wait."""

    @classmethod
    def during(cls, phase: str) -> DispatchCancelledError:
        """Return an error naming the phase that was interrupted."""
        return cls(f"Dispatch cancelled during {phase}")
