"""Polling configuration for workflow run discovery and completion.

The defaults reproduce fixed-interval polling: 12 discovery attempts and 60
completion attempts, five seconds apart, with no backoff or jitter.

Usage
-----
Use the defaults:

>>> config = DispatchPollingConfig()
>>> config.max_completion_attempts
60

Or load overrides from environment variables:

>>> import os
>>> os.environ["GHDISPATCH_COMPLETION_ATTEMPTS"] = "120"
>>> DispatchPollingConfig.from_env().max_completion_attempts
120

"""

from __future__ import annotations

import dataclasses as dc
import math
import os

_DEFAULT_RUN_DISCOVERY_ATTEMPTS = 12
_DEFAULT_RUN_DISCOVERY_INTERVAL_S = 5.0
_DEFAULT_COMPLETION_ATTEMPTS = 60
_DEFAULT_COMPLETION_INTERVAL_S = 5.0
_DEFAULT_RUNS_PER_PAGE = 5


@dc.dataclass(frozen=True, slots=True)
class DispatchPollingConfig:
    """Attempt budgets and intervals for the dispatch poll loops.

    Attributes
    ----------
    max_run_discovery_attempts
        Number of list-runs calls made while looking for the dispatched run.
    run_discovery_interval_s
        Seconds to wait between discovery attempts.
    max_completion_attempts
        Number of get-run calls made while waiting for completion.
    completion_interval_s
        Seconds to wait between completion polls.
    runs_per_page
        Page size requested from the list-runs endpoint.

    """

    max_run_discovery_attempts: int = _DEFAULT_RUN_DISCOVERY_ATTEMPTS
    run_discovery_interval_s: float = _DEFAULT_RUN_DISCOVERY_INTERVAL_S
    max_completion_attempts: int = _DEFAULT_COMPLETION_ATTEMPTS
    completion_interval_s: float = _DEFAULT_COMPLETION_INTERVAL_S
    runs_per_page: int = _DEFAULT_RUNS_PER_PAGE

    def __post_init__(self) -> None:
        """Validate attempt budgets and intervals."""
        for name in (
            "max_run_discovery_attempts",
            "max_completion_attempts",
            "runs_per_page",
        ):
            if getattr(self, name) < 1:
                msg = f"{name} must be positive, got: {getattr(self, name)}"
                raise ValueError(msg)
        for name in ("run_discovery_interval_s", "completion_interval_s"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                msg = f"{name} must be a non-negative number, got: {value}"
                raise ValueError(msg)

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < 1:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @staticmethod
    def _parse_interval(env_var: str, default: float) -> float:
        """Read a non-negative seconds env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number of seconds, got: {raw!r}"
            raise ValueError(msg) from exc
        if not math.isfinite(value) or value < 0:
            msg = f"{env_var} must be a non-negative number, got: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> DispatchPollingConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``GHDISPATCH_RUN_DISCOVERY_ATTEMPTS``: positive integer.
        - ``GHDISPATCH_RUN_DISCOVERY_INTERVAL_S``: non-negative seconds.
        - ``GHDISPATCH_COMPLETION_ATTEMPTS``: positive integer.
        - ``GHDISPATCH_COMPLETION_INTERVAL_S``: non-negative seconds.

        Returns
        -------
        DispatchPollingConfig
            Configuration instance with values from environment or defaults.

        Raises
        ------
        ValueError
            If any variable is set to a malformed or out-of-range value.

        """
        return cls(
            max_run_discovery_attempts=cls._parse_positive_int(
                "GHDISPATCH_RUN_DISCOVERY_ATTEMPTS", _DEFAULT_RUN_DISCOVERY_ATTEMPTS
            ),
            run_discovery_interval_s=cls._parse_interval(
                "GHDISPATCH_RUN_DISCOVERY_INTERVAL_S",
                _DEFAULT_RUN_DISCOVERY_INTERVAL_S,
            ),
            max_completion_attempts=cls._parse_positive_int(
                "GHDISPATCH_COMPLETION_ATTEMPTS", _DEFAULT_COMPLETION_ATTEMPTS
            ),
            completion_interval_s=cls._parse_interval(
                "GHDISPATCH_COMPLETION_INTERVAL_S", _DEFAULT_COMPLETION_INTERVAL_S
            ),
        )
