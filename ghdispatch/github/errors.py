"""Errors raised by the GitHub Actions REST client."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub REST call fails or returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, method: str, path: str, status_code: int) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(
            f"GitHub REST {method} {path} returned HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def timeout(cls, method: str, path: str) -> GitHubAPIError:
        """Return an error for a request that timed out."""
        return cls(f"GitHub REST {method} {path} timed out")

    @classmethod
    def network_error(cls, method: str, path: str, detail: str) -> GitHubAPIError:
        """Return an error for transport-level failures."""
        return cls(f"GitHub REST {method} {path} failed: {detail}")


class GitHubResponseShapeError(RuntimeError):
    """Raised when a GitHub REST payload does not have the expected shape."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub REST response missing expected field: {field}")

    @classmethod
    def invalid(cls, field: str, detail: str) -> GitHubResponseShapeError:
        """Return an error for a field that failed validation."""
        return cls(f"GitHub REST response field {field} is invalid: {detail}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")

    @classmethod
    def invalid_api_url(cls, url: str) -> GitHubConfigError:
        """Return an error for an API base URL that is not http(s)."""
        return cls(f"GitHub API URL must start with http:// or https://, got: {url!r}")
