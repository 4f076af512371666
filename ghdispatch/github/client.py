"""GitHub Actions REST client used by the dispatch orchestrator."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import os
import typing as typ
from urllib.parse import quote

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import ArtifactDescriptor, ArtifactsPage, WorkflowRun, WorkflowRunsPage

_DEFAULT_API_URL = "https://api.github.com"
_API_VERSION = "2022-11-28"
_HTTP_ERROR_STATUS_THRESHOLD = 400

_T = typ.TypeVar("_T")


class GitHubActionsClient(typ.Protocol):
    """Interface for the Actions REST calls a dispatch needs."""

    async def create_workflow_dispatch(
        self,
        owner: str,
        repo: str,
        workflow_id: str | int,
        *,
        ref: str,
        inputs: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Trigger a ``workflow_dispatch`` event for a workflow on ``ref``."""
        ...

    async def list_workflow_runs(  # noqa: PLR0913
        self,
        owner: str,
        repo: str,
        workflow_id: str | int,
        *,
        event: str,
        branch: str,
        per_page: int,
    ) -> list[WorkflowRun]:
        """Return the most recent runs of a workflow matching the filters."""
        ...

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        """Return the current snapshot of a single run."""
        ...

    async def list_run_artifacts(
        self, owner: str, repo: str, run_id: int
    ) -> list[ArtifactDescriptor]:
        """Return the artifacts uploaded by a run."""
        ...

    async def download_artifact(self, owner: str, repo: str, artifact_id: int) -> bytes:
        """Return the zip archive bytes for an artifact."""
        ...

    async def aclose(self) -> None:
        """Release any owned transport resources."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = 30.0
    user_agent: str = "ghdispatch/0.1"

    @classmethod
    def from_env(cls, token: str) -> GitHubRestConfig:
        """Build configuration for ``token``, honouring `GHDISPATCH_GITHUB_API_URL`.

        The override points the client at a GitHub Enterprise Server
        instance, e.g. ``https://ghe.example.com/api/v3``.
        """
        api_url = os.environ.get("GHDISPATCH_GITHUB_API_URL", "").strip()
        if not api_url:
            return cls(token=token)
        if not api_url.startswith(("http://", "https://")):
            raise GitHubConfigError.invalid_api_url(api_url)
        return cls(token=token, api_url=api_url)


def _segment(value: str | int) -> str:
    return quote(str(value), safe="")


def _decode(content: bytes, payload_type: type[_T], *, field: str) -> _T:
    try:
        return msgspec.json.decode(content, type=payload_type)
    except msgspec.ValidationError as exc:
        raise GitHubResponseShapeError.invalid(field, str(exc)) from exc
    except msgspec.DecodeError as exc:
        raise GitHubResponseShapeError.missing(field) from exc


class GitHubActionsRestClient:
    """``httpx`` implementation of :class:`GitHubActionsClient`."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._base_url = config.api_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
            "User-Agent": config.user_agent,
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def create_workflow_dispatch(
        self,
        owner: str,
        repo: str,
        workflow_id: str | int,
        *,
        ref: str,
        inputs: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Trigger a ``workflow_dispatch`` event; GitHub answers 204 with no body."""
        body: dict[str, typ.Any] = {"ref": ref}
        if inputs:
            body["inputs"] = dict(inputs)
        path = (
            f"/repos/{_segment(owner)}/{_segment(repo)}/actions/workflows/"
            f"{_segment(workflow_id)}/dispatches"
        )
        await self._request("POST", path, json=body)

    async def list_workflow_runs(  # noqa: PLR0913
        self,
        owner: str,
        repo: str,
        workflow_id: str | int,
        *,
        event: str,
        branch: str,
        per_page: int,
    ) -> list[WorkflowRun]:
        """Return the most recent runs of a workflow matching the filters."""
        path = (
            f"/repos/{_segment(owner)}/{_segment(repo)}/actions/workflows/"
            f"{_segment(workflow_id)}/runs"
        )
        response = await self._request(
            "GET",
            path,
            params={"event": event, "branch": branch, "per_page": per_page},
        )
        page = _decode(response.content, WorkflowRunsPage, field="workflow_runs")
        return page.workflow_runs

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        """Return the current snapshot of a single run."""
        path = f"/repos/{_segment(owner)}/{_segment(repo)}/actions/runs/{run_id}"
        response = await self._request("GET", path)
        return _decode(response.content, WorkflowRun, field="workflow_run")

    async def list_run_artifacts(
        self, owner: str, repo: str, run_id: int
    ) -> list[ArtifactDescriptor]:
        """Return the artifacts uploaded by a run, in API order."""
        path = (
            f"/repos/{_segment(owner)}/{_segment(repo)}/actions/runs/{run_id}/artifacts"
        )
        response = await self._request("GET", path)
        page = _decode(response.content, ArtifactsPage, field="artifacts")
        return page.artifacts

    async def download_artifact(self, owner: str, repo: str, artifact_id: int) -> bytes:
        """Return the zip archive bytes for an artifact.

        GitHub answers with a redirect to short-lived blob storage; ``httpx``
        drops the ``Authorization`` header when the redirect changes origin.
        """
        path = (
            f"/repos/{_segment(owner)}/{_segment(repo)}/actions/artifacts/"
            f"{artifact_id}/zip"
        )
        response = await self._request("GET", path, follow_redirects=True)
        return response.content

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, typ.Any] | None = None,
        json: dict[str, typ.Any] | None = None,
        follow_redirects: bool = False,
    ) -> httpx.Response:
        """Send one request and translate transport and status failures."""
        try:
            response = await self._client.request(
                method,
                f"{self._base_url}{path}",
                params=params,
                json=json,
                headers=self._headers,
                follow_redirects=follow_redirects,
            )
        except httpx.TimeoutException as exc:
            raise GitHubAPIError.timeout(method, path) from exc
        except httpx.RequestError as exc:
            raise GitHubAPIError.network_error(method, path, str(exc)) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(method, path, response.status_code)
        return response
