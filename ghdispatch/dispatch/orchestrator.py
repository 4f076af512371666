"""Dispatch a workflow, wait for its run, and collect its JSON output.

The ``workflow_dispatch`` endpoint does not return the id of the run it
creates, so the orchestrator has to find the run afterwards: it lists recent
``workflow_dispatch`` runs of the workflow on the requested ref and selects
the most recently created one whose ``head_branch`` equals the ref.

Two dispatches of the same workflow to the same ref in quick succession can
therefore be confused: each caller may select the other's run. The Actions
API offers no correlation token to tell them apart, so callers that dispatch
concurrently should serialise dispatches per ``owner/repo/workflow/ref``.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses
import typing as typ

from ghdispatch.github.client import (
    GitHubActionsClient,
    GitHubActionsRestClient,
    GitHubRestConfig,
)
from ghdispatch.github.errors import GitHubAPIError, GitHubResponseShapeError

from .artifacts import ArtifactExtractionError, ExtractedJSON, extract_json
from .config import DispatchPollingConfig
from .credentials import resolve_token
from .errors import DispatchCancelledError, DispatchTimeoutError, RunNotFoundError
from .models import DispatchRequest, DispatchResult
from .observability import DispatchEventLogger

if typ.TYPE_CHECKING:
    from ghdispatch.github.models import WorkflowRun

DISPATCH_EVENT = "workflow_dispatch"

ClientFactory = cabc.Callable[[str], GitHubActionsClient]


def _default_client_factory(token: str) -> GitHubActionsClient:
    return GitHubActionsRestClient(GitHubRestConfig.from_env(token))


def select_dispatched_run(
    runs: cabc.Iterable[WorkflowRun], ref: str
) -> WorkflowRun | None:
    """Return the most recently created run whose head branch equals ``ref``.

    Ties on ``created_at`` keep the run the API listed first.
    """
    candidates = [run for run in runs if run.head_branch == ref]
    if not candidates:
        return None
    return max(candidates, key=lambda run: run.created_at)


class DispatchOrchestrator:
    """Trigger a workflow and optionally await its run and artifact output.

    Parameters
    ----------
    config
        Attempt budgets and intervals for the discovery and completion loops.
    client_factory
        Builds a client for a resolved token. One client is created per
        dispatch and closed before :meth:`dispatch` returns.
    event_logger
        Receives phase-transition events.

    Examples
    --------
    >>> import asyncio
    >>> orchestrator = DispatchOrchestrator()
    >>> request = DispatchRequest(
    ...     owner="octo", repo="reef", workflow_id="build.yml", ref="main"
    ... )
    >>> # result = asyncio.run(orchestrator.dispatch(request))

    """

    def __init__(
        self,
        config: DispatchPollingConfig | None = None,
        *,
        client_factory: ClientFactory | None = None,
        event_logger: DispatchEventLogger | None = None,
    ) -> None:
        """Store configuration and collaborators."""
        self._config = config or DispatchPollingConfig()
        self._client_factory = client_factory or _default_client_factory
        self._events = event_logger or DispatchEventLogger()

    @property
    def config(self) -> DispatchPollingConfig:
        """Read-only access to the polling configuration."""
        return self._config

    async def dispatch(
        self,
        request: DispatchRequest,
        *,
        cancel: asyncio.Event | None = None,
    ) -> DispatchResult:
        """Dispatch the workflow described by ``request``.

        Parameters
        ----------
        request
            Workflow, ref, inputs and wait options for the dispatch.
        cancel
            Optional signal; when set, the current wait between poll attempts
            ends and the dispatch fails with :class:`DispatchCancelledError`.

        Returns
        -------
        DispatchResult
            Empty unless ``wait_for_completion`` was requested, in which case
            the run id and conclusion are set, plus the artifact outputs when
            an artifact was requested and parsed.

        Raises
        ------
        MissingCredentialError
            If no token is available; raised before any network call.
        RunNotFoundError
            If no matching run appears within the discovery budget.
        DispatchTimeoutError
            If the run does not complete within the polling budget.
        DispatchCancelledError
            If ``cancel`` is set while waiting between attempts.
        GitHubAPIError
            If the trigger, a discovery call or a completion poll fails.

        """
        token = resolve_token(request.token)
        client = self._client_factory(token)
        try:
            return await self._dispatch_with(client, request, cancel)
        finally:
            await client.aclose()

    async def _dispatch_with(
        self,
        client: GitHubActionsClient,
        request: DispatchRequest,
        cancel: asyncio.Event | None,
    ) -> DispatchResult:
        await client.create_workflow_dispatch(
            request.owner,
            request.repo,
            request.workflow_id,
            ref=request.ref,
            inputs=request.inputs,
        )
        self._events.log_dispatch_issued(request)

        if not request.wait_for_completion:
            self._events.log_not_waiting(request)
            return DispatchResult()

        run = await self._discover_run(client, request, cancel)
        completed = await self._await_completion(client, request, run, cancel)
        result = DispatchResult(
            run_id=completed.id,
            run_url=completed.html_url or run.html_url,
            conclusion=completed.conclusion,
        )

        artifact_name = request.output_artifact_name
        if not artifact_name:
            return result

        extracted = await self._extract_outputs(
            client, request, completed.id, artifact_name
        )
        if extracted is None:
            return result
        return dataclasses.replace(result, outputs=extracted.value, has_outputs=True)

    async def _discover_run(
        self,
        client: GitHubActionsClient,
        request: DispatchRequest,
        cancel: asyncio.Event | None,
    ) -> WorkflowRun:
        max_attempts = self._config.max_run_discovery_attempts
        for attempt in range(1, max_attempts + 1):
            runs = await client.list_workflow_runs(
                request.owner,
                request.repo,
                request.workflow_id,
                event=DISPATCH_EVENT,
                branch=request.ref,
                per_page=self._config.runs_per_page,
            )
            run = select_dispatched_run(runs, request.ref)
            if run is not None:
                self._events.log_run_found(request, run)
                return run

            self._events.log_run_pending(request, attempt, max_attempts)
            if attempt < max_attempts:
                await _pause(
                    self._config.run_discovery_interval_s, cancel, "run discovery"
                )

        raise RunNotFoundError.for_ref(request.workflow_id, request.ref, max_attempts)

    async def _await_completion(
        self,
        client: GitHubActionsClient,
        request: DispatchRequest,
        run: WorkflowRun,
        cancel: asyncio.Event | None,
    ) -> WorkflowRun:
        max_attempts = self._config.max_completion_attempts
        interval_s = self._config.completion_interval_s
        last_status = run.status
        for attempt in range(1, max_attempts + 1):
            snapshot = await client.get_workflow_run(
                request.owner, request.repo, run.id
            )
            if snapshot.is_completed:
                self._events.log_run_completed(snapshot, attempt)
                return snapshot

            last_status = snapshot.status
            self._events.log_run_polled(snapshot, attempt, interval_s)
            if attempt < max_attempts:
                await _pause(interval_s, cancel, "completion polling")

        raise DispatchTimeoutError.for_run(run.id, max_attempts, last_status)

    async def _extract_outputs(
        self,
        client: GitHubActionsClient,
        request: DispatchRequest,
        run_id: int,
        artifact_name: str,
    ) -> ExtractedJSON | None:
        """Fetch and decode the named artifact; failures are logged, not raised."""
        try:
            artifacts = await client.list_run_artifacts(
                request.owner, request.repo, run_id
            )
            artifact = next((a for a in artifacts if a.name == artifact_name), None)
            if artifact is None:
                self._events.log_artifact_missing(run_id, artifact_name)
                return None

            archive = await client.download_artifact(
                request.owner, request.repo, artifact.id
            )
            extracted = extract_json(archive)
        except (
            GitHubAPIError,
            GitHubResponseShapeError,
            ArtifactExtractionError,
        ) as exc:
            self._events.log_artifact_failed(run_id, artifact_name, exc)
            return None

        if extracted is None:
            self._events.log_artifact_no_json(run_id, artifact_name)
            return None

        self._events.log_artifact_parsed(run_id, artifact_name, extracted.entry_name)
        return extracted


async def _pause(seconds: float, cancel: asyncio.Event | None, phase: str) -> None:
    """Sleep between poll attempts, ending early if ``cancel`` is set."""
    if cancel is None:
        await asyncio.sleep(seconds)
        return
    if cancel.is_set():
        raise DispatchCancelledError.during(phase)
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except TimeoutError:
        return
    raise DispatchCancelledError.during(phase)


async def dispatch_workflow(
    request: DispatchRequest,
    *,
    config: DispatchPollingConfig | None = None,
    cancel: asyncio.Event | None = None,
) -> DispatchResult:
    """Dispatch ``request`` with the default GitHub REST client."""
    return await DispatchOrchestrator(config).dispatch(request, cancel=cancel)
