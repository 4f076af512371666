"""Behavioural coverage for dispatching and awaiting workflows."""

from __future__ import annotations

import asyncio
import json
import typing as typ

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from ghdispatch.dispatch import (
    DispatchError,
    DispatchOrchestrator,
    DispatchPollingConfig,
    DispatchRequest,
    DispatchResult,
    RunNotFoundError,
)
from ghdispatch.github.models import ArtifactDescriptor
from tests.helpers.actions_fakes import FakeActionsClient, make_run, make_zip

_FEATURE = "../workflow_dispatch.feature"

T = typ.TypeVar("T")


def run_async(coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


class DispatchContext(typ.TypedDict, total=False):
    """Shared mutable scenario state."""

    client: FakeActionsClient
    result: DispatchResult
    error: DispatchError


@scenario(_FEATURE, "Dispatch without waiting only triggers the workflow")
def test_dispatch_without_waiting() -> None:
    """Wrap the pytest-bdd scenario for fire-and-forget dispatch."""


@scenario(
    _FEATURE,
    "Waiting for completion returns the conclusion and artifact outputs",
)
def test_waiting_returns_outputs() -> None:
    """Wrap the pytest-bdd scenario for waiting with an artifact."""


@scenario(
    _FEATURE,
    "A run that never appears is reported after the discovery budget",
)
def test_run_never_appears() -> None:
    """Wrap the pytest-bdd scenario for run discovery exhaustion."""


@scenario(_FEATURE, "A corrupt artifact does not fail the dispatch")
def test_corrupt_artifact() -> None:
    """Wrap the pytest-bdd scenario for best-effort artifact extraction."""


@pytest.fixture
def dispatch_context() -> DispatchContext:
    """Provide fresh scenario state with an empty fake client."""
    return {"client": FakeActionsClient()}


@given("a GitHub token is available in the environment")
def given_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Expose a token through GITHUB_TOKEN."""
    monkeypatch.setenv("GITHUB_TOKEN", "bdd-token")


@given(
    parsers.parse(
        'the workflow "{workflow}" on "{ref}" produces run {run_id:d} '
        'concluding "{conclusion}"'
    )
)
def given_workflow_run(
    dispatch_context: DispatchContext,
    workflow: str,
    ref: str,
    run_id: int,
    conclusion: str,
) -> None:
    """Script a run that appears on the second listing and completes."""
    del workflow
    client = dispatch_context["client"]
    client.run_listings = [[], [make_run(run_id, head_branch=ref)]]
    client.run_snapshots = [
        make_run(run_id, status="in_progress", head_branch=ref),
        make_run(run_id, status="completed", conclusion=conclusion, head_branch=ref),
    ]


@given(parsers.parse('the workflow "{workflow}" never starts a run on "{ref}"'))
def given_no_run(dispatch_context: DispatchContext, workflow: str, ref: str) -> None:
    """Script listings that only ever show runs on other refs."""
    del workflow
    dispatch_context["client"].run_listings = [
        [make_run(7, head_branch=f"{ref}-backport")]
    ]


@given(
    parsers.parse(
        "run {run_id:d} uploads artifact \"{name}\" holding result.json '{payload}'"
    )
)
def given_artifact(
    dispatch_context: DispatchContext, run_id: int, name: str, payload: str
) -> None:
    """Attach a zip artifact holding result.json to the run."""
    del run_id
    client = dispatch_context["client"]
    client.artifacts = [ArtifactDescriptor(id=501, name=name)]
    client.archives = {501: make_zip({"result.json": payload})}


@given(parsers.parse('run {run_id:d} uploads a corrupt artifact "{name}"'))
def given_corrupt_artifact(
    dispatch_context: DispatchContext, run_id: int, name: str
) -> None:
    """Attach an artifact whose bytes are not a zip archive."""
    del run_id
    client = dispatch_context["client"]
    client.artifacts = [ArtifactDescriptor(id=502, name=name)]
    client.archives = {502: b"definitely not a zip"}


def _dispatch(dispatch_context: DispatchContext, request: DispatchRequest) -> None:
    client = dispatch_context["client"]
    orchestrator = DispatchOrchestrator(
        DispatchPollingConfig(run_discovery_interval_s=0, completion_interval_s=0),
        client_factory=lambda _token: client,
    )
    try:
        dispatch_context["result"] = run_async(orchestrator.dispatch(request))
    except DispatchError as exc:
        dispatch_context["error"] = exc


def _request(
    workflow: str, slug: str, ref: str, **options: typ.Any  # noqa: ANN401
) -> DispatchRequest:
    owner, repo = slug.split("/", 1)
    return DispatchRequest(
        owner=owner, repo=repo, workflow_id=workflow, ref=ref, **options
    )


@when(
    parsers.parse(
        'I dispatch "{workflow}" for "{slug}" on "{ref}" without waiting'
    )
)
def when_dispatch_no_wait(
    dispatch_context: DispatchContext, workflow: str, slug: str, ref: str
) -> None:
    """Dispatch without waiting for completion."""
    _dispatch(dispatch_context, _request(workflow, slug, ref))


@when(parsers.parse('I dispatch "{workflow}" for "{slug}" on "{ref}" and wait'))
def when_dispatch_wait(
    dispatch_context: DispatchContext, workflow: str, slug: str, ref: str
) -> None:
    """Dispatch and wait for completion without an artifact."""
    _dispatch(
        dispatch_context, _request(workflow, slug, ref, wait_for_completion=True)
    )


@when(
    parsers.parse(
        'I dispatch "{workflow}" for "{slug}" on "{ref}" and wait for '
        'artifact "{name}"'
    )
)
def when_dispatch_wait_artifact(
    dispatch_context: DispatchContext,
    workflow: str,
    slug: str,
    ref: str,
    name: str,
) -> None:
    """Dispatch, wait for completion and request an artifact."""
    _dispatch(
        dispatch_context,
        _request(
            workflow, slug, ref, wait_for_completion=True, output_artifact_name=name
        ),
    )


@then(parsers.parse("exactly {count:d} trigger call was made"))
def then_trigger_calls(dispatch_context: DispatchContext, count: int) -> None:
    """Assert the number of dispatch trigger calls."""
    actual = dispatch_context["client"].count("create_workflow_dispatch")
    assert actual == count, f"expected {count} trigger calls, got {actual}"


@then("no run listing or run polling calls were made")
def then_no_polling(dispatch_context: DispatchContext) -> None:
    """Assert that the no-wait path never polls."""
    client = dispatch_context["client"]
    assert client.count("list_workflow_runs") == 0
    assert client.count("get_workflow_run") == 0


@then("the dispatch produced no outputs")
def then_no_outputs(dispatch_context: DispatchContext) -> None:
    """Assert an empty result."""
    assert dispatch_context["result"].as_outputs() == {}


@then(parsers.parse('the conclusion is "{conclusion}"'))
def then_conclusion(dispatch_context: DispatchContext, conclusion: str) -> None:
    """Assert the run conclusion."""
    assert dispatch_context["result"].conclusion == conclusion


@then(parsers.parse("the outputs are '{payload}'"))
def then_outputs(dispatch_context: DispatchContext, payload: str) -> None:
    """Assert the parsed artifact outputs."""
    result = dispatch_context["result"]
    assert result.has_outputs is True
    assert result.outputs == json.loads(payload)


@then("the dispatch produced no artifact outputs")
def then_no_artifact_outputs(dispatch_context: DispatchContext) -> None:
    """Assert the dispatch succeeded without outputs."""
    result = dispatch_context["result"]
    assert result.has_outputs is False
    assert "outputs" not in result.as_outputs()


@then("the dispatch fails because the run was not found")
def then_run_not_found(dispatch_context: DispatchContext) -> None:
    """Assert RunNotFoundError was raised."""
    assert isinstance(dispatch_context.get("error"), RunNotFoundError)


@then(parsers.parse("{count:d} run listing calls were made"))
def then_listing_calls(dispatch_context: DispatchContext, count: int) -> None:
    """Assert the number of list-run calls."""
    actual = dispatch_context["client"].count("list_workflow_runs")
    assert actual == count, f"expected {count} list calls, got {actual}"
