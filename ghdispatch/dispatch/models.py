"""Request and result types for a single workflow dispatch."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import types
import typing as typ

from .errors import DispatchRequestError


def _require_text(field: str, value: object) -> None:
    if not isinstance(value, str) or not value.strip():
        raise DispatchRequestError.empty_field(field)


def _validate_workflow_id(workflow_id: object) -> None:
    if isinstance(workflow_id, bool):
        raise DispatchRequestError.invalid_workflow_id(workflow_id)
    if isinstance(workflow_id, int):
        if workflow_id < 1:
            raise DispatchRequestError.invalid_workflow_id(workflow_id)
        return
    if not isinstance(workflow_id, str) or not workflow_id.strip():
        raise DispatchRequestError.invalid_workflow_id(workflow_id)


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchRequest:
    """Parameters for dispatching one workflow run.

    Attributes
    ----------
    owner
        Repository owner (organisation or user).
    repo
        Repository name.
    workflow_id
        Workflow file name (``build.yml``) or numeric workflow id.
    ref
        Branch or tag the workflow runs on.
    inputs
        ``workflow_dispatch`` inputs; keys and values must be strings.
    token
        Explicit GitHub token. When ``None`` the token is read from the
        environment.
    wait_for_completion
        Discover the run and poll it until it completes.
    output_artifact_name
        Name of an artifact whose first ``.json`` entry becomes the result
        outputs. Only used when waiting for completion.

    """

    owner: str
    repo: str
    workflow_id: str | int
    ref: str
    inputs: cabc.Mapping[str, str] = dataclasses.field(default_factory=dict)
    token: str | None = dataclasses.field(default=None, repr=False)
    wait_for_completion: bool = False
    output_artifact_name: str | None = None

    def __post_init__(self) -> None:
        """Reject blank identifiers and non-string inputs, then freeze inputs."""
        _require_text("owner", self.owner)
        _require_text("repo", self.repo)
        _require_text("ref", self.ref)
        _validate_workflow_id(self.workflow_id)
        inputs = dict(self.inputs)
        for key, value in inputs.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise DispatchRequestError.invalid_input(key)
        object.__setattr__(self, "inputs", types.MappingProxyType(inputs))

    @property
    def repo_slug(self) -> str:
        """Return the repository in ``owner/name`` form."""
        return f"{self.owner}/{self.repo}"


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchResult:
    """Outcome of a dispatch.

    ``conclusion`` is only set when the caller waited for completion.
    ``has_outputs`` distinguishes an artifact whose JSON is ``null`` from no
    artifact output at all.
    """

    run_id: int | None = None
    run_url: str | None = None
    conclusion: str | None = None
    outputs: typ.Any = None
    has_outputs: bool = False

    def as_outputs(self) -> dict[str, typ.Any]:
        """Return the action outputs that were produced, keyed by name."""
        produced: dict[str, typ.Any] = {}
        if self.conclusion is not None:
            produced["conclusion"] = self.conclusion
        if self.has_outputs:
            produced["outputs"] = self.outputs
        return produced
