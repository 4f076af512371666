"""Command-line entry point for dispatching a GitHub Actions workflow.

Example::

    ghdispatch octo reef build.yml --ref main --input env=staging
    ghdispatch octo reef build.yml --ref main --wait --output-artifact meta

The produced outputs (``conclusion`` and ``outputs``) are printed to stdout as
JSON. The token is read from ``--token``, ``GITHUB_TOKEN`` or ``GH_TOKEN``.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

import msgspec

from ghdispatch.dispatch import (
    DispatchError,
    DispatchOrchestrator,
    DispatchPollingConfig,
    DispatchRequest,
)
from ghdispatch.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from ghdispatch.logging import configure_logging, get_logger, log_error, log_warning

logger = get_logger(__name__)


def _parse_input(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        msg = f"expected KEY=VALUE, got: {raw!r}"
        raise argparse.ArgumentTypeError(msg)
    return (key.strip(), value)


def _parse_workflow_id(raw: str) -> str | int:
    """Treat all-digit identifiers as numeric workflow ids."""
    return int(raw) if raw.isdigit() else raw


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghdispatch",
        description=(
            "Dispatch a GitHub Actions workflow on a branch or tag, optionally "
            "wait for completion and fetch a JSON output artifact."
        ),
    )
    parser.add_argument("owner", help="Repository owner (org or user)")
    parser.add_argument("repo", help="Repository name")
    parser.add_argument(
        "workflow",
        type=_parse_workflow_id,
        help="Workflow file name or numeric workflow id",
    )
    parser.add_argument(
        "--ref", required=True, help="Branch or tag to run the workflow on"
    )
    parser.add_argument(
        "--input",
        dest="inputs",
        action="append",
        type=_parse_input,
        default=[],
        metavar="KEY=VALUE",
        help="Workflow input; repeat for several inputs",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to GITHUB_TOKEN, then GH_TOKEN)",
    )
    parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the workflow run to complete",
    )
    parser.add_argument(
        "--output-artifact",
        default=None,
        metavar="NAME",
        help="Artifact whose JSON file becomes the outputs (requires --wait)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("GHDISPATCH_LOG_LEVEL", "INFO"),
        help="Log level (default: GHDISPATCH_LOG_LEVEL or INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Dispatch a workflow and print its outputs.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the dispatch fails.

    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    level, invalid = configure_logging(args.log_level)
    if invalid:
        log_warning(logger, "Invalid log level %r; using %s", args.log_level, level)

    if args.output_artifact and not args.wait:
        log_warning(logger, "--output-artifact has no effect without --wait")

    try:
        request = DispatchRequest(
            owner=args.owner,
            repo=args.repo,
            workflow_id=args.workflow,
            ref=args.ref,
            inputs=dict(args.inputs),
            token=args.token,
            wait_for_completion=args.wait,
            output_artifact_name=args.output_artifact,
        )
        orchestrator = DispatchOrchestrator(DispatchPollingConfig.from_env())
        result = asyncio.run(orchestrator.dispatch(request))
    except (
        DispatchError,
        GitHubAPIError,
        GitHubConfigError,
        GitHubResponseShapeError,
        ValueError,
    ) as exc:
        log_error(logger, "Workflow dispatch failed: %s", exc)
        print(f"ghdispatch: {exc}", file=sys.stderr)
        return 1

    print(msgspec.json.encode(result.as_outputs()).decode("utf-8"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
