"""Unit tests for GitHub token resolution."""

from __future__ import annotations

import pytest

from ghdispatch.dispatch import MissingCredentialError, resolve_token


@pytest.mark.parametrize(
    ("explicit", "environ", "expected"),
    [
        pytest.param(
            "explicit", {"GITHUB_TOKEN": "a", "GH_TOKEN": "b"}, "explicit", id="explicit"
        ),
        pytest.param(None, {"GITHUB_TOKEN": "a", "GH_TOKEN": "b"}, "a", id="github"),
        pytest.param(None, {"GH_TOKEN": "b"}, "b", id="gh"),
        pytest.param(None, {"GITHUB_TOKEN": "  ", "GH_TOKEN": "b"}, "b", id="blank"),
        pytest.param("  ", {"GH_TOKEN": "b"}, "b", id="blank-explicit"),
    ],
)
def test_resolution_order(
    explicit: str | None, environ: dict[str, str], expected: str
) -> None:
    """Explicit tokens win, then GITHUB_TOKEN, then GH_TOKEN."""
    assert resolve_token(explicit, environ=environ) == expected


def test_missing_token_names_variables() -> None:
    """The error lists the environment variables that were consulted."""
    with pytest.raises(MissingCredentialError) as excinfo:
        resolve_token(None, environ={})

    message = str(excinfo.value)
    assert "GITHUB_TOKEN" in message
    assert "GH_TOKEN" in message


def test_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """os.environ is used when no mapping is supplied."""
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    assert resolve_token(None) == "from-env"
