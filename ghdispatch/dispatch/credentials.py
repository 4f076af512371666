"""GitHub token resolution for dispatch requests."""

from __future__ import annotations

import collections.abc as cabc
import os

from .errors import MissingCredentialError

TOKEN_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "GH_TOKEN")


def resolve_token(
    explicit: str | None,
    *,
    environ: cabc.Mapping[str, str] | None = None,
) -> str:
    """Return the token to authenticate with.

    An explicit non-blank token wins; otherwise the first non-blank value of
    ``GITHUB_TOKEN`` then ``GH_TOKEN`` is used.

    Raises
    ------
    MissingCredentialError
        If neither source yields a token.

    """
    if explicit is not None and explicit.strip():
        return explicit.strip()

    env = os.environ if environ is None else environ
    for name in TOKEN_ENV_VARS:
        value = env.get(name, "").strip()
        if value:
            return value

    raise MissingCredentialError.not_found(TOKEN_ENV_VARS)
