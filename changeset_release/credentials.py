"""Credential and git identity setup.

The changesets CLI shells out to npm and git, which read their credentials
from files in the user's home directory. These helpers put the tokens where
those tools look for them. Failures are fatal: nothing downstream works
without credentials.
"""

from __future__ import annotations

import re
from pathlib import Path

from .errors import CredentialsError
from .shell import git

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"

_NPM_AUTH_LINE_RE = re.compile(r"^\s*//registry\.npmjs\.org/:[_-]authToken=", re.I)


def _npm_auth_line(npm_token: str) -> str:
    return f"//registry.npmjs.org/:_authToken={npm_token}"


def configure_npmrc(npm_token: str, home: Path) -> Path:
    """Make sure ~/.npmrc carries an auth token for the npm registry.

    An existing token line is respected as-is, so a runner that was set up
    with its own registry credentials keeps them.

    Returns:
        Path of the .npmrc file.
    """
    npmrc = home / ".npmrc"
    try:
        if npmrc.exists():
            print("  Found existing user .npmrc file")
            content = npmrc.read_text()
            if any(_NPM_AUTH_LINE_RE.match(line) for line in content.splitlines()):
                print("  Found existing auth token for the npm registry")
            else:
                print("  No auth token for the npm registry found, adding one")
                with npmrc.open("a") as fh:
                    fh.write(f"\n{_npm_auth_line(npm_token)}\n")
        else:
            print("  No user .npmrc file found, creating one")
            npmrc.write_text(f"{_npm_auth_line(npm_token)}\n")
    except OSError as exc:
        raise CredentialsError(f"Failed to write {npmrc}: {exc}") from exc
    return npmrc


def write_netrc(github_token: str, home: Path) -> Path:
    """Write ~/.netrc so git can push to github.com over https."""
    netrc = home / ".netrc"
    try:
        netrc.write_text(
            f"machine github.com\nlogin {BOT_NAME}\npassword {github_token}"
        )
    except OSError as exc:
        raise CredentialsError(f"Failed to write {netrc}: {exc}") from exc
    return netrc


def setup_git_user(cwd: Path) -> None:
    """Commit as github-actions[bot] in this repository."""
    git("config", "user.name", BOT_NAME, cwd=cwd)
    git("config", "user.email", BOT_EMAIL, cwd=cwd)
