"""GitHub pull requests and releases, through the gh CLI.

Every call takes the GitHub token as an argument and hands it to gh as
GH_TOKEN. Every call also names the repository explicitly, so nothing
depends on the checkout's remotes.
"""

from __future__ import annotations

import json
from pathlib import Path

from .models import PullRequest
from .shell import gh


def _number_from_url(url: str) -> int:
    # https://github.com/owner/repo/pull/42
    return int(url.rstrip("/").rsplit("/", 1)[-1])


def find_open_pull_request(
    repository: str,
    head: str,
    base: str,
    cwd: Path | None = None,
    token: str | None = None,
) -> PullRequest | None:
    """Find the open PR from head into base, if any.

    At most one such PR exists: the version workflow only creates one when
    this lookup comes back empty.
    """
    output = gh(
        "pr",
        "list",
        "--repo",
        repository,
        "--head",
        head,
        "--base",
        base,
        "--state",
        "open",
        "--json",
        "number,url",
        cwd=cwd,
        token=token,
    )
    prs = json.loads(output) if output else []
    if not prs:
        return None
    return PullRequest(number=prs[0]["number"], url=prs[0].get("url", ""))


def create_pull_request(
    repository: str,
    head: str,
    base: str,
    title: str,
    body: str,
    cwd: Path | None = None,
    token: str | None = None,
) -> PullRequest:
    """Open a PR and return it. gh prints the new PR's URL."""
    url = gh(
        "pr",
        "create",
        "--repo",
        repository,
        "--head",
        head,
        "--base",
        base,
        "--title",
        title,
        "--body",
        body,
        cwd=cwd,
        token=token,
    )
    url = url.splitlines()[-1]
    return PullRequest(number=_number_from_url(url), url=url)


def update_pull_request(
    repository: str,
    pr: PullRequest,
    title: str,
    body: str,
    cwd: Path | None = None,
    token: str | None = None,
) -> None:
    gh(
        "pr",
        "edit",
        str(pr.number),
        "--repo",
        repository,
        "--title",
        title,
        "--body",
        body,
        cwd=cwd,
        token=token,
    )


def release_exists(
    repository: str, tag: str, cwd: Path | None = None, token: str | None = None
) -> bool:
    output = gh(
        "release",
        "view",
        tag,
        "--repo",
        repository,
        "--json",
        "tagName",
        cwd=cwd,
        check=False,
        token=token,
    )
    return bool(output)


def create_or_update_release(
    repository: str,
    tag: str,
    notes: str,
    prerelease: bool,
    cwd: Path | None = None,
    token: str | None = None,
) -> None:
    """Create the GitHub release for a tag, or refresh an existing one.

    Args:
        repository: "owner/repo".
        tag: Git tag the release is attached to; also used as its title.
        notes: Markdown release notes.
        prerelease: Mark the release as a prerelease.
        token: GitHub token for gh.
    """
    flags = ["--title", tag, "--notes", notes]
    if prerelease:
        flags.append("--prerelease")

    if release_exists(repository, tag, cwd=cwd, token=token):
        gh(
            "release",
            "edit",
            tag,
            "--repo",
            repository,
            *flags,
            cwd=cwd,
            token=token,
        )
    else:
        gh(
            "release",
            "create",
            tag,
            "--repo",
            repository,
            "--verify-tag",
            *flags,
            cwd=cwd,
            token=token,
        )
