"""Run configuration.

Everything the run needs from its environment is gathered once, at the CLI
boundary, into these models and passed explicitly to each component.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr

DEFAULT_PR_TITLE = "Version Packages"
DEFAULT_COMMIT_MESSAGE = "Version Packages"
# GitHub rejects PR bodies over 65536 characters
DEFAULT_PR_BODY_MAX_CHARACTERS = 60000


class GitHubContext(BaseModel):
    """The workflow run that triggered us.

    Attributes:
        repository: "owner/repo".
        ref: Fully qualified ref, e.g. "refs/heads/main".
        sha: Commit the workflow was triggered for.
    """

    repository: str
    ref: str
    sha: str

    @property
    def branch(self) -> str:
        return self.ref.removeprefix("refs/heads/")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GitHubContext:
        env = os.environ if environ is None else environ
        return cls(
            repository=env.get("GITHUB_REPOSITORY", ""),
            ref=env.get("GITHUB_REF", ""),
            sha=env.get("GITHUB_SHA", ""),
        )


class ActionConfig(BaseModel):
    """Inputs and credentials for one run.

    Attributes:
        github_token: Token for git pushes and the GitHub API.
        npm_token: Registry token written to ~/.npmrc.
        cwd: Repository checkout to operate on.
        setup_git_user: Configure the github-actions[bot] commit identity.
        tag: Release channel ("latest", "next", ...). Required once
             changesets exist.
        prepare_script: Command run between versioning and publishing.
        pr_title: Title of the version PR.
        commit_message: Message of the version commit.
        create_github_releases: Create a GitHub release per published package.
        pr_body_max_characters: Upper bound for the version PR body.
        home: Directory the credential files are written to.
    """

    github_token: SecretStr | None = None
    npm_token: SecretStr | None = None
    cwd: Path = Field(default_factory=Path.cwd)
    setup_git_user: bool = True
    tag: str | None = None
    prepare_script: str | None = None
    pr_title: str = DEFAULT_PR_TITLE
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    create_github_releases: bool = True
    pr_body_max_characters: int = DEFAULT_PR_BODY_MAX_CHARACTERS
    home: Path = Field(default_factory=Path.home)

    @property
    def gh_token(self) -> str | None:
        """The GitHub token in plain text, for handing to gh."""
        if self.github_token is None:
            return None
        return self.github_token.get_secret_value()
