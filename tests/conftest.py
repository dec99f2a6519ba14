"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from changeset_release.config import ActionConfig, GitHubContext


def write_package_json(pkg_dir: Path, data: dict) -> None:
    pkg_dir.mkdir(parents=True, exist_ok=True)
    (pkg_dir / "package.json").write_text(json.dumps(data, indent=2))


def write_changeset(
    root: Path, changeset_id: str, releases: dict[str, str], summary: str
) -> Path:
    """Write `.changeset/<id>.md` the way `changeset add` does."""
    changeset_dir = root / ".changeset"
    changeset_dir.mkdir(exist_ok=True)
    front = "\n".join(f'"{name}": {bump}' for name, bump in releases.items())
    path = changeset_dir / f"{changeset_id}.md"
    path.write_text(f"---\n{front}\n---\n\n{summary}\n")
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An npm workspace with packages a and b, both at 1.0.0."""
    write_package_json(
        tmp_path, {"name": "root", "private": True, "workspaces": ["packages/*"]}
    )
    write_package_json(tmp_path / "packages" / "a", {"name": "a", "version": "1.0.0"})
    write_package_json(tmp_path / "packages" / "b", {"name": "b", "version": "1.0.0"})
    (tmp_path / ".changeset").mkdir()
    (tmp_path / ".changeset" / "README.md").write_text("# Changesets\n")
    (tmp_path / ".changeset" / "config.json").write_text("{}")
    return tmp_path


@pytest.fixture
def sample_changelog() -> str:
    return """\
# a

## 1.1.0

### Minor Changes

- abc1234: Add streaming support.

### Patch Changes

- def5678: Fix a typo in the docs.

## 1.0.0

### Major Changes

- 0123456: First stable release.
"""


@pytest.fixture
def context() -> GitHubContext:
    return GitHubContext(repository="acme/widgets", ref="refs/heads/main", sha="abc123")


@pytest.fixture
def config(workspace: Path, tmp_path_factory: pytest.TempPathFactory) -> ActionConfig:
    return ActionConfig(
        github_token="gh-token",
        npm_token="npm-token",
        cwd=workspace,
        tag="latest",
        home=tmp_path_factory.mktemp("home"),
    )


@pytest.fixture
def add_changeset(workspace: Path):
    """Factory writing changesets into the workspace fixture."""

    def _add(changeset_id: str, releases: dict[str, str], summary: str) -> Path:
        return write_changeset(workspace, changeset_id, releases, summary)

    return _add


@pytest.fixture
def bump_package(workspace: Path):
    """Factory standing in for `changeset version` on one package."""

    def _bump(name: str, version: str, changelog: str | None = None) -> None:
        pkg_dir = workspace / "packages" / name
        write_package_json(pkg_dir, {"name": name, "version": version})
        if changelog is not None:
            (pkg_dir / "CHANGELOG.md").write_text(changelog)

    return _bump


@pytest.fixture
def pnpm_workspace(tmp_path: Path) -> Path:
    """A pnpm monorepo: private versioned root, packages a (1.1.0) and b (1.0.0)."""
    write_package_json(
        tmp_path, {"name": "monorepo", "version": "0.0.0", "private": True}
    )
    (tmp_path / "pnpm-workspace.yaml").write_text(
        "packages:\n  - 'packages/*'\n  - '!**/fixtures/**'\n"
    )
    write_package_json(tmp_path / "packages" / "a", {"name": "a", "version": "1.1.0"})
    write_package_json(tmp_path / "packages" / "b", {"name": "b", "version": "1.0.0"})
    return tmp_path
