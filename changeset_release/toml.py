"""pyproject.toml reading utilities.

Python packages in a changesets-managed repository keep their version in
pyproject.toml. tomlkit is used so manifests are read exactly as the
versioning tool wrote them.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from packaging.utils import canonicalize_name

PRIVATE_CLASSIFIER = "Private :: Do Not Upload"


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) so they match the names used in changeset files.

    Args:
        doc: Parsed pyproject.toml document.
        fallback: Value to return if name is not specified.
    """
    return canonicalize_name(doc.get("project", {}).get("name", fallback))


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract version from [project].version, defaulting to '0.0.0'."""
    return str(doc.get("project", {}).get("version", "0.0.0"))


def is_private(doc: tomlkit.TOMLDocument) -> bool:
    """True when the project opts out of publishing via its classifiers."""
    classifiers = doc.get("project", {}).get("classifiers", [])
    return PRIVATE_CLASSIFIER in classifiers


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [tool.uv.workspace].

    These patterns (e.g., "packages/*", "libs/*") define which directories
    contain workspace packages. Returns an empty list for a repository that
    is a single package.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    return [str(m) for m in members] if members else []
