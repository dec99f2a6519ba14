"""Package discovery and version snapshots.

A repository is either a single package (the manifest at its root) or a
workspace whose members are listed by glob in the root manifest:

- package.json: "workspaces": ["packages/*"] or {"packages": [...]}
- pnpm-workspace.yaml: packages: ["packages/*", "!**/test/**"]
- pyproject.toml: [tool.uv.workspace] members = ["packages/*"]

Each member directory's manifest is package.json when present, otherwise
pyproject.toml. Snapshots taken before and after the versioning tool runs
are diffed to find the packages it bumped.
"""

from __future__ import annotations

import fnmatch
import glob
import json
from pathlib import Path

import yaml

from .errors import ManifestError
from .models import PackageInfo, VersionBump
from .toml import (
    get_project_name,
    get_project_version,
    get_workspace_member_globs,
    is_private,
    load_pyproject,
)

ROOT_DIR = "."
PNPM_WORKSPACE = "pnpm-workspace.yaml"


def _load_package_json(path: Path) -> dict:
    return json.loads(path.read_text())


def read_manifest(pkg_dir: Path, rel_dir: str) -> PackageInfo | None:
    """Read the package manifest in a directory.

    Returns None for directories without a manifest, or with a package.json
    that has no name (workspace roots often don't).
    """
    package_json = pkg_dir / "package.json"
    if package_json.exists():
        data = _load_package_json(package_json)
        if not data.get("name"):
            return None
        return PackageInfo(
            name=data["name"],
            dir=rel_dir,
            version=data.get("version", "0.0.0"),
            private=bool(data.get("private", False)),
        )

    pyproject = pkg_dir / "pyproject.toml"
    if pyproject.exists():
        doc = load_pyproject(pyproject)
        return PackageInfo(
            name=get_project_name(doc, pkg_dir.name),
            dir=rel_dir,
            version=get_project_version(doc),
            private=is_private(doc),
        )

    return None


def get_workspace_globs(root: Path) -> list[str]:
    """Collect workspace member globs declared by the root manifests.

    pnpm exclusions ("!**/test/**") are returned as-is, with their "!".
    """
    globs: list[str] = []

    package_json = root / "package.json"
    if package_json.exists():
        workspaces = _load_package_json(package_json).get("workspaces") or []
        # Yarn's object form: {"packages": [...], "nohoist": [...]}
        if isinstance(workspaces, dict):
            workspaces = workspaces.get("packages") or []
        globs.extend(str(w) for w in workspaces)

    pnpm_workspace = root / PNPM_WORKSPACE
    if pnpm_workspace.exists():
        try:
            data = yaml.safe_load(pnpm_workspace.read_text())
        except yaml.YAMLError as exc:
            raise ManifestError(f"Invalid {PNPM_WORKSPACE}: {exc}") from exc
        if isinstance(data, dict):
            globs.extend(str(p) for p in data.get("packages") or [])

    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        globs.extend(get_workspace_member_globs(load_pyproject(pyproject)))

    return globs


def _is_excluded(rel_dir: str, exclusions: list[str]) -> bool:
    return any(
        fnmatch.fnmatch(rel_dir, pattern) or fnmatch.fnmatch(f"{rel_dir}/", pattern)
        for pattern in exclusions
    )


def discover_packages(root: Path) -> dict[str, PackageInfo]:
    """Scan the repository and discover all packages.

    Returns:
        Map of package directory (relative to root, "." for the root
        package of a single-package repository) to PackageInfo.
    """
    member_globs = get_workspace_globs(root)

    if not member_globs:
        info = read_manifest(root, ROOT_DIR)
        return {ROOT_DIR: info} if info else {}

    includes = [g for g in member_globs if not g.startswith("!")]
    exclusions = [g[1:] for g in member_globs if g.startswith("!")]

    # Expand globs to find all package directories
    packages: dict[str, PackageInfo] = {}
    for pattern in includes:
        for match in sorted(glob.glob(str(root / pattern), recursive=True)):
            p = Path(match)
            if not p.is_dir():
                continue
            rel_dir = p.relative_to(root).as_posix()
            if rel_dir == ROOT_DIR or rel_dir in packages:
                continue
            if "node_modules" in p.relative_to(root).parts:
                continue
            if _is_excluded(rel_dir, exclusions):
                continue
            info = read_manifest(p, rel_dir)
            if info is not None:
                packages[rel_dir] = info

    return packages


def is_single_package(packages: dict[str, PackageInfo]) -> bool:
    """True when the repository is one package living at its root."""
    return list(packages) == [ROOT_DIR]


def snapshot_versions(root: Path) -> dict[str, str]:
    """Capture the version of every package, keyed by directory."""
    return {d: info.version for d, info in discover_packages(root).items()}


def diff_versions(
    before: dict[str, str], after: dict[str, PackageInfo]
) -> list[tuple[PackageInfo, VersionBump]]:
    """Find packages whose version differs between two snapshots.

    Packages that only exist in the second snapshot count as changed, with an
    empty old version.

    Args:
        before: Directory → version, captured before versioning.
        after: Directory → PackageInfo, discovered after versioning.

    Returns:
        (package, bump) pairs in directory order.
    """
    changed: list[tuple[PackageInfo, VersionBump]] = []
    for pkg_dir in sorted(after):
        info = after[pkg_dir]
        old = before.get(pkg_dir, "")
        if old != info.version:
            changed.append((info, VersionBump(old=old, new=info.version)))
    return changed
