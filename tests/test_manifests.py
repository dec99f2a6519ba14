"""Tests for changeset_release.manifests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from changeset_release.errors import ManifestError
from changeset_release.manifests import (
    diff_versions,
    discover_packages,
    get_workspace_globs,
    is_single_package,
    read_manifest,
    snapshot_versions,
)
from changeset_release.models import PackageInfo, VersionBump


def _write_pyproject(pkg_dir: Path, content: str) -> None:
    pkg_dir.mkdir(parents=True, exist_ok=True)
    (pkg_dir / "pyproject.toml").write_text(content)


class TestReadManifest:
    def test_package_json(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "@acme/a", "version": "2.0.0", "private": True})
        )

        info = read_manifest(tmp_path, "packages/a")

        assert info == PackageInfo(
            name="@acme/a", dir="packages/a", version="2.0.0", private=True
        )

    def test_package_json_without_name_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(json.dumps({"private": True}))
        assert read_manifest(tmp_path, ".") is None

    def test_pyproject(self, tmp_path: Path) -> None:
        _write_pyproject(
            tmp_path,
            '[project]\nname = "My_Lib"\nversion = "0.3.0"\n'
            'classifiers = ["Private :: Do Not Upload"]\n',
        )

        info = read_manifest(tmp_path, "libs/my-lib")

        assert info is not None
        assert info.name == "my-lib"
        assert info.version == "0.3.0"
        assert info.private is True

    def test_package_json_wins_over_pyproject(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "js", "version": "1.0.0"})
        )
        _write_pyproject(tmp_path, '[project]\nname = "py"\nversion = "9.0.0"\n')

        info = read_manifest(tmp_path, ".")

        assert info is not None
        assert info.name == "js"

    def test_no_manifest(self, tmp_path: Path) -> None:
        assert read_manifest(tmp_path, ".") is None


class TestGetWorkspaceGlobs:
    def test_npm_workspaces_list(self, workspace: Path) -> None:
        assert get_workspace_globs(workspace) == ["packages/*"]

    def test_yarn_workspaces_object(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"workspaces": {"packages": ["libs/*"], "nohoist": ["**"]}})
        )
        assert get_workspace_globs(tmp_path) == ["libs/*"]

    def test_uv_workspace(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, '[tool.uv.workspace]\nmembers = ["packages/*"]\n')
        assert get_workspace_globs(tmp_path) == ["packages/*"]

    def test_pnpm_workspace(self, pnpm_workspace: Path) -> None:
        assert get_workspace_globs(pnpm_workspace) == [
            "packages/*",
            "!**/fixtures/**",
        ]

    def test_invalid_pnpm_workspace(self, tmp_path: Path) -> None:
        (tmp_path / "pnpm-workspace.yaml").write_text("packages: [unclosed\n")

        with pytest.raises(ManifestError, match="pnpm-workspace.yaml"):
            get_workspace_globs(tmp_path)

    def test_single_package(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(json.dumps({"name": "solo"}))
        assert get_workspace_globs(tmp_path) == []


class TestDiscoverPackages:
    def test_workspace_members(self, workspace: Path) -> None:
        packages = discover_packages(workspace)

        assert sorted(packages) == ["packages/a", "packages/b"]
        assert packages["packages/a"].name == "a"
        assert not is_single_package(packages)

    def test_member_directory_without_manifest_is_ignored(
        self, workspace: Path
    ) -> None:
        (workspace / "packages" / "docs").mkdir()
        assert sorted(discover_packages(workspace)) == ["packages/a", "packages/b"]

    def test_single_package_repository(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "solo", "version": "3.1.4"})
        )

        packages = discover_packages(tmp_path)

        assert list(packages) == ["."]
        assert is_single_package(packages)

    def test_uv_workspace_members(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, '[tool.uv.workspace]\nmembers = ["packages/*"]\n')
        _write_pyproject(
            tmp_path / "packages" / "core",
            '[project]\nname = "acme-core"\nversion = "1.2.0"\n',
        )

        packages = discover_packages(tmp_path)

        assert packages == {
            "packages/core": PackageInfo(
                name="acme-core", dir="packages/core", version="1.2.0"
            )
        }

    def test_pnpm_workspace_members(self, pnpm_workspace: Path) -> None:
        """The private root is not a member; excluded directories are skipped."""
        fixture_pkg = pnpm_workspace / "packages" / "fixtures"
        fixture_pkg.mkdir()
        (fixture_pkg / "package.json").write_text(json.dumps({"name": "fx"}))

        packages = discover_packages(pnpm_workspace)

        assert sorted(packages) == ["packages/a", "packages/b"]
        assert not is_single_package(packages)
        assert snapshot_versions(pnpm_workspace) == {
            "packages/a": "1.1.0",
            "packages/b": "1.0.0",
        }

    def test_empty_repository(self, tmp_path: Path) -> None:
        assert discover_packages(tmp_path) == {}


class TestSnapshots:
    def test_snapshot_versions(self, workspace: Path) -> None:
        assert snapshot_versions(workspace) == {
            "packages/a": "1.0.0",
            "packages/b": "1.0.0",
        }

    def test_diff_reports_only_bumped_packages(
        self, workspace: Path, bump_package
    ) -> None:
        before = snapshot_versions(workspace)
        bump_package("a", "1.1.0")

        changed = diff_versions(before, discover_packages(workspace))

        assert [(info.name, bump) for info, bump in changed] == [
            ("a", VersionBump(old="1.0.0", new="1.1.0"))
        ]

    def test_diff_with_no_changes(self, workspace: Path) -> None:
        before = snapshot_versions(workspace)
        assert diff_versions(before, discover_packages(workspace)) == []

    def test_new_package_counts_as_changed(self) -> None:
        after = {"packages/c": PackageInfo(name="c", dir="packages/c", version="0.1.0")}

        changed = diff_versions({}, after)

        assert changed[0][1] == VersionBump(old="", new="0.1.0")
