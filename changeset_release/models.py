"""Data models for changeset-release.

These Pydantic models represent the core data structures passed between
the reader, the version and publish workflows, and the orchestrator.
"""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BumpType = Literal["major", "minor", "patch", "none"]


class Release(BaseModel):
    """A single package bump requested by a changeset."""

    name: str
    type: BumpType


class Changeset(BaseModel):
    """A pending release note from `.changeset/<id>.md`.

    Attributes:
        id: File stem of the changeset file.
        summary: Markdown body, used as the changelog line.
        releases: Packages affected and how far each one is bumped.
    """

    id: str
    summary: str
    releases: list[Release] = Field(default_factory=list)

    @property
    def package_names(self) -> list[str]:
        return [r.name for r in self.releases]


class PreState(BaseModel):
    """Contents of `.changeset/pre.json` while in prerelease mode."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["pre", "exit"]
    tag: str
    initial_versions: dict[str, str] = Field(
        default_factory=dict, alias="initialVersions"
    )
    changesets: list[str] = Field(default_factory=list)


class ChangesetState(BaseModel):
    """Release intent for one run: the pending changesets and pre state."""

    changesets: list[Changeset] = Field(default_factory=list)
    pre_state: PreState | None = None

    @property
    def has_changesets(self) -> bool:
        return len(self.changesets) != 0


class PackageInfo(BaseModel):
    """Metadata for a single package in the repository.

    Attributes:
        name: Package name as published to the registry.
        dir: Path from the repository root to the package directory.
        version: Current version string from the manifest.
        private: Private packages are versioned but never published.
    """

    name: str
    dir: str
    version: str
    private: bool = False


class VersionBump(BaseModel):
    """Records a version change for a package.

    Attributes:
        old: The version before the versioning tool ran.
        new: The version after it ran.
    """

    old: str
    new: str


class ChangelogEntry(BaseModel):
    """The changelog section for one released version.

    Attributes:
        content: Markdown of the section, without its version heading.
        highest_level: 3 major, 2 minor, 1 patch, 0 when no change headings
                       were found.
    """

    content: str
    highest_level: int = 0


class ChangedPackage(BaseModel):
    """A package whose version the versioning tool bumped."""

    package: PackageInfo
    bump: VersionBump
    changelog: ChangelogEntry


class PublishedPackage(BaseModel):
    name: str
    version: str


class PublishResult(BaseModel):
    """Outcome of a publish run.

    published is true iff at least one package was newly published.
    """

    published: bool = False
    published_packages: list[PublishedPackage] = Field(default_factory=list)

    @classmethod
    def from_packages(cls, packages: list[PublishedPackage]) -> PublishResult:
        return cls(published=bool(packages), published_packages=packages)


class PullRequest(BaseModel):
    number: int
    url: str = ""


class ActionOutputs(BaseModel):
    """The three step outputs every run reports to the calling workflow."""

    published: bool = False
    published_packages: list[PublishedPackage] = Field(default_factory=list)
    has_changesets: bool = False

    def as_step_outputs(self) -> dict[str, str]:
        """Render outputs the way GitHub Actions expects them: strings."""
        return {
            "published": str(self.published).lower(),
            "publishedPackages": json.dumps(
                [p.model_dump() for p in self.published_packages],
                separators=(",", ":"),
            ),
            "hasChangesets": str(self.has_changesets).lower(),
        }
