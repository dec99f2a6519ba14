"""The changesets CLI, seen as a versioning tool and a publish tool.

All knowledge of how the CLI is invoked and what its output looks like lives
here, so the workflows deal only in typed results and the text parsing can be
tested against captured output.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from .errors import CommandError
from .models import PublishedPackage
from .shell import exec_with_output

# "🦋  New tag:  @scope/pkg@1.1.0" or "packages/pkg: pkg@1.1.0"
_PUBLISHED_LINE_RE = re.compile(
    r"(?:New tag:|^\S+:)\s+(?P<name>@[^/\s]+/[^@\s]+|[^/@\s]+)@(?P<version>[^\s@]+)"
)
_ALREADY_PUBLISHED = "(already published)"
_NEW_TAG = "New tag:"


def parse_publish_output(stdout: str) -> list[PublishedPackage]:
    """Recover the packages a publish run actually published.

    Lines that don't match the expected pattern are skipped, as are packages
    the tool reports as already published. A package named more than once is
    reported once, at its first mention.
    """
    published: list[PublishedPackage] = []
    seen: set[str] = set()
    for line in stdout.splitlines():
        if _ALREADY_PUBLISHED in line:
            continue
        match = _PUBLISHED_LINE_RE.search(line.strip())
        if match is None or match.group("name") in seen:
            continue
        seen.add(match.group("name"))
        published.append(
            PublishedPackage(name=match.group("name"), version=match.group("version"))
        )
    return published


def has_new_tag(stdout: str) -> bool:
    """True if the publish run created any tag at all.

    Used for single-package repositories, where the tool's tag lines don't
    name a workspace package.
    """
    return any(_NEW_TAG in line for line in stdout.splitlines())


class ChangesetCli:
    """Runs `changeset version` and `changeset publish` in a checkout.

    Prefers the CLI installed in the repository's node_modules so the run
    uses the version the repository pins.
    """

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    @property
    def executable(self) -> str:
        local = self.cwd / "node_modules" / ".bin" / "changeset"
        if local.exists():
            return str(local)
        return shutil.which("changeset") or "changeset"

    def _run(self, *args: str, failure: str) -> str:
        result = exec_with_output(self.executable, *args, cwd=self.cwd)
        if result.stdout:
            print(result.stdout.rstrip())
        if result.returncode != 0:
            raise CommandError(
                result.args,
                result.returncode,
                result.stdout,
                result.stderr,
                message=failure,
            )
        return result.stdout

    def version(self) -> str:
        """Apply pending changesets to manifests and changelogs."""
        return self._run("version", failure="Failed to run 'changeset version'")

    def publish(self, tag: str) -> str:
        """Publish unpublished package versions to the registry under a tag.

        Returns:
            The tool's stdout, for parse_publish_output().
        """
        return self._run(
            "publish", "--tag", tag, failure="Failed to run 'changeset publish'"
        )
