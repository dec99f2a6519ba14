"""Reading pending changesets from `.changeset/`.

Changeset file format::

    ---
    "pkg-a": minor
    "@scope/pkg-b": patch
    ---

    Add streaming support to pkg-a.

The front matter lists the packages to bump and by how much; the body is
the summary that ends up in the changelog. While the repository is in
prerelease mode, `.changeset/pre.json` records which changesets have already
been applied, and those are not pending any more.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from pydantic import ValidationError

from .errors import ChangesetParseError
from .models import Changeset, ChangesetState, PreState, Release

CHANGESET_DIR = ".changeset"

_FRONT_MATTER_RE = re.compile(
    r"\A\s*---\r?\n(?P<front>.*?)^---[ \t]*(?:\r?\n|\Z)(?P<body>.*)\Z", re.S | re.M
)
_RELEASE_LINE_RE = re.compile(
    r"""^["']?(?P<name>[^"':]+?)["']?\s*:\s*(?P<type>major|minor|patch|none)\s*$"""
)


def parse_changeset(text: str, changeset_id: str) -> Changeset:
    """Parse the contents of a single changeset file.

    Args:
        text: File contents.
        changeset_id: The file stem, used as the changeset id.

    Raises:
        ChangesetParseError: If the front matter is missing or has a line
            that isn't a `"package": bump` pair.
    """
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        raise ChangesetParseError(
            f"Changeset {changeset_id!r} has no front matter block"
        )

    releases: list[Release] = []
    for line in match.group("front").splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        m = _RELEASE_LINE_RE.match(stripped)
        if m is None:
            raise ChangesetParseError(
                f"Changeset {changeset_id!r} has an invalid release line: {stripped!r}"
            )
        releases.append(Release(name=m.group("name").strip(), type=m.group("type")))

    return Changeset(
        id=changeset_id, summary=match.group("body").strip(), releases=releases
    )


def read_changesets(changeset_dir: Path) -> list[Changeset]:
    """Parse every changeset in a `.changeset/` directory, sorted by id."""
    if not changeset_dir.is_dir():
        return []

    changesets: list[Changeset] = []
    for path in sorted(changeset_dir.glob("*.md")):
        # README.md is written by `changeset init`
        if path.name == "README.md":
            continue
        changesets.append(parse_changeset(path.read_text(), path.stem))
    return changesets


def read_pre_state(changeset_dir: Path) -> PreState | None:
    """Load `.changeset/pre.json`, or None when not in prerelease mode."""
    pre_json = changeset_dir / "pre.json"
    if not pre_json.exists():
        return None
    try:
        return PreState.model_validate(json.loads(pre_json.read_text()))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ChangesetParseError(f"Invalid {pre_json}: {exc}") from exc


def read_changeset_state(cwd: Path) -> ChangesetState:
    """Collect the changesets still pending in a repository checkout.

    A missing `.changeset/` directory is not an error: the repository simply
    has nothing to release.
    """
    changeset_dir = cwd / CHANGESET_DIR
    pre_state = read_pre_state(changeset_dir)
    changesets = read_changesets(changeset_dir)

    if pre_state is not None and pre_state.mode == "pre":
        applied = set(pre_state.changesets)
        changesets = [c for c in changesets if c.id not in applied]

    return ChangesetState(changesets=changesets, pre_state=pre_state)
