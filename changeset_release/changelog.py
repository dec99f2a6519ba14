"""Extracting a single version's section from a CHANGELOG.md.

The versioning tool writes changelogs shaped like::

    # pkg-a

    ## 1.1.0

    ### Minor Changes

    - abc1234: Add streaming support.

    ## 1.0.0
    ...

The section under `## <version>` is what goes into the version PR body and
the GitHub release notes.
"""

from __future__ import annotations

import re

from .models import ChangelogEntry
from .versions import BUMP_LEVELS

_HEADING_RE = re.compile(r"^(?P<hashes>#{1,6})\s+(?P<text>.*?)\s*#*\s*$")
_CHANGE_HEADING_RE = re.compile(r"^(major|minor|patch) changes$", re.I)


def _is_fence(line: str) -> bool:
    stripped = line.lstrip()
    return stripped.startswith("```") or stripped.startswith("~~~")


def get_changelog_entry(changelog: str, version: str) -> ChangelogEntry:
    """Return the changelog section for a version.

    Headings inside fenced code blocks are ignored. When the version has no
    section, the entry is empty.

    Args:
        changelog: Full CHANGELOG.md contents.
        version: Version whose `## <version>` section is wanted.
    """
    collected: list[str] = []
    capturing = False
    in_fence = False
    highest_level = BUMP_LEVELS["none"]

    for line in changelog.splitlines():
        if _is_fence(line):
            in_fence = not in_fence
        heading = None if in_fence else _HEADING_RE.match(line)

        if heading and len(heading.group("hashes")) <= 2:
            if capturing:
                break
            text = heading.group("text")
            if len(heading.group("hashes")) == 2 and (
                text == version or text.startswith(f"{version} ")
            ):
                capturing = True
            continue

        if not capturing:
            continue

        if heading and len(heading.group("hashes")) == 3:
            kind = _CHANGE_HEADING_RE.match(heading.group("text"))
            if kind:
                level = BUMP_LEVELS[kind.group(1).lower()]
                highest_level = max(highest_level, level)
        collected.append(line)

    return ChangelogEntry(
        content="\n".join(collected).strip(), highest_level=highest_level
    )
