"""Version parsing and comparison utilities.

Handles incomplete version strings (e.g., "1.0" → "1.0.0") the same way
everywhere a manifest version is inspected.
"""

from __future__ import annotations

import semver

# Ordering used when sorting released packages: major first
BUMP_LEVELS = {"none": 0, "patch": 1, "minor": 2, "major": 3}


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-next.0" → "1.2.3-next.0"

    Raises:
        ValueError: If the string is not a version at all.
    """
    return semver.Version.parse(version_str, optional_minor_and_patch=True)


def is_prerelease(version_str: str) -> bool:
    """True for versions like "2.0.0-next.1" that carry a prerelease part."""
    try:
        return parse_version(version_str).prerelease is not None
    except ValueError:
        return "-" in version_str


def bump_level(old: str, new: str) -> int:
    """How far a version moved, on the BUMP_LEVELS scale.

    Examples:
        "1.2.3" → "2.0.0" is 3 (major)
        "1.2.3" → "1.3.0" is 2 (minor)
        "1.2.3" → "1.2.4" is 1 (patch)
        "" → "1.0.0" is 0 (no previous version to compare with)
    """
    try:
        before, after = parse_version(old), parse_version(new)
    except ValueError:
        return BUMP_LEVELS["none"]
    if after.major != before.major:
        return BUMP_LEVELS["major"]
    if after.minor != before.minor:
        return BUMP_LEVELS["minor"]
    if after.patch != before.patch:
        return BUMP_LEVELS["patch"]
    return BUMP_LEVELS["none"]
