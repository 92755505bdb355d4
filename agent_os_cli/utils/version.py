"""Semantic version parsing and comparison.

Used by the installer to decide whether a project installation is stale and
must be re-compiled.
"""

import logging
from enum import Enum
from typing import NamedTuple

logger = logging.getLogger(__name__)

# Installations older than this use a layout that must be re-compiled
MIGRATION_THRESHOLD = "2.1.0"


class SemVer(NamedTuple):
    """Parsed semantic version. ``prerelease`` is empty for releases."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


class Comparison(Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def _component(value: str, name: str, version: str) -> int:
    if value.isdigit():
        return int(value)
    if value:
        logger.warning(f"Non-numeric {name} component '{value}' in version '{version}', using 0")
    else:
        logger.debug(f"Missing {name} component in version '{version}', using 0")
    return 0


def parse_semver(version: str) -> SemVer:
    """Parse ``MAJOR.MINOR.PATCH[-PRERELEASE]``.

    Missing or non-numeric components default to 0. The prerelease is
    everything after the first ``-``.

    Examples:
        >>> parse_semver("2.1.3")
        SemVer(major=2, minor=1, patch=3, prerelease='')
        >>> parse_semver("2.1.0-beta.1")
        SemVer(major=2, minor=1, patch=0, prerelease='beta.1')
        >>> parse_semver("")
        SemVer(major=0, minor=0, patch=0, prerelease='')
    """
    version = (version or "").strip()
    if not version:
        return SemVer(0, 0, 0, "")

    core, _, prerelease = version.partition("-")
    parts = core.split(".")
    parts += [""] * (3 - len(parts))

    return SemVer(
        major=_component(parts[0], "major", version),
        minor=_component(parts[1], "minor", version),
        patch=_component(parts[2], "patch", version),
        prerelease=prerelease,
    )


def compare_semver(a: str, b: str) -> Comparison:
    """Compare two version strings.

    Numeric components are compared first. On a tie, a release outranks any
    prerelease of the same number; two prereleases compare lexicographically.
    """
    va = parse_semver(a)
    vb = parse_semver(b)

    for left, right in ((va.major, vb.major), (va.minor, vb.minor), (va.patch, vb.patch)):
        if left > right:
            return Comparison.GREATER
        if left < right:
            return Comparison.LESS

    if not va.prerelease and vb.prerelease:
        return Comparison.GREATER
    if va.prerelease and not vb.prerelease:
        return Comparison.LESS
    if va.prerelease > vb.prerelease:
        return Comparison.GREATER
    if va.prerelease < vb.prerelease:
        return Comparison.LESS
    return Comparison.EQUAL


def is_compatible(a: str, b: str) -> bool:
    """Two versions are compatible when their major components match."""
    return parse_semver(a).major == parse_semver(b).major


def needs_migration(installed: str | None) -> bool:
    """Check whether an installation recorded at ``installed`` must be migrated."""
    if not installed:
        return True
    return compare_semver(installed, MIGRATION_THRESHOLD) == Comparison.LESS
