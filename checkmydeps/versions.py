"""Version selection and update classification.

Versions are compared as ``(major, minor, patch)`` integer tuples. Anything
that is not exactly three numeric components cannot be classified and is
reported as unknown rather than raising.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from .models import UpdateStatus

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")

VersionTuple = tuple[int, int, int]


@dataclass(frozen=True)
class VersionSelection:
    """Upgrade targets for one package."""

    last_patch: Optional[str] = None
    last_minor: Optional[str] = None
    latest: Optional[str] = None


def parse_version(version: Optional[str]) -> Optional[VersionTuple]:
    """Parse ``1.2.3`` into ``(1, 2, 3)``; None when it is not three numbers."""
    if not version:
        return None
    match = _VERSION_RE.match(version.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def is_production_version(version: str) -> bool:
    """Prerelease and build-tagged versions contain a dash."""
    return "-" not in version


def production_versions(versions: Iterable[str]) -> list[str]:
    return [version for version in versions if is_production_version(version)]


def _max_version(candidates: list[tuple[VersionTuple, str]]) -> Optional[str]:
    if not candidates:
        return None
    return max(candidates, key=lambda item: item[0])[1]


def select_versions(installed: Optional[str], available: Iterable[str]) -> VersionSelection:
    """Select the latest patch, latest minor and latest overall versions.

    Args:
        installed: Installed version, if known
        available: Every version published on the registry

    Returns:
        The selection; fields are None when no newer candidate exists. An
        installed version that cannot be parsed yields an empty selection.
    """
    parsed = []
    for version in production_versions(available):
        key = parse_version(version)
        if key is not None:
            parsed.append((key, version))

    if installed is None:
        return VersionSelection(latest=_max_version(parsed))

    current = parse_version(installed)
    if current is None:
        return VersionSelection()

    major, minor, patch = current

    last_minor = _max_version(
        [item for item in parsed if item[0][0] == major and item[0][1] > minor]
    )
    last_patch = _max_version(
        [
            item
            for item in parsed
            if item[0][0] == major and item[0][1] == minor and item[0][2] > patch
        ]
    )

    return VersionSelection(
        last_patch=last_patch,
        last_minor=last_minor,
        latest=_max_version(parsed),
    )


def classify_update(installed: Optional[str], latest: Optional[str]) -> Optional[UpdateStatus]:
    """Classify the distance between the installed and the latest version.

    Returns None when either version is missing or not numeric; a missing
    comparison is never reported as up to date.
    """
    current = parse_version(installed)
    newest = parse_version(latest)
    if current is None or newest is None:
        return None

    if current == newest:
        return "upToDate"
    if current[:2] == newest[:2]:
        return "patch"
    if current[0] == newest[0]:
        return "minor"
    return "major"
