"""Deprecation lookups against registry metadata."""

from typing import Optional

from .models import RegistryPackageData


def is_package_deprecated(data: Optional[RegistryPackageData]) -> bool:
    """Whether the package as a whole carries a deprecation notice."""
    return bool(data is not None and data.deprecated)


def is_deprecated(data: Optional[RegistryPackageData], version: Optional[str]) -> bool:
    """Whether a version is deprecated.

    A package-level notice applies to every version. Missing data or an
    unknown version yields False.
    """
    if data is None:
        return False
    if is_package_deprecated(data):
        return True
    if not version:
        return False

    entry = data.versions.get(version)
    return bool(entry is not None and entry.deprecated)
