"""Assembly of per-dependency package records.

Everything here is a pure transformation of already-fetched data: no network
or file access happens in this module.
"""

from typing import Optional

from .deprecation import is_deprecated
from .helpers import format_date, get_package_page_url
from .logging import get_logger
from .models import (
    DependencyDeclaration,
    LockedDependency,
    PackageRecord,
    PackageVersionInfo,
    RegistryPackageData,
)
from .sources import classify_source
from .versions import classify_update, select_versions

logger = get_logger("aggregate")


def build_version_info(
    package_name: str,
    version: Optional[str],
    data: Optional[RegistryPackageData],
    package_page_url: str,
) -> Optional[PackageVersionInfo]:
    """Collect publish date, page URL and deprecation state for one version."""
    if not version:
        return None

    published = data.time.get(version) if data is not None else None

    return PackageVersionInfo(
        version=version,
        release_date=format_date(published),
        registry_url=get_package_page_url(package_page_url, package_name, version),
        deprecated=is_deprecated(data, version),
    )


def build_package_record(
    declaration: DependencyDeclaration,
    locked: Optional[LockedDependency],
    data: Optional[RegistryPackageData],
    *,
    registry_url: str,
    package_page_url: str,
    error: Optional[str] = None,
) -> PackageRecord:
    """Build the normalized record for one declared dependency.

    Args:
        declaration: The dependency as declared in package.json
        locked: The lockfile entry, None when the lockfile has no entry
        data: Registry metadata, None when fetching it failed
        registry_url: Base URL of the registry used for source classification
        package_page_url: Base URL of the public package pages
        error: Fetch failure message to carry into the report

    Returns:
        The package record
    """
    registry_name = declaration.registry_name
    installed_version = locked.resolved_version if locked else None
    registry_source = classify_source(locked.resolved_location if locked else None, registry_url)

    record = PackageRecord(
        package_name=declaration.package_name,
        dependency_type=declaration.dependency_type,
        version_required=declaration.version_required,
        registry_source=registry_source,
        error=error,
    )

    if locked is None:
        logger.debug("No lockfile entry for %s", declaration.package_name)

    if data is None:
        # Without registry data nothing can be classified
        return record

    selection = select_versions(installed_version, data.versions.keys())

    record.installed = build_version_info(registry_name, installed_version, data, package_page_url)
    record.last_patch = build_version_info(
        registry_name, selection.last_patch, data, package_page_url
    )
    record.last_minor = build_version_info(
        registry_name, selection.last_minor, data, package_page_url
    )
    record.latest = build_version_info(registry_name, selection.latest, data, package_page_url)
    record.update_status = classify_update(installed_version, selection.latest)

    return record
