"""Selecting and applying version bumps to package.json."""

from datetime import datetime, timezone
from typing import Any, Optional

from .logging import get_logger
from .models import (
    PackageRecord,
    PackageVersionInfo,
    UpdateLevel,
    UpdatePlanEntry,
)
from .sources import is_registry_source

logger = get_logger("planner")

# Update statuses each level is allowed to act on
_ALLOWED_STATUSES = {
    "latest": ("major", "minor", "patch"),
    "minor": ("minor", "patch"),
    "patch": ("patch",),
}

_NON_SEMVER_PREFIXES = ("http", "git", "file:", "npm:")


def target_version(record: PackageRecord, level: UpdateLevel) -> Optional[PackageVersionInfo]:
    """Pick the version a record would be bumped to for an update level."""
    if level == "latest":
        return record.latest or record.last_minor or record.last_patch
    if level == "minor":
        return record.last_minor or record.last_patch
    if level == "patch":
        return record.last_patch
    return None


def version_prefix(version_required: str) -> str:
    """Extract the range prefix to keep, e.g. ``^1.2.3`` -> ``^``.

    URLs, git specs, local paths and aliases get no prefix.
    """
    if (
        version_required.startswith(_NON_SEMVER_PREFIXES)
        or ":" in version_required
        or "/" in version_required
    ):
        return ""
    if version_required.startswith(("^", "~")):
        return version_required[0]
    return ""


def new_version_spec(version_required: str, version: str) -> str:
    """Rewrite a declared version to point at ``version``, keeping its range prefix.

    ``npm:`` aliases keep their target, e.g. ``npm:lodash@^4.17.0`` becomes
    ``npm:lodash@^4.17.21``.
    """
    if version_required.startswith("npm:"):
        target = version_required[len("npm:"):]
        at = target.find("@", 1)
        if at == -1:
            return f"npm:{target}@{version}"
        return f"npm:{target[:at + 1]}{version_prefix(target[at + 1:])}{version}"
    return f"{version_prefix(version_required)}{version}"


def is_updatable(record: PackageRecord, level: UpdateLevel, registry_url: str) -> bool:
    """Whether a record qualifies for an update at the requested level."""
    if record.installed is None or record.update_status is None:
        return False

    if record.update_status not in _ALLOWED_STATUSES.get(level, ()):
        return False

    # Lockfiles written without resolved URLs leave the source unknown
    if record.registry_source and not is_registry_source(record.registry_source, registry_url):
        logger.debug("Skipping %s: not installed from the registry", record.package_name)
        return False

    target = target_version(record, level)
    if target is None:
        return False

    # Never move onto a deprecated version; a deprecated install is only
    # worth touching when the target is clean
    if target.deprecated:
        logger.debug("Skipping %s: target %s is deprecated", record.package_name, target.version)
        return False

    return True


def get_updatable_records(
    records: list[PackageRecord], level: UpdateLevel, registry_url: str
) -> list[PackageRecord]:
    return [record for record in records if is_updatable(record, level, registry_url)]


def prepare_updates(
    records: list[PackageRecord], level: UpdateLevel, registry_url: str
) -> list[UpdatePlanEntry]:
    """Build the update plan for a set of records.

    Args:
        records: Aggregated package records
        level: How far updates may go: latest, minor or patch
        registry_url: Base URL of the registry packages must come from

    Returns:
        One plan entry per package to bump, in record order
    """
    updates: list[UpdatePlanEntry] = []

    for record in get_updatable_records(records, level, registry_url):
        target = target_version(record, level)
        new_version = new_version_spec(record.version_required, target.version)

        updates.append(
            UpdatePlanEntry(
                package_name=record.package_name,
                dependency_type=record.dependency_type,
                current_version=record.version_required,
                new_version=new_version,
                update_type=record.update_status,
                deprecated=record.deprecated,
            )
        )

    logger.debug("Planned %d updates at level %s", len(updates), level)
    return updates


def apply_updates(manifest_data: dict[str, Any], updates: list[UpdatePlanEntry]) -> int:
    """Apply planned updates to an in-memory package.json document.

    Returns:
        Number of entries whose version string changed
    """
    updated = 0

    for update in updates:
        deps = manifest_data.get(update.dependency_type)
        if not isinstance(deps, dict) or update.package_name not in deps:
            logger.warning(
                "%s is no longer declared in %s", update.package_name, update.dependency_type
            )
            continue

        if deps[update.package_name] != update.new_version:
            deps[update.package_name] = update.new_version
            updated += 1

    return updated


def updates_document(
    updates: list[UpdatePlanEntry], level: UpdateLevel, now: Optional[datetime] = None
) -> dict[str, Any]:
    """Serializable view of an update plan, shown before applying or on dry runs."""
    moment = now or datetime.now(timezone.utc)
    return {
        "timestamp": moment.isoformat(),
        "update_level": level,
        "total_updates": len(updates),
        "updates": [update.to_dict() for update in updates],
    }
