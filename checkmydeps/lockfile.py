"""Reading resolved versions from package-lock.json."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .errors import LockfileError, LockfileMismatchError
from .logging import get_logger
from .models import DEPENDENCY_TYPES, LockedDependency, Manifest

PACKAGE_LOCK_FILE_NAME = "package-lock.json"

REGENERATE_HINT = 'Run "npm i --package-lock-only" to regenerate package-lock.json.'

# Lockfile "version" fields that are really locations (lockfileVersion 1)
_LOCATION_PREFIXES = ("git+", "git:", "file:", "http://", "https://", "github:")

logger = get_logger("lockfile")


@dataclass
class Lockfile:
    """A parsed package-lock.json."""

    path: Path
    data: dict[str, Any]

    @property
    def lockfile_version(self) -> int:
        version = self.data.get("lockfileVersion", 1)
        return version if isinstance(version, int) else 1

    @property
    def packages(self) -> dict[str, Any]:
        packages = self.data.get("packages")
        return packages if isinstance(packages, dict) else {}

    def get(self, package_name: str) -> Optional[LockedDependency]:
        """Return the top-level lock entry of a package, None when absent."""
        if self.packages:
            return self._get_from_packages(package_name)
        return self._get_from_dependencies(package_name)

    def root_declarations(self) -> Optional[dict[str, dict[str, str]]]:
        """Dependency declarations recorded for the root project (lockfileVersion >= 2)."""
        root = self.packages.get("")
        if not isinstance(root, dict):
            return None
        return {
            dependency_type: dict(root.get(dependency_type) or {})
            for dependency_type in DEPENDENCY_TYPES
        }

    def _get_from_packages(self, package_name: str) -> Optional[LockedDependency]:
        entry = self.packages.get(f"node_modules/{package_name}")
        if not isinstance(entry, dict):
            return None

        if entry.get("link"):
            # Linked local package: the entry only points at the real folder
            target_key = entry.get("resolved") or ""
            target = self.packages.get(target_key) or {}
            return LockedDependency(
                package_name=package_name,
                resolved_version=target.get("version", ""),
                resolved_location=f"file:{target_key}" if target_key else None,
            )

        return _locked_from_entry(package_name, entry)

    def _get_from_dependencies(self, package_name: str) -> Optional[LockedDependency]:
        dependencies = self.data.get("dependencies") or {}
        entry = dependencies.get(package_name)
        if not isinstance(entry, dict):
            return None
        return _locked_from_entry(package_name, entry)


def _locked_from_entry(package_name: str, entry: dict[str, Any]) -> LockedDependency:
    version = entry.get("version") or ""
    resolved = entry.get("resolved") or None

    if version.startswith("npm:"):
        # Alias entry: "npm:<target>@<version>"
        target = version[len("npm:"):]
        at = target.find("@", 1)
        resolved = resolved or version
        version = target[at + 1:] if at != -1 else ""
    elif version.startswith(_LOCATION_PREFIXES):
        resolved = resolved or version
        version = ""

    return LockedDependency(
        package_name=package_name,
        resolved_version=version,
        resolved_location=resolved,
    )


def load_lockfile(cwd: Path) -> Lockfile:
    """Read package-lock.json from a project directory.

    Raises:
        LockfileError: The lockfile is missing or is not a JSON object
    """
    path = Path(cwd) / PACKAGE_LOCK_FILE_NAME

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LockfileError(
            f"{PACKAGE_LOCK_FILE_NAME} file not found in {cwd}",
            hint='Run "npm i --package-lock-only" to generate it first.',
        ) from exc
    except OSError as exc:
        raise LockfileError(f"Could not read {path}: {exc}", hint=REGENERATE_HINT) from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"{path} is not valid JSON: {exc}", hint=REGENERATE_HINT) from exc

    if not isinstance(data, dict):
        raise LockfileError(f"{path} must contain a JSON object", hint=REGENERATE_HINT)

    lockfile = Lockfile(path=path, data=data)
    logger.debug("Read %s (lockfileVersion %d)", path, lockfile.lockfile_version)
    return lockfile


def check_in_sync(manifest: Manifest, lockfile: Lockfile) -> None:
    """Ensure the lockfile was generated from the current manifest.

    Raises:
        LockfileMismatchError: A declaration differs between the two files
    """
    recorded = lockfile.root_declarations()
    if recorded is None:
        logger.debug("Lockfile has no root package entry; skipping sync check")
        return

    declared: dict[str, dict[str, str]] = {dependency_type: {} for dependency_type in DEPENDENCY_TYPES}
    for declaration in manifest.declarations:
        declared[declaration.dependency_type][declaration.package_name] = (
            declaration.version_required
        )

    mismatched: list[str] = []
    for dependency_type in DEPENDENCY_TYPES:
        expected = declared[dependency_type]
        actual = recorded[dependency_type]
        for name in sorted(set(expected) | set(actual)):
            if expected.get(name) != actual.get(name):
                mismatched.append(f"{name} ({dependency_type})")

    if mismatched:
        shown = ", ".join(mismatched[:5])
        more = f" and {len(mismatched) - 5} more" if len(mismatched) > 5 else ""
        raise LockfileMismatchError(
            f"{PACKAGE_LOCK_FILE_NAME} does not match package.json: {shown}{more}",
            hint=REGENERATE_HINT,
        )
