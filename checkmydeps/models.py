"""Core data models for check-my-deps."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UpdateStatus = Literal["upToDate", "patch", "minor", "major"]
UpdateLevel = Literal["latest", "minor", "patch"]

DEPENDENCY_TYPES = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)
UPDATE_LEVELS = ("latest", "minor", "patch")

UNKNOWN_STATUS = "unknown"


@dataclass(frozen=True)
class DependencyDeclaration:
    """A single dependency as written in package.json."""

    package_name: str
    dependency_type: str  # dependencies, devDependencies, peerDependencies, optionalDependencies
    version_required: str  # semver range, git URL, tarball URL, file: path or npm: alias

    @property
    def registry_name(self) -> str:
        """Name to query the registry with; the target package for npm: aliases."""
        if self.version_required.startswith("npm:"):
            target = self.version_required[len("npm:"):]
            # Keep the leading @ of scoped names, drop the @version suffix
            at = target.find("@", 1)
            name = target[:at] if at != -1 else target
            if name:
                return name
        return self.package_name


@dataclass(frozen=True)
class LockedDependency:
    """A top-level package as resolved in the lockfile."""

    package_name: str
    resolved_version: str
    resolved_location: Optional[str] = None


class RegistryVersionData(BaseModel):
    """Metadata of one published version; unknown fields land in ``model_extra``."""

    model_config = ConfigDict(extra="allow")

    deprecated: Optional[Union[str, bool]] = None


class RegistryPackageData(BaseModel):
    """Registry document for one package name."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    versions: dict[str, RegistryVersionData] = Field(default_factory=dict)
    time: dict[str, str] = Field(default_factory=dict)
    deprecated: Optional[Union[str, bool]] = None


@dataclass(frozen=True)
class PackageVersionInfo:
    """Public facts about one resolved version of a package."""

    version: str
    release_date: str = ""  # MM/DD/YYYY, empty when the registry has no publish time
    registry_url: str = ""
    deprecated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "release_date": self.release_date,
            "registry_url": self.registry_url,
            "deprecated": self.deprecated,
        }


@dataclass
class PackageRecord:
    """Normalized per-dependency decision record consumed by reports and the planner."""

    package_name: str
    dependency_type: str
    version_required: str
    installed: Optional[PackageVersionInfo] = None
    last_patch: Optional[PackageVersionInfo] = None
    last_minor: Optional[PackageVersionInfo] = None
    latest: Optional[PackageVersionInfo] = None
    registry_source: Optional[str] = None
    update_status: Optional[UpdateStatus] = None  # None means the comparison was impossible
    error: Optional[str] = None  # per-package registry failure

    @property
    def deprecated(self) -> bool:
        """Whether the installed version is deprecated."""
        return bool(self.installed and self.installed.deprecated)

    @property
    def show_latest(self) -> bool:
        """Latest is only worth showing when it adds a new version to the row."""
        if self.latest is None:
            return False
        if self.installed and self.installed.version == self.latest.version:
            return False
        if self.last_minor and self.last_minor.version == self.latest.version:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "package_name": self.package_name,
            "dependency_type": self.dependency_type,
            "version_required": self.version_required,
            "update_status": self.update_status or UNKNOWN_STATUS,
        }
        if self.installed:
            data["installed"] = self.installed.to_dict()
        if self.last_patch:
            data["last_patch"] = self.last_patch.to_dict()
        if self.last_minor:
            data["last_minor"] = self.last_minor.to_dict()
        if self.show_latest:
            data["latest"] = self.latest.to_dict()
        if self.registry_source:
            data["registry_source"] = self.registry_source
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class UpdatePlanEntry:
    """A single version bump to apply to package.json."""

    package_name: str
    dependency_type: str
    current_version: str
    new_version: str
    update_type: UpdateStatus
    deprecated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "package_name": self.package_name,
            "dependency_type": self.dependency_type,
            "current_version": self.current_version,
            "new_version": self.new_version,
            "update_type": self.update_type,
            "deprecated": self.deprecated,
        }


@dataclass
class Manifest:
    """A parsed package.json."""

    path: Path
    data: dict[str, Any]  # the full document, mutated in memory by the update step
    declarations: list[DependencyDeclaration]

    @property
    def name(self) -> str:
        name = self.data.get("name")
        return name if isinstance(name, str) else ""

    @property
    def version(self) -> str:
        version = self.data.get("version")
        return version if isinstance(version, str) and version else "0.0.0"
