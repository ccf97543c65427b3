"""Error types raised by check-my-deps."""


class CheckMyDepsError(Exception):
    """Base error carrying an optional remediation hint for the user."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class ConfigError(CheckMyDepsError):
    """Raised when settings cannot be parsed."""


class ManifestError(CheckMyDepsError):
    """Raised when package.json is missing, unreadable or not valid JSON."""


class LockfileError(CheckMyDepsError):
    """Raised when package-lock.json is missing or unreadable."""


class LockfileMismatchError(LockfileError):
    """Raised when the lockfile no longer matches the manifest declarations."""


class RegistryFetchError(CheckMyDepsError):
    """Raised when registry metadata for one package cannot be fetched."""

    def __init__(self, package_name: str, message: str):
        super().__init__(message)
        self.package_name = package_name


class PackageNotFoundError(RegistryFetchError):
    """Raised when the registry answers 404 for a package."""
