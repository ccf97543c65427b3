"""Classification of lockfile resolved locations into registry sources.

A resolved location (``resolved`` in package-lock.json) is parsed into one of
a small set of tagged variants, each of which knows its normalized form:

* ``RegistrySource``  - a tarball served by the configured registry
* ``GitSource``       - a git repository, with the ref dropped
* ``TarballSource``   - any other http(s) URL
* ``LocalSource``     - a ``file:`` package
* ``AliasSource``     - an ``npm:`` alias pointing at another registry package
* ``UnknownSource``   - anything else, kept verbatim
"""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlsplit, urlunsplit

from .logging import get_logger

GIT_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")
TARBALL_MARKER = "/-/"

logger = get_logger("sources")


@dataclass(frozen=True)
class RegistrySource:
    base_url: str
    package_name: str

    @property
    def normalized(self) -> str:
        return f"{self.base_url}/{self.package_name}"


@dataclass(frozen=True)
class GitSource:
    url: str
    ref: Optional[str] = None  # branch, tag or commit from the #fragment

    @property
    def normalized(self) -> str:
        return self.url


@dataclass(frozen=True)
class TarballSource:
    url: str

    @property
    def normalized(self) -> str:
        return self.url


@dataclass(frozen=True)
class LocalSource:
    path: str

    @property
    def normalized(self) -> str:
        return self.path


@dataclass(frozen=True)
class AliasSource:
    base_url: str
    package_name: str
    version: Optional[str] = None

    @property
    def normalized(self) -> str:
        return f"{self.base_url}/{self.package_name}"


@dataclass(frozen=True)
class UnknownSource:
    raw: str

    @property
    def normalized(self) -> str:
        return self.raw


Source = Union[RegistrySource, GitSource, TarballSource, LocalSource, AliasSource, UnknownSource]


def parse_source(location: Optional[str], registry_url: str) -> Optional[Source]:
    """Parse a resolved location into a source variant.

    Returns None when there is no location. Malformed input never raises; it
    is kept verbatim as an ``UnknownSource``.
    """
    if not location:
        return None

    base_url = registry_url.rstrip("/")

    try:
        if _starts_with_base(location, base_url):
            return _parse_registry(location, base_url)

        if location.startswith(("http://", "https://")):
            return _parse_http(location)

        if location.startswith("git+"):
            url, _, ref = location[len("git+"):].partition("#")
            return GitSource(url=url, ref=ref or None)

        if location.startswith("file:"):
            return LocalSource(path=location)

        if location.startswith("npm:"):
            return _parse_alias(location, base_url)

    except ValueError as exc:
        logger.debug("Could not parse resolved location %r: %s", location, exc)

    return UnknownSource(raw=location)


def classify_source(location: Optional[str], registry_url: str) -> Optional[str]:
    """Return the normalized registry source for a resolved location."""
    source = parse_source(location, registry_url)
    if source is None:
        return None
    return source.normalized


def is_registry_source(source: Optional[str], registry_url: str) -> bool:
    """Whether a normalized source points at the configured registry."""
    if not source:
        return False
    return _starts_with_base(source, registry_url.rstrip("/"))


def _starts_with_base(location: str, base_url: str) -> bool:
    if not location.startswith(base_url):
        return False
    rest = location[len(base_url):]
    return rest == "" or rest.startswith("/")


def _parse_registry(location: str, base_url: str) -> Source:
    rest = location[len(base_url):].lstrip("/")
    package_name = rest.split(TARBALL_MARKER, 1)[0].split("#", 1)[0].split("?", 1)[0].rstrip("/")
    if not package_name:
        return UnknownSource(raw=location)
    return RegistrySource(base_url=base_url, package_name=package_name)


def _parse_http(location: str) -> Source:
    parts = urlsplit(location)
    host = (parts.hostname or "").lower()

    if any(git_host in host for git_host in GIT_HOSTS):
        url = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))
        return GitSource(url=url, ref=parts.fragment or None)

    if TARBALL_MARKER in parts.path:
        path = parts.path.split(TARBALL_MARKER, 1)[0]
        return TarballSource(url=urlunsplit((parts.scheme, parts.netloc, path, "", "")))

    return TarballSource(url=location)


def _parse_alias(location: str, base_url: str) -> Source:
    target = location[len("npm:"):]
    # A leading @ belongs to the scope, the next one introduces the version
    at = target.find("@", 1)
    if at == -1:
        package_name, version = target, None
    else:
        package_name, version = target[:at], target[at + 1:] or None

    if not package_name:
        return UnknownSource(raw=location)
    return AliasSource(base_url=base_url, package_name=package_name, version=version)
