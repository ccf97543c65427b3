"""Runtime settings for check-my-deps."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError
from .logging import get_logger

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_PACKAGE_PAGE_URL = "https://www.npmjs.com/package"
DEFAULT_CONCURRENCY = 5
DEFAULT_TIMEOUT = 30.0

NPMRC_FILE_NAME = ".npmrc"

logger = get_logger("config")


@dataclass
class Settings:
    """Settings shared by the registry client, aggregator and planner."""

    registry_url: str = DEFAULT_REGISTRY_URL
    package_page_url: str = DEFAULT_PACKAGE_PAGE_URL
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        self.registry_url = self.registry_url.rstrip("/")
        self.package_page_url = self.package_page_url.rstrip("/")


def load_settings(cwd: Path, environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings for a project directory.

    The registry is read from the project's ``.npmrc`` (``registry=...``) and
    may be overridden, like the numeric knobs, through environment variables:
    ``CHECKMYDEPS_REGISTRY``, ``CHECKMYDEPS_CONCURRENCY`` and
    ``CHECKMYDEPS_TIMEOUT``.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    npmrc_registry = _read_npmrc_registry(Path(cwd) / NPMRC_FILE_NAME)
    if npmrc_registry:
        settings.registry_url = npmrc_registry.rstrip("/")

    if env.get("CHECKMYDEPS_REGISTRY"):
        settings.registry_url = env["CHECKMYDEPS_REGISTRY"].rstrip("/")

    if env.get("CHECKMYDEPS_CONCURRENCY"):
        settings.concurrency = _parse_number(
            "CHECKMYDEPS_CONCURRENCY", env["CHECKMYDEPS_CONCURRENCY"], int
        )
        if settings.concurrency < 1:
            raise ConfigError("CHECKMYDEPS_CONCURRENCY must be at least 1")

    if env.get("CHECKMYDEPS_TIMEOUT"):
        settings.timeout = _parse_number("CHECKMYDEPS_TIMEOUT", env["CHECKMYDEPS_TIMEOUT"], float)
        if settings.timeout <= 0:
            raise ConfigError("CHECKMYDEPS_TIMEOUT must be positive")

    logger.debug("Using registry %s (concurrency=%d)", settings.registry_url, settings.concurrency)
    return settings


def _parse_number(name: str, raw: str, kind: type):
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc


def _read_npmrc_registry(path: Path) -> str | None:
    """Return the ``registry=`` value of an .npmrc file, if any."""
    if not path.is_file():
        return None

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        key, sep, value = stripped.partition("=")
        if sep and key.strip() == "registry":
            return value.strip() or None

    return None
