"""End-to-end analysis of a project's dependencies."""

from dataclasses import dataclass, field
from pathlib import Path

from .aggregate import build_package_record
from .config import Settings
from .lockfile import check_in_sync, load_lockfile
from .logging import get_logger
from .manifest import load_manifest
from .models import Manifest, PackageRecord
from .registry import FetchResult, RegistryClient, fetch_registry_data

logger = get_logger("analysis")


@dataclass
class Analysis:
    """Result of analyzing one project."""

    manifest: Manifest
    records: list[PackageRecord]
    failures: list[FetchResult] = field(default_factory=list)


async def analyze_project(
    cwd: Path, settings: Settings, client: RegistryClient | None = None
) -> Analysis:
    """Read the manifest and lockfile, fetch registry data and build records.

    Manifest and lockfile problems (including a lockfile that is out of sync
    with the manifest) raise before any registry request is made. Registry
    failures only degrade the affected records.

    Args:
        cwd: Project directory containing package.json and package-lock.json
        settings: Registry and concurrency settings
        client: Registry client to use; one is created from settings otherwise

    Returns:
        The analysis with one record per declared dependency, in manifest order
    """
    manifest = load_manifest(cwd)
    lockfile = load_lockfile(cwd)
    check_in_sync(manifest, lockfile)

    if client is None:
        client = RegistryClient(registry_url=settings.registry_url, timeout=settings.timeout)

    async with client:
        results = await fetch_registry_data(manifest.declarations, client, settings.concurrency)

    records = []
    for declaration, result in zip(manifest.declarations, results):
        records.append(
            build_package_record(
                declaration,
                lockfile.get(declaration.package_name),
                result.data,
                registry_url=settings.registry_url,
                package_page_url=settings.package_page_url,
                error=result.error,
            )
        )

    failures = list({result.package_name: result for result in results if not result.ok}.values())
    if failures:
        logger.debug(
            "Registry data unavailable for %d packages; they are reported as unknown",
            len(failures),
        )

    return Analysis(manifest=manifest, records=records, failures=failures)
