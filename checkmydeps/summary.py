"""Aggregate statistics over package records for the report emitters."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

from .helpers import format_date
from .models import Manifest, PackageRecord
from .sources import is_registry_source

PROJECT_NAME = "check-my-deps"
PROJECT_URLS = (
    ("Website", "https://checkmydeps.com"),
    ("GitHub", "https://github.com/kinolanka/check-my-deps"),
)


@dataclass
class SummaryStats:
    """Counts for one dependency type (or for all of them)."""

    total: int = 0
    from_registry: int = 0
    not_from_registry: int = 0
    up_to_date: int = 0
    outdated: int = 0  # major + minor + patch
    major: int = 0
    minor: int = 0
    patch: int = 0
    deprecated: int = 0
    unknown: int = 0

    def add(self, other: "SummaryStats") -> None:
        for name in self.__dataclass_fields__:
            setattr(self, name, getattr(self, name) + getattr(other, name))


@dataclass
class ReportInfo:
    date: str
    time: str
    project_name: str
    project_version: str


@dataclass
class Summary:
    by_type: dict[str, SummaryStats]
    totals: SummaryStats
    report_info: ReportInfo
    source_info: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "by_type": {name: asdict(stats) for name, stats in self.by_type.items()},
            "totals": asdict(self.totals),
            "report_info": asdict(self.report_info),
            "source_info": self.source_info,
        }


def _count(stats: SummaryStats, record: PackageRecord, registry_url: str) -> None:
    stats.total += 1

    status = record.update_status
    if status == "upToDate":
        stats.up_to_date += 1
    elif status in ("major", "minor", "patch"):
        setattr(stats, status, getattr(stats, status) + 1)
        stats.outdated += 1
    else:
        stats.unknown += 1

    # Only the installed version counts, not newer deprecated releases
    if record.deprecated:
        stats.deprecated += 1

    if is_registry_source(record.registry_source, registry_url):
        stats.from_registry += 1
    elif record.registry_source:
        stats.not_from_registry += 1


def build_summary(
    records: list[PackageRecord],
    manifest: Manifest,
    registry_url: str,
    now: Optional[datetime] = None,
) -> Summary:
    """Group records by dependency type and count update tiers.

    Args:
        records: Package records in report order
        manifest: The analyzed manifest, for project name and version
        registry_url: Base URL of the registry, to tell registry sources apart
        now: Report timestamp, defaults to the current local time

    Returns:
        Summary with per-type and total statistics
    """
    by_type: dict[str, SummaryStats] = {}
    for record in records:
        stats = by_type.setdefault(record.dependency_type, SummaryStats())
        _count(stats, record, registry_url)

    totals = SummaryStats()
    for stats in by_type.values():
        totals.add(stats)

    moment = now or datetime.now()
    report_info = ReportInfo(
        date=format_date(moment),
        time=moment.strftime("%H:%M:%S"),
        project_name=manifest.name,
        project_version=manifest.version,
    )

    source_info = {
        "info": f"This report was created using {PROJECT_NAME}",
        "urls": [{"label": label, "url": url} for label, url in PROJECT_URLS],
    }

    return Summary(by_type=by_type, totals=totals, report_info=report_info, source_info=source_info)
