"""Report emitters: JSON documents and Excel workbooks."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .helpers import sanitize_file_name
from .logging import get_logger
from .models import Manifest, PackageRecord, PackageVersionInfo
from .summary import Summary

logger = get_logger("exporters")

STATUS_COLORS = {
    "major": "FF0000",
    "minor": "FFA500",
    "patch": "ADD8E6",
    "upToDate": "00FF00",
}
DEPRECATED_COLOR = "FF0000"
LINK_COLOR = "0000FF"
MUTED_COLOR = "666666"

SUMMARY_HEADERS = (
    "Dependency Type",
    "Total",
    "Up-to-Date",
    "Outdated",
    "Major",
    "Minor",
    "Patch",
    "Deprecated",
    "Unknown",
)
SUMMARY_WIDTHS = (20, 10, 15, 15, 10, 10, 10, 12, 10)

# (header, width) per column of the Dependencies sheet
DEPENDENCY_COLUMNS = (
    ("Package Name", 30),
    ("Update Status", 12),
    ("Required Version", 14),
    ("Installed Version", 12),
    ("Installed Version Deprecated", 12),
    ("Installed Version Published Date", 15),
    ("Latest Patch Version", 12),
    ("Latest Patch Version Deprecated", 12),
    ("Latest Patch Version Published Date", 15),
    ("Latest Minor Version", 12),
    ("Latest Minor Version Deprecated", 12),
    ("Latest Minor Version Published Date", 15),
    ("Latest Available Version", 15),
    ("Latest Available Version Deprecated", 12),
    ("Latest Version Published Date", 15),
    ("Registry Source", 30),
    ("Dependency Type", 20),
    ("Error", 40),
)


def get_export_file_path(
    manifest: Manifest, output_dir: Path, extension: str, force_overwrite: bool = False
) -> Path:
    """Return the report path without extension.

    The name is ``<package>-v<version>-dependencies``; unless overwriting is
    forced, a ``-N`` suffix is added until no file with ``extension`` exists.
    """
    package_name = sanitize_file_name(manifest.name or "package")
    version = manifest.version.replace(".", "-")
    base_name = f"{package_name}-v{version}-dependencies"

    output_dir = Path(output_dir).resolve()
    candidate = output_dir / base_name
    if force_overwrite:
        return candidate

    counter = 1
    while candidate.with_name(candidate.name + extension).exists():
        candidate = output_dir / f"{base_name}-{counter}"
        counter += 1
    return candidate


def _is_http_url(value: str) -> bool:
    try:
        return urlsplit(value).scheme in ("http", "https")
    except ValueError:
        return False


class Exporter(ABC):
    """Base class for report formats."""

    file_extension = ""

    def __init__(self, records: list[PackageRecord], summary: Summary):
        self.records = records
        self.summary = summary

    def save(self, file_path: Path) -> Path:
        """Write the report to ``file_path`` plus the format's extension."""
        full_path = Path(str(file_path) + self.file_extension)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        self._write(full_path)
        logger.debug("Report written to %s", full_path)
        return full_path

    @abstractmethod
    def _write(self, full_path: Path) -> None:
        """Write the report to its final location."""


class JsonExporter(Exporter):
    file_extension = ".json"

    def to_dict(self) -> dict:
        return {
            "dependencies": [record.to_dict() for record in self.records],
            "summary": self.summary.to_dict(),
        }

    def _write(self, full_path: Path) -> None:
        full_path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")


class ExcelExporter(Exporter):
    file_extension = ".xlsx"

    def build_workbook(self) -> Workbook:
        workbook = Workbook()
        summary_sheet = workbook.active
        summary_sheet.title = "Summary"
        self._fill_summary(summary_sheet)
        self._fill_dependencies(workbook.create_sheet("Dependencies"))
        return workbook

    def _write(self, full_path: Path) -> None:
        self.build_workbook().save(full_path)

    @staticmethod
    def _fill(color: str) -> PatternFill:
        return PatternFill(fill_type="solid", start_color=color, end_color=color)

    def _link(self, cell, text: str, url: str, italic: bool = False) -> None:
        cell.value = text
        cell.hyperlink = url
        cell.font = Font(color=LINK_COLOR, underline="single", italic=italic)
        cell.alignment = Alignment(horizontal="left")

    def _fill_summary(self, sheet) -> None:
        for index, width in enumerate(SUMMARY_WIDTHS, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = width

        info = self.summary.report_info
        sheet.append(["Report Date:", info.date])
        sheet.append(["Report Time:", info.time])
        sheet.append(["Project Name:", info.project_name])
        sheet.append(["Project Version:", info.project_version])
        sheet.append([])

        sheet.append(list(SUMMARY_HEADERS))
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)

        for dependency_type, stats in self.summary.by_type.items():
            sheet.append(
                [
                    dependency_type,
                    stats.total,
                    stats.up_to_date,
                    stats.outdated,
                    stats.major,
                    stats.minor,
                    stats.patch,
                    stats.deprecated,
                    stats.unknown,
                ]
            )

        sheet.append([])
        totals = self.summary.totals
        sheet.append(
            [
                "Total",
                totals.total,
                totals.up_to_date,
                totals.outdated,
                totals.major,
                totals.minor,
                totals.patch,
                totals.deprecated,
                totals.unknown,
            ]
        )
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)

        source_info = self.summary.source_info
        if not source_info:
            return

        sheet.append([])
        sheet.append([])
        sheet.append([source_info["info"]])
        row = sheet.max_row
        sheet.merge_cells(start_row=row, start_column=1, end_row=row, end_column=len(SUMMARY_HEADERS))
        info_cell = sheet.cell(row=row, column=1)
        info_cell.font = Font(italic=True, color=MUTED_COLOR)
        info_cell.alignment = Alignment(horizontal="left")

        for link in source_info.get("urls", []):
            sheet.append([link["label"], link["url"]])
            row = sheet.max_row
            label_cell = sheet.cell(row=row, column=1)
            label_cell.font = Font(italic=True, color=MUTED_COLOR)
            self._link(sheet.cell(row=row, column=2), link["url"], link["url"], italic=True)

    def _version_cells(self, sheet, row: int, column: int, info: Optional[PackageVersionInfo]):
        """Fill version / deprecated / published date starting at ``column``."""
        if info is None:
            return

        version_cell = sheet.cell(row=row, column=column)
        if info.registry_url:
            self._link(version_cell, info.version, info.registry_url)
        else:
            version_cell.value = info.version

        deprecated_cell = sheet.cell(row=row, column=column + 1, value="yes" if info.deprecated else "no")
        if info.deprecated:
            deprecated_cell.fill = self._fill(DEPRECATED_COLOR)

        sheet.cell(row=row, column=column + 2, value=info.release_date)

    def _fill_dependencies(self, sheet) -> None:
        sheet.append([header for header, _ in DEPENDENCY_COLUMNS])
        for index, (_, width) in enumerate(DEPENDENCY_COLUMNS, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = width
            sheet.cell(row=1, column=index).font = Font(bold=True)

        # Keep the header row and the package names visible while scrolling
        sheet.freeze_panes = "B2"

        for row, record in enumerate(self.records, start=2):
            sheet.cell(row=row, column=1, value=record.package_name)

            status_cell = sheet.cell(row=row, column=2, value=record.update_status or "unknown")
            if record.update_status in STATUS_COLORS:
                status_cell.fill = self._fill(STATUS_COLORS[record.update_status])

            sheet.cell(row=row, column=3, value=record.version_required)

            self._version_cells(sheet, row, 4, record.installed)
            self._version_cells(sheet, row, 7, record.last_patch)
            self._version_cells(sheet, row, 10, record.last_minor)
            if record.show_latest:
                self._version_cells(sheet, row, 13, record.latest)

            if record.registry_source:
                source_cell = sheet.cell(row=row, column=16)
                if _is_http_url(record.registry_source):
                    self._link(source_cell, record.registry_source, record.registry_source)
                else:
                    source_cell.value = record.registry_source
                    source_cell.alignment = Alignment(horizontal="left")

            sheet.cell(row=row, column=17, value=record.dependency_type)
            if record.error:
                sheet.cell(row=row, column=18, value=record.error)
