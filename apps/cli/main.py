"""CLI application for check-my-deps."""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from checkmydeps.analysis import analyze_project
from checkmydeps.config import load_settings
from checkmydeps.errors import CheckMyDepsError
from checkmydeps.exporters import ExcelExporter, JsonExporter, get_export_file_path
from checkmydeps.lockfile import PACKAGE_LOCK_FILE_NAME
from checkmydeps.logging import configure_logging
from checkmydeps.manifest import PACKAGE_FILE_NAME, write_manifest
from checkmydeps.models import UPDATE_LEVELS
from checkmydeps.planner import apply_updates, prepare_updates, updates_document
from checkmydeps.summary import build_summary

console = Console()

EXPORTERS = {
    "excel": ExcelExporter,
    "json": JsonExporter,
}


class Output:
    """Terminal feedback that honors --silent; errors are always shown."""

    def __init__(self, silent: bool = False):
        self.silent = silent
        self._status = None

    @contextmanager
    def loading(self, text: str) -> Iterator[None]:
        if self.silent:
            yield
            return
        with console.status(text) as status:
            self._status = status
            try:
                yield
            finally:
                self._status = None

    def step(self, text: str) -> None:
        if self._status is not None:
            self._status.update(text)

    def msg(self, message: str) -> None:
        if not self.silent:
            console.print(message, style="blue")

    def success(self, message: str) -> None:
        if not self.silent:
            console.print(message, style="green")

    def error(self, error: Exception) -> None:
        console.print(f"Error: {error}", style="red")
        hint = getattr(error, "hint", None)
        if hint:
            console.print(hint, style="yellow")


app = typer.Typer(
    name="check-my-deps",
    help="check-my-deps - Analyze, export and update npm dependencies of a project",
    add_completion=False,
    no_args_is_help=True,
)


@app.command()
def export(
    cwd: Path = typer.Option(
        Path("."), "--cwd", "-c", help=f"Directory containing {PACKAGE_FILE_NAME}"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for the report (defaults to --cwd)"
    ),
    silent: bool = typer.Option(False, "--silent", "-s", help="Prevent any output to the terminal"),
    force_overwrite: bool = typer.Option(
        False, "--force-overwrite", "-f", help="Overwrite an existing report instead of numbering it"
    ),
    format_type: str = typer.Option("excel", "--format", help="Report format: excel or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Export dependency status of package.json to an Excel or JSON report."""
    output = Output(silent)
    configure_logging(verbose=verbose, silent=silent)

    try:
        format_key = format_type.lower()
        if format_key not in EXPORTERS:
            raise CheckMyDepsError(
                f"Invalid format {format_type!r}. Must be one of: {', '.join(EXPORTERS)}"
            )

        with output.loading("Analyzing dependencies..."):
            settings = load_settings(cwd)

            output.step("Fetching registry data...")
            analysis = asyncio.run(analyze_project(cwd, settings))

            output.step("Generating summary...")
            summary = build_summary(analysis.records, analysis.manifest, settings.registry_url)

            exporter = EXPORTERS[format_key](analysis.records, summary)
            file_path = get_export_file_path(
                analysis.manifest,
                output_dir or cwd,
                exporter.file_extension,
                force_overwrite,
            )

            output.step(f"Saving report to {file_path}{exporter.file_extension}...")
            saved = exporter.save(file_path)

        output.success(f"Report created at {saved}")

    except Exception as e:
        output.error(e)
        raise typer.Exit(1)


@app.command()
def update(
    cwd: Path = typer.Option(
        Path("."), "--cwd", "-c", help=f"Directory containing {PACKAGE_FILE_NAME}"
    ),
    silent: bool = typer.Option(False, "--silent", "-s", help="Prevent any output to the terminal"),
    level: str = typer.Option(
        "latest", "--level", "-l", help="How far to update: latest, minor or patch"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d", help=f"Show the updates without changing {PACKAGE_FILE_NAME}"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Update package.json dependencies according to semver rules."""
    output = Output(silent)
    configure_logging(verbose=verbose, silent=silent)

    try:
        update_level = level.lower()
        if update_level not in UPDATE_LEVELS:
            raise CheckMyDepsError(
                f"Invalid update level {level!r}. Must be one of: {', '.join(UPDATE_LEVELS)}"
            )

        with output.loading("Analyzing dependencies..."):
            settings = load_settings(cwd)

            output.step("Fetching registry data...")
            analysis = asyncio.run(analyze_project(cwd, settings))

            output.step("Determining updates...")
            updates = prepare_updates(analysis.records, update_level, settings.registry_url)

        if not updates:
            output.success("All packages are already up to date!")
            return

        # The plan is printed even in silent mode
        console.print_json(data=updates_document(updates, update_level))

        if dry_run:
            output.success(f"Dry run completed. {len(updates)} packages would be updated.")
            return

        updated = apply_updates(analysis.manifest.data, updates)
        if not updated:
            output.success("No packages needed updating.")
            return

        write_manifest(analysis.manifest.path, analysis.manifest.data)
        output.success(f"Successfully updated {updated} packages!")
        output.msg(
            f'Run "npm install" to update your {PACKAGE_LOCK_FILE_NAME} and node_modules.'
        )

    except Exception as e:
        output.error(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
