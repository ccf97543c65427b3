"""Reading and writing package.json."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .errors import ManifestError
from .logging import get_logger
from .models import DEPENDENCY_TYPES, DependencyDeclaration, Manifest

PACKAGE_FILE_NAME = "package.json"

logger = get_logger("manifest")


def parse_package_json(content: str, path: Path | None = None) -> Manifest:
    """Parse package.json content into a Manifest.

    Args:
        content: The package.json file content
        path: Where the content was read from

    Returns:
        Parsed Manifest with declarations ordered by dependency type

    Raises:
        ManifestError: The content is not a JSON object
    """
    display = str(path) if path else PACKAGE_FILE_NAME

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestError(
            f"{display} is not valid JSON: {exc}",
            hint=f"Fix the syntax of {PACKAGE_FILE_NAME} and run the command again.",
        ) from exc

    if not isinstance(data, dict):
        raise ManifestError(f"{display} must contain a JSON object")

    declarations: list[DependencyDeclaration] = []
    for dependency_type in DEPENDENCY_TYPES:
        deps = data.get(dependency_type)
        if not deps:
            continue
        if not isinstance(deps, dict):
            raise ManifestError(f'"{dependency_type}" in {display} must be an object')

        for package_name, version_required in deps.items():
            if not isinstance(version_required, str):
                logger.warning(
                    "Skipping %s in %s: version is not a string", package_name, dependency_type
                )
                continue
            declarations.append(
                DependencyDeclaration(
                    package_name=package_name,
                    dependency_type=dependency_type,
                    version_required=version_required,
                )
            )

    return Manifest(path=path or Path(PACKAGE_FILE_NAME), data=data, declarations=declarations)


def load_manifest(cwd: Path) -> Manifest:
    """Read package.json from a project directory."""
    path = Path(cwd) / PACKAGE_FILE_NAME

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestError(
            f"{PACKAGE_FILE_NAME} not found in {cwd}",
            hint="Run the command from the project root or pass --cwd.",
        ) from exc
    except OSError as exc:
        raise ManifestError(f"Could not read {path}: {exc}") from exc

    manifest = parse_package_json(content, path)
    logger.debug("Read %d dependencies from %s", len(manifest.declarations), path)
    return manifest


def write_manifest(path: Path, data: dict[str, Any]) -> None:
    """Write package.json in full, pretty-printed with 2-space indentation.

    The document goes to a temporary file in the same directory first and
    replaces the manifest in a single rename, so an interrupted run never
    leaves a partially written file.
    """
    path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o777)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug("Wrote %s", path)
