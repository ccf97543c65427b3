"""Test that project structure is correct and modules can be imported."""

import checkmydeps.aggregate
import checkmydeps.exporters
import checkmydeps.planner
import checkmydeps.registry
import checkmydeps.sources
from checkmydeps.models import DependencyDeclaration, PackageRecord


def test_core_modules_importable():
    """Ensure core modules can be imported."""
    assert hasattr(checkmydeps.registry, "RegistryClient")
    assert hasattr(checkmydeps.registry, "process_in_chunks")
    assert hasattr(checkmydeps.sources, "parse_source")
    assert hasattr(checkmydeps.aggregate, "build_package_record")
    assert hasattr(checkmydeps.planner, "prepare_updates")
    assert hasattr(checkmydeps.exporters, "ExcelExporter")


def test_model_creation():
    """Test that basic models can be instantiated."""
    declaration = DependencyDeclaration("my-lodash", "dependencies", "npm:lodash@^4.17.0")
    assert declaration.package_name == "my-lodash"
    assert declaration.registry_name == "lodash"

    record = PackageRecord(
        package_name="lodash", dependency_type="dependencies", version_required="^4.17.0"
    )
    assert record.update_status is None
    assert record.to_dict()["update_status"] == "unknown"
