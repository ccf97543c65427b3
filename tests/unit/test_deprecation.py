"""Tests for deprecation lookups."""

from checkmydeps.deprecation import is_deprecated, is_package_deprecated


def test_package_level_deprecation_applies_to_every_version(registry_data):
    data = registry_data(["1.0.0", "2.0.0"], deprecated=True)
    assert is_deprecated(data, "1.0.0")
    assert is_deprecated(data, "2.0.0")
    assert is_deprecated(data, "9.9.9")


def test_package_level_message_counts_as_deprecated(registry_data):
    data = registry_data(["1.0.0"], deprecated="Use other-package instead")
    assert is_package_deprecated(data)
    assert is_deprecated(data, "1.0.0")


def test_version_level_deprecation(registry_data):
    data = registry_data(["1.0.0", "1.0.1"], version_deprecations={"1.0.0": "security issue"})
    assert is_deprecated(data, "1.0.0")
    assert not is_deprecated(data, "1.0.1")


def test_empty_deprecation_string_is_not_deprecated(registry_data):
    data = registry_data(["1.0.0"], version_deprecations={"1.0.0": ""})
    assert not is_deprecated(data, "1.0.0")


def test_missing_data_is_not_deprecated(registry_data):
    assert not is_deprecated(None, "1.0.0")
    assert not is_deprecated(registry_data(["1.0.0"]), "3.0.0")
    assert not is_deprecated(registry_data(["1.0.0"]), None)
