"""Pytest configuration and fixtures."""

import json

import pytest

from checkmydeps.models import RegistryPackageData

REGISTRY_URL = "https://registry.npmjs.org"


def make_registry_data(versions, time=None, deprecated=None, version_deprecations=None):
    """Build a registry document for the given version strings."""
    version_deprecations = version_deprecations or {}
    payload = {
        "name": "pkg",
        "versions": {
            version: ({"deprecated": version_deprecations[version]}
                      if version in version_deprecations else {"version": version})
            for version in versions
        },
        "time": time or {},
    }
    if deprecated is not None:
        payload["deprecated"] = deprecated
    return RegistryPackageData.model_validate(payload)


@pytest.fixture
def registry_data():
    """Factory for registry documents."""
    return make_registry_data


@pytest.fixture
def sample_package_json():
    """Sample package.json document for testing."""
    return {
        "name": "@acme/test-project",
        "version": "1.4.0",
        "dependencies": {
            "express": "^4.18.0",
            "lodash": "~4.17.20",
            "is-odd": "file:local-packages/is-odd",
        },
        "devDependencies": {
            "jest": "29.0.0",
        },
    }


@pytest.fixture
def sample_lockfile():
    """Lockfile (v3) generated from sample_package_json."""
    return {
        "name": "@acme/test-project",
        "version": "1.4.0",
        "lockfileVersion": 3,
        "requires": True,
        "packages": {
            "": {
                "name": "@acme/test-project",
                "version": "1.4.0",
                "dependencies": {
                    "express": "^4.18.0",
                    "lodash": "~4.17.20",
                    "is-odd": "file:local-packages/is-odd",
                },
                "devDependencies": {
                    "jest": "29.0.0",
                },
            },
            "local-packages/is-odd": {"version": "1.0.0"},
            "node_modules/express": {
                "version": "4.18.2",
                "resolved": f"{REGISTRY_URL}/express/-/express-4.18.2.tgz",
            },
            "node_modules/lodash": {
                "version": "4.17.20",
                "resolved": f"{REGISTRY_URL}/lodash/-/lodash-4.17.20.tgz",
            },
            "node_modules/is-odd": {
                "resolved": "local-packages/is-odd",
                "link": True,
            },
            "node_modules/jest": {
                "version": "29.0.0",
                "resolved": f"{REGISTRY_URL}/jest/-/jest-29.0.0.tgz",
                "dev": True,
            },
        },
    }


@pytest.fixture
def project_dir(tmp_path, sample_package_json, sample_lockfile):
    """A project directory with package.json and package-lock.json."""
    (tmp_path / "package.json").write_text(json.dumps(sample_package_json, indent=2) + "\n")
    (tmp_path / "package-lock.json").write_text(json.dumps(sample_lockfile, indent=2))
    return tmp_path
