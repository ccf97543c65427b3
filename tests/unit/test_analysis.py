"""Tests for end-to-end project analysis."""

import json

import httpx
import pytest

from checkmydeps.analysis import analyze_project
from checkmydeps.config import Settings
from checkmydeps.errors import LockfileError, LockfileMismatchError, ManifestError
from checkmydeps.registry import RegistryClient

REGISTRY_DOCS = {
    "express": {
        "versions": {"4.18.2": {}, "4.19.0": {}, "5.0.0": {}, "5.1.0-beta.1": {}},
        "time": {"4.18.2": "2022-10-08T20:26:05.000Z"},
    },
    "lodash": {
        "versions": {"4.17.20": {}, "4.17.21": {}},
    },
    "jest": {
        "versions": {"29.0.0": {}},
    },
}


def registry_client(requests):
    def handler(request):
        name = request.url.path.lstrip("/")
        requests.append(name)
        if name not in REGISTRY_DOCS:
            return httpx.Response(404, json={"error": "Not found"})
        return httpx.Response(200, json=REGISTRY_DOCS[name])

    return RegistryClient(
        "https://registry.npmjs.org",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestAnalyzeProject:
    """Test the manifest -> lockfile -> registry -> records pipeline."""

    @pytest.mark.asyncio
    async def test_records_in_manifest_order(self, project_dir):
        requests = []

        analysis = await analyze_project(project_dir, Settings(), client=registry_client(requests))

        assert sorted(requests) == ["express", "is-odd", "jest", "lodash"]
        assert [r.package_name for r in analysis.records] == ["express", "lodash", "is-odd", "jest"]

        express, lodash, is_odd, jest = analysis.records
        assert express.update_status == "major"
        assert express.last_minor.version == "4.19.0"
        assert express.latest.version == "5.0.0"
        assert express.installed.release_date == "10/08/2022"
        assert lodash.update_status == "patch"
        assert jest.update_status == "upToDate"
        assert jest.dependency_type == "devDependencies"

        assert is_odd.update_status is None
        assert is_odd.registry_source == "file:local-packages/is-odd"
        assert "not found" in is_odd.error
        assert [f.package_name for f in analysis.failures] == ["is-odd"]

    @pytest.mark.asyncio
    async def test_mismatch_stops_before_fetching(self, project_dir, sample_package_json):
        sample_package_json["dependencies"]["express"] = "^5.0.0"
        (project_dir / "package.json").write_text(json.dumps(sample_package_json))
        requests = []

        with pytest.raises(LockfileMismatchError):
            await analyze_project(project_dir, Settings(), client=registry_client(requests))

        assert requests == []

    @pytest.mark.asyncio
    async def test_missing_lockfile(self, project_dir):
        (project_dir / "package-lock.json").unlink()

        with pytest.raises(LockfileError):
            await analyze_project(project_dir, Settings(), client=registry_client([]))

    @pytest.mark.asyncio
    async def test_invalid_manifest(self, project_dir):
        (project_dir / "package.json").write_text("{ not json")

        with pytest.raises(ManifestError):
            await analyze_project(project_dir, Settings(), client=registry_client([]))
