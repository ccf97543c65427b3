"""Tests for resolved-location classification."""

import pytest

from checkmydeps.sources import (
    AliasSource,
    GitSource,
    LocalSource,
    RegistrySource,
    TarballSource,
    UnknownSource,
    classify_source,
    is_registry_source,
    parse_source,
)

REGISTRY = "https://registry.npmjs.org"


class TestParseSource:
    """Test the tagged source variants."""

    def test_registry_tarball(self):
        source = parse_source(f"{REGISTRY}/lodash/-/lodash-4.17.21.tgz", REGISTRY)
        assert source == RegistrySource(base_url=REGISTRY, package_name="lodash")

    def test_scoped_registry_tarball(self):
        source = parse_source(f"{REGISTRY}/@babel/core/-/core-7.24.0.tgz", REGISTRY)
        assert isinstance(source, RegistrySource)
        assert source.normalized == f"{REGISTRY}/@babel/core"

    def test_github_url_keeps_ref_separately(self):
        source = parse_source("https://github.com/user/repo.git#v1.2.0", REGISTRY)
        assert source == GitSource(url="https://github.com/user/repo.git", ref="v1.2.0")

    def test_git_plus_prefix(self):
        source = parse_source("git+ssh://git@github.com/user/repo.git#abc123", REGISTRY)
        assert isinstance(source, GitSource)
        assert source.normalized == "ssh://git@github.com/user/repo.git"
        assert source.ref == "abc123"

    def test_other_http_tarball(self):
        source = parse_source("https://npm.example.com/pkg/-/pkg-1.0.0.tgz", REGISTRY)
        assert source == TarballSource(url="https://npm.example.com/pkg")

    def test_local_package(self):
        assert parse_source("file:local-packages/is-odd", REGISTRY) == LocalSource(
            path="file:local-packages/is-odd"
        )

    def test_alias(self):
        source = parse_source("npm:@scope/real-pkg@2.1.0", REGISTRY)
        assert source == AliasSource(base_url=REGISTRY, package_name="@scope/real-pkg", version="2.1.0")

    def test_unknown_kept_verbatim(self):
        assert parse_source("github:user/repo", REGISTRY) == UnknownSource(raw="github:user/repo")

    def test_missing_location(self):
        assert parse_source(None, REGISTRY) is None
        assert parse_source("", REGISTRY) is None


class TestClassifySource:
    """Test normalized registry sources."""

    @pytest.mark.parametrize(
        "location, expected",
        [
            (f"{REGISTRY}/lodash/-/lodash-4.17.21.tgz", f"{REGISTRY}/lodash"),
            ("https://gitlab.com/group/project.git#main", "https://gitlab.com/group/project.git"),
            ("https://bitbucket.org/team/repo#develop", "https://bitbucket.org/team/repo"),
            ("https://cdn.example.com/files/pkg.tgz", "https://cdn.example.com/files/pkg.tgz"),
            ("git+https://github.com/user/repo.git#main", "https://github.com/user/repo.git"),
            ("file:../shared", "file:../shared"),
            ("npm:lodash@4.17.21", f"{REGISTRY}/lodash"),
            ("npm:left-pad", f"{REGISTRY}/left-pad"),
            ("some/odd/location", "some/odd/location"),
        ],
    )
    def test_rules(self, location, expected):
        assert classify_source(location, REGISTRY) == expected

    def test_idempotent_on_registry_urls(self):
        registry = "https://registry.example"
        once = classify_source(f"{registry}/lodash/-/lodash-4.17.21.tgz", registry)
        assert once == f"{registry}/lodash"
        assert classify_source(once, registry) == once

    def test_malformed_url_falls_back_to_raw(self):
        raw = "http://[::1/broken"
        assert classify_source(raw, REGISTRY) == raw

    def test_registry_prefix_must_end_at_path_boundary(self):
        location = "https://registry.npmjs.org.evil.com/pkg/-/pkg-1.0.0.tgz"
        assert classify_source(location, REGISTRY) == "https://registry.npmjs.org.evil.com/pkg"

    def test_trailing_slash_on_registry_url(self):
        assert classify_source(f"{REGISTRY}/lodash/-/lodash-1.0.0.tgz", REGISTRY + "/") == (
            f"{REGISTRY}/lodash"
        )


def test_is_registry_source():
    assert is_registry_source(f"{REGISTRY}/lodash", REGISTRY)
    assert not is_registry_source("https://github.com/user/repo.git", REGISTRY)
    assert not is_registry_source("file:local", REGISTRY)
    assert not is_registry_source(None, REGISTRY)
