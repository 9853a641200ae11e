"""Tests for arauth.rewrite -- the artifactregistry:// rewrite rule."""

from __future__ import annotations

import pytest

from arauth.exceptions import ConfigurationError, UrlRewriteError
from arauth.host import FlatDirRepository, IvyRepository, MavenRepository
from arauth.models import AuthenticationScheme, PasswordCredentials
from arauth.rewrite import (
    RewriteOutcome,
    configure_repository,
    has_artifact_registry_scheme,
    rewrite_url,
)


EXISTING = PasswordCredentials(username="deployer", password="s3cret")


# ---------------------------------------------------------------------------
# Scheme detection
# ---------------------------------------------------------------------------


class TestSchemeDetection:
    @pytest.mark.parametrize(
        "url",
        [
            "artifactregistry://us-maven.pkg.dev/proj/repo",
            "artifactregistry://host",
        ],
    )
    def test_matches_sentinel(self, url: str) -> None:
        assert has_artifact_registry_scheme(url)

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://repo.maven.apache.org/maven2",
            "ArtifactRegistry://us-maven.pkg.dev/proj/repo",
            "artifactregistry+https://host/path",
            "file:///tmp/artifactregistry",
            "artifactregistry",
        ],
    )
    def test_rejects_other_schemes(self, url: str | None) -> None:
        assert not has_artifact_registry_scheme(url)


# ---------------------------------------------------------------------------
# URL rewriting
# ---------------------------------------------------------------------------


class TestRewriteUrl:
    def test_host_and_path(self) -> None:
        assert (
            rewrite_url("artifactregistry://us-maven.pkg.dev/myproj/myrepo")
            == "https://us-maven.pkg.dev/myproj/myrepo"
        )

    def test_fragment_preserved(self) -> None:
        assert (
            rewrite_url("artifactregistry://host/path#fragment")
            == "https://host/path#fragment"
        )

    def test_empty_fragment_kept(self) -> None:
        assert rewrite_url("artifactregistry://host/p#") == "https://host/p#"

    def test_query_string_is_dropped(self) -> None:
        """Query parameters do not survive the rewrite."""
        assert (
            rewrite_url("artifactregistry://host/path?version=1&x=y#frag")
            == "https://host/path#frag"
        )

    def test_port_and_userinfo_are_dropped(self) -> None:
        assert rewrite_url("artifactregistry://user:pw@host:8443/p") == "https://host/p"

    def test_trailing_slash_kept(self) -> None:
        assert rewrite_url("artifactregistry://host/repo/") == "https://host/repo/"

    def test_percent_encoding_passthrough(self) -> None:
        assert rewrite_url("artifactregistry://host/a%20b") == "https://host/a%20b"

    def test_host_case_preserved(self) -> None:
        assert rewrite_url("artifactregistry://US-Maven.pkg.dev/p") == "https://US-Maven.pkg.dev/p"

    def test_host_only(self) -> None:
        assert rewrite_url("artifactregistry://host") == "https://host"

    def test_ipv6_host(self) -> None:
        assert rewrite_url("artifactregistry://[::1]:8080/repo") == "https://[::1]/repo"

    def test_missing_host_raises(self) -> None:
        with pytest.raises(UrlRewriteError) as exc_info:
            rewrite_url("artifactregistry:///only/path")
        assert exc_info.value.url == "artifactregistry:///only/path"
        assert "artifactregistry:///only/path" in str(exc_info.value)

    def test_opaque_url_raises(self) -> None:
        with pytest.raises(UrlRewriteError):
            rewrite_url("artifactregistry:opaque-thing")

    def test_invalid_ipv6_raises(self) -> None:
        with pytest.raises(UrlRewriteError):
            rewrite_url("artifactregistry://[::1/repo")

    def test_non_matching_scheme_raises(self) -> None:
        with pytest.raises(UrlRewriteError, match="scheme"):
            rewrite_url("https://host/path")

    def test_error_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            rewrite_url("artifactregistry:///x")


# ---------------------------------------------------------------------------
# Repository configuration
# ---------------------------------------------------------------------------


class TestConfigureRepository:
    def test_scenario_us_maven(self) -> None:
        repo = MavenRepository("ar", url="artifactregistry://us-maven.pkg.dev/myproj/myrepo")
        pair = PasswordCredentials.from_access_token("abc123")

        outcome = configure_repository(repo, pair)

        assert outcome is RewriteOutcome.AUTHENTICATED
        assert repo.url == "https://us-maven.pkg.dev/myproj/myrepo"
        assert repo.credentials is not None
        assert repo.credentials.username == "oauth2accesstoken"
        assert repo.credentials.password == "abc123"
        assert repo.authentication == [AuthenticationScheme.BASIC]

    def test_non_matching_scheme_without_credentials(
        self, credential_pair: PasswordCredentials
    ) -> None:
        repo = MavenRepository("central", url="https://repo.maven.apache.org/maven2")

        outcome = configure_repository(repo, credential_pair)

        assert outcome is RewriteOutcome.UNCHANGED
        assert repo.url == "https://repo.maven.apache.org/maven2"
        assert repo.credentials is None
        assert repo.authentication == []

    def test_non_matching_scheme_with_credentials(
        self, credential_pair: PasswordCredentials
    ) -> None:
        repo = MavenRepository(
            "central", url="https://repo.maven.apache.org/maven2", credentials=EXISTING
        )

        assert configure_repository(repo, credential_pair) is RewriteOutcome.UNCHANGED
        assert repo.credentials is EXISTING

    def test_repository_without_url(self, credential_pair: PasswordCredentials) -> None:
        repo = MavenRepository("empty")
        assert configure_repository(repo, credential_pair) is RewriteOutcome.UNCHANGED
        assert repo.url is None
        assert repo.credentials is None

    def test_existing_credentials_win(self, credential_pair: PasswordCredentials) -> None:
        repo = MavenRepository(
            "ar",
            url="artifactregistry://us-maven.pkg.dev/proj/repo",
            credentials=EXISTING,
            authentication=[AuthenticationScheme.DIGEST],
        )

        outcome = configure_repository(repo, credential_pair)

        assert outcome is RewriteOutcome.REWRITTEN
        assert repo.url == "https://us-maven.pkg.dev/proj/repo"
        assert repo.credentials is EXISTING
        assert repo.authentication == [AuthenticationScheme.DIGEST]

    @pytest.mark.parametrize(
        "repo",
        [
            IvyRepository("ivy", url="artifactregistry://host/ivy"),
            FlatDirRepository("libs", url="artifactregistry://host/libs"),
        ],
    )
    def test_non_url_repositories_ignored(
        self, repo: object, credential_pair: PasswordCredentials
    ) -> None:
        outcome = configure_repository(repo, credential_pair)  # type: ignore[arg-type]
        assert outcome is RewriteOutcome.IGNORED
        assert repo.url.startswith("artifactregistry://")  # type: ignore[attr-defined]

    def test_idempotent(self, credential_pair: PasswordCredentials) -> None:
        repo = MavenRepository("ar", url="artifactregistry://host/path#frag")

        configure_repository(repo, credential_pair)
        state_after_first = (repo.url, repo.credentials, repo.authentication)
        second = configure_repository(repo, credential_pair)

        assert second is RewriteOutcome.UNCHANGED
        assert (repo.url, repo.credentials, repo.authentication) == state_after_first

    def test_unrewritable_url_leaves_repository_untouched(
        self, credential_pair: PasswordCredentials
    ) -> None:
        repo = MavenRepository("broken", url="artifactregistry:///no-host")

        with pytest.raises(UrlRewriteError):
            configure_repository(repo, credential_pair)

        assert repo.url == "artifactregistry:///no-host"
        assert repo.credentials is None
