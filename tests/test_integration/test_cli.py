"""Integration tests for the arauth CLI.

Drive the real Typer app end to end: configuration resolution, plugin
discovery (with a patched entry-point table), the configuration pass and
output formatting. Google credentials are replaced by in-memory fakes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import yaml

from arauth import __version__
from arauth.app import app
from arauth.config import load_build_config
from arauth.exit_codes import EXIT_CREDENTIAL_FAILURE, EXIT_URL_REWRITE_ERROR
from arauth.plugins import ArtifactRegistryPlugin
from arauth.plugins.manager import ENTRY_POINT_GROUP

BUILD = {
    "name": "demo",
    "settings": {
        "plugins": ["artifactregistry"],
        "plugin_management": {
            "repositories": [{"name": "plugins", "url": "artifactregistry://us-maven.pkg.dev/p/plugins"}]
        },
    },
    "projects": [
        {
            "name": "app",
            "repositories": [
                {"name": "ar", "url": "artifactregistry://us-maven.pkg.dev/p/repo"},
                {"name": "central", "url": "https://repo.maven.apache.org/maven2"},
            ],
            "publishing": {
                "repositories": [{"name": "release", "url": "artifactregistry://host/releases"}]
            },
        }
    ],
}


def _entry_points() -> Any:
    class MockEP:
        name = "artifactregistry"

        def load(self) -> type:
            return ArtifactRegistryPlugin

    class MockEPs:
        def select(self, group: str) -> list[Any]:
            return [MockEP()] if group == ENTRY_POINT_GROUP else []

    return MockEPs()


@pytest.fixture
def patched_plugins():
    with patch(
        "arauth.plugins.manager.importlib.metadata.entry_points",
        return_value=_entry_points(),
    ):
        yield


@pytest.fixture
def build_file(isolated_config: Path) -> Path:
    path = isolated_config / "build.yaml"
    path.write_text(yaml.safe_dump(BUILD))
    return path


def _use_provider(provider: Any):
    return patch(
        "arauth.plugins.artifactregistry.plugin.create_credential_provider",
        return_value=provider,
    )


class TestVersionAndHelp:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"arauth {__version__}" in result.output

    def test_help_lists_commands(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("configure", "rewrite-url", "token", "plugins"):
            assert command in result.output


class TestRewriteUrl:
    def test_success(self, cli_runner) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "rewrite-url", "artifactregistry://us-maven.pkg.dev/p/r#x"]
        )
        assert result.exit_code == 0
        assert result.output.strip() == "https://us-maven.pkg.dev/p/r#x"

    def test_invalid_url(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--plain", "rewrite-url", "artifactregistry:///p"])
        assert result.exit_code == EXIT_URL_REWRITE_ERROR
        assert "Invalid repository URL" in result.output


class TestConfigure:
    def test_rewrites_and_masks(
        self, cli_runner, build_file: Path, patched_plugins, fake_provider
    ) -> None:
        with _use_provider(fake_provider):
            result = cli_runner.invoke(app, ["--plain", "configure", str(build_file)])

        assert result.exit_code == 0, result.output
        out = result.output
        assert "https://us-maven.pkg.dev/p/plugins" in out
        assert "https://us-maven.pkg.dev/p/repo" in out
        assert "https://host/releases" in out
        assert "https://repo.maven.apache.org/maven2" in out
        assert "oauth2accesstoken" in out
        assert "********c123" in out
        assert "abc123" not in out
        assert "artifactregistry://" not in out

    def test_json_output(self, cli_runner, build_file: Path, patched_plugins, fake_provider) -> None:
        with _use_provider(fake_provider):
            result = cli_runner.invoke(app, ["--json", "configure", str(build_file)])

        assert result.exit_code == 0, result.output
        rows = json.loads(result.output)
        by_name = {row["Repository"]: row for row in rows}
        assert by_name["ar"]["Scope"] == "project:app"
        assert by_name["ar"]["Authentication"] == "basic"
        assert by_name["release"]["Scope"] == "publishing:app"
        assert by_name["plugins"]["Scope"] == "plugin-management"
        assert by_name["central"]["Username"] == ""

    def test_write_saves_credentials(
        self, cli_runner, build_file: Path, patched_plugins, fake_provider, isolated_config: Path
    ) -> None:
        target = isolated_config / "resolved.json"
        with _use_provider(fake_provider):
            result = cli_runner.invoke(
                app, ["--plain", "configure", str(build_file), "--write", str(target)]
            )

        assert result.exit_code == 0, result.output
        saved = load_build_config(target)
        repo = saved.projects[0].repositories[0]
        assert repo.url == "https://us-maven.pkg.dev/p/repo"
        assert repo.credentials is not None
        assert repo.credentials.password == "abc123"
        assert saved.settings.plugins == ["artifactregistry"]

    def test_write_refuses_build_file(
        self, cli_runner, build_file: Path, patched_plugins, fake_provider
    ) -> None:
        before = build_file.read_text()
        with _use_provider(fake_provider):
            result = cli_runner.invoke(
                app, ["--plain", "configure", str(build_file), "-w", str(build_file)]
            )
        assert result.exit_code == 2
        assert build_file.read_text() == before

    def test_credential_failure(
        self, cli_runner, build_file: Path, patched_plugins, failing_provider
    ) -> None:
        with _use_provider(failing_provider):
            result = cli_runner.invoke(app, ["--plain", "--no-color", "configure", str(build_file)])

        assert result.exit_code == EXIT_CREDENTIAL_FAILURE
        assert "Failed to get access token from gcloud or Application Default Credentials" in result.output

    def test_unrewritable_url(
        self, cli_runner, isolated_config: Path, patched_plugins, fake_provider
    ) -> None:
        path = isolated_config / "build.json"
        path.write_text(
            json.dumps(
                {
                    "init_plugins": ["artifactregistry"],
                    "projects": [
                        {"name": "app", "repositories": [{"name": "bad", "url": "artifactregistry:///x"}]}
                    ],
                }
            )
        )
        with _use_provider(fake_provider):
            result = cli_runner.invoke(app, ["--plain", "configure", str(path)])

        assert result.exit_code == EXIT_URL_REWRITE_ERROR

    def test_missing_build_file(self, cli_runner, isolated_config: Path, patched_plugins) -> None:
        result = cli_runner.invoke(app, ["--plain", "configure", "nope.yaml"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unknown_plugin(self, cli_runner, isolated_config: Path, patched_plugins) -> None:
        path = isolated_config / "build.json"
        path.write_text(json.dumps({"init_plugins": ["mirror"]}))
        result = cli_runner.invoke(app, ["--plain", "configure", str(path)])
        assert result.exit_code == 10
        assert "mirror" in result.output

    def test_credential_source_flag(
        self, cli_runner, build_file: Path, patched_plugins, fake_provider
    ) -> None:
        with _use_provider(fake_provider) as factory:
            result = cli_runner.invoke(
                app, ["--plain", "--credential-source", "adc", "configure", str(build_file)]
            )
        assert result.exit_code == 0, result.output
        assert factory.call_args.args[0].source.value == "adc"


class TestToken:
    def test_prints_token(self, cli_runner, isolated_config: Path, fake_provider) -> None:
        with patch("arauth.auth.create_credential_provider", return_value=fake_provider):
            result = cli_runner.invoke(app, ["--plain", "token"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "abc123"

    def test_failure(self, cli_runner, isolated_config: Path, failing_provider) -> None:
        with patch("arauth.auth.create_credential_provider", return_value=failing_provider):
            result = cli_runner.invoke(app, ["--plain", "token"])
        assert result.exit_code == EXIT_CREDENTIAL_FAILURE

    def test_invalid_source(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "-s", "keychain", "token"])
        assert result.exit_code == 1
        assert "keychain" in result.output


class TestPlugins:
    def test_lists_discovered(self, cli_runner, isolated_config: Path, patched_plugins) -> None:
        result = cli_runner.invoke(app, ["--plain", "plugins"])
        assert result.exit_code == 0, result.output
        assert "artifactregistry" in result.output
        assert __version__ in result.output

    def test_none_found(self, cli_runner, isolated_config: Path) -> None:
        with patch(
            "arauth.plugins.manager.importlib.metadata.entry_points",
            return_value=type("Empty", (), {"select": lambda self, group: []})(),
        ):
            result = cli_runner.invoke(app, ["--plain", "plugins"])
        assert result.exit_code == 0
        assert "No plugins found." in result.output
