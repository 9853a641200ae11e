"""Configure commands -- run a configuration pass over a build description.

``arauth configure`` loads a build file, applies the plugins it declares,
evaluates the build and prints every repository after the pass.
``arauth rewrite-url`` applies the URL rewrite to a single URL.

Typical workflow::

    arauth configure build.yaml
    arauth configure build.yaml --write resolved.json
    arauth rewrite-url artifactregistry://us-maven.pkg.dev/proj/repo
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from arauth.exceptions import ArauthError, InvalidUsageError
from arauth.host import Build, PublishingExtension, UrlArtifactRepository
from arauth.output import error, mask_secret, print_data, print_table, success


def _repository_rows(build: Build) -> list[list[str]]:
    """Flatten every repository of *build* into display rows."""
    scoped = [("plugin-management", r) for r in build.settings.plugin_management.repositories]
    for project in build.projects:
        scoped.extend((f"project:{project.name}", r) for r in project.repositories)
        publishing = project.extensions.find_by_type(PublishingExtension)
        if publishing is not None:
            scoped.extend((f"publishing:{project.name}", r) for r in publishing.repositories)

    rows: list[list[str]] = []
    for scope, repository in scoped:
        url = getattr(repository, "url", None) or ""
        username = password = auth = ""
        if isinstance(repository, UrlArtifactRepository):
            if repository.credentials is not None:
                username = repository.credentials.username
                password = mask_secret(repository.credentials.password)
            auth = ",".join(s.value for s in repository.authentication)
        rows.append([scope, repository.name, url, username, password, auth])
    return rows


def configure_command(
    ctx: typer.Context,
    build_file: Path = typer.Argument(help="Build description (JSON or YAML)."),
    write: Optional[Path] = typer.Option(
        None,
        "--write",
        "-w",
        help="Save the configured build (including credentials) to this file.",
    ),
) -> None:
    """Apply plugins to a build description and show the resulting repositories.

    Raises:
        typer.Exit: With the error's exit code when the configuration pass
            fails (3 for credential failures, 4 for unrewritable URLs).
    """
    from arauth.config import load_build_config, resolve_config, save_build_config
    from arauth.host import build_to_config
    from arauth.plugins import PluginManager

    obj = ctx.obj or {}
    manager = PluginManager()
    try:
        if write is not None and write.resolve() == build_file.resolve():
            raise InvalidUsageError(
                "--write must not overwrite the build file; the output contains access tokens"
            )
        config = resolve_config(cli_credential_source=obj.get("credential_source"))
        manager.discover(config)
        build_config = load_build_config(build_file)
        build = manager.configure(build_config)
        if write is not None:
            save_build_config(build_to_config(build, build_config), write)
    except ArauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    finally:
        manager.cleanup()

    print_table(
        ["Scope", "Repository", "URL", "Username", "Password", "Authentication"],
        _repository_rows(build),
        title=build.name or str(build_file),
    )
    if write is not None:
        success(f"Configured build written to {write}")


def rewrite_url_command(
    url: str = typer.Argument(help="An artifactregistry:// URL."),
) -> None:
    """Print the HTTPS form of an ``artifactregistry://`` URL.

    The query string is not carried over.
    """
    from arauth.rewrite import rewrite_url

    try:
        print_data(rewrite_url(url))
    except ArauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
