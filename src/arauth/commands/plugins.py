"""Plugins command -- list the plugins discovered through entry points."""

from __future__ import annotations

import typer

from arauth.exceptions import ArauthError
from arauth.output import error, info, print_table


def plugins_command(ctx: typer.Context) -> None:
    """List discovered plugins and their versions."""
    from arauth.config import resolve_config
    from arauth.plugins import PluginManager

    obj = ctx.obj or {}
    manager = PluginManager()
    try:
        config = resolve_config(cli_credential_source=obj.get("credential_source"))
        manager.discover(config)
        plugins = manager.list_plugins()
    except ArauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    finally:
        manager.cleanup()

    if not plugins:
        info("No plugins found.")
        return
    print_table(
        ["Name", "Version", "Description"],
        [[p["name"], p["version"], p["description"]] for p in plugins],
    )
