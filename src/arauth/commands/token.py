"""Token command -- print an Artifact Registry access token.

Useful for tools that take the token directly, for example::

    curl -u "oauth2accesstoken:$(arauth token)" https://us-maven.pkg.dev/...
"""

from __future__ import annotations

import typer

from arauth.exceptions import ArauthError
from arauth.output import error, print_data


def token_command(ctx: typer.Context) -> None:
    """Print a fresh access token to stdout."""
    from arauth.auth import acquire_credentials, create_credential_provider
    from arauth.config import resolve_config
    from arauth.transport import Request

    obj = ctx.obj or {}
    try:
        config = resolve_config(cli_credential_source=obj.get("credential_source"))
        provider = create_credential_provider(config.credentials)
        with Request(timeout=config.credentials.timeout) as request:
            credentials = acquire_credentials(provider, request)
    except ArauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    print_data(credentials.password)
