"""Built-in CLI sub-commands for arauth.

Each module in this package defines a Typer command (or sub-application)
that is registered on the root app in :func:`arauth.app.main`:

- :mod:`~arauth.commands.configure` -- ``configure`` and ``rewrite-url``.
- :mod:`~arauth.commands.token` -- ``token``.
- :mod:`~arauth.commands.plugins` -- ``plugins``.
"""
