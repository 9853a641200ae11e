"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~arauth.exceptions.ArauthError` subclass.
CI scripts can inspect the exit code to tell a credential problem apart
from a broken repository URL without parsing stderr.

Example::

    $ arauth configure build.yaml
    $ echo $?
    3   # EXIT_CREDENTIAL_FAILURE -- no access token could be obtained
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the configuration pass failed."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CREDENTIAL_FAILURE = 3
"""No access token could be obtained or refreshed."""

EXIT_URL_REWRITE_ERROR = 4
"""An ``artifactregistry://`` URL could not be rewritten to HTTPS."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load or is not known."""
