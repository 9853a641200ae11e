"""Exception hierarchy for arauth.

All exceptions inherit from :class:`ArauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`arauth.exit_codes`.
The top-level error handler in :func:`arauth.app.main` catches
``ArauthError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ArauthError (exit 1)
    +-- ConfigurationError              (exit 1)
    |   +-- CredentialAcquisitionError  (exit 3)
    |   +-- UrlRewriteError             (exit 4)
    +-- ConfigFileError                 (exit 1)
    +-- InvalidUsageError               (exit 2)
    +-- PluginError                     (exit 10)

:class:`ConfigurationError` and its subclasses abort the whole
configuration pass. Rewrites already applied to earlier repositories in
the same pass are not rolled back.
"""

from arauth.exit_codes import (
    EXIT_CREDENTIAL_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_URL_REWRITE_ERROR,
)


class ArauthError(Exception):
    """Base exception for all arauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`arauth.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(ArauthError):
    """Raised when a configuration pass cannot complete."""

    exit_code = EXIT_GENERIC_FAILURE


class CredentialAcquisitionError(ConfigurationError):
    """Raised when the credential provider cannot produce or refresh an access token."""

    exit_code = EXIT_CREDENTIAL_FAILURE


class UrlRewriteError(ConfigurationError):
    """Raised when a matched repository URL cannot be rebuilt with the ``https`` scheme.

    Args:
        url: The offending repository URL, kept for diagnosis.
        reason: Optional detail appended to the message.
    """

    exit_code = EXIT_URL_REWRITE_ERROR

    def __init__(self, url: str, reason: str | None = None):
        message = f"Invalid repository URL {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class ConfigFileError(ArauthError):
    """Raised for configuration file problems (missing build file, invalid JSON or YAML)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(ArauthError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class PluginError(ArauthError):
    """Raised when a plugin fails to load or is referenced but not loaded."""

    exit_code = EXIT_PLUGIN_ERROR
