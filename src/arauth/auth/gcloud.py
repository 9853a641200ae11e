"""Credentials backed by the ``gcloud`` CLI.

When Application Default Credentials are not set up, developers are
usually logged in through ``gcloud auth login``. :class:`GcloudCredentials`
asks ``gcloud config config-helper`` for the current access token on every
refresh, so token caching and renewal stay inside ``gcloud``.
"""

from __future__ import annotations

import json
import logging
import platform
import subprocess
from datetime import datetime
from typing import Any, Optional

import google.auth.exceptions
from google.auth import credentials

logger = logging.getLogger(__name__)

_EXPIRY_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_HELPER_ARGS = ("config", "config-helper", "--format=json(credential)")


def default_gcloud_command() -> str:
    """Return the platform-specific name of the gcloud executable."""
    return "gcloud.cmd" if platform.system() == "Windows" else "gcloud"


class GcloudCredentials(credentials.Credentials):
    """Access tokens obtained from ``gcloud config config-helper``.

    Args:
        command: Name or path of the gcloud executable. Defaults to
            :func:`default_gcloud_command`.
        timeout: Seconds to wait for gcloud before giving up.
    """

    def __init__(self, command: Optional[str] = None, timeout: float = 30.0) -> None:
        super().__init__()
        self._command = command or default_gcloud_command()
        self._timeout = timeout

    @property
    def command(self) -> str:
        return self._command

    def refresh(self, request: Any) -> None:
        """Fetch the current token from gcloud; *request* is not used.

        Raises:
            google.auth.exceptions.RefreshError: If gcloud is missing,
                fails, times out, or prints something unexpected.
        """
        args = [self._command, *_HELPER_ARGS]
        logger.debug("Refreshing access token with %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise google.auth.exceptions.RefreshError(
                f"gcloud executable '{self._command}' not found"
            ) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise google.auth.exceptions.RefreshError(
                f"gcloud config config-helper failed: {detail}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise google.auth.exceptions.RefreshError(
                f"gcloud did not respond within {self._timeout:g}s"
            ) from exc

        self.token, self.expiry = _parse_helper_output(result.stdout)


def _parse_helper_output(output: str) -> tuple[str, Optional[datetime]]:
    """Extract the access token and its (naive UTC) expiry from config-helper JSON."""
    try:
        data = json.loads(output)
        credential = data["credential"]
        token = credential["access_token"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise google.auth.exceptions.RefreshError(
            "Unexpected output from gcloud config config-helper"
        ) from exc

    expiry: Optional[datetime] = None
    raw_expiry = credential.get("token_expiry")
    if raw_expiry:
        try:
            expiry = datetime.strptime(raw_expiry, _EXPIRY_FORMAT)
        except ValueError:
            logger.debug("Ignoring unparseable gcloud token expiry %r", raw_expiry)
    return token, expiry
