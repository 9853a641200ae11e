"""Credential provider interface and token acquisition.

This module defines the seam between arauth and ``google-auth``:

- :class:`CredentialProvider` -- the abstract source of credentials that
  plugins receive by injection.
- :func:`refresh_if_expired` -- refresh a credential only when its token
  is missing or expired.
- :func:`acquire_credentials` -- the one call a plugin makes per
  application; every failure surfaces as
  :class:`~arauth.exceptions.CredentialAcquisitionError`.

See Also:
    :mod:`arauth.auth.providers` for the built-in providers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import google.auth.exceptions
import google.auth.transport
from google.auth.credentials import Credentials

from arauth.exceptions import CredentialAcquisitionError
from arauth.models import PasswordCredentials

ACQUISITION_FAILURE_MESSAGE = (
    "Failed to get access token from gcloud or Application Default Credentials"
)


class CredentialProvider(ABC):
    """Abstract source of Google credentials.

    Implementations return a credential object that may not hold a valid
    token yet; :func:`refresh_if_expired` takes care of that.
    """

    @abstractmethod
    def get_credential(self) -> Credentials:
        """Return the credentials to authenticate with.

        Raises:
            google.auth.exceptions.GoogleAuthError: If no credentials can
                be located.
            OSError: If a credential file or helper process cannot be read.
        """
        ...


def refresh_if_expired(
    credentials: Credentials, request: google.auth.transport.Request
) -> str:
    """Refresh *credentials* when needed and return the access token.

    Args:
        credentials: The credential object to refresh.
        request: Transport used by ``google-auth`` for the token exchange.

    Returns:
        The raw bearer token string.

    Raises:
        google.auth.exceptions.RefreshError: If the refresh fails or yields
            no token.
    """
    if not credentials.valid:
        credentials.refresh(request)
    token = credentials.token
    if not token:
        raise google.auth.exceptions.RefreshError("Credentials returned no access token")
    return token


def acquire_credentials(
    provider: CredentialProvider, request: google.auth.transport.Request
) -> PasswordCredentials:
    """Obtain a fresh access token and wrap it as a credential pair.

    Args:
        provider: Where to get the credentials from.
        request: Transport used for the refresh.

    Returns:
        ``PasswordCredentials("oauth2accesstoken", <token>)``.

    Raises:
        CredentialAcquisitionError: On any lookup, transport or refresh
            failure. Nothing is retried.
    """
    try:
        credentials = provider.get_credential()
        token = refresh_if_expired(credentials, request)
    except (google.auth.exceptions.GoogleAuthError, OSError) as exc:
        raise CredentialAcquisitionError(f"{ACQUISITION_FAILURE_MESSAGE}: {exc}") from exc
    return PasswordCredentials.from_access_token(token)
