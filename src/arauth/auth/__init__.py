"""Credential acquisition for Artifact Registry.

This package turns ambient Google credentials into the
:class:`~arauth.models.PasswordCredentials` pair that the rewrite rule
attaches to repositories. Token exchange and refresh are delegated to
``google-auth``; this package only selects a credential source and wraps
its failures.

The main entry points are:

- :class:`CredentialProvider` -- abstract source of
  :class:`google.auth.credentials.Credentials`.
- :class:`DefaultCredentialProvider` -- Application Default Credentials
  with a fallback to the ``gcloud`` CLI.
- :class:`GcloudCredentials` -- credentials refreshed through
  ``gcloud config config-helper``.
- :func:`acquire_credentials` -- refresh and wrap a token, raising
  :class:`~arauth.exceptions.CredentialAcquisitionError` on any failure.

Typical usage::

    from arauth.auth import DefaultCredentialProvider, acquire_credentials
    from arauth.transport import Request

    with Request() as request:
        pair = acquire_credentials(DefaultCredentialProvider(), request)
"""

from arauth.auth.base import (
    ACQUISITION_FAILURE_MESSAGE,
    CredentialProvider,
    acquire_credentials,
    refresh_if_expired,
)
from arauth.auth.gcloud import GcloudCredentials
from arauth.auth.providers import DefaultCredentialProvider, create_credential_provider

__all__ = [
    "ACQUISITION_FAILURE_MESSAGE",
    "CredentialProvider",
    "DefaultCredentialProvider",
    "GcloudCredentials",
    "acquire_credentials",
    "create_credential_provider",
    "refresh_if_expired",
]
