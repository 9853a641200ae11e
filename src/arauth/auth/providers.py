"""Built-in credential providers.

:class:`DefaultCredentialProvider` mirrors the lookup order developers
expect from Google tooling: Application Default Credentials first (service
account key, workload identity, ``gcloud auth application-default login``),
then the user's ``gcloud`` login.

Use :func:`create_credential_provider` to build a provider from
:class:`~arauth.models.CredentialsConfig`.
"""

from __future__ import annotations

import logging
from typing import Optional

import google.auth
import google.auth.exceptions
from google.auth.credentials import Credentials

from arauth.auth.base import CredentialProvider
from arauth.auth.gcloud import GcloudCredentials
from arauth.models import CLOUD_PLATFORM_SCOPE, CredentialsConfig, CredentialSource

logger = logging.getLogger(__name__)


class DefaultCredentialProvider(CredentialProvider):
    """Application Default Credentials with a ``gcloud`` fallback.

    Args:
        source: ``DEFAULT`` tries ADC then gcloud, ``ADC`` and ``GCLOUD``
            use only that source.
        scopes: OAuth2 scopes requested for ADC.
        gcloud_command: Executable used by :class:`GcloudCredentials`.
        timeout: Timeout passed to :class:`GcloudCredentials`.
    """

    def __init__(
        self,
        source: CredentialSource = CredentialSource.DEFAULT,
        scopes: Optional[list[str]] = None,
        gcloud_command: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self._source = source
        self._scopes = list(scopes) if scopes else [CLOUD_PLATFORM_SCOPE]
        self._gcloud_command = gcloud_command
        self._timeout = timeout

    @property
    def source(self) -> CredentialSource:
        return self._source

    def get_credential(self) -> Credentials:
        """Locate credentials according to :attr:`source`.

        Raises:
            google.auth.exceptions.DefaultCredentialsError: If ADC is
                required (``source=ADC``) and not configured.
        """
        if self._source in (CredentialSource.DEFAULT, CredentialSource.ADC):
            try:
                credentials, project = google.auth.default(scopes=self._scopes)
                logger.debug("Using Application Default Credentials (project=%s)", project)
                return credentials
            except google.auth.exceptions.DefaultCredentialsError as exc:
                if self._source == CredentialSource.ADC:
                    raise
                logger.debug("Application Default Credentials unavailable: %s", exc)

        logger.debug("Using gcloud credentials")
        return GcloudCredentials(self._gcloud_command, timeout=self._timeout)


def create_credential_provider(config: CredentialsConfig) -> CredentialProvider:
    """Build the default provider from the ``credentials`` config section."""
    return DefaultCredentialProvider(
        source=config.source,
        scopes=config.scopes,
        gcloud_command=config.gcloud_command,
        timeout=config.timeout,
    )
