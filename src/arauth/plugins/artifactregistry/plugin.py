"""Artifact Registry plugin.

This module provides :class:`ArtifactRegistryPlugin`, which hooks the
rewrite rule from :mod:`arauth.rewrite` into the three places a build
exposes its repositories:

* **Project** -- after the project is evaluated: its repositories and the
  repositories of its publishing extension.
* **Build** -- after settings are evaluated: plugin-management
  repositories; after all projects are evaluated: every project as above.
* **Settings** -- same as **Build**, through ``settings.build``.

An access token is acquired once per :meth:`~ArtifactRegistryPlugin.apply`
call, before anything is registered. If that fails the whole
configuration pass aborts with
:class:`~arauth.exceptions.CredentialAcquisitionError`.

See Also:
    :class:`arauth.plugins.base.Plugin` for the base interface.
"""

from __future__ import annotations

import logging
from typing import Optional

import google.auth.transport

from arauth import __version__
from arauth.auth import CredentialProvider, acquire_credentials, create_credential_provider
from arauth.host import Build, Project, PublishingExtension, RepositoryHandler, Settings
from arauth.models import CredentialsConfig, GlobalConfig, PasswordCredentials
from arauth.plugins.base import Plugin
from arauth.rewrite import configure_repository
from arauth.transport import Request

logger = logging.getLogger(__name__)


class ArtifactRegistryPlugin(Plugin):
    """Rewrite ``artifactregistry://`` repositories and attach credentials.

    Args:
        credential_provider: Source of Google credentials. When omitted,
            :meth:`on_init` builds one from the ``credentials`` section of
            the global configuration.
        request: Transport used to refresh tokens. When omitted, an
            httpx-backed :class:`~arauth.transport.Request` is created and
            closed by :meth:`cleanup`.
    """

    def __init__(
        self,
        credential_provider: Optional[CredentialProvider] = None,
        request: Optional[google.auth.transport.Request] = None,
    ) -> None:
        self._provider = credential_provider
        self._request = request
        self._owned_request: Optional[Request] = None
        self._credentials_config = CredentialsConfig()

    @property
    def name(self) -> str:
        return "artifactregistry"

    @property
    def version(self) -> str:
        return __version__

    @property
    def description(self) -> str:
        return "Rewrite artifactregistry:// repositories to HTTPS with OAuth2 credentials"

    def on_init(self, config: GlobalConfig) -> None:
        self._credentials_config = config.credentials

    def apply(self, target: object) -> None:
        """Acquire credentials and register the rewrite on *target*.

        Raises:
            CredentialAcquisitionError: If no access token can be obtained.
        """
        credentials = acquire_credentials(self._get_provider(), self._get_request())

        if isinstance(target, Project):
            target.after_evaluate(lambda p: self._modify_project(p, credentials))
        elif isinstance(target, Build):
            self._apply_build(target, credentials)
        elif isinstance(target, Settings):
            self._apply_build(target.build, credentials)
        else:
            logger.debug("Ignoring unsupported plugin target %r", type(target).__name__)

    def cleanup(self) -> None:
        if self._owned_request is not None:
            self._owned_request.close()
            self._owned_request = None
            self._request = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_provider(self) -> CredentialProvider:
        if self._provider is None:
            self._provider = create_credential_provider(self._credentials_config)
        return self._provider

    def _get_request(self) -> google.auth.transport.Request:
        if self._request is None:
            self._owned_request = Request(timeout=self._credentials_config.timeout)
            self._request = self._owned_request
        return self._request

    def _apply_build(self, build: Build, credentials: PasswordCredentials) -> None:
        build.settings_evaluated(lambda s: self._modify_settings(s, credentials))
        build.projects_evaluated(
            lambda b: b.all_projects(lambda p: self._modify_project(p, credentials))
        )

    def _modify_project(self, project: Project, credentials: PasswordCredentials) -> None:
        self._configure_all(project.repositories, credentials, f"project '{project.name}'")
        publishing = project.extensions.find_by_type(PublishingExtension)
        if publishing is not None:
            self._configure_all(
                publishing.repositories,
                credentials,
                f"publishing of project '{project.name}'",
            )

    def _modify_settings(self, settings: Settings, credentials: PasswordCredentials) -> None:
        self._configure_all(
            settings.plugin_management.repositories, credentials, "plugin management"
        )

    @staticmethod
    def _configure_all(
        repositories: RepositoryHandler, credentials: PasswordCredentials, scope: str
    ) -> None:
        for repository in repositories:
            outcome = configure_repository(repository, credentials)
            logger.debug("%s: repository '%s' %s", scope, repository.name, outcome.value)
