"""In-process build model: repositories, projects, settings and lifecycle hooks.

This module provides the host side of the plugin contract:

* :class:`ArtifactRepository` and its subclasses -- mutable repository
  declarations owned by the build. :class:`UrlArtifactRepository` is the
  capability surface (URL, credentials, authentication schemes) that
  :mod:`arauth.rewrite` depends on.
* :class:`Project`, :class:`Settings` and :class:`Build` -- the three
  objects a plugin can be applied to. Each exposes registration points
  for "configuration is complete" callbacks.
* :func:`build_from_config` / :func:`build_to_config` -- conversion between
  the on-disk :class:`~arauth.models.BuildConfig` and the live model.

Evaluation order for :meth:`Build.evaluate`:

1. ``settings_evaluated`` callbacks, with the :class:`Settings`.
2. Each project's ``after_evaluate`` callbacks, in declaration order.
3. ``projects_evaluated`` callbacks, with the :class:`Build`.

Callbacks run synchronously in registration order. An exception raised by
a callback aborts the evaluation and propagates to the caller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional, TypeVar

from arauth.exceptions import ConfigurationError
from arauth.models import (
    AuthenticationScheme,
    BuildConfig,
    PasswordCredentials,
    PluginManagementConfig,
    ProjectConfig,
    PublishingConfig,
    RepositoryConfig,
    RepositoryKind,
    SettingsConfig,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ------------------------------------------------------------------
# Repositories
# ------------------------------------------------------------------


class ArtifactRepository(ABC):
    """Base class for every repository declaration a build can hold."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    @abstractmethod
    def kind(self) -> RepositoryKind:
        """The repository layout."""
        ...


class UrlArtifactRepository(ArtifactRepository):
    """A remote repository addressed by URL that can carry credentials.

    This is the capability interface the rewrite rule works against: it
    reads and replaces the URL, reads and sets the configured credentials,
    and declares authentication schemes. Nothing else about the host is
    visible to :func:`arauth.rewrite.configure_repository`.
    """

    @property
    @abstractmethod
    def url(self) -> Optional[str]: ...

    @url.setter
    @abstractmethod
    def url(self, value: Optional[str]) -> None: ...

    @property
    @abstractmethod
    def credentials(self) -> Optional[PasswordCredentials]:
        """Explicitly configured credentials, or ``None``."""
        ...

    @credentials.setter
    @abstractmethod
    def credentials(self, value: Optional[PasswordCredentials]) -> None: ...

    @property
    @abstractmethod
    def authentication(self) -> list[AuthenticationScheme]:
        """A copy of the declared authentication schemes."""
        ...

    @abstractmethod
    def add_authentication(self, scheme: AuthenticationScheme) -> None:
        """Declare *scheme*; declaring the same scheme twice keeps one entry."""
        ...


class MavenRepository(UrlArtifactRepository):
    """A remote Maven-layout repository."""

    def __init__(
        self,
        name: str,
        url: Optional[str] = None,
        credentials: Optional[PasswordCredentials] = None,
        authentication: Optional[list[AuthenticationScheme]] = None,
    ) -> None:
        super().__init__(name)
        self._url = url
        self._credentials = credentials
        self._authentication: list[AuthenticationScheme] = []
        for scheme in authentication or []:
            self.add_authentication(scheme)

    @property
    def kind(self) -> RepositoryKind:
        return RepositoryKind.MAVEN

    @property
    def url(self) -> Optional[str]:
        return self._url

    @url.setter
    def url(self, value: Optional[str]) -> None:
        self._url = value

    @property
    def credentials(self) -> Optional[PasswordCredentials]:
        return self._credentials

    @credentials.setter
    def credentials(self, value: Optional[PasswordCredentials]) -> None:
        self._credentials = value

    @property
    def authentication(self) -> list[AuthenticationScheme]:
        return list(self._authentication)

    def add_authentication(self, scheme: AuthenticationScheme) -> None:
        if scheme not in self._authentication:
            self._authentication.append(scheme)

    def __repr__(self) -> str:
        return f"MavenRepository(name={self.name!r}, url={self._url!r})"


class IvyRepository(ArtifactRepository):
    """An Ivy-layout repository.

    Ivy repositories have a URL but are not eligible for the Artifact
    Registry rewrite, so they do not expose the URL capability.
    """

    def __init__(self, name: str, url: Optional[str] = None) -> None:
        super().__init__(name)
        self.url = url

    @property
    def kind(self) -> RepositoryKind:
        return RepositoryKind.IVY


class FlatDirRepository(ArtifactRepository):
    """A local directory of artifacts."""

    def __init__(self, name: str, url: Optional[str] = None) -> None:
        super().__init__(name)
        self.url = url

    @property
    def kind(self) -> RepositoryKind:
        return RepositoryKind.FLAT_DIR


class RepositoryHandler:
    """Ordered container of repository declarations."""

    def __init__(self, repositories: Optional[list[ArtifactRepository]] = None) -> None:
        self._repositories: list[ArtifactRepository] = list(repositories or [])

    def add(self, repository: ArtifactRepository) -> ArtifactRepository:
        self._repositories.append(repository)
        return repository

    def find_by_name(self, name: str) -> Optional[ArtifactRepository]:
        for repository in self._repositories:
            if repository.name == name:
                return repository
        return None

    def __iter__(self) -> Iterator[ArtifactRepository]:
        return iter(list(self._repositories))

    def __len__(self) -> int:
        return len(self._repositories)


# ------------------------------------------------------------------
# Projects, settings, build
# ------------------------------------------------------------------


class PublishingExtension:
    """Project extension holding the repositories artifacts are published to."""

    def __init__(self) -> None:
        self.repositories = RepositoryHandler()


class ExtensionContainer:
    """Per-project registry of extension objects, looked up by type."""

    def __init__(self) -> None:
        self._extensions: list[object] = []

    def add(self, extension: object) -> None:
        self._extensions.append(extension)

    def find_by_type(self, extension_type: type[T]) -> Optional[T]:
        for extension in self._extensions:
            if isinstance(extension, extension_type):
                return extension
        return None


class Project:
    """A single project in a build.

    Args:
        name: The project name, unique within the build.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.repositories = RepositoryHandler()
        self.extensions = ExtensionContainer()
        self._after_evaluate: list[Callable[[Project], None]] = []
        self._evaluated = False

    @property
    def evaluated(self) -> bool:
        return self._evaluated

    def after_evaluate(self, callback: Callable[[Project], None]) -> None:
        """Register *callback* to run once this project is fully configured.

        Raises:
            ConfigurationError: If the project has already been evaluated.
        """
        if self._evaluated:
            raise ConfigurationError(
                f"Cannot register an after-evaluate callback: project "
                f"'{self.name}' is already evaluated"
            )
        self._after_evaluate.append(callback)

    def evaluate(self) -> None:
        """Mark the project configured and run its after-evaluate callbacks."""
        if self._evaluated:
            raise ConfigurationError(f"Project '{self.name}' is already evaluated")
        self._evaluated = True
        logger.debug(
            "Project '%s' evaluated, running %d callback(s)",
            self.name,
            len(self._after_evaluate),
        )
        for callback in self._after_evaluate:
            callback(self)


class PluginManagement:
    """Repositories used to resolve plugins at settings time."""

    def __init__(self) -> None:
        self.repositories = RepositoryHandler()


class Settings:
    """The settings object evaluated before any project is configured."""

    def __init__(self, build: Build) -> None:
        self.build = build
        self.plugin_management = PluginManagement()


class Build:
    """A whole build: settings plus every project, with build-wide hooks.

    Args:
        name: Optional display name of the build.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self.settings = Settings(self)
        self._projects: list[Project] = []
        self._settings_evaluated: list[Callable[[Settings], None]] = []
        self._projects_evaluated: list[Callable[[Build], None]] = []
        self._evaluated = False

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    def add_project(self, project: Project) -> Project:
        if any(p.name == project.name for p in self._projects):
            raise ConfigurationError(f"Duplicate project name '{project.name}'")
        self._projects.append(project)
        return project

    def find_project(self, name: str) -> Optional[Project]:
        for project in self._projects:
            if project.name == name:
                return project
        return None

    def settings_evaluated(self, callback: Callable[[Settings], None]) -> None:
        """Register *callback* to run after settings are evaluated."""
        self._settings_evaluated.append(callback)

    def projects_evaluated(self, callback: Callable[[Build], None]) -> None:
        """Register *callback* to run after every project is evaluated."""
        self._projects_evaluated.append(callback)

    def all_projects(self, action: Callable[[Project], None]) -> None:
        """Run *action* against every project in declaration order."""
        for project in self._projects:
            action(project)

    def evaluate(self) -> None:
        """Run the configuration pass.

        Raises:
            ConfigurationError: If the build was already evaluated, or
                re-raised from any callback that aborts the pass.
        """
        if self._evaluated:
            raise ConfigurationError("Build is already evaluated")
        self._evaluated = True

        for settings_callback in self._settings_evaluated:
            settings_callback(self.settings)
        for project in self._projects:
            project.evaluate()
        for build_callback in self._projects_evaluated:
            build_callback(self)
        logger.debug("Build evaluated (%d project(s))", len(self._projects))


# ------------------------------------------------------------------
# Conversion from / to the on-disk description
# ------------------------------------------------------------------


def repository_from_config(config: RepositoryConfig) -> ArtifactRepository:
    """Create a live repository declaration from its on-disk form."""
    if config.kind == RepositoryKind.MAVEN:
        return MavenRepository(
            config.name,
            url=config.url,
            credentials=config.credentials,
            authentication=config.authentication,
        )
    if config.kind == RepositoryKind.IVY:
        return IvyRepository(config.name, url=config.url)
    return FlatDirRepository(config.name, url=config.url)


def repository_to_config(repository: ArtifactRepository) -> RepositoryConfig:
    """Snapshot a live repository declaration back into its on-disk form."""
    if isinstance(repository, UrlArtifactRepository):
        return RepositoryConfig(
            name=repository.name,
            kind=repository.kind,
            url=repository.url,
            credentials=repository.credentials,
            authentication=repository.authentication,
        )
    return RepositoryConfig(
        name=repository.name,
        kind=repository.kind,
        url=getattr(repository, "url", None),
    )


def build_from_config(config: BuildConfig) -> Build:
    """Create a live :class:`Build` from a :class:`~arauth.models.BuildConfig`.

    Plugins listed in the description are not applied here; see
    :meth:`arauth.plugins.manager.PluginManager.configure`.
    """
    build = Build(config.name)
    for repo_config in config.settings.plugin_management.repositories:
        build.settings.plugin_management.repositories.add(
            repository_from_config(repo_config)
        )
    for project_config in config.projects:
        project = build.add_project(Project(project_config.name))
        for repo_config in project_config.repositories:
            project.repositories.add(repository_from_config(repo_config))
        if project_config.publishing is not None:
            publishing = PublishingExtension()
            for repo_config in project_config.publishing.repositories:
                publishing.repositories.add(repository_from_config(repo_config))
            project.extensions.add(publishing)
    return build


def build_to_config(build: Build, template: Optional[BuildConfig] = None) -> BuildConfig:
    """Snapshot a live :class:`Build` into a :class:`~arauth.models.BuildConfig`.

    Plugin lists are not part of the live model; they are copied from
    *template* when one is given.
    """
    template_projects = {p.name: p for p in (template.projects if template else [])}

    projects: list[ProjectConfig] = []
    for project in build.projects:
        publishing_ext = project.extensions.find_by_type(PublishingExtension)
        publishing: Optional[PublishingConfig] = None
        if publishing_ext is not None:
            publishing = PublishingConfig(
                repositories=[repository_to_config(r) for r in publishing_ext.repositories]
            )
        source = template_projects.get(project.name)
        projects.append(
            ProjectConfig(
                name=project.name,
                repositories=[repository_to_config(r) for r in project.repositories],
                publishing=publishing,
                plugins=list(source.plugins) if source else [],
            )
        )

    return BuildConfig(
        name=build.name,
        settings=SettingsConfig(
            plugin_management=PluginManagementConfig(
                repositories=[
                    repository_to_config(r)
                    for r in build.settings.plugin_management.repositories
                ]
            ),
            plugins=list(template.settings.plugins) if template else [],
        ),
        init_plugins=list(template.init_plugins) if template else [],
        projects=projects,
    )
