"""Canonical Pydantic models shared across all arauth modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CredentialsConfig`, :class:`PluginsConfig` and
    :class:`GlobalConfig`.

**Build description models** -- the on-disk (JSON or YAML) form of a build
that :mod:`arauth.host` turns into live projects and repositories:
    :class:`RepositoryConfig`, :class:`PublishingConfig`,
    :class:`ProjectConfig`, :class:`PluginManagementConfig`,
    :class:`SettingsConfig` and :class:`BuildConfig`.

:class:`PasswordCredentials` is shared by both worlds: it is the credential
pair the Artifact Registry plugin attaches to rewritten repositories.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

OAUTH2_ACCESS_TOKEN_USERNAME = "oauth2accesstoken"
"""Username Artifact Registry expects alongside a raw OAuth2 access token."""

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


# --- Credentials ---


class PasswordCredentials(BaseModel):
    """An immutable username/password pair used for HTTP Basic authentication.

    Created once per plugin application from a freshly refreshed access
    token and never persisted by the plugin itself. The password is kept
    out of ``repr()`` so that it does not leak into logs or tracebacks.

    Example::

        creds = PasswordCredentials.from_access_token("ya29.a0...")
        assert creds.username == "oauth2accesstoken"
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)

    @classmethod
    def from_access_token(cls, token: str) -> PasswordCredentials:
        """Wrap a bearer token in the pair Artifact Registry accepts."""
        return cls(username=OAUTH2_ACCESS_TOKEN_USERNAME, password=token)


class AuthenticationScheme(str, enum.Enum):
    """Authentication mechanisms a repository may declare."""

    BASIC = "basic"
    DIGEST = "digest"
    HEADER = "header"


class RepositoryKind(str, enum.Enum):
    """Repository layouts understood by the build model.

    Only ``MAVEN`` repositories are remote, URL-based declarations eligible
    for the ``artifactregistry://`` rewrite.
    """

    MAVEN = "maven"
    IVY = "ivy"
    FLAT_DIR = "flat_dir"


# --- Build description ---


class RepositoryConfig(BaseModel):
    """A repository declaration as written in a build file.

    Example::

        RepositoryConfig(
            name="internal",
            url="artifactregistry://us-maven.pkg.dev/my-project/my-repo",
        )
    """

    name: str
    kind: RepositoryKind = RepositoryKind.MAVEN
    url: Optional[str] = None
    credentials: Optional[PasswordCredentials] = None
    authentication: list[AuthenticationScheme] = Field(default_factory=list)


class PublishingConfig(BaseModel):
    """Repositories that a project publishes its artifacts to."""

    repositories: list[RepositoryConfig] = Field(default_factory=list)


class ProjectConfig(BaseModel):
    """A single (sub-)project in a build description.

    ``plugins`` lists plugin ids applied at project level; they only see
    this project's repositories.
    """

    name: str
    repositories: list[RepositoryConfig] = Field(default_factory=list)
    publishing: Optional[PublishingConfig] = None
    plugins: list[str] = Field(default_factory=list)


class PluginManagementConfig(BaseModel):
    """Repositories used to resolve build plugins before projects are configured."""

    repositories: list[RepositoryConfig] = Field(default_factory=list)


class SettingsConfig(BaseModel):
    """Settings-level declarations evaluated before any project.

    Plugins listed in ``plugins`` are applied to the settings object and
    therefore see plugin-management repositories as well as every project.
    """

    plugin_management: PluginManagementConfig = Field(
        default_factory=PluginManagementConfig
    )
    plugins: list[str] = Field(default_factory=list)


class BuildConfig(BaseModel):
    """Top-level build description loaded by :func:`arauth.config.load_build_config`.

    ``init_plugins`` are applied to the build itself, before settings are
    evaluated, the way an init script would apply them.
    """

    name: Optional[str] = None
    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    init_plugins: list[str] = Field(default_factory=list)
    projects: list[ProjectConfig] = Field(default_factory=list)


# --- Global config ---


class CredentialSource(str, enum.Enum):
    """Where the default credential provider looks for credentials.

    ``DEFAULT`` tries Application Default Credentials first and falls back
    to the ``gcloud`` CLI.
    """

    DEFAULT = "default"
    ADC = "adc"
    GCLOUD = "gcloud"


class CredentialsConfig(BaseModel):
    """Settings for the default credential provider."""

    source: CredentialSource = Field(
        default=CredentialSource.DEFAULT,
        description="Credential source: default, adc, or gcloud",
    )
    scopes: list[str] = Field(
        default_factory=lambda: [CLOUD_PLATFORM_SCOPE],
        description="OAuth2 scopes requested for Application Default Credentials",
    )
    gcloud_command: Optional[str] = Field(
        default=None,
        description="Name or path of the gcloud executable (default: gcloud, "
        "gcloud.cmd on Windows)",
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for token refresh"
    )


class PluginsConfig(BaseModel):
    """Allowlist/blocklist applied during plugin discovery."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """Global arauth configuration stored in ``<config_dir>/config.json``."""

    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
