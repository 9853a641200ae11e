"""Artifact Registry repository plugin.

Registered under the plugin id ``artifactregistry``. Rewrites
``artifactregistry://`` repositories to HTTPS and attaches OAuth2
credentials.

See Also:
    :class:`~arauth.plugins.artifactregistry.plugin.ArtifactRegistryPlugin`
    :mod:`arauth.rewrite` for the rewrite rule itself.
"""

from arauth.plugins.artifactregistry.plugin import ArtifactRegistryPlugin

__all__ = ["ArtifactRegistryPlugin"]
