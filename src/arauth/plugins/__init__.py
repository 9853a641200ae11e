"""Plugin system for arauth -- discovery, loading, and application.

Third-party packages can register plugins by declaring an entry point in
the ``arauth.plugins`` group. At runtime, :class:`PluginManager` discovers
and loads those entry points and applies them, by id, to the build,
settings and project objects named in a build description.

Key classes:

* :class:`Plugin` -- Abstract base class that all plugins must extend.
* :class:`PluginManager` -- Discovers, loads, applies and cleans up plugins.
* :class:`ArtifactRegistryPlugin` -- The built-in ``artifactregistry``
  plugin that rewrites ``artifactregistry://`` repositories.

Example:
    Typical usage from the CLI::

        from arauth.plugins import PluginManager

        manager = PluginManager()
        manager.discover(global_config)
        build = manager.configure(build_config)
"""

from arauth.plugins.artifactregistry import ArtifactRegistryPlugin
from arauth.plugins.base import Plugin
from arauth.plugins.manager import PluginManager

__all__ = ["ArtifactRegistryPlugin", "Plugin", "PluginManager"]
