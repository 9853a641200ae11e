"""Plugin manager -- discovery, loading, application and lifecycle.

This module contains :class:`PluginManager`, the central coordinator for the
plugin system. It discovers plugins registered as Python entry points,
applies enable/disable filtering from the global configuration, and
applies plugins by id to the objects of a build.

The entry-point group used for discovery is ``arauth.plugins``.
Third-party packages register plugins by declaring an entry point under
this group in their ``pyproject.toml``::

    [project.entry-points."arauth.plugins"]
    my-plugin = "my_package.plugin:MyPlugin"
"""

from __future__ import annotations

import importlib.metadata
import logging

from arauth.exceptions import PluginError
from arauth.host import Build, build_from_config
from arauth.models import BuildConfig, GlobalConfig
from arauth.plugins.base import Plugin

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "arauth.plugins"
"""The entry-point group name used for plugin discovery."""


class PluginManager:
    """Discovers, loads, and applies arauth plugins.

    The *enabled* and *disabled* lists in
    :class:`~arauth.models.PluginsConfig` act as an explicit
    allowlist/blocklist. When *enabled* is non-empty only those plugins are
    loaded; otherwise all discovered plugins that are **not** in *disabled*
    are loaded.

    Example:
        Typical usage::

            manager = PluginManager()
            manager.discover(global_config)
            build = manager.configure(build_config)
            manager.cleanup()
    """

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, config: GlobalConfig) -> list[str]:
        """Discover and load available plugins via Python entry points.

        Args:
            config: The global configuration whose ``plugins.enabled`` and
                ``plugins.disabled`` lists control which plugins are loaded.

        Returns:
            A list of plugin names that were successfully loaded. Plugins
            that fail to load are logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        enabled_set = set(config.plugins.enabled)
        disabled_set = set(config.plugins.disabled)

        eps = importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP)

        for ep in eps:
            name = ep.name

            if enabled_set and name not in enabled_set:
                logger.debug("Plugin '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Plugin '%s' is disabled, skipping", name)
                continue

            try:
                plugin_cls = ep.load()
                plugin: Plugin = plugin_cls()
                self.load_plugin(name, plugin, config)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", name, exc)

        return loaded_names

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(self, name: str, plugin: Plugin, config: GlobalConfig) -> None:
        """Initialise *plugin* with *config* and register it under *name*.

        Raises:
            PluginError: If a plugin with the same *name* is already loaded.
        """
        if name in self._plugins:
            raise PluginError(f"Plugin '{name}' is already loaded")

        plugin.on_init(config)
        self._plugins[name] = plugin
        logger.info("Loaded plugin '%s' v%s", name, plugin.version)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_plugin(self, name: str) -> Plugin:
        """Retrieve a loaded plugin by its registered name.

        Raises:
            PluginError: If no plugin with the given *name* is loaded.
        """
        try:
            return self._plugins[name]
        except KeyError:
            available = ", ".join(sorted(self._plugins)) or "(none)"
            raise PluginError(
                f"Plugin '{name}' is not loaded. Available plugins: {available}"
            ) from None

    def list_plugins(self) -> list[dict[str, str]]:
        """List all loaded plugins with their ``name``, ``version`` and ``description``."""
        return [
            {
                "name": plugin.name,
                "version": plugin.version,
                "description": plugin.description,
            }
            for plugin in self._plugins.values()
        ]

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(self, name: str, target: object) -> None:
        """Apply the plugin registered as *name* to *target*."""
        plugin = self.get_plugin(name)
        logger.debug("Applying plugin '%s' to %s", name, type(target).__name__)
        plugin.apply(target)

    def configure(self, config: BuildConfig) -> Build:
        """Run a full configuration pass for a build description.

        Plugins are applied in the order a build would apply them: init
        plugins to the build, settings plugins to the settings, then each
        project's plugins to that project. The build is then evaluated,
        which fires the callbacks those plugins registered.

        Args:
            config: The build description.

        Returns:
            The evaluated :class:`~arauth.host.Build`.

        Raises:
            PluginError: If the description names a plugin that is not loaded.
            ConfigurationError: If a plugin aborts the configuration pass.
        """
        build = build_from_config(config)

        for name in config.init_plugins:
            self.apply(name, build)
        for name in config.settings.plugins:
            self.apply(name, build.settings)
        for project_config in config.projects:
            project = build.find_project(project_config.name)
            for name in project_config.plugins:
                self.apply(name, project)

        build.evaluate()
        return build

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def cleanup(self) -> None:
        """Clean up all loaded plugins and reset internal state.

        Exceptions from individual plugins are logged and swallowed so that
        one plugin's failure does not prevent others from cleaning up.
        """
        for name, plugin in self._plugins.items():
            try:
                plugin.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up plugin '%s': %s", name, exc)
        self._plugins.clear()
