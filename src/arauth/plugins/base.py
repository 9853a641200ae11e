"""Abstract base class for arauth plugins.

Every plugin must subclass :class:`Plugin` and implement the :attr:`name`
property and :meth:`apply`. The remaining lifecycle hooks (``on_init``,
``cleanup``) are optional -- default implementations are no-ops so
plugins only override what they need.

Plugins are registered as entry points in the ``arauth.plugins`` group
and discovered at runtime by :class:`~arauth.plugins.manager.PluginManager`.

Example:
    Minimal plugin implementation::

        class MirrorPlugin(Plugin):
            @property
            def name(self) -> str:
                return "mirror"

            def apply(self, target: object) -> None:
                if isinstance(target, Project):
                    target.repositories.add(MavenRepository("mirror", url=MIRROR))
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from arauth.models import GlobalConfig


class Plugin(ABC):
    """Base class for all arauth plugins.

    The plugin lifecycle is:

    1. Instantiation -- the :class:`PluginManager` calls the no-arg constructor.
    2. :meth:`on_init` -- called once with the global configuration.
    3. :meth:`apply` -- called once per build, settings or project object
       the plugin is declared on.
    4. :meth:`cleanup` -- called once during shutdown.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique plugin id used for discovery and logging.

        Returns:
            A short identifier (e.g. ``"artifactregistry"``).
        """
        ...

    @property
    def version(self) -> str:
        """Return the plugin version string. Defaults to ``"0.1.0"``."""
        return "0.1.0"

    @property
    def description(self) -> str:
        """Return a one-line description. Defaults to ``""``."""
        return ""

    def on_init(self, config: GlobalConfig) -> None:
        """Called once when the plugin is loaded by the :class:`PluginManager`.

        Args:
            config: The global arauth configuration.
        """

    @abstractmethod
    def apply(self, target: object) -> None:
        """Apply the plugin to a :class:`~arauth.host.Build`,
        :class:`~arauth.host.Settings` or :class:`~arauth.host.Project`.

        Plugins typically register lifecycle callbacks on *target* rather
        than changing it directly, since repositories may still be added
        after the plugin is applied.

        Args:
            target: The object the plugin is declared on.
        """
        ...

    def cleanup(self) -> None:
        """Called once during shutdown to release plugin resources."""
