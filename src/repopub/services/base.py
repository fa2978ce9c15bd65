"""BaseService — shared foundation for repopub services.

Every service receives the resolved :class:`RepoSettings` and, optionally,
a loaded :class:`PluginManager` for lifecycle hooks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from repopub.config.settings import RepoSettings
    from repopub.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class InstallService(BaseService):
            def install(self, descriptor: Path) -> ServiceResult:
                ...
    """

    def __init__(
        self,
        settings: RepoSettings,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._plugins = plugin_manager

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a lifecycle hook on all plugins. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Plugin hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
