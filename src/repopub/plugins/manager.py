"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.repopub/plugins/``.
Capabilities: extra repository layouts, post-install hooks.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path

import pluggy

from repopub.plugins.hookspecs import RepopubHookSpec

PROJECT_NAME = "repopub"
ENTRY_POINT_GROUP = "repopub.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RepopubHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Layouts contributed by any registered plugin are added to the
        layout registry. Returns the names of all registered plugins.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        if local_dir is not None:
            self._discover_local(local_dir)
        for plugin in self._pm.get_plugins():
            self._register_plugin_layouts(plugin, self._name_of(plugin))
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._register_plugin_layouts(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._name_of(p) for p in self._pm.get_plugins()]

    def _name_of(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    def _discover_local(self, local_dir: Path) -> None:
        """Load ``*.py`` files in *local_dir* and register their hook classes.

        A broken local plugin is logged and skipped; it never prevents
        the rest of the tool from running.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"repopub_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name or not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=module_name)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    @staticmethod
    def _register_plugin_layouts(plugin: object, plugin_name: str) -> None:
        """Add layouts exposed by a single plugin to the layout registry."""
        from repopub.domain.layout import register_layout

        hook = getattr(plugin, "register_layouts", None)
        if hook is None:
            return

        try:
            layouts = hook()
        except Exception:
            logger.warning("Failed to collect layouts from plugin %s", plugin_name, exc_info=True)
            return

        if layouts is None:
            return
        if not isinstance(layouts, dict):
            logger.warning("Plugin %s returned non-dict layout registrations", plugin_name)
            return

        for layout_name, layout in layouts.items():
            try:
                register_layout(layout_name, layout)
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping layout registration %r from plugin %s",
                    layout_name,
                    plugin_name,
                    exc_info=True,
                )

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether *cls* has methods decorated with ``@hookimpl`` (``repopub_impl`` attr)."""
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "repopub_impl", None):
                return True
        return False
