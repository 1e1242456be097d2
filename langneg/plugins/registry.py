"""
Plugin Registry

PluginRegistry: in-process registry that stores plugins, aggregates the
language types and negotiation methods they contribute, runs their alter
passes, and dispatches hook events to subscribers.

Contributions and alter passes run in registration order.  A plugin that
raises is logged and skipped; it never breaks negotiation for the rest.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from langneg.i18n.methods import MethodDescriptor
    from langneg.i18n.switcher import SwitchLink
    from langneg.i18n.types import LanguageType
    from langneg.plugins.base import PluginBase

logger = logging.getLogger(__name__)


class PluginRegistry:
    """
    In-process registry for plugins.

    ``revision`` increases on every register/unregister so cached type and
    method registries know to rebuild.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, PluginBase] = {}
        self._hook_subscriptions: dict[str, list[PluginBase]] = defaultdict(list)
        self.revision = 0

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, plugin: PluginBase) -> None:
        """Register a plugin and index its hook subscriptions."""
        if plugin.meta.name in self._plugins:
            self.unregister(plugin.meta.name)
        self._plugins[plugin.meta.name] = plugin
        for hook in plugin.meta.hooks:
            self._hook_subscriptions[hook].append(plugin)
        self.revision += 1
        logger.info("Plugin registered: %s v%s", plugin.meta.name, plugin.meta.version)

    def unregister(self, name: str) -> PluginBase | None:
        """Remove a plugin; returns it, or None if it was not registered."""
        plugin = self._plugins.pop(name, None)
        if plugin is None:
            return None
        for subscribers in self._hook_subscriptions.values():
            if plugin in subscribers:
                subscribers.remove(plugin)
        self.revision += 1
        logger.info("Plugin unregistered: %s", name)
        return plugin

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, name: str) -> PluginBase | None:
        """Return the plugin with the given name, or None if not registered."""
        return self._plugins.get(name)

    def all_plugins(self) -> list[PluginBase]:
        """Return all registered plugins in registration order."""
        return list(self._plugins.values())

    def is_registered(self, name: str) -> bool:
        return name in self._plugins

    # ── Contributions ─────────────────────────────────────────────────────────

    def collect_language_types(self) -> dict[str, LanguageType]:
        """Aggregate type definitions, then apply every alter pass."""
        types: dict[str, LanguageType] = {}
        for plugin in self._plugins.values():
            try:
                for language_type in plugin.language_types():
                    types[language_type.type_id] = language_type
            except Exception as exc:
                logger.warning("Plugin %s failed to list language types: %s", plugin.meta.name, exc)
        self._alter("alter_language_types", types)
        return types

    def collect_negotiation_methods(self) -> dict[str, MethodDescriptor]:
        """Aggregate method descriptors, then apply every alter pass."""
        methods: dict[str, MethodDescriptor] = {}
        for plugin in self._plugins.values():
            try:
                for descriptor in plugin.negotiation_methods():
                    methods[descriptor.method_id] = descriptor
            except Exception as exc:
                logger.warning("Plugin %s failed to list negotiation methods: %s", plugin.meta.name, exc)
        self._alter("alter_negotiation_methods", methods)
        return methods

    def alter_switch_links(self, links: dict[str, SwitchLink], type_id: str, path: str) -> dict[str, SwitchLink]:
        self._alter("alter_switch_links", links, type_id, path)
        return links

    def alter_fallback_candidates(self, candidates: list[str], type_id: str) -> list[str]:
        self._alter("alter_fallback_candidates", candidates, type_id)
        return candidates

    def _alter(self, callback: str, data: Any, *args: Any) -> None:
        for plugin in self._plugins.values():
            try:
                getattr(plugin, callback)(data, *args)
            except Exception as exc:
                logger.warning("Plugin %s %s raised: %s", plugin.meta.name, callback, exc)

    # ── Hook dispatch ─────────────────────────────────────────────────────────

    async def fire_hook(self, hook_name: str, payload: dict[str, Any]) -> list[Any]:
        """
        Fire a hook to all subscribing plugins.

        Each plugin's handle_hook() is called in turn.  Exceptions are caught
        and logged, so a misbehaving plugin never blocks the others.

        Returns:
            List of return values from each subscriber (None for no-ops).
        """
        results: list[Any] = []
        for plugin in list(self._hook_subscriptions.get(hook_name, [])):
            try:
                result = await plugin.handle_hook(hook_name, payload)
                results.append(result)
            except Exception as exc:
                logger.warning(
                    "Plugin %s hook %s raised: %s",
                    plugin.meta.name,
                    hook_name,
                    exc,
                )
        return results


# ── Global singleton ──────────────────────────────────────────────────────────
plugin_registry = PluginRegistry()
