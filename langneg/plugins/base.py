"""
Plugin Base Classes

PluginMeta: declarative metadata for a plugin (name, version, hooks, config schema).
PluginBase: abstract base class all plugins must subclass.

Besides async lifecycle hooks, a plugin can contribute language types and
negotiation methods, and alter what other plugins contributed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from langneg.i18n.methods import MethodDescriptor
    from langneg.i18n.switcher import SwitchLink
    from langneg.i18n.types import LanguageType


@dataclass
class PluginMeta:
    """
    Declarative metadata describing a plugin.

    Attributes:
        name:          Machine-readable slug, e.g. "locale".
        version:       Semver string, e.g. "1.0.0".
        description:   Human-readable description.
        author:        Plugin author (defaults to "Core Team").
        hooks:         List of hook names this plugin subscribes to.
        config_schema: JSON Schema fragments describing configurable options.
    """

    name: str
    version: str
    description: str
    author: str = "Core Team"
    hooks: list[str] = field(default_factory=list)
    config_schema: dict[str, Any] = field(default_factory=dict)


class PluginBase(ABC):
    """
    Abstract base class for all plugins.

    Subclasses must implement the `meta` property.  Every other method has a
    default implementation, so subclasses only override what they need.
    """

    @property
    @abstractmethod
    def meta(self) -> PluginMeta:
        """Return the plugin's metadata."""
        ...

    async def on_load(self, config: dict[str, Any]) -> None:  # noqa: B027
        """Called once at startup with the plugin's persisted config dict."""

    async def on_unload(self) -> None:  # noqa: B027
        """Called when the plugin is disabled at runtime or the app shuts down."""

    async def handle_hook(self, hook_name: str, payload: dict[str, Any]) -> Any:
        """
        Receive and process a hook event.

        Called by PluginRegistry.fire_hook() for each hook the plugin
        declared in PluginMeta.hooks.  Default implementation is a no-op.
        """
        return None

    # ── Contributions ─────────────────────────────────────────────────────────

    def language_types(self) -> list[LanguageType]:
        """Language types this plugin defines."""
        return []

    def negotiation_methods(self) -> list[MethodDescriptor]:
        """Negotiation methods this plugin defines."""
        return []

    # ── Alter passes ──────────────────────────────────────────────────────────
    # Run in plugin registration order over the aggregated result.

    def alter_language_types(self, types: dict[str, LanguageType]) -> None:  # noqa: B027
        """Modify the aggregated type definitions in place."""

    def alter_negotiation_methods(self, methods: dict[str, MethodDescriptor]) -> None:  # noqa: B027
        """Modify the aggregated method descriptors in place."""

    def alter_switch_links(self, links: dict[str, SwitchLink], type_id: str, path: str) -> None:  # noqa: B027
        """Relabel or drop language switch links in place."""

    def alter_fallback_candidates(self, candidates: list[str], type_id: str) -> None:  # noqa: B027
        """Add, remove or reorder fallback langcodes in place."""
