"""
Language types

A language type is an axis along which the language of a request can vary
(interface text, content, URLs).  Configurable types get their method
order from an administrator; fixed types declare it themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from langneg.exceptions import UnknownLanguageTypeError

if TYPE_CHECKING:
    from langneg.i18n.methods import MethodRegistry
    from langneg.i18n.settings import NegotiationSettings
    from langneg.i18n.store import SettingsStore
    from langneg.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

# ── Core language types ───────────────────────────────────────────────────────
LANGUAGE_TYPE_INTERFACE = "language_interface"
LANGUAGE_TYPE_CONTENT = "language_content"
LANGUAGE_TYPE_URL = "language_url"

# Stored record used before set_types() has ever run
DEFAULT_LANGUAGE_TYPES: dict[str, bool] = {
    LANGUAGE_TYPE_INTERFACE: True,
    LANGUAGE_TYPE_CONTENT: False,
    LANGUAGE_TYPE_URL: False,
}


@dataclass(frozen=True)
class LanguageType:
    """
    Definition of a language type.

    Attributes:
        type_id:     Machine name, e.g. "language_interface".
        name:        Human-readable name.
        description: Longer explanation shown to administrators.
        fixed:       Method order for non-configurable types; None when the
                     order is left to the administrator.
    """

    type_id: str
    name: str = ""
    description: str = ""
    fixed: tuple[str, ...] | None = None

    @property
    def configurable(self) -> bool:
        return self.fixed is None


class TypeRegistry:
    """Language type definitions plus the stored configurable/fixed record."""

    def __init__(self, plugins: PluginRegistry, store: SettingsStore) -> None:
        self._plugins = plugins
        self._store = store
        self._types: dict[str, LanguageType] | None = None
        self._revision = -1

    def list_types(self) -> dict[str, LanguageType]:
        """Return every defined type, rebuilt when the plugin set changes."""
        if self._types is None or self._revision != self._plugins.revision:
            self._types = self._plugins.collect_language_types()
            self._revision = self._plugins.revision
        return self._types

    def get(self, type_id: str) -> LanguageType:
        types = self.list_types()
        if type_id not in types:
            raise UnknownLanguageTypeError(type_id)
        return types[type_id]

    def reset(self) -> None:
        self._types = None

    def stored_types(self) -> dict[str, bool]:
        stored = self._store.load_types()
        if not isinstance(stored, dict):
            return dict(DEFAULT_LANGUAGE_TYPES)
        return stored

    def configurable_types(self, stored: bool = True) -> list[str]:
        """Return the configurable type IDs.

        Args:
            stored: Read the stored snapshot (default).  When False the list
                    is recomputed from the live type definitions.
        """
        if stored:
            return [type_id for type_id, configurable in self.stored_types().items() if configurable]
        return [type_id for type_id, info in self.list_types().items() if info.configurable]

    def all_types(self) -> list[str]:
        return list(self.stored_types())

    def disable(self, types: list[str]) -> None:
        """Drop the given types from the stored record.

        Their negotiation settings are left in place so re-enabling the type
        restores the previous order.
        """
        enabled = self.stored_types()
        for type_id in types:
            enabled.pop(type_id, None)
        self._store.save_types(enabled)
        logger.info("Language types disabled: %s", ", ".join(types))

    def set_types(self, methods: MethodRegistry, settings: NegotiationSettings) -> None:
        """Sync the stored type record and fixed method orders with definitions.

        Must run whenever plugins contributing types or methods are added or
        removed.  A configurable type with no stored method order gets every
        applicable method, ordered by descriptor weight.  Disabled types keep
        their order, so enabling them again does not reset it.
        """
        known = methods.list_methods()
        configurable = self.configurable_types(stored=False)
        enabled: dict[str, bool] = {}
        for type_id, info in self.list_types().items():
            if info.configurable:
                enabled[type_id] = True
                if not settings.get(type_id):
                    settings.set(
                        type_id,
                        {
                            method_id: descriptor.weight
                            for method_id, descriptor in known.items()
                            if descriptor.applies_to(type_id, configurable)
                        },
                    )
                continue
            enabled[type_id] = False
            method_weights = {
                method_id: weight for weight, method_id in enumerate(info.fixed or ()) if method_id in known
            }
            settings.set(type_id, method_weights)
        self._store.save_types(enabled)
        logger.info("Language types updated: %s", enabled)
