"""
Locale Plugin

Core plugin providing the built-in language types and negotiation methods:
  - language_interface  (configurable)
  - language_content    (fixed: follows the interface language)
  - language_url        (fixed: URL, then URL fallback)

Hook subscriptions:
  - language.negotiation_changed   → log the new method order
  - language.url_settings_changed  → log the new URL mode
"""

from __future__ import annotations

import logging
from typing import Any

from langneg.i18n.builtin_methods import (
    METHOD_BROWSER,
    METHOD_INTERFACE,
    METHOD_URL,
    METHOD_URL_FALLBACK,
    builtin_methods,
)
from langneg.i18n.methods import MethodDescriptor
from langneg.i18n.types import LANGUAGE_TYPE_CONTENT, LANGUAGE_TYPE_INTERFACE, LANGUAGE_TYPE_URL, LanguageType
from langneg.plugins.base import PluginBase, PluginMeta
from langneg.plugins.hooks import HOOK_NEGOTIATION_CHANGED, HOOK_URL_SETTINGS_CHANGED

logger = logging.getLogger(__name__)

_META = PluginMeta(
    name="locale",
    version="1.0.0",
    description=(
        "Core language negotiation: interface, content and URL language types; "
        "URL, session, user, browser, interface and URL fallback methods"
    ),
    hooks=[HOOK_NEGOTIATION_CHANGED, HOOK_URL_SETTINGS_CHANGED],
    config_schema={
        "browser_detection": {"type": "boolean", "default": True},
    },
)


class LocalePlugin(PluginBase):
    """Core types and methods."""

    def __init__(self) -> None:
        self._config: dict[str, Any] = {}

    @property
    def meta(self) -> PluginMeta:
        return _META

    async def on_load(self, config: dict[str, Any]) -> None:
        self._config = config
        logger.debug("LocalePlugin loaded (browser_detection=%s)", config.get("browser_detection", True))

    async def handle_hook(self, hook_name: str, payload: dict[str, Any]) -> None:
        if hook_name == HOOK_NEGOTIATION_CHANGED:
            logger.debug(
                "LocalePlugin: %s now uses %s",
                payload.get("type_id"),
                payload.get("methods"),
            )
        elif hook_name == HOOK_URL_SETTINGS_CHANGED:
            logger.debug("LocalePlugin: URL negotiation part is now %s", payload.get("part"))
        return None

    def language_types(self) -> list[LanguageType]:
        return [
            LanguageType(
                type_id=LANGUAGE_TYPE_INTERFACE,
                name="User interface text",
                description="Order of language detection methods for user interface text.",
            ),
            LanguageType(
                type_id=LANGUAGE_TYPE_CONTENT,
                name="Content",
                description="Order of language detection methods for content.",
                fixed=(METHOD_INTERFACE,),
            ),
            LanguageType(
                type_id=LANGUAGE_TYPE_URL,
                name="URL",
                description="Language used for generating links.",
                fixed=(METHOD_URL, METHOD_URL_FALLBACK),
            ),
        ]

    def negotiation_methods(self) -> list[MethodDescriptor]:
        methods = builtin_methods(provider=self.meta.name)
        if not self._config.get("browser_detection", True):
            methods = [descriptor for descriptor in methods if descriptor.method_id != METHOD_BROWSER]
        return methods
