"""
Language negotiator

LanguageNegotiator ties the registries, the stored settings and the active
language list together.  ``initialize`` is the pipeline: walk a type's
stored method order, first valid language wins, otherwise the default
language tagged with the default sentinel.  It never raises.

Administrative entry points (``configure``, ``rebuild``, ``save_url_config``)
validate their input and raise LanguageNegotiationError subclasses.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from langneg.exceptions import ValidationError
from langneg.i18n.context import RequestContext
from langneg.i18n.fallback import fallback_candidates
from langneg.i18n.methods import METHOD_DEFAULT, MethodRegistry
from langneg.i18n.settings import NegotiationSettings
from langneg.i18n.switcher import switch_links
from langneg.i18n.types import LANGUAGE_TYPE_CONTENT, LANGUAGE_TYPE_INTERFACE, TypeRegistry
from langneg.i18n.url import URL_PART_PREFIX, UrlConfig, ensure_prefixes, rewrite_outbound_url

if TYPE_CHECKING:
    from langneg.i18n.languages import Language, LanguageList
    from langneg.i18n.store import SettingsStore
    from langneg.i18n.switcher import SwitchLinks
    from langneg.i18n.url import OutboundUrl
    from langneg.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)


class LanguageNegotiator:
    """
    Resolves the language of each language type for a request.

    Args:
        plugins:       Capability registry supplying types and methods.
        store:         Durable negotiation settings.
        language_list: Active languages.
        url_part:      URL negotiation mode used until URL settings are saved.
    """

    def __init__(
        self,
        plugins: PluginRegistry,
        store: SettingsStore,
        language_list: LanguageList,
        url_part: str = URL_PART_PREFIX,
    ) -> None:
        self.plugins = plugins
        self.store = store
        self.language_list = language_list
        self.url_part = url_part
        self.types = TypeRegistry(plugins, store)
        self.methods = MethodRegistry(plugins)
        self.settings = NegotiationSettings(store, self.methods, self.types)

    # ── Request lifecycle ─────────────────────────────────────────────────────

    def new_context(self, **request: Any) -> RequestContext:
        """Start a request: snapshot the registry and URL settings.

        Keyword arguments are RequestContext fields (path, host, query, ...).
        """
        return RequestContext(
            language_list=self.language_list,
            methods=dict(self.methods.list_methods()),
            negotiator=self,
            url_config=self.url_config(),
            **request,
        )

    def initialize(self, type_id: str, context: RequestContext) -> Language:
        """Return the language for a type, negotiating it on first use."""
        language = context.languages.get(type_id)
        if language is not None:
            return language

        if context.language_list.is_multilingual():
            language = self._negotiate(type_id, context)
        else:
            language = context.language_list.default.with_method(METHOD_DEFAULT)
        context.languages[type_id] = language
        return language

    def initialize_all(self, context: RequestContext) -> dict[str, Language]:
        """Negotiate every stored type, interface first."""
        type_ids = self.types.all_types()
        if LANGUAGE_TYPE_INTERFACE in type_ids:
            type_ids.remove(LANGUAGE_TYPE_INTERFACE)
            type_ids.insert(0, LANGUAGE_TYPE_INTERFACE)
        for type_id in type_ids:
            self.initialize(type_id, context)
        return dict(context.languages)

    def _negotiate(self, type_id: str, context: RequestContext) -> Language:
        for method_id, record in self.settings.get_records(type_id).items():
            descriptor = context.methods.get(method_id)
            if descriptor is not None and descriptor.types and type_id not in descriptor.types:
                continue
            language = context.method_cache.invoke(method_id, record, descriptor)
            if language is not None:
                logger.debug("Negotiated %s=%s via %s", type_id, language.langcode, method_id)
                return language.with_method(method_id)

        default = context.language_list.default
        logger.debug("No negotiation method matched %s, using default %s", type_id, default.langcode)
        return default.with_method(METHOD_DEFAULT)

    def switch_links(self, type_id: str, path: str, context: RequestContext) -> SwitchLinks | None:
        return switch_links(type_id, path, context)

    def fallback_candidates(self, context: RequestContext, type_id: str = LANGUAGE_TYPE_CONTENT) -> list[str]:
        return fallback_candidates(context, type_id)

    def rewrite_url(self, url: OutboundUrl, context: RequestContext) -> OutboundUrl:
        return rewrite_outbound_url(url, context)

    # ── Administration ────────────────────────────────────────────────────────

    def rebuild(self) -> None:
        """Re-normalise stored settings after plugins changed."""
        self.types.reset()
        self.methods.reset()
        self.types.set_types(self.methods, self.settings)
        self.methods.purge(self.settings)
        logger.info(
            "Language negotiation rebuilt: %d types, %d methods",
            len(self.types.list_types()),
            len(self.methods.list_methods()),
        )

    def configure(self, type_id: str, method_weights: Mapping[str, float]) -> list[str]:
        """Set the method order of a configurable type.

        Raises:
            UnknownLanguageTypeError: the type is not defined.
            ValidationError: the type has a fixed order, or a method does not
                apply to it.
            UnknownMethodError: a method is not registered.
        """
        info = self.types.get(type_id)
        if not info.configurable:
            raise ValidationError(f"Language type '{type_id}' has a fixed method order", field="type_id")

        configurable = self.types.configurable_types(stored=False)
        for method_id in method_weights:
            descriptor = self.methods.get(method_id)
            if not descriptor.applies_to(type_id, configurable):
                raise ValidationError(
                    f"Method '{method_id}' does not apply to '{type_id}'",
                    field="method_weights",
                    details={"method_id": method_id},
                )

        order = self.settings.set(type_id, method_weights)
        logger.info("Negotiation order for %s set to %s", type_id, order)
        return order

    def describe(self, type_id: str) -> dict[str, Any]:
        info = self.types.get(type_id)
        methods = self.methods.list_methods()
        return {
            "type_id": type_id,
            "name": info.name,
            "description": info.description,
            "configurable": info.configurable,
            "enabled": type_id in self.types.all_types(),
            "methods": [
                {
                    "method_id": method_id,
                    "name": methods[method_id].name if method_id in methods else method_id,
                    **record.to_dict(),
                }
                for method_id, record in self.settings.get_records(type_id).items()
            ],
        }

    def url_config(self) -> UrlConfig:
        """Stored URL settings, with prefixes filled in for every language."""
        config = UrlConfig.from_dict(self.store.load_url_config(), default_part=self.url_part)
        return ensure_prefixes(self.language_list, config)

    def save_url_config(self, config: UrlConfig) -> UrlConfig:
        configurable = self.language_list.codes(include_locked=False)
        for langcode in list(config.prefixes) + list(config.domains):
            if langcode not in configurable:
                raise ValidationError(f"Unknown language '{langcode}'", field="langcode")
        config = ensure_prefixes(self.language_list, config)
        config.validate()
        self.store.save_url_config(config.to_dict())
        logger.info("URL negotiation settings saved (part=%s)", config.part)
        return config

