"""
Negotiation methods

NegotiationMethod:  strategy interface, one method per capability.
MethodDescriptor:   static metadata (weight, applicable types, cache policy)
                    wrapping a strategy instance.
MethodRegistry:     the full set of known methods, aggregated from plugins,
                    with the built-in default-language sentinel always last.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from langneg.exceptions import UnknownMethodError

if TYPE_CHECKING:
    from langneg.i18n.context import RequestContext
    from langneg.i18n.languages import LanguageList
    from langneg.i18n.settings import NegotiationSettings
    from langneg.i18n.switcher import SwitchLink
    from langneg.i18n.url import OutboundUrl
    from langneg.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

# Sentinel method: always returns the site default, and tags results when
# no other method matched.
METHOD_DEFAULT = "language-default"

# The sentinel never sorts before this weight
DEFAULT_METHOD_WEIGHT = 10

# ── Capabilities ──────────────────────────────────────────────────────────────
CAPABILITY_NEGOTIATION = "negotiation"
CAPABILITY_LANGUAGE_SWITCH = "language_switch"
CAPABILITY_URL_REWRITE = "url_rewrite"


class CachePolicy(str, enum.Enum):
    """When a method may run for anonymous traffic.

    Methods reading per-visitor input (e.g. Accept-Language) must not run
    while page caching is on, or one visitor's language would be cached for
    everyone.
    """

    NONE = "none"
    PAGE_CACHE_ENABLED = "page_cache_enabled"
    PAGE_CACHE_DISABLED = "page_cache_disabled"


class NegotiationMethod(ABC):
    """
    Strategy interface for a language negotiation method.

    Only ``negotiate`` is required.  Overriding ``switch_links`` or
    ``rewrite_url`` advertises the matching capability.
    """

    @abstractmethod
    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        """Return a langcode, or None to decline.  Must not raise for "no match"."""
        ...

    def switch_links(self, type_id: str, path: str, context: RequestContext) -> dict[str, SwitchLink] | None:
        """Return language switcher links keyed by langcode."""
        return None

    def rewrite_url(self, url: OutboundUrl, context: RequestContext) -> None:  # noqa: B027
        """Rewrite an outbound URL in place."""

    @property
    def capabilities(self) -> tuple[str, ...]:
        found = [CAPABILITY_NEGOTIATION]
        cls = type(self)
        if cls.switch_links is not NegotiationMethod.switch_links:
            found.append(CAPABILITY_LANGUAGE_SWITCH)
        if cls.rewrite_url is not NegotiationMethod.rewrite_url:
            found.append(CAPABILITY_URL_REWRITE)
        return tuple(found)


@dataclass(frozen=True)
class MethodDescriptor:
    """
    Static description of a negotiation method.

    Attributes:
        method_id:   Machine name, e.g. "language-url".
        strategy:    The NegotiationMethod implementation.
        name:        Human-readable name.
        description: Shown to administrators.
        weight:      Default position when first assigned to a type.
        types:       Types the method applies to; empty means every
                     configurable type.
        cache:       Cache policy gate for anonymous requests.
        provider:    Name of the plugin that contributed the method.
    """

    method_id: str
    strategy: NegotiationMethod
    name: str = ""
    description: str = ""
    weight: int = 0
    types: frozenset[str] = field(default_factory=frozenset)
    cache: CachePolicy = CachePolicy.NONE
    provider: str = ""

    @property
    def callbacks(self) -> tuple[str, ...]:
        return self.strategy.capabilities

    @property
    def file(self) -> str:
        return type(self.strategy).__module__

    def applies_to(self, type_id: str, configurable_types: list[str]) -> bool:
        if self.types:
            return type_id in self.types
        return type_id in configurable_types

    def to_dict(self) -> dict:
        return {
            "method_id": self.method_id,
            "name": self.name,
            "description": self.description,
            "weight": self.weight,
            "types": sorted(self.types),
            "cache": self.cache.value,
            "callbacks": list(self.callbacks),
            "provider": self.provider,
        }


class DefaultLanguageMethod(NegotiationMethod):
    """Always picks the site default language."""

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        return languages.default.langcode


class MethodRegistry:
    """All known negotiation methods, keyed by ID."""

    def __init__(self, plugins: PluginRegistry) -> None:
        self._plugins = plugins
        self._methods: dict[str, MethodDescriptor] | None = None
        self._revision = -1

    def list_methods(self) -> dict[str, MethodDescriptor]:
        """Return every method, rebuilt when the plugin set changes.

        The sentinel ``language-default`` is always injected, weighted after
        every contributed method.
        """
        if self._methods is None or self._revision != self._plugins.revision:
            methods = self._plugins.collect_negotiation_methods()
            if METHOD_DEFAULT in methods:
                logger.debug("Ignoring plugin definition of reserved method %s", METHOD_DEFAULT)
                del methods[METHOD_DEFAULT]
            weight = max([DEFAULT_METHOD_WEIGHT - 1] + [m.weight for m in methods.values()]) + 1
            methods[METHOD_DEFAULT] = MethodDescriptor(
                method_id=METHOD_DEFAULT,
                strategy=DefaultLanguageMethod(),
                name="Default",
                description="Use the site default language.",
                weight=weight,
                provider="core",
            )
            self._methods = methods
            self._revision = self._plugins.revision
        return self._methods

    def get(self, method_id: str) -> MethodDescriptor:
        methods = self.list_methods()
        if method_id not in methods:
            raise UnknownMethodError(method_id)
        return methods[method_id]

    def reset(self) -> None:
        self._methods = None

    def purge(self, settings: NegotiationSettings) -> None:
        """Drop methods that no longer exist from every type's stored order.

        Remaining methods keep their relative order, renumbered densely from 0.
        Types whose definition is gone are purged too.
        """
        self.reset()
        settings.types.reset()
        known = self.list_methods()
        defined = settings.types.list_types()
        for type_id in settings.store.negotiation_types():
            if type_id in defined:
                continue
            records = settings.get_records(type_id)
            stale = sorted(set(records) - set(known))
            if stale:
                settings.store.save_negotiation(
                    type_id,
                    {method_id: record.to_dict() for method_id, record in records.items() if method_id in known},
                )
                logger.info("Purged negotiation methods for undefined type %s: %s", type_id, stale)
        for type_id in defined:
            current = settings.get(type_id)
            survivors = [method_id for method_id in current if method_id in known]
            settings.set(type_id, {method_id: weight for weight, method_id in enumerate(survivors)})
            if len(survivors) != len(current):
                logger.info(
                    "Purged negotiation methods for %s: %s",
                    type_id,
                    sorted(set(current) - set(survivors)),
                )
