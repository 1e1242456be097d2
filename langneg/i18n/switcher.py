"""
Language switch links

Walks a type's method order for the first method with the language_switch
capability that produces links, then hands them to plugins for relabelling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from langneg.i18n.methods import CAPABILITY_LANGUAGE_SWITCH

if TYPE_CHECKING:
    from langneg.i18n.context import RequestContext
    from langneg.i18n.languages import Language

logger = logging.getLogger(__name__)


@dataclass
class SwitchLink:
    href: str
    title: str
    language: Language | None = None
    query: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, list[str]] = field(default_factory=lambda: {"class": ["language-link"]})

    def to_dict(self) -> dict[str, Any]:
        return {
            "href": self.href,
            "title": self.title,
            "langcode": self.language.langcode if self.language else None,
            "query": dict(self.query),
            "attributes": {name: list(values) for name, values in self.attributes.items()},
        }


@dataclass
class SwitchLinks:
    """Links produced by one method, keyed by langcode."""

    links: dict[str, SwitchLink]
    method_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "method_id": self.method_id,
            "links": {langcode: link.to_dict() for langcode, link in self.links.items()},
        }


def switch_links(type_id: str, path: str, context: RequestContext) -> SwitchLinks | None:
    """Return the language switch links for a type, or None.

    The first method in the type's stored order that both advertises the
    language_switch capability and returns a non-empty link set wins.
    """
    negotiator = context.negotiator
    if negotiator is None:
        return None

    for method_id, record in negotiator.settings.get_records(type_id).items():
        descriptor = context.methods.get(method_id)
        if descriptor is None or CAPABILITY_LANGUAGE_SWITCH not in record.callbacks:
            continue
        try:
            links = descriptor.strategy.switch_links(type_id, path, context)
        except Exception as exc:
            logger.warning("Switch links of method %s raised: %s", method_id, exc)
            continue
        if links:
            negotiator.plugins.alter_switch_links(links, type_id, path)
            return SwitchLinks(links=links, method_id=method_id)
    return None
