"""
URL prefix / domain resolution

Inbound: ``split_prefix`` pulls a language prefix off the first path
segment; ``language_from_domain`` maps the request host to a language.
Outbound: ``rewrite_outbound_url`` runs the url_rewrite capability of every
enabled method over a link before it is rendered.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode, urlsplit

from langneg.exceptions import ValidationError
from langneg.i18n.methods import CAPABILITY_URL_REWRITE

if TYPE_CHECKING:
    from langneg.i18n.context import RequestContext
    from langneg.i18n.languages import Language, LanguageList
    from langneg.i18n.methods import NegotiationMethod

logger = logging.getLogger(__name__)

URL_PART_PREFIX = "prefix"
URL_PART_DOMAIN = "domain"

DEFAULT_SESSION_PARAM = "language"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class UrlConfig:
    """
    URL negotiation settings.

    Attributes:
        part:          Which part of the URL carries the language:
                       "prefix" (first path segment) or "domain".
        prefixes:      langcode → path prefix.  "" means no prefix.
        domains:       langcode → host name (optionally with scheme/port).
        session_param: Query/session parameter used by session negotiation.
    """

    part: str = URL_PART_PREFIX
    prefixes: dict[str, str] = field(default_factory=dict)
    domains: dict[str, str] = field(default_factory=dict)
    session_param: str = DEFAULT_SESSION_PARAM

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None, default_part: str = URL_PART_PREFIX) -> UrlConfig:
        data = data if isinstance(data, dict) else {}
        prefixes = data.get("prefixes")
        domains = data.get("domains")
        return cls(
            part=data.get("part", default_part),
            prefixes=dict(prefixes) if isinstance(prefixes, dict) else {},
            domains=dict(domains) if isinstance(domains, dict) else {},
            session_param=data.get("session_param", DEFAULT_SESSION_PARAM),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "part": self.part,
            "prefixes": dict(self.prefixes),
            "domains": dict(self.domains),
            "session_param": self.session_param,
        }

    def validate(self) -> None:
        """Raise ValidationError for settings that would make URLs ambiguous."""
        if self.part not in (URL_PART_PREFIX, URL_PART_DOMAIN):
            raise ValidationError(f"Unknown URL negotiation part '{self.part}'", field="part")
        if not self.session_param:
            raise ValidationError("Session parameter cannot be empty", field="session_param")

        seen: dict[str, str] = {}
        for langcode, prefix in self.prefixes.items():
            if "/" in prefix:
                raise ValidationError(f"Prefix '{prefix}' cannot contain a slash", field="prefixes")
            if prefix in seen:
                raise ValidationError(
                    f"Prefix '{prefix}' is used by both '{seen[prefix]}' and '{langcode}'",
                    field="prefixes",
                )
            seen[prefix] = langcode

        hosts: dict[str, str] = {}
        for langcode, domain in self.domains.items():
            if not domain:
                continue
            host = normalize_host(domain)
            if host in hosts:
                raise ValidationError(
                    f"Domain '{host}' is used by both '{hosts[host]}' and '{langcode}'",
                    field="domains",
                )
            hosts[host] = langcode


# ── Inbound ───────────────────────────────────────────────────────────────────


def split_prefix(path: str, languages: LanguageList, prefixes: dict[str, str]) -> tuple[Language | None, str]:
    """Split a language prefix off a path.

    The first segment of ``path`` is compared for exact equality against the
    prefix of every active language.  An empty first segment matches the
    language whose prefix is "".

    Returns:
        (language, path without the prefix segment), or (None, path) when no
        prefix matches.
    """
    first, _, rest = path.partition("/")
    for language in languages:
        if prefixes.get(language.langcode) == first:
            return language, rest
    return None, path


def normalize_host(value: str) -> str:
    """Reduce a configured domain ("https://fr.example.com:8080") to its host."""
    parsed = urlsplit("http://" + _SCHEME_RE.sub("", value.strip()))
    return (parsed.hostname or "").lower()


def language_from_domain(host: str, languages: LanguageList, domains: dict[str, str]) -> Language | None:
    """Return the language whose configured domain matches ``host``.

    Only host names are compared; protocols and ports are ignored.
    """
    host = host.lower()
    for language in languages:
        domain = domains.get(language.langcode)
        if domain and normalize_host(domain) == host:
            return language
    return None


def ensure_prefixes(languages: LanguageList, config: UrlConfig) -> UrlConfig:
    """Fill in missing prefixes and domains.

    The default language gets an empty prefix, every other language its
    langcode.  Returns a new config; the input is left untouched.
    """
    prefixes = dict(config.prefixes)
    domains = dict(config.domains)
    for language in languages.configurable():
        if not prefixes.get(language.langcode):
            prefixes[language.langcode] = "" if language.default else language.langcode
        domains.setdefault(language.langcode, "")
    return replace(config, prefixes=prefixes, domains=domains)


# ── Outbound ──────────────────────────────────────────────────────────────────


@dataclass
class OutboundUrl:
    """
    A link being generated.  URL rewriters mutate it in place.

    Attributes:
        path:     Internal path without the leading slash.
        language: Target language; rewriters fill it from the URL language
                  when absent.
        prefix:   Path prefix including its trailing slash, e.g. "fr/".
        base_url: Scheme and host for absolute URLs.
        absolute: Render scheme and host.
        external: External links are never rewritten.
        https:    Force (True) or drop (False) https on rewritten domains.
        query:    Query string parameters.
    """

    path: str
    language: Language | None = None
    prefix: str = ""
    base_url: str | None = None
    absolute: bool = False
    external: bool = False
    https: bool | None = None
    query: dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        if self.external:
            url = self.path
        else:
            url = "/" + self.prefix + self.path.lstrip("/")
            if self.absolute and self.base_url:
                url = self.base_url.rstrip("/") + url
        if self.query:
            url += "?" + urlencode(self.query)
        return url


def _url_rewriters(context: RequestContext) -> list[NegotiationMethod]:
    """Collect the url_rewrite strategies enabled for any configurable type.

    Computed once per request; a method enabled for several types appears
    once.
    """
    rewriters = context.slots.get("url_rewriters")
    if rewriters is not None:
        return rewriters

    rewriters = []
    negotiator = context.negotiator
    if negotiator is not None:
        seen: set[str] = set()
        for type_id in negotiator.types.configurable_types():
            for method_id, record in negotiator.settings.get_records(type_id).items():
                descriptor = context.methods.get(method_id)
                if descriptor is None or method_id in seen or CAPABILITY_URL_REWRITE not in record.callbacks:
                    continue
                seen.add(method_id)
                rewriters.append(descriptor.strategy)
    context.slots["url_rewriters"] = rewriters
    return rewriters


def rewrite_outbound_url(url: OutboundUrl, context: RequestContext) -> OutboundUrl:
    """Apply language-aware rewriting to an internal link.

    Only internal URLs on multilingual sites are touched.  When no enabled
    method rewrites URLs, the link carries no language.
    """
    if url.external or not context.language_list.is_multilingual():
        return url

    rewriters = _url_rewriters(context)
    for strategy in rewriters:
        strategy.rewrite_url(url, context)
    if not rewriters:
        url.language = None
    return url
