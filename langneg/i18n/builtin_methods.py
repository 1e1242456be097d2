"""
Built-in negotiation methods

Contributed by the core locale plugin:

    language-url         : path prefix or domain
    language-session     : ?language= query parameter, remembered in the session
    language-user        : the authenticated user's preferred language
    language-browser     : Accept-Language header
    language-interface   : content follows the interface language
    language-url-fallback: URL language when the URL carries none
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from langneg.i18n.locale import parse_accept_language
from langneg.i18n.methods import CachePolicy, MethodDescriptor, NegotiationMethod
from langneg.i18n.switcher import SwitchLink
from langneg.i18n.types import LANGUAGE_TYPE_CONTENT, LANGUAGE_TYPE_INTERFACE, LANGUAGE_TYPE_URL
from langneg.i18n.url import URL_PART_DOMAIN, URL_PART_PREFIX, language_from_domain, normalize_host, split_prefix

if TYPE_CHECKING:
    from langneg.i18n.context import RequestContext
    from langneg.i18n.languages import Language, LanguageList
    from langneg.i18n.url import OutboundUrl

logger = logging.getLogger(__name__)

METHOD_URL = "language-url"
METHOD_SESSION = "language-session"
METHOD_USER = "language-user"
METHOD_BROWSER = "language-browser"
METHOD_INTERFACE = "language-interface"
METHOD_URL_FALLBACK = "language-url-fallback"


def _resolved(type_id: str, context: RequestContext) -> Language | None:
    """Language of another type, negotiating it first if needed."""
    language = context.current_language(type_id)
    if language is None and context.negotiator is not None:
        language = context.negotiator.initialize(type_id, context)
    return language


class UrlMethod(NegotiationMethod):
    """Language from the URL: path prefix or domain, depending on settings.

    In prefix mode the domain map is still consulted when no prefix
    matched and domains are configured.
    """

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        config = context.url_config
        language = None
        if config.part == URL_PART_PREFIX:
            language, _ = split_prefix(context.path, languages, config.prefixes)
            if language is None and any(config.domains.values()):
                language = language_from_domain(context.host, languages, config.domains)
        elif config.part == URL_PART_DOMAIN:
            language = language_from_domain(context.host, languages, config.domains)
        return language.langcode if language else None

    def switch_links(self, type_id: str, path: str, context: RequestContext) -> dict[str, SwitchLink] | None:
        return {
            language.langcode: SwitchLink(href=path, title=language.name, language=language)
            for language in context.language_list.configurable()
        }

    def rewrite_url(self, url: OutboundUrl, context: RequestContext) -> None:
        languages = context.language_list
        if url.language is None:
            url.language = _resolved(LANGUAGE_TYPE_URL, context)
        elif url.language.langcode not in languages:
            # Only active languages may appear in URLs
            url.language = None
            return
        if url.language is None:
            return

        config = context.url_config
        langcode = url.language.langcode
        if config.part == URL_PART_DOMAIN:
            domain = config.domains.get(langcode)
            if not domain:
                return
            port = None
            if url.base_url:
                port = _port_of(url.base_url)
            elif context.port:
                port = context.port
            scheme = "https" if context.is_secure else "http"
            if url.https is True:
                scheme = "https"
            elif url.https is False:
                scheme = "http"
            url.absolute = True
            url.base_url = f"{scheme}://{normalize_host(domain)}"
            if port:
                url.base_url += f":{port}"
        else:
            prefix = config.prefixes.get(langcode)
            if prefix:
                url.prefix = prefix + "/"


def _port_of(base_url: str) -> int | None:
    """Port of an absolute base URL, if explicit."""
    try:
        return urlsplit(base_url).port
    except ValueError:
        return None


class SessionMethod(NegotiationMethod):
    """Language from a query parameter, remembered in the session.

    The query parameter wins when it names an active language; it is only
    written to the session for authenticated users.
    """

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        param = context.url_config.session_param
        langcode = context.query.get(param)
        if langcode and langcode in languages:
            if context.user.authenticated:
                context.session[param] = langcode
            return langcode
        return context.session.get(param)

    def switch_links(self, type_id: str, path: str, context: RequestContext) -> dict[str, SwitchLink] | None:
        param = context.url_config.session_param
        active = context.session.get(param)
        if active is None:
            current = _resolved(type_id, context)
            active = current.langcode if current else None

        links: dict[str, SwitchLink] = {}
        for language in context.language_list.configurable():
            link = SwitchLink(href=path, title=language.name, language=language, query=dict(context.query))
            if language.langcode != active:
                link.query[param] = language.langcode
            else:
                link.attributes["class"].append("session-active")
            links[language.langcode] = link
        return links

    def rewrite_url(self, url: OutboundUrl, context: RequestContext) -> None:
        # Anonymous users may have cookies disabled: carry an explicit
        # ?language= choice over to every generated link.
        state = context.slots.get("session_rewrite")
        if state is None:
            param = context.url_config.session_param
            value = context.query.get(param)
            enabled = (
                not context.user.authenticated
                and value is not None
                and value in context.language_list
                and context.negotiator is not None
                and context.negotiator.settings.is_enabled(METHOD_SESSION)
            )
            state = (enabled, param, value)
            context.slots["session_rewrite"] = state

        enabled, param, value = state
        if enabled:
            url.query.setdefault(param, value)


class UserMethod(NegotiationMethod):
    """The authenticated user's preferred language."""

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        user = context.user
        if user.authenticated and user.preferred_langcode and user.preferred_langcode in languages:
            return user.preferred_langcode
        return None


class BrowserMethod(NegotiationMethod):
    """Best match for the Accept-Language header."""

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        return parse_accept_language(context.header("Accept-Language"), languages.codes(include_locked=False))


class InterfaceMethod(NegotiationMethod):
    """Content language follows the interface language."""

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        language = _resolved(LANGUAGE_TYPE_INTERFACE, context)
        return language.langcode if language else None


class UrlFallbackMethod(NegotiationMethod):
    """URL language when the URL itself carries none.

    If the default language has no prefix (or domain), a URL without
    language information is in the default language; otherwise links keep
    the interface language.
    """

    def negotiate(self, languages: LanguageList, context: RequestContext) -> str | None:
        default = languages.default
        config = context.url_config
        if config.part == URL_PART_DOMAIN:
            carries_language = bool(config.domains.get(default.langcode))
        else:
            carries_language = bool(config.prefixes.get(default.langcode))
        if not carries_language:
            return default.langcode
        language = _resolved(LANGUAGE_TYPE_INTERFACE, context)
        return language.langcode if language else None


def builtin_methods(provider: str = "locale") -> list[MethodDescriptor]:
    """Descriptors for every built-in method."""
    return [
        MethodDescriptor(
            method_id=METHOD_URL,
            strategy=UrlMethod(),
            name="URL",
            description="Language from the URL (Path prefix or domain).",
            weight=-8,
            types=frozenset({LANGUAGE_TYPE_INTERFACE, LANGUAGE_TYPE_CONTENT, LANGUAGE_TYPE_URL}),
            provider=provider,
        ),
        MethodDescriptor(
            method_id=METHOD_SESSION,
            strategy=SessionMethod(),
            name="Session",
            description="Language from a request/session parameter.",
            weight=-6,
            provider=provider,
        ),
        MethodDescriptor(
            method_id=METHOD_USER,
            strategy=UserMethod(),
            name="User",
            description="Follow the user's language preference.",
            weight=-4,
            provider=provider,
        ),
        MethodDescriptor(
            method_id=METHOD_BROWSER,
            strategy=BrowserMethod(),
            name="Browser",
            description="Language from the browser's language settings.",
            weight=-2,
            cache=CachePolicy.PAGE_CACHE_DISABLED,
            provider=provider,
        ),
        MethodDescriptor(
            method_id=METHOD_INTERFACE,
            strategy=InterfaceMethod(),
            name="Interface",
            description="Use the detected interface language.",
            weight=8,
            types=frozenset({LANGUAGE_TYPE_CONTENT}),
            provider=provider,
        ),
        MethodDescriptor(
            method_id=METHOD_URL_FALLBACK,
            strategy=UrlFallbackMethod(),
            name="URL fallback",
            description="Use an already detected language for URLs if none is found.",
            weight=8,
            types=frozenset({LANGUAGE_TYPE_URL}),
            provider=provider,
        ),
    ]
