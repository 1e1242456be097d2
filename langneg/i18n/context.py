"""
Request-scoped negotiation state

A RequestContext is created at the start of a request and dropped at the
end.  It carries the request inputs the methods read (path, host, query,
headers, session, user) and owns every per-request cache slot: the method
registry snapshot, the method result cache, the resolved language of each
type and the fallback candidate list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from langneg.i18n.methods import CAPABILITY_NEGOTIATION, CachePolicy
from langneg.i18n.url import UrlConfig

if TYPE_CHECKING:
    from langneg.i18n.languages import Language, LanguageList
    from langneg.i18n.methods import MethodDescriptor
    from langneg.i18n.negotiator import LanguageNegotiator
    from langneg.i18n.settings import MethodSettings

logger = logging.getLogger(__name__)


@dataclass
class UserContext:
    """The principal making the request."""

    authenticated: bool = False
    user_id: Any = None
    preferred_langcode: str | None = None


class MethodCache:
    """
    Memoises raw method results for one request.

    Keyed by method ID only: a method shared by several language types runs
    at most once per request.  Misses (declined, gated, unavailable) are
    cached too.
    """

    def __init__(self, context: RequestContext) -> None:
        self._context = context
        self._results: dict[str, Language | None] = {}

    def __contains__(self, method_id: str) -> bool:
        return method_id in self._results

    def may_run(self, record: MethodSettings) -> bool:
        """Apply the cache policy gate.

        A method runs if it declares no policy, if the user is authenticated,
        or if its policy matches the current page cache state.
        """
        if record.cache is CachePolicy.NONE or self._context.user.authenticated:
            return True
        if self._context.page_cacheable:
            return record.cache is CachePolicy.PAGE_CACHE_ENABLED
        return record.cache is CachePolicy.PAGE_CACHE_DISABLED

    def invoke(
        self,
        method_id: str,
        record: MethodSettings,
        descriptor: MethodDescriptor | None,
    ) -> Language | None:
        if method_id in self._results:
            return self._results[method_id]

        language: Language | None = None
        languages = self._context.language_list
        if descriptor is None or CAPABILITY_NEGOTIATION not in record.callbacks:
            logger.debug("Negotiation method %s is unavailable", method_id)
        elif not self.may_run(record):
            logger.debug("Negotiation method %s skipped by cache policy %s", method_id, record.cache.value)
        else:
            try:
                langcode = descriptor.strategy.negotiate(languages, self._context)
            except Exception as exc:
                logger.warning("Negotiation method %s raised: %s", method_id, exc)
                langcode = None
            language = languages.get(langcode)
            if langcode is not None and language is None:
                logger.debug("Negotiation method %s returned unknown langcode %r", method_id, langcode)

        self._results[method_id] = language
        return language


@dataclass
class RequestContext:
    """
    Everything negotiation needs to know about one request.

    Attributes:
        language_list:  Active languages for this request.
        methods:        Method registry snapshot taken at request start.
        negotiator:     The negotiator that created this context.
        url_config:     URL prefix/domain settings snapshot.
        path:           Request path without the leading slash.
        host:           Request host name, without port.
        port:           Request port, when explicit.
        scheme:         "http" or "https".
        query:          Query string parameters.
        headers:        Request headers, lowercased names.
        session:        Mutable session mapping.
        user:           The requesting principal.
        page_cacheable: Whether the response may be stored in the page cache.
    """

    language_list: LanguageList
    methods: dict[str, MethodDescriptor] = field(default_factory=dict)
    negotiator: LanguageNegotiator | None = None
    url_config: UrlConfig = field(default_factory=UrlConfig)
    path: str = ""
    host: str = ""
    port: int | None = None
    scheme: str = "http"
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    session: dict[str, Any] = field(default_factory=dict)
    user: UserContext = field(default_factory=UserContext)
    page_cacheable: bool = False

    # ── Cache slots ───────────────────────────────────────────────────────────
    languages: dict[str, Language] = field(default_factory=dict, init=False)
    fallback_candidates: list[str] | None = field(default=None, init=False)
    slots: dict[str, Any] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.headers = {name.lower(): value for name, value in self.headers.items()}
        self.path = self.path.lstrip("/")
        self.method_cache = MethodCache(self)

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    def current_language(self, type_id: str) -> Language | None:
        """Return the language already resolved for a type in this request."""
        return self.languages.get(type_id)

    @property
    def is_secure(self) -> bool:
        return self.scheme == "https"
