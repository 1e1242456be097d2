"""
Language Negotiation Middleware

Builds a RequestContext for every request, negotiates every language type,
and exposes the results on request.state:

    request.state.language_context : the RequestContext (switch links,
                                      fallback candidates, URL rewriting)
    request.state.languages        : {type_id: Language}
    request.state.locale           : interface langcode

When the URL language was detected from a path prefix, the prefix is
stripped before routing, so "/fr/api/v1/i18n/current" is served by
"/api/v1/i18n/current".  The response carries a Content-Language header.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from langneg.config import settings
from langneg.i18n.builtin_methods import METHOD_URL
from langneg.i18n.context import UserContext
from langneg.i18n.types import LANGUAGE_TYPE_INTERFACE, LANGUAGE_TYPE_URL
from langneg.i18n.url import URL_PART_PREFIX, split_prefix
from langneg.plugins.hooks import HOOK_LANGUAGE_NEGOTIATED

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import Request
    from starlette.responses import Response

    from langneg.i18n.context import RequestContext
    from langneg.i18n.negotiator import LanguageNegotiator


def _request_user(request: Request) -> UserContext:
    """Read the principal an upstream auth middleware left on request.state."""
    user = getattr(request.state, "user", None)
    if user is None:
        return UserContext()
    if isinstance(user, UserContext):
        return user
    return UserContext(
        authenticated=True,
        user_id=getattr(user, "id", None),
        preferred_langcode=getattr(user, "preferred_langcode", None),
    )


def build_context(request: Request, negotiator: LanguageNegotiator) -> RequestContext:
    """Translate an incoming request into a RequestContext."""
    session = request.scope["session"] if "session" in request.scope else {}
    return negotiator.new_context(
        path=request.scope["path"],
        host=request.url.hostname or "",
        port=request.url.port,
        scheme=request.url.scheme,
        query=dict(request.query_params),
        headers=dict(request.headers),
        session=session,
        user=_request_user(request),
        page_cacheable=settings.page_cache_enabled and request.method in ("GET", "HEAD"),
    )


class LanguageNegotiationMiddleware(BaseHTTPMiddleware):
    """Negotiate request languages before routing.

    The negotiator is read from ``app.state.negotiator``, installed by the
    application lifespan (or directly by tests).
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        negotiator: LanguageNegotiator | None = getattr(request.app.state, "negotiator", None)
        if negotiator is None:
            return await call_next(request)

        context = build_context(request, negotiator)
        languages = negotiator.initialize_all(context)

        url_language = languages.get(LANGUAGE_TYPE_URL)
        if url_language is not None and url_language.method_id == METHOD_URL:
            if context.url_config.part == URL_PART_PREFIX:
                language, remainder = split_prefix(context.path, context.language_list, context.url_config.prefixes)
                if language is not None and language.langcode == url_language.langcode:
                    request.scope["path"] = "/" + remainder

        request.state.language_context = context
        request.state.languages = languages
        interface = languages.get(LANGUAGE_TYPE_INTERFACE) or negotiator.initialize(LANGUAGE_TYPE_INTERFACE, context)
        request.state.locale = interface.langcode

        await negotiator.plugins.fire_hook(
            HOOK_LANGUAGE_NEGOTIATED,
            {
                "path": context.path,
                "languages": {type_id: language.langcode for type_id, language in languages.items()},
            },
        )

        response = await call_next(request)
        response.headers["Content-Language"] = interface.langcode
        return response
