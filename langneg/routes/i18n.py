"""
i18n Routes

i18n_router  (prefix: /api/v1/i18n)
    GET    /languages                 → active, configurable languages
    GET    /methods                   → registered negotiation methods
    GET    /negotiation               → method order of every language type
    GET    /negotiation/{type_id}     → method order of one type
    PUT    /negotiation/{type_id}     → reorder a configurable type
    GET    /url-settings              → URL prefix/domain settings
    PUT    /url-settings              → update URL prefix/domain settings
    GET    /current                   → languages negotiated for this request
    GET    /switch-links/{type_id}    → language switcher links for a path
    GET    /fallback                  → fallback candidates
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from langneg.i18n.context import RequestContext
from langneg.i18n.negotiator import LanguageNegotiator
from langneg.i18n.types import LANGUAGE_TYPE_CONTENT
from langneg.i18n.url import UrlConfig
from langneg.middleware.language import build_context
from langneg.plugins.hooks import HOOK_NEGOTIATION_CHANGED, HOOK_URL_SETTINGS_CHANGED

i18n_router = APIRouter(tags=["Internationalization"])
logger = logging.getLogger(__name__)


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class NegotiationUpdate(BaseModel):
    method_weights: dict[str, float] = Field(
        ..., description="Method ID → weight; lower weights are evaluated first."
    )


class UrlSettingsUpdate(BaseModel):
    part: str = "prefix"
    prefixes: dict[str, str] = Field(default_factory=dict)
    domains: dict[str, str] = Field(default_factory=dict)
    session_param: str = "language"


# ── Dependencies ──────────────────────────────────────────────────────────────


def get_negotiator(request: Request) -> LanguageNegotiator:
    negotiator = getattr(request.app.state, "negotiator", None)
    if negotiator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Language negotiation is not initialised",
        )
    return negotiator


def get_language_context(
    request: Request,
    negotiator: LanguageNegotiator = Depends(get_negotiator),
) -> RequestContext:
    """The context built by the middleware, or a fresh one without it."""
    context = getattr(request.state, "language_context", None)
    if context is None:
        context = build_context(request, negotiator)
        negotiator.initialize_all(context)
    return context


# ── Languages & methods ───────────────────────────────────────────────────────


@i18n_router.get("/languages")
async def list_languages(negotiator: LanguageNegotiator = Depends(get_negotiator)) -> list[dict[str, Any]]:
    """Active languages in display order.  Locked system languages are omitted."""
    return [language.to_dict() for language in negotiator.language_list.configurable()]


@i18n_router.get("/methods")
async def list_methods(negotiator: LanguageNegotiator = Depends(get_negotiator)) -> list[dict[str, Any]]:
    methods = sorted(negotiator.methods.list_methods().values(), key=lambda descriptor: descriptor.weight)
    return [descriptor.to_dict() for descriptor in methods]


# ── Negotiation settings ──────────────────────────────────────────────────────


@i18n_router.get("/negotiation")
async def list_negotiation(negotiator: LanguageNegotiator = Depends(get_negotiator)) -> dict[str, Any]:
    return {type_id: negotiator.describe(type_id) for type_id in negotiator.types.list_types()}


@i18n_router.get("/negotiation/{type_id}")
async def get_negotiation(type_id: str, negotiator: LanguageNegotiator = Depends(get_negotiator)) -> dict[str, Any]:
    return negotiator.describe(type_id)


@i18n_router.put("/negotiation/{type_id}")
async def update_negotiation(
    type_id: str,
    data: NegotiationUpdate,
    negotiator: LanguageNegotiator = Depends(get_negotiator),
) -> dict[str, Any]:
    """
    Reorder the negotiation methods of a configurable language type.

    Methods left out of ``method_weights`` are disabled for the type.
    """
    order = negotiator.configure(type_id, data.method_weights)
    await negotiator.plugins.fire_hook(HOOK_NEGOTIATION_CHANGED, {"type_id": type_id, "methods": order})
    return negotiator.describe(type_id)


@i18n_router.get("/url-settings")
async def get_url_settings(negotiator: LanguageNegotiator = Depends(get_negotiator)) -> dict[str, Any]:
    return negotiator.url_config().to_dict()


@i18n_router.put("/url-settings")
async def update_url_settings(
    data: UrlSettingsUpdate,
    negotiator: LanguageNegotiator = Depends(get_negotiator),
) -> dict[str, Any]:
    config = negotiator.save_url_config(UrlConfig.from_dict(data.model_dump()))
    await negotiator.plugins.fire_hook(HOOK_URL_SETTINGS_CHANGED, config.to_dict())
    return config.to_dict()


# ── Per-request results ───────────────────────────────────────────────────────


@i18n_router.get("/current")
async def current_languages(context: RequestContext = Depends(get_language_context)) -> dict[str, Any]:
    return {type_id: language.to_dict() for type_id, language in context.languages.items()}


@i18n_router.get("/switch-links/{type_id}")
async def get_switch_links(
    type_id: str,
    path: str = Query("", description="Path the links should point to"),
    negotiator: LanguageNegotiator = Depends(get_negotiator),
    context: RequestContext = Depends(get_language_context),
) -> dict[str, Any] | None:
    negotiator.types.get(type_id)
    links = negotiator.switch_links(type_id, path, context)
    return links.to_dict() if links else None


@i18n_router.get("/fallback")
async def get_fallback_candidates(
    type_id: str = Query(LANGUAGE_TYPE_CONTENT),
    negotiator: LanguageNegotiator = Depends(get_negotiator),
    context: RequestContext = Depends(get_language_context),
) -> list[str]:
    return negotiator.fallback_candidates(context, type_id)
