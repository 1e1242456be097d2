"""
i18n package

Language negotiation engine: language types, pluggable negotiation methods,
per-request resolution, URL prefix/domain handling, switch links and
fallback candidates.
"""

from .context import RequestContext, UserContext
from .languages import LANGCODE_NOT_APPLICABLE, LANGCODE_NOT_SPECIFIED, Direction, Language, LanguageList
from .locale import LANGUAGE_NAMES, RTL_LOCALES, is_rtl_locale, parse_accept_language
from .methods import METHOD_DEFAULT, CachePolicy, MethodDescriptor, MethodRegistry, NegotiationMethod
from .negotiator import LanguageNegotiator
from .settings import MethodSettings, NegotiationSettings
from .store import InMemorySettingsStore, JsonFileSettingsStore, SettingsStore
from .types import (
    LANGUAGE_TYPE_CONTENT,
    LANGUAGE_TYPE_INTERFACE,
    LANGUAGE_TYPE_URL,
    LanguageType,
    TypeRegistry,
)
from .url import OutboundUrl, UrlConfig, split_prefix

__all__ = [
    "LANGCODE_NOT_APPLICABLE",
    "LANGCODE_NOT_SPECIFIED",
    "LANGUAGE_NAMES",
    "LANGUAGE_TYPE_CONTENT",
    "LANGUAGE_TYPE_INTERFACE",
    "LANGUAGE_TYPE_URL",
    "METHOD_DEFAULT",
    "RTL_LOCALES",
    "CachePolicy",
    "Direction",
    "InMemorySettingsStore",
    "JsonFileSettingsStore",
    "Language",
    "LanguageList",
    "LanguageNegotiator",
    "LanguageType",
    "MethodDescriptor",
    "MethodRegistry",
    "MethodSettings",
    "NegotiationMethod",
    "NegotiationSettings",
    "OutboundUrl",
    "RequestContext",
    "SettingsStore",
    "TypeRegistry",
    "UrlConfig",
    "UserContext",
    "is_rtl_locale",
    "parse_accept_language",
    "split_prefix",
]
