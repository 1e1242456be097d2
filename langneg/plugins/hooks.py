"""
Plugin Hook Constants

Hook names plugins can subscribe to, following the `category.action`
convention.
"""

from __future__ import annotations

# ── Negotiation ───────────────────────────────────────────────────────────────
HOOK_LANGUAGE_NEGOTIATED = "language.negotiated"

# ── Configuration ─────────────────────────────────────────────────────────────
HOOK_LANGUAGE_TYPES_CHANGED = "language.types_changed"
HOOK_NEGOTIATION_CHANGED = "language.negotiation_changed"
HOOK_URL_SETTINGS_CHANGED = "language.url_settings_changed"

# ── Master list ───────────────────────────────────────────────────────────────
ALL_HOOKS: list[str] = [
    HOOK_LANGUAGE_NEGOTIATED,
    HOOK_LANGUAGE_TYPES_CHANGED,
    HOOK_NEGOTIATION_CHANGED,
    HOOK_URL_SETTINGS_CHANGED,
]
