"""
Locale helpers

Pure functions for BCP 47 locale handling:
- RTL (right-to-left) language detection
- Accept-Language header parsing with quality-value (q=) support
- Language display names
"""

from __future__ import annotations

# ── Constants ─────────────────────────────────────────────────────────────────

# BCP 47 base language codes whose scripts read right-to-left
RTL_LOCALES: frozenset[str] = frozenset({"ar", "he", "fa", "ur", "yi", "ku"})

# Human-readable names for known locales (subset of BCP 47 code space)
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "fr": "Français",
    "de": "Deutsch",
    "es": "Español",
    "ar": "العربية",
    "zh": "中文",
    "ja": "日本語",
    "pt": "Português",
    "it": "Italiano",
    "nl": "Nederlands",
    "he": "עברית",
    "und": "Not specified",
    "zxx": "Not applicable",
}


# ── Public helpers ────────────────────────────────────────────────────────────


def is_rtl_locale(locale: str) -> bool:
    """Return True when the given BCP 47 locale is right-to-left.

    Compares only the base language tag (before the first hyphen), so
    both "ar" and "ar-SA" are identified as RTL.
    """
    base = locale.split("-")[0].lower()
    return base in RTL_LOCALES


def _parse_weighted_tags(header: str) -> dict[str, float]:
    """Split an Accept-Language header into {lowercased tag: q-value}.

    Tags listed more than once keep their highest q-value.  Malformed
    q-values count as 1.0.
    """
    weighted: dict[str, float] = {}
    for part in header.split(","):
        part = part.strip()
        if not part:
            continue
        tag, _, params = part.partition(";")
        q = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                q = float(params[2:].strip())
            except ValueError:
                q = 1.0
        tag = tag.strip().lower()
        if tag and q > weighted.get(tag, -1.0):
            weighted[tag] = q
    return weighted


def parse_accept_language(header: str, supported: list[str]) -> str | None:
    """Parse an Accept-Language header and return the best matching locale.

    Algorithm:
    1. Split header into tags with optional q-values (default q=1.0).
    2. For each supported locale, find the most specific browser range that
       covers it: exact tag, then each shorter prefix ("zh-hant-tw" →
       "zh-hant" → "zh"), then "*".  A q-value of 0 rejects the locale.
    3. Also credit a supported base locale ("fr") when the browser only
       sends a regional variant ("fr-CA").
    4. Return the supported locale with the highest q-value; ties keep the
       order of ``supported``.

    Args:
        header:    Value of the Accept-Language HTTP header, e.g.
                   "fr-CA,fr;q=0.9,en-US;q=0.8,en;q=0.7".
        supported: Ordered list of BCP 47 locale codes the site serves.

    Returns:
        The best matching locale from `supported`, or None.
    """
    if not header:
        return None

    weighted = _parse_weighted_tags(header)
    if not weighted:
        return None

    best: str | None = None
    best_q = 0.0
    for locale in supported:
        prefix = locale.lower()
        q: float | None = None
        while prefix:
            if prefix in weighted:
                q = weighted[prefix]
                break
            prefix = prefix.rpartition("-")[0]
        if q is None:
            # Regional variant sent for a base locale we serve
            variants = [v for tag, v in weighted.items() if tag.split("-")[0] == locale.lower()]
            if variants:
                q = max(variants)
        if q is None:
            q = weighted.get("*")
        if q is not None and q > best_q:
            best, best_q = locale, q

    return best
