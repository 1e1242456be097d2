"""Fallback candidates: the languages to try when content is missing in the negotiated one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langneg.i18n.languages import LANGCODE_NOT_SPECIFIED
from langneg.i18n.types import LANGUAGE_TYPE_CONTENT

if TYPE_CHECKING:
    from langneg.i18n.context import RequestContext


def fallback_candidates(context: RequestContext, type_id: str = LANGUAGE_TYPE_CONTENT) -> list[str]:
    """Return langcodes in display order followed by the "not specified" code.

    Locked system languages are left out; the list is built once per
    request and plugins may add or reorder candidates.
    """
    if context.fallback_candidates is None:
        candidates = context.language_list.codes(include_locked=False)
        candidates.append(LANGCODE_NOT_SPECIFIED)
        if context.negotiator is not None:
            candidates = context.negotiator.plugins.alter_fallback_candidates(candidates, type_id)
        context.fallback_candidates = candidates
    return list(context.fallback_candidates)
