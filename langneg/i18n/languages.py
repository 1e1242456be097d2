"""
Language value types

``Language`` is an immutable record: the pipeline tags its results with
``dataclasses.replace`` so cached instances can be shared across language
types within a request without anyone mutating them.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace

from langneg.exceptions import ValidationError
from langneg.i18n.locale import LANGUAGE_NAMES, is_rtl_locale

# Reserved langcodes, always present as locked languages
LANGCODE_NOT_SPECIFIED = "und"
LANGCODE_NOT_APPLICABLE = "zxx"


class Direction(str, enum.Enum):
    LTR = "ltr"
    RTL = "rtl"


@dataclass(frozen=True)
class Language:
    """A site language.

    Attributes:
        langcode:  Unique BCP 47 code, e.g. "en", "pt-br".
        name:      Human-readable name.
        direction: Script direction.
        weight:    Display order key; lower sorts first.
        default:   True for the site default language.
        locked:    System languages that cannot be edited or configured.
        method_id: Set only on languages returned by negotiation.
    """

    langcode: str
    name: str
    direction: Direction = Direction.LTR
    weight: int = 0
    default: bool = False
    locked: bool = False
    method_id: str | None = None

    def with_method(self, method_id: str) -> Language:
        return replace(self, method_id=method_id)

    def to_dict(self) -> dict:
        return {
            "langcode": self.langcode,
            "name": self.name,
            "direction": self.direction.value,
            "weight": self.weight,
            "default": self.default,
            "locked": self.locked,
            "method_id": self.method_id,
        }


def locked_languages(start_weight: int = 0) -> list[Language]:
    """The system languages appended to every language list."""
    return [
        Language(
            langcode=langcode,
            name=LANGUAGE_NAMES[langcode],
            weight=start_weight + offset,
            locked=True,
        )
        for offset, langcode in enumerate((LANGCODE_NOT_SPECIFIED, LANGCODE_NOT_APPLICABLE))
    ]


class LanguageList:
    """Ordered, read-only set of the active languages.

    Iteration order is (weight, name).  Locked languages take part in
    lookups and negotiation but are left out of ``configurable()``.
    """

    def __init__(self, languages: Iterable[Language]) -> None:
        ordered = sorted(languages, key=lambda language: (language.weight, language.name))
        defaults = [language.langcode for language in ordered if language.default]
        if len(defaults) > 1:
            raise ValidationError(
                "Only one language can be the default",
                field="default",
                details={"defaults": defaults},
            )
        self._languages: dict[str, Language] = {language.langcode: language for language in ordered}
        self._default = self._languages[defaults[0]] if defaults else None

    @classmethod
    def from_langcodes(cls, langcodes: list[str], default_langcode: str) -> LanguageList:
        """Build a list from plain codes, appending the locked system languages."""
        if default_langcode not in langcodes:
            raise ValidationError(
                f"Default language '{default_langcode}' is not a supported language",
                field="default_language",
            )
        languages = [
            Language(
                langcode=langcode,
                name=LANGUAGE_NAMES.get(langcode, langcode),
                direction=Direction.RTL if is_rtl_locale(langcode) else Direction.LTR,
                weight=weight,
                default=langcode == default_langcode,
            )
            for weight, langcode in enumerate(langcodes)
        ]
        return cls(languages + locked_languages(len(languages)))

    def __iter__(self) -> Iterator[Language]:
        return iter(self._languages.values())

    def __len__(self) -> int:
        return len(self._languages)

    def __contains__(self, langcode: object) -> bool:
        return langcode in self._languages

    def get(self, langcode: str | None) -> Language | None:
        if langcode is None:
            return None
        return self._languages.get(langcode)

    @property
    def default(self) -> Language:
        if self._default is None:
            raise ValidationError("No default language configured", field="default")
        return self._default

    def configurable(self) -> list[Language]:
        return [language for language in self if not language.locked]

    def codes(self, include_locked: bool = True) -> list[str]:
        return [language.langcode for language in self if include_locked or not language.locked]

    def is_multilingual(self) -> bool:
        return len(self.configurable()) > 1
