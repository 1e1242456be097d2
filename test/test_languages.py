"""
Language list tests

Test classes:
    TestLanguage       : the immutable Language record
    TestLanguageList   : ordering, lookups, default, locked languages
"""

from __future__ import annotations

import dataclasses

import pytest

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestLanguage
# ══════════════════════════════════════════════════════════════════════════════


class TestLanguage:
    def test_language_is_frozen(self):
        from langneg.i18n.languages import Language

        language = Language(langcode="en", name="English")
        with pytest.raises(dataclasses.FrozenInstanceError):
            language.langcode = "fr"  # type: ignore[misc]

    def test_with_method_returns_tagged_copy(self):
        from langneg.i18n.languages import Language

        language = Language(langcode="en", name="English")
        tagged = language.with_method("language-url")
        assert tagged.method_id == "language-url"
        assert language.method_id is None
        assert tagged.langcode == "en"

    def test_to_dict(self):
        from langneg.i18n.languages import Direction, Language

        data = Language(langcode="ar", name="Arabic", direction=Direction.RTL).to_dict()
        assert data["direction"] == "rtl"
        assert data["method_id"] is None


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestLanguageList
# ══════════════════════════════════════════════════════════════════════════════


class TestLanguageList:
    def test_from_langcodes_appends_locked_languages(self, language_list):
        assert language_list.codes() == ["en", "fr", "de", "und", "zxx"]

    def test_locked_languages_are_not_configurable(self, language_list):
        assert language_list.codes(include_locked=False) == ["en", "fr", "de"]
        assert all(not language.locked for language in language_list.configurable())

    def test_locked_languages_take_part_in_lookups(self, language_list):
        assert "und" in language_list
        assert language_list.get("zxx").locked is True

    def test_default(self, language_list):
        assert language_list.default.langcode == "en"

    def test_get_unknown_returns_none(self, language_list):
        assert language_list.get("xx") is None
        assert language_list.get(None) is None

    def test_ordered_by_weight_then_name(self):
        from langneg.i18n.languages import Language, LanguageList

        languages = LanguageList(
            [
                Language(langcode="fr", name="French", weight=1),
                Language(langcode="de", name="German", weight=0),
                Language(langcode="en", name="English", weight=0, default=True),
            ]
        )
        assert languages.codes() == ["en", "de", "fr"]

    def test_rtl_direction_detected(self):
        from langneg.i18n.languages import Direction, LanguageList

        languages = LanguageList.from_langcodes(["en", "ar"], "en")
        assert languages.get("ar").direction is Direction.RTL

    def test_two_defaults_rejected(self):
        from langneg.exceptions import ValidationError
        from langneg.i18n.languages import Language, LanguageList

        with pytest.raises(ValidationError):
            LanguageList(
                [
                    Language(langcode="en", name="English", default=True),
                    Language(langcode="fr", name="French", default=True),
                ]
            )

    def test_default_must_be_supported(self):
        from langneg.exceptions import ValidationError
        from langneg.i18n.languages import LanguageList

        with pytest.raises(ValidationError):
            LanguageList.from_langcodes(["en", "fr"], "de")

    def test_missing_default_raises_on_access(self):
        from langneg.exceptions import ValidationError
        from langneg.i18n.languages import Language, LanguageList

        languages = LanguageList([Language(langcode="en", name="English")])
        with pytest.raises(ValidationError):
            _ = languages.default

    def test_multilingual(self, language_list):
        assert language_list.is_multilingual() is True

    def test_locked_languages_do_not_make_a_site_multilingual(self):
        from langneg.i18n.languages import LanguageList

        assert LanguageList.from_langcodes(["en"], "en").is_multilingual() is False
