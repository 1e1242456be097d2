"""
Built-in negotiation method tests

Test classes:
    TestUrlMethod         : prefix and domain detection
    TestSessionMethod     : query parameter and session storage
    TestUserMethod        : authenticated user preference
    TestBrowserMethod     : Accept-Language detection
    TestUrlFallbackMethod : URL language when the URL has none
    TestBuiltinDescriptors: registration metadata
"""

from __future__ import annotations

# ── helpers ────────────────────────────────────────────────────────────────────


def _negotiate(negotiator, method_id, **request):
    context = negotiator.new_context(**request)
    strategy = negotiator.methods.get(method_id).strategy
    return strategy.negotiate(context.language_list, context), context


# ══════════════════════════════════════════════════════════════════════════════
# 1. TestUrlMethod
# ══════════════════════════════════════════════════════════════════════════════


class TestUrlMethod:
    def test_prefix(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-url", path="/de/node")
        assert langcode == "de"

    def test_no_prefix_declines(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-url", path="/node")
        assert langcode is None

    def test_prefix_mode_consults_configured_domains(self, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(domains={"de": "de.example.com"}))
        langcode, _ = _negotiate(negotiator, "language-url", path="/node", host="de.example.com")
        assert langcode == "de"

    def test_domain_mode_ignores_prefix(self, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(part="domain", domains={"en": "example.com", "fr": "fr.example.com"}))
        langcode, _ = _negotiate(negotiator, "language-url", path="/de/node", host="fr.example.com")
        assert langcode == "fr"

    def test_domain_mode_unknown_host(self, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(part="domain", domains={"en": "example.com"}))
        langcode, _ = _negotiate(negotiator, "language-url", path="/node", host="example.net")
        assert langcode is None


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestSessionMethod
# ══════════════════════════════════════════════════════════════════════════════


class TestSessionMethod:
    def test_query_parameter(self, negotiator):
        langcode, context = _negotiate(negotiator, "language-session", query={"language": "fr"})
        assert langcode == "fr"
        assert context.session == {}

    def test_authenticated_choice_is_remembered(self, negotiator):
        from langneg.i18n.context import UserContext

        session = {}
        langcode, _ = _negotiate(
            negotiator,
            "language-session",
            query={"language": "fr"},
            session=session,
            user=UserContext(authenticated=True),
        )
        assert langcode == "fr"
        assert session == {"language": "fr"}

    def test_session_value_used_without_parameter(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-session", session={"language": "de"})
        assert langcode == "de"

    def test_invalid_parameter_falls_back_to_session(self, negotiator):
        langcode, _ = _negotiate(
            negotiator,
            "language-session",
            query={"language": "xx"},
            session={"language": "de"},
        )
        assert langcode == "de"

    def test_custom_parameter_name(self, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(session_param="lang"))
        langcode, _ = _negotiate(negotiator, "language-session", query={"lang": "fr", "language": "de"})
        assert langcode == "fr"


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestUserMethod
# ══════════════════════════════════════════════════════════════════════════════


class TestUserMethod:
    def test_anonymous_declines(self, negotiator):
        from langneg.i18n.context import UserContext

        user = UserContext(preferred_langcode="fr")
        langcode, _ = _negotiate(negotiator, "language-user", user=user)
        assert langcode is None

    def test_inactive_preference_declines(self, negotiator):
        from langneg.i18n.context import UserContext

        user = UserContext(authenticated=True, preferred_langcode="ja")
        langcode, _ = _negotiate(negotiator, "language-user", user=user)
        assert langcode is None


# ══════════════════════════════════════════════════════════════════════════════
# 4. TestBrowserMethod
# ══════════════════════════════════════════════════════════════════════════════


class TestBrowserMethod:
    def test_accept_language(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-browser", headers={"accept-language": "de-AT,fr;q=0.5"})
        assert langcode == "de"

    def test_locked_languages_never_match(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-browser", headers={"Accept-Language": "und,zxx"})
        assert langcode is None

    def test_missing_header(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-browser")
        assert langcode is None


# ══════════════════════════════════════════════════════════════════════════════
# 5. TestUrlFallbackMethod
# ══════════════════════════════════════════════════════════════════════════════


class TestUrlFallbackMethod:
    def test_default_without_prefix(self, negotiator):
        langcode, _ = _negotiate(negotiator, "language-url-fallback", path="/node", headers={"Accept-Language": "de"})
        assert langcode == "en"

    def test_default_with_prefix_uses_interface_language(self, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(prefixes={"en": "en", "fr": "fr", "de": "de"}))
        langcode, _ = _negotiate(negotiator, "language-url-fallback", path="/node", headers={"Accept-Language": "de"})
        assert langcode == "de"

    def test_url_type_uses_interface_language_when_default_prefixed(self, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(prefixes={"en": "en", "fr": "fr", "de": "de"}))
        context = negotiator.new_context(path="/node", headers={"Accept-Language": "fr"})
        language = negotiator.initialize("language_url", context)
        assert (language.langcode, language.method_id) == ("fr", "language-url-fallback")


# ══════════════════════════════════════════════════════════════════════════════
# 6. TestBuiltinDescriptors
# ══════════════════════════════════════════════════════════════════════════════


class TestBuiltinDescriptors:
    def test_weights(self):
        from langneg.i18n.builtin_methods import builtin_methods

        weights = {descriptor.method_id: descriptor.weight for descriptor in builtin_methods()}
        assert weights == {
            "language-url": -8,
            "language-session": -6,
            "language-user": -4,
            "language-browser": -2,
            "language-interface": 8,
            "language-url-fallback": 8,
        }

    def test_only_browser_is_cache_restricted(self):
        from langneg.i18n.builtin_methods import builtin_methods
        from langneg.i18n.methods import CachePolicy

        restricted = [d.method_id for d in builtin_methods() if d.cache is not CachePolicy.NONE]
        assert restricted == ["language-browser"]

    def test_provider(self):
        from langneg.i18n.builtin_methods import builtin_methods

        assert {descriptor.provider for descriptor in builtin_methods("core")} == {"core"}

    def test_session_advertises_switch_and_rewrite(self):
        from langneg.i18n.builtin_methods import builtin_methods

        session = next(d for d in builtin_methods() if d.method_id == "language-session")
        assert session.callbacks == ("negotiation", "language_switch", "url_rewrite")
