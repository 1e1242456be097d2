"""
Middleware tests

Test classes:
    TestRequestUser           : principal read from request.state
    TestLanguageMiddleware    : prefix stripping rules
    TestStructuredLogging     : JSON formatter and request ID filter
"""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace

API = "/api/v1/i18n"

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestRequestUser
# ══════════════════════════════════════════════════════════════════════════════


class TestRequestUser:
    def test_anonymous_without_user(self):
        from langneg.middleware.language import _request_user

        user = _request_user(SimpleNamespace(state=SimpleNamespace()))
        assert user.authenticated is False

    def test_user_object_is_authenticated(self):
        from langneg.middleware.language import _request_user

        principal = SimpleNamespace(id=3, preferred_langcode="fr")
        user = _request_user(SimpleNamespace(state=SimpleNamespace(user=principal)))
        assert (user.authenticated, user.user_id, user.preferred_langcode) == (True, 3, "fr")

    def test_user_context_passed_through(self):
        from langneg.i18n.context import UserContext
        from langneg.middleware.language import _request_user

        context_user = UserContext(authenticated=True, user_id=9)
        assert _request_user(SimpleNamespace(state=SimpleNamespace(user=context_user))) is context_user


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestLanguageMiddleware
# ══════════════════════════════════════════════════════════════════════════════


class TestLanguageMiddleware:
    def test_prefix_stripped_before_routing(self, client):
        assert client.get(f"/de{API}/languages").status_code == 200

    def test_domain_mode_does_not_strip(self, client, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(part="domain", domains={"en": "testserver", "fr": "fr.testserver"}))
        assert client.get(f"/fr{API}/languages").status_code == 404

    def test_domain_mode_negotiates_from_host(self, client, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(part="domain", domains={"en": "example.com", "fr": "fr.example.com"}))
        response = client.get(f"http://fr.example.com{API}/current")
        assert response.json()["language_url"]["langcode"] == "fr"
        assert response.headers["content-language"] == "fr"

    def test_path_untouched_when_language_came_from_domain(self, client, negotiator):
        from langneg.i18n.url import UrlConfig

        negotiator.save_url_config(UrlConfig(domains={"de": "de.example.com"}))
        response = client.get(f"http://de.example.com{API}/current")
        assert response.status_code == 200
        assert response.json()["language_url"]["langcode"] == "de"

    def test_unknown_prefix_not_stripped(self, client):
        assert client.get(f"/xx{API}/languages").status_code == 404


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestStructuredLogging
# ══════════════════════════════════════════════════════════════════════════════


class TestStructuredLogging:
    def _record(self, **extra):
        record = logging.LogRecord("langneg.access", logging.INFO, __file__, 1, "GET /fr/node - 200", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formatter_emits_json(self):
        from langneg.middleware.logging import StructuredFormatter

        data = json.loads(StructuredFormatter().format(self._record(request_id="r1", status_code=200)))
        assert data["message"] == "GET /fr/node - 200"
        assert data["level"] == "INFO"
        assert data["request_id"] == "r1"
        assert data["status_code"] == 200

    def test_formatter_includes_langcode(self):
        from langneg.middleware.logging import StructuredFormatter

        data = json.loads(StructuredFormatter().format(self._record(langcode="fr")))
        assert data["langcode"] == "fr"

    def test_request_id_filter(self):
        from langneg.middleware.logging import RequestIdFilter, request_id_var

        token = request_id_var.set("req-42")
        try:
            record = self._record()
            assert RequestIdFilter().filter(record) is True
            assert record.request_id == "req-42"
        finally:
            request_id_var.reset(token)

    def test_setup_configures_package_logger(self):
        from langneg.middleware.logging import setup_structured_logging

        setup_structured_logging(log_level="DEBUG", json_format=False)
        assert logging.getLogger("langneg").level == logging.DEBUG
        assert logging.getLogger("uvicorn").level == logging.WARNING
        setup_structured_logging(log_level="INFO")
