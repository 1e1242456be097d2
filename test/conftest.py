"""
Pytest configuration and fixtures for language negotiation tests
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from langneg.i18n.languages import LanguageList
from langneg.i18n.negotiator import LanguageNegotiator
from langneg.i18n.store import InMemorySettingsStore
from langneg.plugins.locale_plugin import LocalePlugin
from langneg.plugins.registry import PluginRegistry


@pytest.fixture
def language_list() -> LanguageList:
    """English (default), French and German plus the locked system languages"""
    return LanguageList.from_langcodes(["en", "fr", "de"], "en")


@pytest.fixture
def plugins() -> PluginRegistry:
    """A private registry holding only the core locale plugin"""
    registry = PluginRegistry()
    registry.register(LocalePlugin())
    return registry


@pytest.fixture
def store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def negotiator(plugins, store, language_list) -> LanguageNegotiator:
    """Negotiator with stored settings normalised, as after application startup"""
    negotiator = LanguageNegotiator(plugins=plugins, store=store, language_list=language_list)
    negotiator.rebuild()
    return negotiator


@pytest.fixture
def client(negotiator):
    """Test client for an application wired to the in-memory negotiator"""
    from langneg.main import create_app

    with TestClient(create_app(negotiator=negotiator)) as test_client:
        yield test_client
