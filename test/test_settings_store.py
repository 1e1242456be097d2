"""
Settings store tests

Test classes:
    TestInMemorySettingsStore : private copies, empty defaults
    TestJsonFileSettingsStore : persistence, shared files, atomic writes
"""

from __future__ import annotations

import json
import os

import pytest

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestInMemorySettingsStore
# ══════════════════════════════════════════════════════════════════════════════


class TestInMemorySettingsStore:
    def test_empty_store(self):
        from langneg.i18n.store import InMemorySettingsStore

        store = InMemorySettingsStore()
        assert store.load_types() is None
        assert store.load_negotiation("language_interface") == {}
        assert store.load_url_config() is None

    def test_loads_are_private_copies(self):
        from langneg.i18n.store import InMemorySettingsStore

        store = InMemorySettingsStore()
        store.save_negotiation("language_interface", {"language-url": {"callbacks": ["negotiation"]}})
        loaded = store.load_negotiation("language_interface")
        loaded["language-url"]["callbacks"].append("tampered")
        assert store.load_negotiation("language_interface")["language-url"]["callbacks"] == ["negotiation"]

    def test_saves_are_copied(self):
        from langneg.i18n.store import InMemorySettingsStore

        store = InMemorySettingsStore()
        config = {"part": "prefix", "prefixes": {"en": ""}}
        store.save_url_config(config)
        config["prefixes"]["en"] = "en"
        assert store.load_url_config()["prefixes"] == {"en": ""}

    def test_initial_document(self):
        from langneg.i18n.store import InMemorySettingsStore

        store = InMemorySettingsStore({"language_types": {"language_interface": True}})
        assert store.load_types() == {"language_interface": True}

    def test_malformed_initial_document(self):
        from langneg.i18n.store import InMemorySettingsStore

        store = InMemorySettingsStore({"language_types": "all", "negotiation": {"language_interface": None}})
        assert store.load_types() is None
        assert store.negotiation_types() == []

    def test_order_is_preserved(self):
        from langneg.i18n.store import InMemorySettingsStore

        store = InMemorySettingsStore()
        store.save_negotiation("language_interface", {"b": {}, "a": {}, "c": {}})
        assert list(store.load_negotiation("language_interface")) == ["b", "a", "c"]


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestJsonFileSettingsStore
# ══════════════════════════════════════════════════════════════════════════════


class TestJsonFileSettingsStore:
    def test_missing_file_is_empty(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        store = JsonFileSettingsStore(tmp_path / "negotiation.json")
        assert store.load_types() is None

    def test_writes_document(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "data" / "negotiation.json"
        store = JsonFileSettingsStore(path)
        store.save_types({"language_interface": True})

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["language_types"] == {"language_interface": True}
        assert document["negotiation"] == {}

    def test_survives_restart(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "negotiation.json"
        JsonFileSettingsStore(path).save_negotiation("language_interface", {"language-url": {}, "language-user": {}})

        reopened = JsonFileSettingsStore(path)
        assert list(reopened.load_negotiation("language_interface")) == ["language-url", "language-user"]

    def test_sees_writes_from_another_store(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "negotiation.json"
        first = JsonFileSettingsStore(path)
        second = JsonFileSettingsStore(path)
        first.save_url_config({"part": "prefix"})
        assert second.load_url_config() == {"part": "prefix"}

        second.save_url_config({"part": "domain"})
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + 5))
        assert first.load_url_config() == {"part": "domain"}

    def test_unreadable_file_keeps_last_good_document(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "negotiation.json"
        store = JsonFileSettingsStore(path)
        store.save_types({"language_interface": True})

        path.write_text("{not json", encoding="utf-8")
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + 5))
        assert store.load_types() == {"language_interface": True}

    @pytest.mark.parametrize(
        "document",
        [
            {"negotiation": {"language_interface": ["language-url"]}},
            {"negotiation": None},
            {"negotiation": ["language-url"]},
            {"language_types": ["language_interface"]},
            {"url": "prefix"},
            ["not", "an", "object"],
        ],
    )
    def test_malformed_sections_fall_back_to_defaults(self, tmp_path, plugins, language_list, document):
        from langneg.i18n.negotiator import LanguageNegotiator
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "negotiation.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        store = JsonFileSettingsStore(path)
        assert store.load_negotiation("language_interface") == {}

        negotiator = LanguageNegotiator(plugins, store, language_list)
        context = negotiator.new_context(path="/de/node")
        assert negotiator.initialize("language_interface", context).langcode == "en"
        assert negotiator.initialize_all(negotiator.new_context(path="/de/node"))["language_url"].langcode == "en"

        negotiator.rebuild()
        assert negotiator.initialize("language_interface", negotiator.new_context(path="/de/node")).langcode == "de"

    def test_well_formed_sections_survive_a_malformed_neighbour(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "negotiation.json"
        document = {
            "language_types": {"language_interface": True},
            "negotiation": {"language_interface": {"language-user": {}}, "language_content": "broken"},
            "url": 42,
        }
        path.write_text(json.dumps(document), encoding="utf-8")

        store = JsonFileSettingsStore(path)
        assert store.load_types() == {"language_interface": True}
        assert list(store.load_negotiation("language_interface")) == ["language-user"]
        assert store.load_negotiation("language_content") == {}
        assert store.negotiation_types() == ["language_interface"]
        assert store.load_url_config() is None

    def test_failed_write_removes_temporary_file(self, tmp_path):
        from langneg.exceptions import ConfigurationError
        from langneg.i18n.store import JsonFileSettingsStore

        store = JsonFileSettingsStore(tmp_path / "negotiation.json")
        with pytest.raises(ConfigurationError):
            store.save_url_config({"part": object()})
        assert list(tmp_path.iterdir()) == []

    def test_no_temporary_files_left(self, tmp_path):
        from langneg.i18n.store import JsonFileSettingsStore

        store = JsonFileSettingsStore(tmp_path / "negotiation.json")
        store.save_types({"language_interface": True})
        store.save_url_config({"part": "prefix"})
        assert [p.name for p in tmp_path.iterdir()] == ["negotiation.json"]

    def test_write_failure_raises_configuration_error(self, tmp_path):
        from langneg.exceptions import ConfigurationError
        from langneg.i18n.store import JsonFileSettingsStore

        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileSettingsStore(blocker / "negotiation.json")
        with pytest.raises(ConfigurationError):
            store.save_types({"language_interface": True})

    def test_negotiator_on_file_store(self, tmp_path, plugins, language_list):
        from langneg.i18n.negotiator import LanguageNegotiator
        from langneg.i18n.store import JsonFileSettingsStore

        path = tmp_path / "negotiation.json"
        LanguageNegotiator(plugins, JsonFileSettingsStore(path), language_list).rebuild()

        negotiator = LanguageNegotiator(plugins, JsonFileSettingsStore(path), language_list)
        assert negotiator.settings.get("language_url") == ["language-url", "language-url-fallback"]
        context = negotiator.new_context(path="/de/node")
        assert negotiator.initialize("language_interface", context).langcode == "de"
