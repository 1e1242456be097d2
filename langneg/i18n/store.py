"""
Negotiation settings storage

SettingsStore is the persistence seam for negotiation configuration.  It
deals only in plain JSON-compatible data; normalisation against the method
and type registries happens in NegotiationSettings.

Document shape (JsonFileSettingsStore):
{
    "language_types": {"language_interface": true, "language_content": false},
    "negotiation": {
        "language_interface": {
            "language-url": {"callbacks": [...], "file": "...", "cache": "none"},
            ...
        }
    },
    "url": {"part": "prefix", "prefixes": {...}, "domains": {...}}
}
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from langneg.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _empty_document() -> dict[str, Any]:
    return {"language_types": None, "negotiation": {}, "url": None}


def _checked_document(loaded: dict[str, Any], source: object) -> dict[str, Any]:
    """Keep the sections of a loaded document that have the expected shape."""
    document = _empty_document()
    types = loaded.get("language_types")
    if isinstance(types, dict):
        document["language_types"] = types
    elif types is not None:
        logger.warning("Ignoring malformed language_types in %s", source)

    negotiation = loaded.get("negotiation")
    if isinstance(negotiation, dict):
        for type_id, records in negotiation.items():
            if isinstance(records, dict):
                document["negotiation"][type_id] = records
            else:
                logger.warning("Ignoring malformed negotiation settings for %s in %s", type_id, source)
    elif negotiation is not None:
        logger.warning("Ignoring malformed negotiation section in %s", source)

    url = loaded.get("url")
    if isinstance(url, dict):
        document["url"] = url
    elif url is not None:
        logger.warning("Ignoring malformed url section in %s", source)
    return document


class SettingsStore(ABC):
    """Abstract storage for negotiation configuration."""

    @abstractmethod
    def load_types(self) -> dict[str, bool] | None:
        """Stored type record, or None if never saved."""

    @abstractmethod
    def save_types(self, types: dict[str, bool]) -> None: ...

    @abstractmethod
    def load_negotiation(self, type_id: str) -> dict[str, dict[str, Any]]:
        """Ordered mapping method ID → method record for a type."""

    @abstractmethod
    def save_negotiation(self, type_id: str, records: dict[str, dict[str, Any]]) -> None: ...

    @abstractmethod
    def negotiation_types(self) -> list[str]:
        """Type IDs that have a stored method order."""

    @abstractmethod
    def load_url_config(self) -> dict[str, Any] | None: ...

    @abstractmethod
    def save_url_config(self, config: dict[str, Any]) -> None: ...


class InMemorySettingsStore(SettingsStore):
    """Process-local store.  Every load returns a private copy."""

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self._document = _checked_document(copy.deepcopy(document or {}), "initial document")

    def load_types(self) -> dict[str, bool] | None:
        return copy.deepcopy(self._document["language_types"])

    def save_types(self, types: dict[str, bool]) -> None:
        self._document["language_types"] = dict(types)

    def load_negotiation(self, type_id: str) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._document["negotiation"].get(type_id, {}))

    def save_negotiation(self, type_id: str, records: dict[str, dict[str, Any]]) -> None:
        self._document["negotiation"][type_id] = copy.deepcopy(records)

    def negotiation_types(self) -> list[str]:
        return list(self._document["negotiation"])

    def load_url_config(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._document["url"])

    def save_url_config(self, config: dict[str, Any]) -> None:
        self._document["url"] = copy.deepcopy(config)


class JsonFileSettingsStore(InMemorySettingsStore):
    """
    Store backed by a single JSON file.

    The file is re-read when its modification time changes, so several
    worker processes sharing one file see each other's writes.  Writes go
    to a temporary file that replaces the original, so readers never see a
    half-written document.  Last write wins.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._mtime: float | None = None

    def _refresh(self) -> None:
        try:
            mtime = self.path.stat().st_mtime
        except (FileNotFoundError, NotADirectoryError):
            return
        if mtime == self._mtime:
            return
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read negotiation config %s: %s", self.path, exc)
            return
        if not isinstance(loaded, dict):
            logger.warning("Negotiation config %s is not a JSON object", self.path)
            loaded = {}
        self._document = _checked_document(loaded, self.path)
        self._mtime = mtime

    def _flush(self) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._document, handle, indent=2, ensure_ascii=False)
            Path(tmp_name).replace(self.path)
            tmp_name = None
            self._mtime = self.path.stat().st_mtime
        except (OSError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Failed to write negotiation config: {exc}", operation="save") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def load_types(self) -> dict[str, bool] | None:
        self._refresh()
        return super().load_types()

    def save_types(self, types: dict[str, bool]) -> None:
        self._refresh()
        super().save_types(types)
        self._flush()

    def load_negotiation(self, type_id: str) -> dict[str, dict[str, Any]]:
        self._refresh()
        return super().load_negotiation(type_id)

    def save_negotiation(self, type_id: str, records: dict[str, dict[str, Any]]) -> None:
        self._refresh()
        super().save_negotiation(type_id, records)
        self._flush()

    def negotiation_types(self) -> list[str]:
        self._refresh()
        return super().negotiation_types()

    def load_url_config(self) -> dict[str, Any] | None:
        self._refresh()
        return super().load_url_config()

    def save_url_config(self, config: dict[str, Any]) -> None:
        self._refresh()
        super().save_url_config(config)
        self._flush()
