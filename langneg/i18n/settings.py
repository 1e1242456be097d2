"""
Negotiation settings, the per-type ordered method list

Only order is stored, never weights.  Each stored entry keeps the parts of
the method descriptor the pipeline needs at request time (capabilities,
implementing module, cache policy).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from langneg.i18n.methods import CAPABILITY_NEGOTIATION, METHOD_DEFAULT, CachePolicy

if TYPE_CHECKING:
    from langneg.i18n.methods import MethodDescriptor, MethodRegistry
    from langneg.i18n.store import SettingsStore
    from langneg.i18n.types import TypeRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodSettings:
    """Stored record for one method within a type's order."""

    callbacks: tuple[str, ...] = (CAPABILITY_NEGOTIATION,)
    file: str | None = None
    cache: CachePolicy = CachePolicy.NONE

    @classmethod
    def from_descriptor(cls, descriptor: MethodDescriptor) -> MethodSettings:
        return cls(callbacks=descriptor.callbacks, file=descriptor.file, cache=descriptor.cache)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MethodSettings:
        try:
            cache = CachePolicy(data.get("cache", CachePolicy.NONE.value))
        except ValueError:
            cache = CachePolicy.NONE
        callbacks = data.get("callbacks", ())
        if not isinstance(callbacks, (list, tuple)):
            callbacks = ()
        return cls(
            callbacks=tuple(callbacks),
            file=data.get("file"),
            cache=cache,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"callbacks": list(self.callbacks), "cache": self.cache.value}
        if self.file:
            data["file"] = self.file
        return data


class NegotiationSettings:
    """Reads and normalises the stored method order of each language type."""

    def __init__(self, store: SettingsStore, methods: MethodRegistry, types: TypeRegistry) -> None:
        self.store = store
        self.methods = methods
        self.types = types

    def _load(self, type_id: str) -> Mapping[str, Any]:
        records = self.store.load_negotiation(type_id)
        if not isinstance(records, Mapping):
            logger.warning("Ignoring malformed negotiation settings for %s", type_id)
            return {}
        return records

    def get_records(self, type_id: str) -> dict[str, MethodSettings]:
        return {
            method_id: MethodSettings.from_dict(record)
            for method_id, record in self._load(type_id).items()
            if isinstance(record, Mapping)
        }

    def get(self, type_id: str) -> list[str]:
        """Return the method IDs enabled for a type, in evaluation order."""
        return list(self._load(type_id))

    def first(self, type_id: str) -> str:
        """Return the first method for a type, or the default sentinel."""
        order = self.get(type_id)
        return order[0] if order else METHOD_DEFAULT

    def is_enabled(self, method_id: str, type_id: str | None = None) -> bool:
        """Check whether a method is enabled for a type, or any configurable type."""
        type_ids = [type_id] if type_id else self.types.configurable_types()
        return any(method_id in self._load(t) for t in type_ids)

    def set(self, type_id: str, method_weights: Mapping[str, float]) -> list[str]:
        """Store a type's method order.

        Methods are sorted by weight; ties keep the input mapping's order.
        Unknown methods and methods not applicable to the type are dropped.
        A method with no declared types applies to every configurable type,
        computed from the live type definitions.

        Returns:
            The stored order.
        """
        known = self.methods.list_methods()
        configurable = self.types.configurable_types(stored=False)
        records: dict[str, dict[str, Any]] = {}
        for method_id, _weight in sorted(method_weights.items(), key=lambda item: item[1]):
            descriptor = known.get(method_id)
            if descriptor is None:
                logger.debug("Dropping unknown negotiation method %s for %s", method_id, type_id)
                continue
            if not descriptor.applies_to(type_id, configurable):
                logger.debug("Method %s does not apply to %s", method_id, type_id)
                continue
            records[method_id] = MethodSettings.from_descriptor(descriptor).to_dict()
        self.store.save_negotiation(type_id, records)
        return list(records)
