from __future__ import annotations
"""Adapters between a FieldCatalog and the application's record objects.

The core only ever talks to a record through ``get(name)`` and
``set(name, value)``; how a record maps field names onto its own attributes
is the collaborator's business.
"""
from typing import Any, Dict, Mapping, Optional, Protocol

from .codec import bind_value
from .name_index import normalize_name
from .schema import FieldCatalog


class FieldValueSource(Protocol):
    def get(self, name: str) -> Optional[Any]: ...


class FieldValueSink(Protocol):
    def set(self, name: str, value: str) -> None: ...


class DictBinding:
    """Dict-backed record. Keys match exactly, then case-insensitively, then normalized."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})

    def _key_for(self, name: str) -> Optional[str]:
        if name in self.data:
            return name
        folded = name.casefold()
        for key in self.data:
            if key.casefold() == folded:
                return key
        normalized = normalize_name(name)
        if not normalized:
            return None
        for key in self.data:
            if normalize_name(key) == normalized:
                return key
        return None

    def get(self, name: str) -> Optional[Any]:
        key = self._key_for(name)
        return self.data[key] if key is not None else None

    def set(self, name: str, value: str) -> None:
        key = self._key_for(name)
        self.data[key if key is not None else name] = value


def bind_from_source(catalog: FieldCatalog, source: FieldValueSource) -> Dict[str, str]:
    """Pull values for every field the source knows about into the catalog.

    Returns the bound ``name -> text`` map; fields the source has no value for
    are left untouched and omitted.
    """
    bound: Dict[str, str] = {}
    for descriptor in catalog:
        raw = source.get(descriptor.name)
        if raw is None:
            continue
        bound[descriptor.name] = bind_value(descriptor, raw)
    return bound


def read_into(catalog: FieldCatalog, sink: FieldValueSink) -> int:
    count = 0
    for descriptor in catalog:
        sink.set(descriptor.name, descriptor.value)
        count += 1
    return count


def to_value_map(catalog: FieldCatalog) -> Dict[str, str]:
    return {d.name: d.value for d in catalog if d.value}
