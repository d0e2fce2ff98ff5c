from __future__ import annotations
"""Lookup of caller-supplied field names against a walked field list.

Four successively looser tiers: exact, case-folded, alphanumeric-normalized,
and final path segment. Each tier is first-wins, so duplicate suffixes
resolve deterministically to the earliest field in walk order.
"""
from typing import Dict, Iterable, Optional, Tuple

from config import NAME_SEPARATOR
from .extract import FieldEntry

TIERS = ("exact", "casefold", "normalized", "segment")


def normalize_name(name: str) -> str:
    return "".join(ch for ch in name if ch.isalnum()).casefold()


def last_segment(name: str) -> str:
    return name.rsplit(NAME_SEPARATOR, 1)[-1]


class NameIndex:
    def __init__(self):
        self._tiers: Dict[str, Dict[str, FieldEntry]] = {tier: {} for tier in TIERS}

    @classmethod
    def build(cls, entries: Iterable[FieldEntry]) -> "NameIndex":
        index = cls()
        for entry in entries:
            index.add(entry.descriptor.name, entry)
        return index

    def add(self, name: str, entry: FieldEntry):
        keys = {
            "exact": name,
            "casefold": name.casefold(),
            "normalized": normalize_name(name),
        }
        if NAME_SEPARATOR in name:
            keys["segment"] = last_segment(name).casefold()
        for tier, key in keys.items():
            if key:
                self._tiers[tier].setdefault(key, entry)

    def lookup_with_tier(self, name: str) -> Tuple[Optional[FieldEntry], Optional[str]]:
        if not name:
            return None, None
        candidates = (
            ("exact", name),
            ("casefold", name.casefold()),
            ("normalized", normalize_name(name)),
            ("segment", name.casefold()),
        )
        for tier, key in candidates:
            entry = self._tiers[tier].get(key) if key else None
            if entry is not None:
                return entry, tier
        return None, None

    def lookup(self, name: str) -> Optional[FieldEntry]:
        return self.lookup_with_tier(name)[0]

    def __len__(self) -> int:
        return len(self._tiers["exact"])

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None
