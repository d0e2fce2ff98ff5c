from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple, Callable, Iterator
import hashlib
import json

from config import DEFAULT_RECT

Rect = Tuple[float, float, float, float]

CATALOG_HASH_LEN = 16


class FieldKind(Enum):
    TEXT = "text"
    MULTILINE_TEXT = "multiline_text"
    CHECKBOX = "checkbox"
    COMBOBOX = "combobox"
    RADIO_BUTTON = "radio"
    UNKNOWN = "unknown"


@dataclass
class FieldDescriptor:
    """A single terminal form field as seen by the binding and UI layers.

    ``name`` is the fully qualified name (ancestor names joined with ``.``).
    ``options`` holds display strings in /Opt order and is only set for
    combo boxes; ``export_values`` runs parallel to it.
    """
    name: str
    kind: FieldKind = FieldKind.UNKNOWN
    value: str = ""
    bounds: Rect = DEFAULT_RECT
    options: Optional[List[str]] = None
    export_values: Optional[List[str]] = None
    read_only: bool = False
    required: bool = False
    on_change: Optional[Callable[[str], None]] = field(default=None, repr=False, compare=False)

    def to_public(self) -> Dict[str, Any]:  # stable outward shape
        return {
            "name": self.name,
            "kind": self.kind.value,
            "value": self.value,
            "bounds": list(self.bounds),
            **({"options": list(self.options)} if self.options is not None else {}),
            **({"read_only": True} if self.read_only else {}),
            **({"required": True} if self.required else {}),
        }


@dataclass
class FieldCatalog:
    fields: List[FieldDescriptor] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def values(self) -> Dict[str, str]:
        return {f.name: f.value for f in self.fields}

    @property
    def catalog_hash(self) -> str:
        canonical = sorted(self.names())
        raw = json.dumps(canonical, separators=(",", ":"))
        return hashlib.sha256(raw.encode()).hexdigest()[:CATALOG_HASH_LEN]

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "field_count": len(self.fields),
            "catalog_hash": self.catalog_hash,
            "fields": [f.to_public() for f in self.fields],
            "metadata": self.metadata,
        }
