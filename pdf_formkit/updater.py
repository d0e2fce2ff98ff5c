from __future__ import annotations
"""Fallback apply loop: exact-name matching plus pypdf's structured form API.

apply_field_values(graph, values) returns an ApplyResult summary.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Mapping
import logging

from pypdf import PdfWriter

from .codec import clear_appearance, decode_value, write_value
from .extract import FieldEntry, walk_fields
from .graph import FormGraph
from .schema import FieldCatalog, FieldKind

logger = logging.getLogger(__name__)

_STRUCTURED_KINDS = (FieldKind.TEXT, FieldKind.MULTILINE_TEXT, FieldKind.COMBOBOX, FieldKind.UNKNOWN)


@dataclass
class ApplyResult:
    applied: Dict[str, str] = field(default_factory=dict)   # field name -> stored text
    matched: Dict[str, str] = field(default_factory=dict)   # requested name -> field name
    unknown_fields: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)    # field name -> error
    skipped_empty: List[str] = field(default_factory=list)
    strategy: str = "direct"
    catalog_hash: Optional[str] = None

    @property
    def success(self) -> bool:
        return bool(self.applied)

    def __bool__(self) -> bool:
        return self.success

    def to_summary(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "applied": dict(self.applied),
            "unknown_fields": list(self.unknown_fields),
            "failed": dict(self.failed),
            "skipped_empty": list(self.skipped_empty),
            "complete": not self.failed and not self.unknown_fields,
        }


def _structured_pass(writer: PdfWriter, values: Dict[str, str]):
    if not values:
        return
    for page in writer.pages:
        try:
            writer.update_page_form_field_values(page, values, auto_regenerate=False)
        except Exception as e:
            logger.debug("Structured update skipped a page: %s", e)
            continue


def apply_field_values(graph: FormGraph, values: Mapping[str, Any]) -> ApplyResult:
    """Re-walk the graph and apply ``values`` by exact field name.

    Text-like and choice values go through ``PdfWriter.update_page_form_field_values``
    so pypdf builds their appearance streams; fields it could not reach (not
    attached to any page) and button fields are written per kind.
    """
    result = ApplyResult(strategy="structured")
    entries = walk_fields(graph)
    by_name: Dict[str, FieldEntry] = {e.descriptor.name: e for e in entries}
    result.catalog_hash = FieldCatalog([e.descriptor for e in entries]).catalog_hash

    pending: Dict[str, str] = {}
    for key, value in values.items():
        if not isinstance(key, str):
            continue
        k = key.strip()
        if k not in by_name:
            result.unknown_fields.append(k)
            continue
        if value is None:
            continue
        pending[k] = str(value)

    structured = {k: v for k, v in pending.items() if by_name[k].descriptor.kind in _STRUCTURED_KINDS}
    if isinstance(graph.document, PdfWriter):
        _structured_pass(graph.document, structured)

    for k, v in pending.items():
        entry = by_name[k]
        kind = entry.descriptor.kind
        try:
            if k in structured and decode_value(graph, entry.node, kind) == v:
                # stale /AP from the source would otherwise hide the new /V
                clear_appearance(graph, entry.node)
                stored = v
            else:
                stored = write_value(graph, entry.node, kind, v)
        except Exception as e:
            logger.warning("Error applying value to field %r: %s", k, e)
            result.failed[k] = str(e)
            continue
        entry.descriptor.value = stored
        result.applied[k] = stored
        result.matched[k] = k
    return result
