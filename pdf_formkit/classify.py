from __future__ import annotations
"""Semantic kind classification for terminal form fields.

Typed widget hints from PyMuPDF win when available; otherwise the raw /FT tag
and the /Ff flag bits decide.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging
import os

import fitz  # PyMuPDF
from pypdf.generic import ArrayObject, DictionaryObject, IndirectObject

from config import MULTILINE_FLAG, RADIO_FLAG
from .graph import FormGraph, UnresolvedReferenceError, as_text
from .schema import FieldKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassHint:
    kind: FieldKind
    multiline: bool = False


_WIDGET_KINDS = {
    fitz.PDF_WIDGET_TYPE_TEXT: FieldKind.TEXT,
    fitz.PDF_WIDGET_TYPE_CHECKBOX: FieldKind.CHECKBOX,
    fitz.PDF_WIDGET_TYPE_RADIOBUTTON: FieldKind.RADIO_BUTTON,
    fitz.PDF_WIDGET_TYPE_COMBOBOX: FieldKind.COMBOBOX,
    fitz.PDF_WIDGET_TYPE_LISTBOX: FieldKind.COMBOBOX,
}


def load_class_hints(pdf_path: str) -> Dict[str, ClassHint]:
    """Read typed widget information for every named widget in the file.

    The first widget seen for a name wins. Any failure leaves the map partial
    (or empty), which simply routes classification to the flag path.
    """
    hints: Dict[str, ClassHint] = {}
    try:
        doc = fitz.open(pdf_path)
    except Exception as e:
        logger.debug("PyMuPDF could not open %s: %s", pdf_path, e)
        return hints
    try:
        for page in doc:
            for w in page.widgets() or []:
                name = w.field_name
                kind = _WIDGET_KINDS.get(w.field_type)
                if not name or kind is None or name in hints:
                    continue
                multiline = kind is FieldKind.TEXT and bool((w.field_flags or 0) & MULTILINE_FLAG)
                hints[name] = ClassHint(kind, multiline)
    except Exception as e:
        logger.debug("Widget scan of %s stopped early: %s", pdf_path, e)
    finally:
        doc.close()
    return hints


# Process-wide, append-only. Keyed by (path, mtime, size) so a rewritten file reloads.
_HINT_CACHE: Dict[Tuple[str, float, int], Dict[str, ClassHint]] = {}


def cached_class_hints(pdf_path: str) -> Dict[str, ClassHint]:
    """Shared, read-only hint map for ``pdf_path``; computed at most once per file version."""
    try:
        st = os.stat(pdf_path)
    except OSError:
        return {}
    key = (os.path.abspath(pdf_path), st.st_mtime, st.st_size)
    hints = _HINT_CACHE.get(key)
    if hints is None:
        hints = _HINT_CACHE.setdefault(key, load_class_hints(pdf_path))
    return hints


def _coerce_int(graph: FormGraph, raw: Any) -> int:
    obj = raw
    if isinstance(raw, IndirectObject):
        try:
            obj = graph.resolve(raw)
        except UnresolvedReferenceError:
            return 0
    if isinstance(obj, bool):
        return 0
    try:
        return int(obj)
    except (TypeError, ValueError):
        pass
    try:
        return int(str(obj).strip())
    except (TypeError, ValueError):
        return 0


def field_flags(graph: FormGraph, node: Any) -> int:
    """Return /Ff as an int, inherited from ancestors when absent; 0 on any failure."""
    try:
        raw = node.get("/Ff") if isinstance(node, DictionaryObject) else None
        if raw is None:
            parent = graph.get(node, "/Parent")
            raw = graph.inherited(parent, "/Ff") if parent is not None else None
        if raw is None:
            return 0
        return _coerce_int(graph, raw)
    except Exception as e:
        logger.debug("Unreadable /Ff: %s", e)
        return 0


def classify(graph: FormGraph, node: Any, hint: Optional[ClassHint] = None) -> FieldKind:
    if hint is not None:
        if hint.kind is FieldKind.TEXT:
            return FieldKind.MULTILINE_TEXT if hint.multiline else FieldKind.TEXT
        return hint.kind

    ft = graph.inherited(node, "/FT")
    if ft == "/Tx":
        flags = field_flags(graph, node)
        return FieldKind.MULTILINE_TEXT if flags & MULTILINE_FLAG else FieldKind.TEXT
    if ft == "/Btn":
        flags = field_flags(graph, node)
        return FieldKind.RADIO_BUTTON if flags & RADIO_FLAG else FieldKind.CHECKBOX
    if ft == "/Ch":
        return FieldKind.COMBOBOX
    return FieldKind.UNKNOWN


def choice_options(graph: FormGraph, node: Any) -> List[Tuple[str, str]]:
    """(export, display) pairs in /Opt order.

    A plain string entry is both export and display value; a one-element
    array carries only the export value.
    """
    opts = graph.get(node, "/Opt")
    if not isinstance(opts, ArrayObject):
        return []
    out: List[Tuple[str, str]] = []
    for raw in opts:
        try:
            item = graph.resolve(raw)
        except UnresolvedReferenceError:
            continue
        if isinstance(item, ArrayObject):
            if not item:
                continue
            export = _resolved_text(graph, item[0])
            display = _resolved_text(graph, item[1]) if len(item) > 1 else None
            if export is None and display is None:
                continue
            out.append((export if export is not None else display,
                        display if display is not None else export))
        else:
            text = as_text(item)
            if text is not None:
                out.append((text, text))
    return out


def _resolved_text(graph: FormGraph, raw: Any) -> Optional[str]:
    try:
        return as_text(graph.resolve(raw))
    except UnresolvedReferenceError:
        return None
