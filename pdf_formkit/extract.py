from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set
import logging

from pypdf.generic import ArrayObject, DictionaryObject

from config import DEFAULT_RECT, NAME_SEPARATOR, READ_ONLY_FLAG, REQUIRED_FLAG
from .classify import ClassHint, choice_options, classify, field_flags
from .codec import decode_value
from .graph import FormGraph, Mode, UnresolvedReferenceError, as_text
from .schema import FieldCatalog, FieldDescriptor, FieldKind, Rect

logger = logging.getLogger(__name__)


@dataclass
class FieldEntry:
    """A walked terminal field: its descriptor plus the live dictionary it came from."""
    descriptor: FieldDescriptor
    node: DictionaryObject


def _rect(graph: FormGraph, holder: Any) -> Optional[Rect]:
    arr = graph.get(holder, "/Rect")
    if not isinstance(arr, ArrayObject) or len(arr) != 4:
        return None
    try:
        x0, y0, x1, y1 = (float(graph.resolve(x)) for x in arr)
    except Exception:
        return None
    return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))


def field_bounds(graph: FormGraph, node: DictionaryObject) -> Rect:
    """The field's own /Rect, else its first widget's, else the placeholder."""
    try:
        for holder in [node] + graph.widgets(node):
            rect = _rect(graph, holder)
            if rect is not None:
                return rect
    except Exception as e:
        logger.debug("Bounds unavailable: %s", e)
    return DEFAULT_RECT


class _Walk:
    def __init__(self, graph: FormGraph, hints: Dict[str, ClassHint], limit: Optional[int]):
        self.graph = graph
        self.hints = hints
        self.limit = limit
        self.entries: List[FieldEntry] = []
        self.skipped = 0
        self._used_names: Set[str] = set()
        self._name_counts: Dict[str, int] = {}
        self._visited: Set[int] = set()

    @property
    def cap_reached(self) -> bool:
        return self.limit is not None and len(self.entries) >= self.limit

    def visit(self, refs: List[Any], prefix: str):
        for i, ref in enumerate(refs):
            if self.cap_reached:
                return
            try:
                self._visit_one(ref, prefix)
            except UnresolvedReferenceError as e:
                self.skipped += 1
                logger.warning("Skipping field at index %d under %r: %s", i, prefix or "<root>", e)
            except Exception as e:
                self.skipped += 1
                logger.warning("Error processing field at index %d under %r: %s", i, prefix or "<root>", e)

    def _visit_one(self, ref: Any, prefix: str):
        node = self.graph.resolve(ref)
        if not isinstance(node, DictionaryObject) or id(node) in self._visited:
            return
        self._visited.add(id(node))

        partial = as_text(self.graph.get(node, "/T"))
        if not partial:
            # nameless grouping node: children keep the parent prefix
            if self._has_children(node):
                self.visit(self.graph.kids(node), prefix)
            return
        name = f"{prefix}{NAME_SEPARATOR}{partial}" if prefix else partial

        if self._has_children(node):
            self.visit(self.graph.kids(node), name)
            return
        self._emit(node, name)

    def _has_children(self, node: DictionaryObject) -> bool:
        # Leaf fields frequently have no /Kids at all; any failure counts as a leaf.
        try:
            return len(self.graph.child_fields(node)) > 0
        except Exception as e:
            logger.debug("Child check failed, treating field as terminal: %s", e)
            return False

    def _unique(self, base: str) -> str:
        name = base
        while name in self._used_names:
            self._name_counts[base] = self._name_counts.get(base, 1) + 1
            name = f"{base}_{self._name_counts[base]}"
        self._used_names.add(name)
        return name

    def _emit(self, node: DictionaryObject, name: str):
        graph = self.graph
        kind = classify(graph, node, self.hints.get(name))
        descriptor = FieldDescriptor(
            name=self._unique(name),
            kind=kind,
            value=decode_value(graph, node, kind),
            bounds=field_bounds(graph, node),
        )
        if kind is FieldKind.COMBOBOX:
            pairs = choice_options(graph, node)
            descriptor.options = [display for _, display in pairs]
            descriptor.export_values = [export for export, _ in pairs]
        flags = field_flags(graph, node)
        descriptor.read_only = bool(flags & READ_ONLY_FLAG)
        descriptor.required = bool(flags & REQUIRED_FLAG)
        self.entries.append(FieldEntry(descriptor, node))


def _run_walk(graph: FormGraph, hints: Optional[Dict[str, ClassHint]], limit: Optional[int]) -> _Walk:
    if hints is None:
        hints = graph.class_hints()
    walk = _Walk(graph, hints, limit)
    if graph.form_root() is None:
        logger.info("Document has no AcroForm")
        return walk
    walk.visit(graph.root_fields(), "")
    logger.info("Extracted %d terminal fields (%d skipped)", len(walk.entries), walk.skipped)
    return walk


def walk_fields(graph: FormGraph, hints: Optional[Dict[str, ClassHint]] = None,
                limit: Optional[int] = None) -> List[FieldEntry]:
    """Depth-first walk of /AcroForm /Fields returning every terminal field.

    Containers (fields with child fields) are recursed into and never emitted.
    A node that fails to resolve or process is logged and skipped; the walk
    always returns whatever subset succeeded.
    """
    return _run_walk(graph, hints, limit).entries


def extract_fields(graph: FormGraph, hints: Optional[Dict[str, ClassHint]] = None,
                   limit: Optional[int] = None) -> FieldCatalog:
    walk = _run_walk(graph, hints, limit)
    return FieldCatalog(
        fields=[e.descriptor for e in walk.entries],
        metadata={
            "source": graph.path,
            "has_acroform": graph.form_root() is not None,
            "skipped_count": walk.skipped,
            "field_cap_reached": walk.cap_reached,
        },
    )


def extract_catalog(pdf_path: str) -> FieldCatalog:
    """Open ``pdf_path`` read-only and walk its form. DocumentOpenError propagates."""
    with FormGraph.open(pdf_path, Mode.READ_ONLY) as graph:
        return extract_fields(graph)
