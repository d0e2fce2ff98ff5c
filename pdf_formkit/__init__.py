"""AcroForm field extraction and filling.

Walks a PDF's interactive form into a flat catalog of typed fields and writes
values back into the same object graph, leaving appearance regeneration to
the viewer.
"""
from .schema import FieldKind, FieldDescriptor, FieldCatalog
from .graph import FormGraph, Mode, FormGraphError, DocumentOpenError, UnresolvedReferenceError, PersistError
from .extract import FieldEntry, walk_fields, extract_fields, extract_catalog
from .name_index import NameIndex
from .updater import ApplyResult
from .fill import apply_values, fill_form_directly, fill_form_structured
from .binding import DictBinding, bind_from_source

__all__ = [
    "FieldKind",
    "FieldDescriptor",
    "FieldCatalog",
    "FormGraph",
    "Mode",
    "FormGraphError",
    "DocumentOpenError",
    "UnresolvedReferenceError",
    "PersistError",
    "FieldEntry",
    "walk_fields",
    "extract_fields",
    "extract_catalog",
    "NameIndex",
    "ApplyResult",
    "apply_values",
    "fill_form_directly",
    "fill_form_structured",
    "DictBinding",
    "bind_from_source",
]
