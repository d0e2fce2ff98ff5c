from __future__ import annotations
"""Object graph access for AcroForm-bearing PDFs.

Wraps a pypdf reader (read-only walks) or a writer cloned from it (mutation)
behind one small surface: dictionary lookups that resolve indirect values,
reference resolution that fails with a typed, recoverable error, and an
atomic save.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import os
import tempfile

from pypdf import PdfReader, PdfWriter
from pypdf.generic import ArrayObject, DictionaryObject, IndirectObject, NullObject

from config import ERROR_MESSAGES

logger = logging.getLogger(__name__)


class FormGraphError(Exception):
    pass

class DocumentOpenError(FormGraphError):
    pass

class UnresolvedReferenceError(FormGraphError):
    pass

class PersistError(FormGraphError):
    pass


def as_text(obj: Any) -> Optional[str]:
    """Plain str for PDF text/byte/name strings, None for anything else."""
    if isinstance(obj, str):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.decode("latin-1")
    return None


class Mode(Enum):
    READ_ONLY = "read_only"
    MUTATE = "mutate"


class FormGraph:
    def __init__(self, document: Any, mode: Mode = Mode.READ_ONLY, path: Optional[str] = None):
        self.document = document
        self.mode = mode
        self.path = path
        self._class_hints: Optional[Dict[str, Any]] = None

    @classmethod
    def open(cls, path: str, mode: Mode = Mode.READ_ONLY) -> "FormGraph":
        if not os.path.isfile(path):
            raise DocumentOpenError(f"{ERROR_MESSAGES['missing_file']}: {path}")
        try:
            with open(path, "rb") as f:
                head = f.read(1024)
        except OSError as e:
            raise DocumentOpenError(f"Cannot read {path}: {e}") from e
        if b"%PDF" not in head:
            raise DocumentOpenError(f"{ERROR_MESSAGES['not_pdf']}: {path}")

        try:
            reader = PdfReader(path)
            encrypted = reader.is_encrypted
            decrypted = bool(reader.decrypt("")) if encrypted else True
        except Exception as e:
            raise DocumentOpenError(f"{ERROR_MESSAGES['parse_failed']}: {e}") from e
        if not decrypted:
            raise DocumentOpenError(f"{ERROR_MESSAGES['encrypted_pdf']}: {path}")

        if mode is Mode.MUTATE:
            try:
                document = PdfWriter(clone_from=reader)
            except Exception as e:
                raise DocumentOpenError(f"{ERROR_MESSAGES['parse_failed']}: {e}") from e
        else:
            document = reader
        logger.debug("Opened %s (%s)", path, mode.value)
        return cls(document, mode, path)

    # -- structure ---------------------------------------------------------

    @property
    def root(self) -> DictionaryObject:
        if isinstance(self.document, PdfWriter):
            return self.document._root_object
        return self.resolve(self.document.trailer["/Root"])

    def form_root(self) -> Optional[DictionaryObject]:
        """Return the /AcroForm dictionary, or None when the document has no form."""
        try:
            root = self.root
        except Exception as e:
            logger.warning("Document catalog unreadable: %s", e)
            return None
        acro = self.get(root, "/AcroForm")
        return acro if isinstance(acro, DictionaryObject) else None

    def root_fields(self) -> List[Any]:
        acro = self.form_root()
        fields = self.get(acro, "/Fields") if acro is not None else None
        return list(fields) if isinstance(fields, ArrayObject) else []

    def kids(self, node: Any) -> List[Any]:
        kids = self.get(node, "/Kids")
        return list(kids) if isinstance(kids, ArrayObject) else []

    def _resolved_kids(self, node: Any) -> List[DictionaryObject]:
        out = []
        for raw in self.kids(node):
            try:
                kid = self.resolve(raw)
            except UnresolvedReferenceError:
                continue
            if isinstance(kid, DictionaryObject):
                out.append(kid)
        return out

    def child_fields(self, node: Any) -> List[DictionaryObject]:
        """Kids that are fields in their own right (they carry /T)."""
        return [k for k in self._resolved_kids(node) if "/T" in k]

    def widgets(self, node: Any) -> List[DictionaryObject]:
        """Kids that are only widget annotations of this field (no /T)."""
        return [k for k in self._resolved_kids(node) if "/T" not in k]

    # -- node access -------------------------------------------------------

    def resolve(self, ref: Any) -> Any:
        try:
            obj = ref.get_object() if isinstance(ref, IndirectObject) else ref
        except Exception as e:
            raise UnresolvedReferenceError(f"Cannot resolve {ref!r}: {e}") from e
        if obj is None or isinstance(obj, NullObject):
            raise UnresolvedReferenceError(f"Reference {ref!r} resolves to null")
        return obj

    def get(self, node: Any, key: str, default: Any = None) -> Any:
        if not isinstance(node, DictionaryObject):
            return default
        raw = node.get(key)
        if raw is None:
            return default
        try:
            return self.resolve(raw)
        except UnresolvedReferenceError as e:
            logger.debug("Entry %s unresolved: %s", key, e)
            return default

    def inherited(self, node: Any, key: str, default: Any = None) -> Any:
        """Look up an inheritable field attribute, walking the /Parent chain."""
        visited = set()
        current = node
        while isinstance(current, DictionaryObject) and id(current) not in visited:
            visited.add(id(current))
            value = self.get(current, key)
            if value is not None:
                return value
            current = self.get(current, "/Parent")
        return default

    def class_hints(self) -> Dict[str, Any]:
        """Typed widget hints keyed by qualified field name, loaded once."""
        if self._class_hints is None:
            from .classify import cached_class_hints
            self._class_hints = cached_class_hints(self.path) if self.path else {}
        return self._class_hints

    # -- persistence -------------------------------------------------------

    def save(self, path: str):
        if self.mode is not Mode.MUTATE or not isinstance(self.document, PdfWriter):
            raise PersistError("Graph was opened read-only")
        tmp_path = None
        try:
            directory = os.path.dirname(os.path.abspath(path))
            fd, tmp_path = tempfile.mkstemp(prefix=".formkit_", suffix=".pdf", dir=directory)
            with os.fdopen(fd, "wb") as f:
                self.document.write(f)
            os.replace(tmp_path, path)
        except Exception as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistError(f"{ERROR_MESSAGES['persist_failed']}: {e}") from e
        logger.info("Saved %s", path)

    def close(self):
        closer = getattr(self.document, "close", None)
        if callable(closer):
            try:
                closer()
            except Exception:
                logger.debug("Ignoring close failure", exc_info=True)

    def __enter__(self) -> "FormGraph":
        return self

    def __exit__(self, *exc):
        self.close()
        return False
