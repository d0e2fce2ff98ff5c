from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional, Tuple
import logging
import os
import shutil
import tempfile

from pypdf.generic import BooleanObject, DictionaryObject, NameObject, NumberObject, TextStringObject

from config import ERROR_MESSAGES
from .codec import write_value
from .extract import walk_fields
from .graph import DocumentOpenError, FormGraph, Mode, PersistError
from .name_index import NameIndex
from .schema import FieldCatalog
from .updater import ApplyResult, apply_field_values

logger = logging.getLogger(__name__)

_NEED_APPEARANCES = NameObject("/NeedAppearances")


def _set_boolean(dictionary: DictionaryObject, key: NameObject, value: bool):
    try:
        dictionary[key] = NameObject("/true" if value else "/false")
    except Exception:
        dictionary[key] = NumberObject(1 if value else 0)


def set_need_appearances(acro_form: DictionaryObject) -> Optional[str]:
    """Ask viewers to regenerate field appearances.

    Three attempts of descending strength; the first that sticks wins. The
    flag is a rendering hint, so total failure is logged and ignored.
    """
    attempts: Tuple[Tuple[str, Callable[[], None]], ...] = (
        ("boolean", lambda: acro_form.__setitem__(_NEED_APPEARANCES, BooleanObject(True))),
        ("setter", lambda: _set_boolean(acro_form, _NEED_APPEARANCES, True)),
        ("string", lambda: acro_form.__setitem__(_NEED_APPEARANCES, TextStringObject("true"))),
    )
    if _NEED_APPEARANCES in acro_form:
        try:
            del acro_form[_NEED_APPEARANCES]
        except Exception:
            logger.debug("Could not drop existing /NeedAppearances")
    for label, attempt in attempts:
        try:
            attempt()
            return label
        except Exception as e:
            logger.debug("Setting /NeedAppearances via %s failed: %s", label, e)
    logger.warning("Could not set /NeedAppearances; viewers may show stale appearances")
    return None


def apply_values(graph: FormGraph, values: Mapping[str, Any]) -> ApplyResult:
    """Write ``values`` straight into the field dictionaries of ``graph``.

    Names resolve through a NameIndex built from one walk. Misses are
    recorded, not raised; a failing field is recorded and the loop moves on.
    ``success`` is False when nothing was modified, meaning the caller should
    try the structured fallback.
    """
    result = ApplyResult(strategy="direct")
    acro = graph.form_root()
    if acro is None:
        logger.info("No AcroForm found in PDF")
        return result

    entries = walk_fields(graph)
    index = NameIndex.build(entries)
    result.catalog_hash = FieldCatalog([e.descriptor for e in entries]).catalog_hash

    for requested, raw in values.items():
        value = "" if raw is None else str(raw)
        if not value:
            result.skipped_empty.append(requested)
            continue

        entry, tier = index.lookup_with_tier(requested)
        if entry is None:
            logger.debug("Field %r not found in PDF", requested)
            result.unknown_fields.append(requested)
            continue
        descriptor = entry.descriptor
        logger.debug("Located %r as %r (%s match, %s)", requested, descriptor.name, tier, descriptor.kind.value)

        try:
            stored = write_value(graph, entry.node, descriptor.kind, value)
        except Exception as e:
            logger.warning("Error setting value for field %r: %s", descriptor.name, e)
            result.failed[descriptor.name] = str(e)
            continue
        descriptor.value = stored
        result.applied[descriptor.name] = stored
        result.matched[requested] = descriptor.name

    if result.success:
        set_need_appearances(acro)
    logger.info("Direct fill applied %d field(s), %d unknown, %d failed",
                len(result.applied), len(result.unknown_fields), len(result.failed))
    return result


@contextmanager
def staged_copy(source_path: str, output_path: str) -> Iterator[str]:
    """Copy the source to a scratch file beside ``output_path`` and yield its path.

    The scratch file is always removed; ``output_path`` itself is only ever
    touched by ``FormGraph.save``.
    """
    if not os.path.isfile(source_path):
        raise DocumentOpenError(f"{ERROR_MESSAGES['missing_file']}: {source_path}")
    directory = os.path.dirname(os.path.abspath(output_path))
    try:
        fd, scratch = tempfile.mkstemp(prefix=".formkit_src_", suffix=".pdf", dir=directory)
        os.close(fd)
        shutil.copyfile(source_path, scratch)
    except OSError as e:
        raise PersistError(f"{ERROR_MESSAGES['persist_failed']}: {e}") from e
    try:
        yield scratch
    finally:
        try:
            os.remove(scratch)
        except OSError as e:
            logger.debug("Could not remove scratch copy %s: %s", scratch, e)


def fill_form_directly(source_path: str, output_path: str, values: Mapping[str, Any]) -> ApplyResult:
    """Edit field dictionaries of a scratch copy and save it to ``output_path``.

    The output is only written when at least one field changed; otherwise
    whatever was at ``output_path`` is left alone.
    DocumentOpenError and PersistError propagate.
    """
    logger.info("Filling PDF form directly from %s to %s", source_path, output_path)
    with staged_copy(source_path, output_path) as scratch:
        with FormGraph.open(scratch, Mode.MUTATE) as graph:
            result = apply_values(graph, values)
            if result.success:
                graph.save(output_path)
            else:
                logger.info("No changes made to PDF form")
    return result


def fill_form_structured(source_path: str, output_path: str, values: Mapping[str, Any]) -> ApplyResult:
    """Secondary path: apply through the structured API on a fresh scratch copy."""
    logger.info("Filling PDF form via structured fallback from %s to %s", source_path, output_path)
    with staged_copy(source_path, output_path) as scratch:
        with FormGraph.open(scratch, Mode.MUTATE) as graph:
            acro = graph.form_root()
            if acro is None:
                logger.info("No AcroForm found in PDF")
                return ApplyResult(strategy="structured")
            result = apply_field_values(graph, values)
            if result.success:
                set_need_appearances(acro)
                graph.save(output_path)
    return result
