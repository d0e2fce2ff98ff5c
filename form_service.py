"""
Fill orchestration for AcroForm PDFs.
Wraps the pdf_formkit walker and writers behind one object per source document.
"""

from typing import Any, Dict, Mapping, Optional
from dataclasses import dataclass, field
from pathlib import Path
import logging
import time

from pdf_formkit import FieldCatalog, extract_catalog, fill_form_directly, fill_form_structured
from pdf_formkit.binding import FieldValueSink, FieldValueSource, bind_from_source, read_into, to_value_map
from config import ERROR_MESSAGES, FILLED_SUFFIX
from logging_utils import log_fill_operation

logger = logging.getLogger("pdf_formkit.service")


@dataclass
class FillResult:
    """Result of a fill request."""
    path: str
    success: bool
    strategy: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    summary: Dict[str, Any] = field(default_factory=dict)


def default_output_path(pdf_path: str) -> str:
    p = Path(pdf_path)
    return str(p.with_name(f"{p.stem}{FILLED_SUFFIX}{p.suffix or '.pdf'}"))


class PdfFormService:
    """Extract and fill the form of one source PDF. The source is never modified."""

    def __init__(self, pdf_path: str):
        self.pdf_path = pdf_path

    def extract_fields(self) -> FieldCatalog:
        """
        Walk the source form into a fresh catalog.

        Returns:
            FieldCatalog, empty when the document has no AcroForm

        Raises:
            DocumentOpenError: If the source cannot be opened as a PDF
        """
        return extract_catalog(self.pdf_path)

    def fill_form_with_data(self, values: Mapping[str, Any], output_path: Optional[str] = None) -> FillResult:
        """
        Write values into a copy of the source PDF.

        The direct writer runs first; only when it modifies nothing is the
        structured fallback tried.

        Args:
            values: Field name -> value; names are resolved loosely
            output_path: Destination, defaults to ``<stem>_filled.pdf`` beside the source

        Returns:
            FillResult pointing at the filled file, or at the untouched source
            with success False when no field could be written

        Raises:
            DocumentOpenError: If the source cannot be opened as a PDF
            PersistError: If the filled document cannot be saved
        """
        started = time.time()
        output = output_path or default_output_path(self.pdf_path)

        result = fill_form_directly(self.pdf_path, output, values)
        if not result:
            logger.info("Direct fill modified nothing, trying structured fallback")
            result = fill_form_structured(self.pdf_path, output, values)

        summary = result.to_summary()
        log_fill_operation(self.pdf_path, output, result.strategy, summary, started,
                           catalog_hash=result.catalog_hash)

        if not result:
            return FillResult(
                path=self.pdf_path,
                success=False,
                strategy=result.strategy,
                error_code='no_fields_applied',
                error_message=ERROR_MESSAGES['no_fields_applied'],
                summary=summary,
            )
        return FillResult(path=output, success=True, strategy=result.strategy, summary=summary)

    def fill_form_with_source(self, source: FieldValueSource, output_path: Optional[str] = None) -> FillResult:
        """Bind values from a record with ``get(name)`` onto a fresh catalog, then fill.

        Bound values that decode to "" are skipped like any empty value, so a
        record can never clear a field that already holds something.
        """
        catalog = self.extract_fields()
        bind_from_source(catalog, source)
        return self.fill_form_with_data(to_value_map(catalog), output_path)

    def read_into(self, sink: FieldValueSink) -> FieldCatalog:
        catalog = self.extract_fields()
        read_into(catalog, sink)
        return catalog

