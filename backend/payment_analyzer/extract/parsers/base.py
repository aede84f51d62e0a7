from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

from ...contracts.records import InvoiceRecord, ParseResult, RawText, RunsheetRecord
from ..errors import ExtractError
from ..pdf_reader import pages_from_text, read_pdf_bytes
from ..types import ParsedPdf

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", RunsheetRecord, InvoiceRecord)


@dataclass
class DataCheck:
    is_valid: bool
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


class PdfParserBase(ABC, Generic[RecordT]):
    """
    text extraction -> extract_data -> validate_data -> ParseResult.

    Expected failures (unreadable PDF, nothing found) come back as
    success=False; parse() does not raise for them.
    """

    kind: str = ""
    file_type_identifiers: Tuple[str, ...] = ()
    content_indicators: Tuple[str, ...] = ()

    # -----------------------------
    # Entry points
    # -----------------------------
    def parse(self, data: bytes, filename: str = "") -> ParseResult:
        try:
            raw = read_pdf_bytes(data)
        except ExtractError as e:
            logger.info("%s: text extraction failed for %r: %s", self.kind, filename, e)
            return self.failure(str(e))
        return self.parse_pdf(raw, filename)

    def parse_text(self, pages: Sequence[str], filename: str = "") -> ParseResult:
        return self.parse_pdf(pages_from_text(pages), filename)

    def parse_pdf(self, raw: ParsedPdf, filename: str = "") -> ParseResult:
        raw_text = raw.to_raw()
        notes: List[str] = []
        try:
            record = self.extract_data(raw, filename, notes)
            check = self.validate_data(record)
        except Exception as e:  # noqa: BLE001
            # one bad document must not take the batch down
            logger.warning("%s: parser error for %r: %s", self.kind, filename, e, exc_info=True)
            return self.failure(str(e) or type(e).__name__, raw=raw_text)

        return ParseResult(
            success=check.is_valid,
            data=record if check.is_valid else None,
            error=check.error,
            warnings=[*notes, *check.warnings],
            raw=raw_text,
        )

    def failure(self, error: str, raw: Optional[RawText] = None) -> ParseResult:
        return ParseResult(success=False, error=error, raw=raw or RawText())

    # -----------------------------
    # Routing
    # -----------------------------
    def can_parse(self, filename: str, content_preview: Optional[str] = None) -> bool:
        low_name = (filename or "").lower()
        if any(ident in low_name for ident in self.file_type_identifiers):
            return True
        if content_preview:
            return self.check_content_patterns(content_preview)
        return False

    def check_content_patterns(self, content: str) -> bool:
        low = content.lower()
        return any(ind in low for ind in self.content_indicators)

    # -----------------------------
    # Parser-specific
    # -----------------------------
    @abstractmethod
    def extract_data(self, raw: ParsedPdf, filename: str, notes: List[str]) -> RecordT:
        """Build the record; extraction-time warnings go to notes."""
        raise NotImplementedError

    @abstractmethod
    def validate_data(self, data: RecordT) -> DataCheck:
        raise NotImplementedError
