from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..contracts.processing import (
    FileError,
    FileSetCheck,
    ProcessedFile,
    ProcessingResult,
    ProcessingSummary,
)
from ..contracts.records import FileKind, InvoiceRecord, ParseResult, RunsheetRecord
from ..contracts.uploads import UploadedFile
from ..domain.calculator import DayInput
from ..extract.errors import ExtractError
from ..extract.parsers import InvoiceParser, RunsheetParser
from ..extract.pdf_reader import read_pdf_bytes
from ..extract.types import ParsedPdf
from ..fingerprint.file_validation import (
    FileValidationOptions,
    FileValidationService,
    PriorSource,
)

logger = logging.getLogger(__name__)

# (current, total, file_name); current runs 0..total
ProgressCallback = Callable[[int, int, str], None]


def determine_file_type(runsheet: ParseResult, invoice: ParseResult) -> Tuple[FileKind, ParseResult]:
    """
    Pick between the two parses of an unclassified file.

    Success beats failure; two successes compare data points (consignments
    vs standard invoice entries) and a tie goes to the runsheet; two
    failures keep the runsheet result.
    """
    if runsheet.success and not invoice.success:
        return "runsheet", runsheet
    if invoice.success and not runsheet.success:
        return "invoice", invoice
    if runsheet.success and invoice.success:
        if invoice.data_points > runsheet.data_points:
            return "invoice", invoice
        return "runsheet", runsheet
    return "runsheet", runsheet


class PdfProcessor:
    """
    Batch orchestrator: validate -> per file (hash, preview, classify,
    parse) -> ProcessingResult.

    One bad file never fails the batch; it becomes a FileError or a failed
    ParseResult.
    """

    def __init__(
        self,
        *,
        runsheet_parser: Optional[RunsheetParser] = None,
        invoice_parser: Optional[InvoiceParser] = None,
        validator: Optional[FileValidationService] = None,
        preview_chars: int = 1000,
    ) -> None:
        self.runsheet_parser = runsheet_parser or RunsheetParser()
        self.invoice_parser = invoice_parser or InvoiceParser()
        self.validator = validator or FileValidationService()
        self.preview_chars = preview_chars

    @classmethod
    def from_settings(cls, settings, prior_source: Optional[PriorSource] = None) -> "PdfProcessor":
        return cls(
            runsheet_parser=RunsheetParser(max_daily_consignments=settings.max_daily_consignments),
            invoice_parser=InvoiceParser(
                min_amount=settings.invoice_min_amount,
                max_amount=settings.invoice_max_amount,
                total_tolerance=settings.invoice_total_tolerance,
            ),
            validator=FileValidationService(
                FileValidationOptions(
                    max_file_size=settings.max_file_size,
                    allowed_types=tuple(settings.allowed_mime_types),
                ),
                prior_source=prior_source,
            ),
            preview_chars=settings.preview_chars,
        )

    # -----------------------------
    # Batch
    # -----------------------------
    def process_files(
        self,
        files: Sequence[UploadedFile],
        progress: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        files = list(files)
        total = len(files)
        result = ProcessingResult(validation=self.validator.validate_files(files))

        if not result.validation.is_valid:
            logger.info("batch rejected: %d validation error(s)", len(result.validation.errors))
            result.errors = [
                FileError(file_name=f.name, error=err)
                for f in files
                for err in result.validation.errors
            ]
            result.file_metadata = [f.metadata() for f in files]
            result.summary = self._summarize(result, total)
            return result

        self._report(progress, 0, total, "")
        for i, f in enumerate(files, start=1):
            try:
                processed = self.process_file(f)
            except Exception as e:  # noqa: BLE001
                logger.warning("unexpected failure on %r: %s", f.name, e, exc_info=True)
                result.errors.append(FileError(file_name=f.name, error=str(e) or type(e).__name__))
            else:
                result.files.append(processed)
                result.file_metadata.append(processed.metadata)
                if processed.type == "runsheet":
                    result.runsheets.append(processed)
                elif processed.type == "invoice":
                    result.invoices.append(processed)
            self._report(progress, i, total, f.name)

        result.summary = self._summarize(result, total)
        logger.info(
            "batch done: %d file(s), %d ok, %d failed",
            total, result.summary.successful_files, result.summary.failed_files,
        )
        return result

    @staticmethod
    def _report(progress: Optional[ProgressCallback], current: int, total: int, name: str) -> None:
        if progress is not None:
            progress(current, total, name)

    @staticmethod
    def _summarize(result: ProcessingResult, total: int) -> ProcessingSummary:
        ok = sum(1 for f in result.files if f.parse_result.success)
        failed_parses = sum(1 for f in result.files if not f.parse_result.success)
        return ProcessingSummary(
            total_files=total,
            successful_files=ok,
            failed_files=failed_parses + len({e.file_name for e in result.errors}),
            runsheet_count=len(result.runsheets),
            invoice_count=len(result.invoices),
            unknown_count=sum(1 for f in result.files if f.type == "unknown"),
        )

    # -----------------------------
    # Single file
    # -----------------------------
    def read(self, file: UploadedFile) -> Tuple[Optional[ParsedPdf], Optional[str]]:
        try:
            return read_pdf_bytes(file.data), None
        except ExtractError as e:
            return None, str(e)

    def preview(self, file: UploadedFile, raw: Optional[ParsedPdf] = None) -> str:
        """First page text (trimmed), or the filename when there is none."""
        if raw is None:
            raw, _ = self.read(file)
        text = raw.first_page_text[: self.preview_chars] if raw is not None else ""
        return text or file.name

    def classify(self, filename: str, preview: str) -> FileKind:
        if self.runsheet_parser.can_parse(filename, preview):
            return "runsheet"
        if self.invoice_parser.can_parse(filename, preview):
            return "invoice"
        return "unknown"

    def process_file(self, file: UploadedFile) -> ProcessedFile:
        file_hash = file.sha256
        raw, read_error = self.read(file)
        kind = self.classify(file.name, self.preview(file, raw))

        parse_result = self._parse(kind, raw, read_error, file.name)

        logger.debug("%r -> %s (success=%s)", file.name, kind, parse_result.success)
        return ProcessedFile(
            id=str(uuid.uuid4()),
            name=file.name,
            type=kind,
            hash=file_hash,
            parse_result=parse_result,
            metadata=file.metadata(with_hash=True),
        )

    def _parse(
        self,
        kind: FileKind,
        raw: Optional[ParsedPdf],
        read_error: Optional[str],
        filename: str,
    ) -> ParseResult:
        if raw is None:
            return self.runsheet_parser.failure(read_error or "Cannot read PDF")
        if kind == "runsheet":
            return self.runsheet_parser.parse_pdf(raw, filename)
        if kind == "invoice":
            return self.invoice_parser.parse_pdf(raw, filename)

        _, chosen = determine_file_type(
            self.runsheet_parser.parse_pdf(raw, filename),
            self.invoice_parser.parse_pdf(raw, filename),
        )
        return chosen


# -----------------------------
# Post-processing
# -----------------------------
def validate_file_set(result: ProcessingResult) -> FileSetCheck:
    """Is the parsed batch usable for an analysis?"""
    check = FileSetCheck()

    good_runsheets = [f for f in result.runsheets if f.parse_result.success]
    good_invoices = [f for f in result.invoices if f.parse_result.success]

    if result.summary.total_files > 0 and not good_runsheets and not good_invoices:
        check.errors.append(
            "No valid runsheet or invoice files could be processed. Please check your file formats."
        )

    if not result.runsheets:
        check.warnings.append(
            "No runsheet files found. Consignment counts will need to be entered manually."
        )
    if not result.invoices:
        check.warnings.append(
            "No invoice files found. Paid amounts will default to £0.00 for payment reconciliation."
        )

    failed_runsheets = len(result.runsheets) - len(good_runsheets)
    if failed_runsheets:
        check.warnings.append(f"{failed_runsheets} runsheet(s) failed to parse correctly.")
    failed_invoices = len(result.invoices) - len(good_invoices)
    if failed_invoices:
        check.warnings.append(f"{failed_invoices} invoice(s) failed to parse correctly.")

    unknown = sum(1 for f in result.files if f.type == "unknown")
    if unknown:
        check.warnings.append(f"{unknown} file(s) could not be classified.")

    check.is_valid = not check.errors
    return check


def to_daily_data(result: ProcessingResult) -> Dict[date, DayInput]:
    """
    Per-date facts from every successful parse, runsheet or invoice data
    alike (unclassified files included). Byte-identical files count once.
    """
    consignments: Dict[date, int] = defaultdict(int)
    paid: Dict[date, Decimal] = defaultdict(Decimal)
    pickups: Dict[date, int] = defaultdict(int)
    pickup_total: Dict[date, Decimal] = defaultdict(Decimal)

    seen_hashes = set()
    for f in result.files:
        if not f.parse_result.success or f.hash in seen_hashes:
            continue
        seen_hashes.add(f.hash)
        data = f.parse_result.data

        if isinstance(data, RunsheetRecord):
            for day in data.details:
                consignments[day.date] += day.consignments
        elif isinstance(data, InvoiceRecord):
            for entry in data.all_entries():
                paid[entry.date] += entry.amount
                if entry.is_pickup:
                    pickups[entry.date] += 1
                    pickup_total[entry.date] += entry.amount

    days = sorted(set(consignments) | set(paid))
    return {
        d: DayInput(
            consignments=consignments.get(d, 0),
            paid_amount=paid.get(d, Decimal("0")),
            pickups=pickups.get(d, 0),
            pickup_total=pickup_total.get(d, Decimal("0")),
        )
        for d in days
    }


def collect_warnings(result: ProcessingResult) -> List[str]:
    """Batch warnings followed by per-file parser warnings ("name: text")."""
    out = list(result.validation.warnings)
    for f in result.files:
        out.extend(f"{f.name}: {w}" for w in f.parse_result.warnings)
    return out
