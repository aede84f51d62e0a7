from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..contracts.processing import BatchValidation, FileMetadata
from ..contracts.uploads import UploadedFile
from ..extract.pdf_reader import has_pdf_signature
from .fingerprint_service import PriorSubmission

logger = logging.getLogger(__name__)

PriorSource = Callable[[], Iterable[PriorSubmission]]

PDF_MIME = "application/pdf"


@dataclass(frozen=True)
class FileValidationOptions:
    max_file_size: int = 50 * 1024 * 1024
    allowed_types: Tuple[str, ...] = (PDF_MIME,)
    check_for_updates: bool = True
    check_for_duplicates: bool = True


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    i = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    value = round(size / (1024 ** i), 2)
    return f"{value:g} {units[i]}"


class FileValidationService:
    """
    Batch-level checks run before any parsing.

    Errors block the batch; warnings (duplicates in the batch, updated
    files, a matching prior analysis) only annotate it.
    """

    def __init__(
        self,
        options: Optional[FileValidationOptions] = None,
        prior_source: Optional[PriorSource] = None,
    ) -> None:
        self.options = options or FileValidationOptions()
        self._prior_source = prior_source

    def validate_files(self, files: Sequence[UploadedFile]) -> BatchValidation:
        result = BatchValidation()

        self._check_basic(files, result)
        if self.options.check_for_duplicates:
            self._check_duplicates(files, result)
        if self.options.check_for_updates:
            self._check_updates(files, result)
        self._check_pdf_signatures(files, result)

        existing = self.find_existing_analysis(files)
        if existing:
            result.existing_analysis = existing
            result.warnings.append(f"Files match existing analysis: {existing}")

        result.is_valid = not result.errors
        return result

    # -----------------------------
    # Checks
    # -----------------------------
    def _check_basic(self, files: Sequence[UploadedFile], result: BatchValidation) -> None:
        if not files:
            result.errors.append("No files selected")
            return

        opts = self.options
        for f in files:
            if f.size > opts.max_file_size:
                result.errors.append(
                    f'File "{f.name}" is too large ({format_file_size(f.size)}). '
                    f"Maximum size is {format_file_size(opts.max_file_size)}"
                )
            if f.size == 0:
                result.errors.append(f'File "{f.name}" is empty')
            if f.mime_type not in opts.allowed_types:
                result.errors.append(
                    f'File "{f.name}" has invalid type ({f.mime_type or "unknown"}). '
                    f"Allowed types: {', '.join(opts.allowed_types)}"
                )
            if not (f.name or "").strip():
                result.errors.append("File has no name")

    def _check_duplicates(self, files: Sequence[UploadedFile], result: BatchValidation) -> None:
        seen = set()
        dups: List[FileMetadata] = []
        for f in files:
            sig = (f.name, f.size)
            if sig in seen:
                dups.append(f.metadata())
            else:
                seen.add(sig)
        if dups:
            result.duplicate_files = dups
            result.warnings.append("Duplicate files detected: " + ", ".join(d.name for d in dups))

    def _check_updates(self, files: Sequence[UploadedFile], result: BatchValidation) -> None:
        try:
            priors = self._load_priors()
        except Exception as e:  # noqa: BLE001
            logger.warning("prior analyses unavailable for update check: %s", e)
            result.warnings.append("Unable to check for file updates")
            return

        updated: List[str] = []
        for f in files:
            previous = self._find_prior_file(priors, f.name, f.size)
            if previous is not None and f.last_modified > previous.last_modified:
                logger.info(
                    "file %r updated: %s -> %s", f.name, previous.last_modified, f.last_modified
                )
                updated.append(f.name)

        if updated:
            result.is_updated = True
            result.updated_files = updated
            result.warnings.append(
                f"File updates detected: {', '.join(updated)}. "
                "Consider re-processing to get latest data."
            )

    def _check_pdf_signatures(self, files: Sequence[UploadedFile], result: BatchValidation) -> None:
        for f in files:
            if f.mime_type != PDF_MIME or f.size == 0:
                continue
            if not has_pdf_signature(f.data):
                result.errors.append(f'File "{f.name}" is not a valid PDF file')

    # -----------------------------
    # Prior analyses
    # -----------------------------
    def _load_priors(self) -> List[PriorSubmission]:
        if self._prior_source is None:
            return []
        return list(self._prior_source())

    @staticmethod
    def _find_prior_file(priors: Iterable[PriorSubmission], name: str, size: int) -> Optional[FileMetadata]:
        for prior in priors:
            for meta in prior.files or ():
                if meta.name == name and meta.size == size:
                    return meta
        return None

    def find_existing_analysis(self, files: Sequence[UploadedFile]) -> Optional[str]:
        """Id of a prior analysis built from exactly these (name, size) files."""
        if not files:
            return None
        try:
            priors = self._load_priors()
        except Exception as e:  # noqa: BLE001
            logger.warning("prior analyses unavailable for match lookup: %s", e)
            return None

        current = sorted((f.name, f.size) for f in files)
        for prior in priors:
            if not prior.files or not prior.analysis_id:
                continue
            if sorted((m.name, m.size) for m in prior.files) == current:
                return prior.analysis_id
        return None
