# backend/payment_analyzer/services/analysis_service.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence

from ..config import Settings, get_settings
from ..contracts.processing import FileSetCheck, ProcessingResult
from ..contracts.uploads import UploadedFile
from ..core.errors import UserFacingError
from ..domain import (
    Analysis,
    AnalysisSource,
    AnalysisStatus,
    DailyEntry,
    DateRange,
    PaymentCalculator,
    PaymentRules,
    ValidationReport,
    ValidationService,
)
from ..domain.entries import CountLike, MoneyLike
from ..fingerprint import (
    FileFingerprintService,
    FileInfo,
    Fingerprint,
    FingerprintComparison,
    PriorSubmission,
)
from ..pipeline.processor import (
    PdfProcessor,
    ProgressCallback,
    to_daily_data,
    validate_file_set,
)
from .repositories import AnalysisRepository, FingerprintHistory, PriorAnalysisSource

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    analysis: Analysis
    report: ValidationReport
    comparison: FingerprintComparison
    processing: Optional[ProcessingResult] = None
    file_set: Optional[FileSetCheck] = None


class AnalysisService:
    """
    Caller-facing facade over parsing, calculation and fingerprinting.

    IMPORTANT SEMANTICS:
      - parse_files never raises for a bad file; problems land in the result
      - analyze_* raise UserFacingError when nothing usable came out
      - nothing here overwrites a prior analysis; comparison is reported only
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        processor: Optional[PdfProcessor] = None,
        repository: Optional[AnalysisRepository] = None,
        history: Optional[FingerprintHistory] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._processor = processor
        self.repository = repository
        self.history = history
        self.fingerprints = FileFingerprintService()
        self.validation = ValidationService.from_settings(self.settings)

    def prior_source(self, user_id: str) -> PriorAnalysisSource:
        return PriorAnalysisSource(user_id, repository=self.repository, cache=self.history)

    def processor_for(self, user_id: str = "") -> PdfProcessor:
        if self._processor is not None:
            return self._processor
        return PdfProcessor.from_settings(self.settings, prior_source=self.prior_source(user_id))

    # -----------------------------
    # Parsing
    # -----------------------------
    def parse_files(
        self,
        files: Sequence[UploadedFile],
        *,
        user_id: str = "",
        progress: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        return self.processor_for(user_id).process_files(files, progress=progress)

    # -----------------------------
    # Calculation
    # -----------------------------
    def compute_daily_payment(
        self,
        rules: PaymentRules,
        entry_date: date,
        consignments: CountLike,
        *,
        paid_amount: MoneyLike = 0,
        pickups: CountLike = 0,
        pickup_total: MoneyLike = 0,
    ) -> DailyEntry:
        return PaymentCalculator(rules).calculate_daily_payment(
            entry_date,
            consignments,
            pickups=pickups,
            pickup_total=pickup_total,
            paid_amount=paid_amount,
        )

    # -----------------------------
    # Fingerprints
    # -----------------------------
    def compute_fingerprint(self, files: Sequence[UploadedFile]) -> Fingerprint:
        processor = self.processor_for()
        infos = [
            FileInfo(
                name=f.name,
                size=f.size,
                last_modified=f.last_modified,
                content=processor.preview(f),
            )
            for f in files
        ]
        return self.fingerprints.create_fingerprint(infos)

    def compute_manual_fingerprint(
        self, user_id: str, start: date, end: date, entries: Iterable[Any]
    ) -> Fingerprint:
        return self.fingerprints.create_manual_fingerprint(user_id, start, end, entries)

    def compare_fingerprint(
        self,
        current: str,
        prior_list: Optional[Iterable[PriorSubmission]] = None,
        *,
        user_id: str = "",
        files: Optional[Sequence[Any]] = None,
    ) -> FingerprintComparison:
        if prior_list is None:
            try:
                prior_list = self.prior_source(user_id)()
            except Exception as e:  # noqa: BLE001
                logger.warning("prior submissions unavailable, comparing against none: %s", e)
                prior_list = []
        return self.fingerprints.compare_fingerprint(current, prior_list, files=files)

    # -----------------------------
    # End-to-end
    # -----------------------------
    def analyze_uploads(
        self,
        user_id: str,
        rules: PaymentRules,
        files: Sequence[UploadedFile],
        *,
        progress: Optional[ProgressCallback] = None,
    ) -> AnalysisOutcome:
        result = self.parse_files(files, user_id=user_id, progress=progress)
        if not result.validation.is_valid:
            raise UserFacingError(
                code="INVALID_FILES",
                message="; ".join(result.validation.errors),
                details={"errors": list(result.validation.errors)},
                stage="validation",
            )

        file_set = validate_file_set(result)
        daily = to_daily_data(result)
        if not file_set.is_valid or not daily:
            raise UserFacingError(
                code="NO_USABLE_DATA",
                message=file_set.errors[0] if file_set.errors else "No dated data found in the uploaded files",
                details={"warnings": list(file_set.warnings)},
                stage="parse",
            )

        fingerprint = self.compute_fingerprint(files)
        metadata = [f.metadata() for f in files]
        comparison = self.compare_fingerprint(fingerprint.value, user_id=user_id, files=metadata)

        calculator = PaymentCalculator(rules)
        analysis = self._new_analysis(
            user_id,
            rules,
            fingerprint.value,
            AnalysisSource.UPLOAD,
            DateRange(min(daily), max(daily)),
            lambda analysis_id: calculator.build_entries(daily, analysis_id=analysis_id),
            metadata={"file_count": len(files), "warnings": file_set.warnings},
        )
        logger.info(
            "analysis %s: %d day(s) from %d file(s), comparison=%s",
            analysis.id, len(analysis.daily_entries), len(files), comparison.status.value,
        )
        self._remember(user_id, PriorSubmission(fingerprint.value, tuple(metadata), analysis.id))
        return AnalysisOutcome(
            analysis=analysis,
            report=self._report(analysis, rules),
            comparison=comparison,
            processing=result,
            file_set=file_set,
        )

    def analyze_manual(
        self,
        user_id: str,
        rules: PaymentRules,
        entries: Sequence[Any],
    ) -> AnalysisOutcome:
        if not entries:
            raise UserFacingError(code="NO_ENTRIES", message="No manual entries supplied", stage="input")

        start = min(e.date for e in entries)
        end = max(e.date for e in entries)
        fingerprint = self.compute_manual_fingerprint(user_id, start, end, entries)
        comparison = self.compare_fingerprint(fingerprint.value, user_id=user_id)

        calculator = PaymentCalculator(rules)
        analysis = self._new_analysis(
            user_id,
            rules,
            fingerprint.value,
            AnalysisSource.MANUAL,
            DateRange(start, end),
            lambda analysis_id: calculator.entries_from_manual(entries, analysis_id=analysis_id),
        )
        self._remember(user_id, PriorSubmission(fingerprint.value, None, analysis.id))
        return AnalysisOutcome(analysis=analysis, report=self._report(analysis, rules), comparison=comparison)

    # -----------------------------
    # Internals
    # -----------------------------
    @staticmethod
    def _new_analysis(
        user_id: str,
        rules: PaymentRules,
        fingerprint: str,
        source: AnalysisSource,
        period: DateRange,
        build_entries: Callable[[str], List[DailyEntry]],
        metadata: Optional[dict] = None,
    ) -> Analysis:
        analysis = Analysis(
            user_id=user_id,
            fingerprint=fingerprint,
            source=source,
            period=period,
            rules_version=rules.version,
            metadata=metadata,
        )
        for e in build_entries(analysis.id):
            analysis.add_daily_entry(e)
        analysis.update_status(AnalysisStatus.COMPLETED)
        return analysis

    def _report(self, analysis: Analysis, rules: PaymentRules) -> ValidationReport:
        report = self.validation.validate_analysis(analysis)
        report.extend(self.validation.validate_payment_rules(rules))
        return report

    def _remember(self, user_id: str, submission: PriorSubmission) -> None:
        if self.history is not None:
            self.history.remember(user_id, submission)
