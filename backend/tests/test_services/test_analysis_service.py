"""
End-to-end tests for AnalysisService: uploads and manual entries in,
Analysis + ValidationReport + fingerprint comparison out.
"""

from datetime import date
from decimal import Decimal

import pytest

from payment_analyzer.contracts.processing import ManualEntry
from payment_analyzer.core.errors import UserFacingError
from payment_analyzer.domain import (
    AnalysisSource,
    AnalysisStatus,
    Money,
    PaymentStatus,
    default_rules,
)
from payment_analyzer.fingerprint import FingerprintStatus
from payment_analyzer.services import AnalysisService, InMemoryFingerprintHistory


class _DownRepository:
    def list_submissions(self, user_id):
        raise ConnectionError("db down")


@pytest.fixture
def service() -> AnalysisService:
    return AnalysisService(history=InMemoryFingerprintHistory())


@pytest.fixture
def rules():
    return default_rules("driver-1")


class TestAnalyzeUploads:
    def test_builds_completed_analysis(self, service, rules, upload, runsheet_pdf, invoice_pdf):
        files = [upload("runsheet_0107.pdf", runsheet_pdf), upload("self_bill.pdf", invoice_pdf)]
        out = service.analyze_uploads("driver-1", rules, files)

        a = out.analysis
        assert a.source == AnalysisSource.UPLOAD
        assert a.status == AnalysisStatus.COMPLETED
        assert (a.period.start, a.period.end) == (date(2025, 7, 1), date(2025, 7, 2))
        assert [e.date for e in a.daily_entries] == [date(2025, 7, 1), date(2025, 7, 2)]
        assert all(e.analysis_id == a.id for e in a.daily_entries)
        assert a.rules_version == rules.version

        first = a.get_daily_entry(date(2025, 7, 1))
        assert int(first.consignments) == 3
        assert first.paid_amount == Money.of("45.50")
        assert first.status == PaymentStatus.UNDERPAID

        assert out.comparison.status == FingerprintStatus.NEW
        assert out.file_set.is_valid
        assert out.processing.summary.successful_files == 2

    def test_same_upload_twice_is_duplicate(self, service, rules, upload, runsheet_pdf, invoice_pdf):
        files = [upload("runsheet_0107.pdf", runsheet_pdf), upload("self_bill.pdf", invoice_pdf)]
        first = service.analyze_uploads("driver-1", rules, files)
        second = service.analyze_uploads("driver-1", rules, files)

        assert second.analysis.fingerprint == first.analysis.fingerprint
        assert second.comparison.status == FingerprintStatus.DUPLICATE
        assert second.comparison.matched.analysis_id == first.analysis.id
        assert f"Files match existing analysis: {first.analysis.id}" in second.processing.validation.warnings

    def test_newer_file_is_modified(self, service, rules, upload, runsheet_pdf, invoice_pdf):
        service.analyze_uploads(
            "driver-1", rules, [upload("runsheet_0107.pdf", runsheet_pdf), upload("self_bill.pdf", invoice_pdf)]
        )
        out = service.analyze_uploads(
            "driver-1",
            rules,
            [upload("runsheet_0107.pdf", runsheet_pdf, last_modified=5000), upload("self_bill.pdf", invoice_pdf)],
        )

        assert out.comparison.status == FingerprintStatus.MODIFIED
        assert out.comparison.updated_files == ("runsheet_0107.pdf",)
        assert out.processing.validation.is_updated

    def test_history_is_per_user(self, service, rules, upload, runsheet_pdf):
        files = [upload("runsheet_0107.pdf", runsheet_pdf)]
        service.analyze_uploads("driver-1", rules, files)
        assert service.analyze_uploads("driver-2", rules, files).comparison.status == FingerprintStatus.NEW

    def test_invalid_files_raise(self, service, rules, upload):
        with pytest.raises(UserFacingError) as ei:
            service.analyze_uploads("driver-1", rules, [upload("fake.pdf", b"hello")])
        assert ei.value.code == "INVALID_FILES"
        assert ei.value.stage == "validation"

    def test_nothing_parsed_raises(self, service, rules, upload, blank_pdf):
        with pytest.raises(UserFacingError) as ei:
            service.analyze_uploads("driver-1", rules, [upload("runsheet.pdf", blank_pdf)])
        assert ei.value.code == "NO_USABLE_DATA"
        assert ei.value.stage == "parse"


class TestAnalyzeManual:
    def test_manual_entries(self, service, rules):
        entries = [
            ManualEntry(date=date(2025, 7, 1), consignments=20, paid_amount=Decimal("145.00")),
            ManualEntry(date=date(2025, 7, 2), consignments=10, paid_amount=Decimal("100.00")),
        ]
        out = service.analyze_manual("driver-1", rules, entries)

        a = out.analysis
        assert a.source == AnalysisSource.MANUAL
        assert (a.period.start, a.period.end) == (date(2025, 7, 1), date(2025, 7, 2))
        assert a.get_daily_entry(date(2025, 7, 1)).status == PaymentStatus.BALANCED
        assert out.comparison.status == FingerprintStatus.NEW

        again = service.analyze_manual("driver-1", rules, list(reversed(entries)))
        assert again.analysis.fingerprint == a.fingerprint
        assert again.comparison.status == FingerprintStatus.UNCHANGED

    def test_no_entries(self, service, rules):
        with pytest.raises(UserFacingError) as ei:
            service.analyze_manual("driver-1", rules, [])
        assert ei.value.code == "NO_ENTRIES"


class TestBuildingBlocks:
    def test_daily_payment(self, service, rules):
        e = service.compute_daily_payment(rules, date(2025, 7, 1), 20, paid_amount="145.00")
        assert e.expected_total == Money.of(145)
        assert e.status == PaymentStatus.BALANCED

    def test_fingerprint_is_order_independent(self, service, upload, runsheet_pdf, invoice_pdf):
        a = upload("runsheet_0107.pdf", runsheet_pdf)
        b = upload("self_bill.pdf", invoice_pdf)
        assert service.compute_fingerprint([a, b]).value == service.compute_fingerprint([b, a]).value

    def test_compare_survives_repository_outage(self):
        svc = AnalysisService(repository=_DownRepository())
        assert svc.compare_fingerprint("abc", user_id="driver-1").status == FingerprintStatus.NEW

    def test_parse_files_reports_progress(self, service, upload, runsheet_pdf):
        calls = []
        result = service.parse_files(
            [upload("runsheet.pdf", runsheet_pdf)],
            user_id="driver-1",
            progress=lambda *args: calls.append(args),
        )
        assert result.summary.successful_files == 1
        assert calls == [(0, 1, ""), (1, 1, "runsheet.pdf")]
