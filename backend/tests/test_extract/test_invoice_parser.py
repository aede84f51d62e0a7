"""
Tests for InvoiceParser on already-extracted page text.
"""

from datetime import date
from decimal import Decimal

import pytest

from payment_analyzer.contracts.records import InvoiceRecord
from payment_analyzer.extract.parsers import InvoiceParser
from payment_analyzer.extract.parsers.invoice import extract_document_total


@pytest.fixture
def parser() -> InvoiceParser:
    return InvoiceParser()


class TestDocumentTotal:
    @pytest.mark.parametrize(
        "text",
        ["Docket Total: £1,045.50", "TOTAL: GBP £1,045.50", "GBP £1,045.50 Total:"],
    )
    def test_forms(self, text):
        assert extract_document_total(text) == Decimal("1045.50")

    def test_missing(self):
        assert extract_document_total("no totals") is None


class TestEntries:
    @pytest.mark.parametrize(
        "amount, captured",
        [("2.99", False), ("3.00", True), ("500.00", True), ("500.01", False)],
    )
    def test_amount_band(self, parser, amount, captured):
        entries = parser.extract_entries(f"01/07/25 09:30 Route {amount}")
        assert bool(entries) is captured

    def test_out_of_band_amount_ends_search(self, parser):
        assert parser.extract_entries("01/07/25 09:30 1.50 45.50") == []

    def test_pickup_marker(self, parser):
        (entry,) = parser.extract_entries("02/07/25 10:15 -PickUp Depot 12.00")
        assert entry.is_pickup
        assert entry.time == "10:15"

    def test_scan_stops_at_docket_total(self, parser):
        text = "01/07/25 09:30 45.50 Docket Total: £45.50 02/07/25 09:30 10.00"
        assert [e.date for e in parser.extract_entries(text)] == [date(2025, 7, 1)]

    def test_invalid_date_skipped(self, parser):
        assert parser.extract_entries("31/02/25 09:30 45.50") == []


class TestInvoiceParser:
    def test_scenario_valid_total(self, parser):
        result = parser.parse_text(["01/07/25 09:30 Route 4 45.50\nDocket Total: £45.50\n"], "invoice.pdf")
        assert result.success
        data = result.data
        assert isinstance(data, InvoiceRecord)
        assert [(e.date, e.amount) for e in data.entries] == [(date(2025, 7, 1), Decimal("45.50"))]
        assert data.is_valid
        assert data.validation_message == "Totals match - validation successful"
        assert result.warnings == []

    def test_total_mismatch_is_warning(self, parser):
        result = parser.parse_text(["01/07/25 09:30 45.50\nDocket Total: £50.00\n"], "invoice.pdf")
        assert result.success
        assert not result.data.is_valid
        assert result.warnings[0].startswith("Total mismatch")

    def test_missing_total_cannot_validate(self, parser):
        result = parser.parse_text(["01/07/25 09:30 45.50\n"], "invoice.pdf")
        assert result.success
        assert result.data.is_valid
        assert result.warnings == ["Could not find document total for validation"]

    def test_pickups_categorised(self, parser):
        page = "01/07/25 09:30 45.50\n01/07/25 11:00 -PickUp 12.00\nDocket Total: £57.50\n"
        data = parser.parse_text([page], "invoice.pdf").data
        assert len(data.entries) == 1
        assert len(data.pickup_services) == 1
        assert data.total_amount == Decimal("57.50")
        assert data.dates == [date(2025, 7, 1)]

    def test_extra_drop_wording_stays_standard(self, parser):
        data = parser.parse_text(["01/07/25 09:30 Extra Drop 45.50\n"], "invoice.pdf").data
        assert [e.amount for e in data.entries] == [Decimal("45.50")]
        assert data.entries[0].description is None
        assert data.extra_drops == []

    def test_no_entries_fails(self, parser):
        result = parser.parse_text(["Invoice\nDocket Total: £0.00\n"], "invoice.pdf")
        assert not result.success
        assert result.error == "No payment entries found in invoice"

    def test_configurable_band(self):
        parser = InvoiceParser(min_amount=Decimal("1.00"))
        assert parser.extract_entries("01/07/25 09:30 2.00")
