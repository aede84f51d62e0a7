"""
Tests for RunsheetParser on already-extracted page text.
"""

from datetime import date

import pytest

from payment_analyzer.contracts.records import RunsheetRecord
from payment_analyzer.extract.parsers import RunsheetParser
from payment_analyzer.extract.parsers.runsheet import extract_page_consignments, extract_page_date


@pytest.fixture
def parser() -> RunsheetParser:
    return RunsheetParser(today=lambda: date(2025, 1, 1))


class TestPageHelpers:
    def test_label_date(self):
        assert extract_page_date("Runsheet\nDate: 01/07/2025\n") == date(2025, 7, 1)

    def test_iso_date_fallback(self):
        assert extract_page_date("Printed 2025-07-03 by depot") == date(2025, 7, 3)

    def test_impossible_date_skipped(self):
        assert extract_page_date("Date: 31/02/2025 printed 2025-07-02") == date(2025, 7, 2)

    def test_no_date(self):
        assert extract_page_date("nothing here") is None

    def test_consignment_ids(self):
        text = "1 1234567 A St Delivery\n2 AH12 B Rd Collection\n3 12345 C Ln Delivery\n"
        assert extract_page_consignments(text) == ["1234567", "AH12"]

    def test_marker_must_be_in_window(self):
        far = "1 1234567 " + " ".join(["x"] * 10) + " Delivery"
        assert extract_page_consignments(far) == []


class TestRunsheetParser:
    def test_single_consignment_scenario(self, parser):
        result = parser.parse_text(["Date: 01/07/2025\n1 1234567 Delivery\n"], "runsheet.pdf")
        assert result.success
        assert isinstance(result.data, RunsheetRecord)
        assert result.data.consignments_by_date == {"2025-07-01": 1}
        assert result.data.total_consignments == 1
        assert result.data_points == 1

    def test_pages_with_same_date_accumulate(self, parser):
        pages = [
            "Date: 01/07/2025\n1 1234567 Delivery\n",
            "Date: 01/07/2025\n2 7654321 Collection\n",
            "Date: 02/07/2025\n1 1111111 Delivery\n",
        ]
        data = parser.parse_text(pages, "runsheet.pdf").data
        assert data.consignments_by_date == {"2025-07-01": 2, "2025-07-02": 1}
        assert data.dates == [date(2025, 7, 1), date(2025, 7, 2)]
        assert data.details[0].consignment_ids == ["1234567", "7654321"]

    def test_filename_date_fallback(self, parser):
        result = parser.parse_text(["1 1234567 Delivery\n"], "runsheetDV_2025-07-04.pdf")
        assert result.data.dates == [date(2025, 7, 4)]
        assert any("filename" in w for w in result.warnings)

    def test_today_fallback(self, parser):
        result = parser.parse_text(["1 1234567 Delivery\n"], "scan.pdf")
        assert result.data.dates == [date(2025, 1, 1)]
        assert any("today" in w for w in result.warnings)

    def test_no_consignments_fails(self, parser):
        result = parser.parse_text(["Date: 01/07/2025\nNo stops today\n"], "runsheet.pdf")
        assert not result.success
        assert result.data is None
        assert result.error == "No dates found in runsheet"

    def test_warnings_for_sunday_and_high_count(self):
        parser = RunsheetParser(max_daily_consignments=1)
        page = "Date: 06/07/2025\n1 1234567 Delivery\n2 2345678 Delivery\n"
        result = parser.parse_text([page], "runsheet.pdf")
        assert result.success
        assert "Sunday deliveries detected" in result.warnings
        assert "Very high consignment count (2) on 2025-07-06" in result.warnings

    def test_can_parse(self, parser):
        assert parser.can_parse("DV_123.pdf")
        assert parser.can_parse("scan.pdf", "Consignment list")
        assert not parser.can_parse("scan.pdf")
