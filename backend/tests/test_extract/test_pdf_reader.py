"""
Tests for PDF text extraction (PyMuPDF) and the parse() byte entry point.
"""

import pytest

from payment_analyzer.extract import InvalidPdfError, PdfReadError, pages_from_text, read_pdf_bytes
from payment_analyzer.extract.parsers import RunsheetParser


class TestReadPdfBytes:
    def test_reads_pages(self, make_pdf):
        parsed = read_pdf_bytes(make_pdf(["Date: 01/07/2025", "second page"]))
        assert len(parsed.pages) == 2
        assert "01/07/2025" in parsed.first_page_text
        assert all(p.text.endswith("\n") for p in parsed.pages)
        raw = parsed.to_raw()
        assert [p.page_number for p in raw.pages] == [1, 2]
        assert raw.text == parsed.text

    def test_signature_required(self):
        with pytest.raises(InvalidPdfError):
            read_pdf_bytes(b"hello world")

    def test_corrupt_pdf(self):
        with pytest.raises(PdfReadError):
            read_pdf_bytes(b"%PDF-1.7 garbage")

    def test_no_text_layer(self, blank_pdf):
        with pytest.raises(PdfReadError):
            read_pdf_bytes(blank_pdf)


class TestParseBytes:
    def test_runsheet_from_pdf(self, runsheet_pdf):
        result = RunsheetParser().parse(runsheet_pdf, "runsheet.pdf")
        assert result.success
        assert result.data.consignments_by_date == {"2025-07-01": 3}
        assert result.raw.pages

    def test_unreadable_bytes_become_failure(self):
        result = RunsheetParser().parse(b"not a pdf", "runsheet.pdf")
        assert not result.success
        assert "signature" in result.error


def test_pages_from_text_appends_newline():
    parsed = pages_from_text(["a", "b\n"])
    assert parsed.text == "a\nb\n"
