from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Sequence

import pytest


def pytest_sessionstart(session):
    """
    Make sure backend/ (home of the payment_analyzer package) is on sys.path,
    even when pytest is started from the repository root.
    """
    backend_dir = Path(__file__).resolve().parents[1]  # .../backend
    p = str(backend_dir)
    if p not in sys.path:
        sys.path.insert(0, p)


RUNSHEET_PAGE = "\n".join(
    [
        "Runsheet DV_1001",
        "Date: 01/07/2025",
        "1 1234567 Smith Street Delivery",
        "2 7654321 High Road Collection",
        "3 AH998877 Market Lane Delivery",
    ]
)

INVOICE_PAGE = "\n".join(
    [
        "Self Bill Invoice",
        "01/07/25 09:30 Route 4 45.50",
        "02/07/25 10:15 -PickUp Depot 12.00",
        "Docket Total: GBP 57.50",
    ]
)


def build_pdf(pages: Sequence[str]) -> bytes:
    import fitz  # PyMuPDF

    doc = fitz.open()
    try:
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((56, 72), text, fontsize=10)
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def make_pdf() -> Callable[[Sequence[str]], bytes]:
    """Builds an in-memory PDF with one text page per string."""
    return build_pdf


@pytest.fixture
def runsheet_pdf() -> bytes:
    return build_pdf([RUNSHEET_PAGE])


@pytest.fixture
def invoice_pdf() -> bytes:
    return build_pdf([INVOICE_PAGE])


@pytest.fixture
def blank_pdf() -> bytes:
    return build_pdf([""])


@pytest.fixture
def upload():
    from payment_analyzer.contracts.uploads import UploadedFile

    def _make(name: str, data: bytes, *, mime_type: str = "application/pdf", last_modified: int = 0):
        return UploadedFile(name=name, data=data, mime_type=mime_type, last_modified=last_modified)

    return _make
