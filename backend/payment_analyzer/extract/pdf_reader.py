from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import fitz  # PyMuPDF

from .blocks.text import normalize_lines
from .errors import InvalidPdfError, PdfReadError
from .types import PageText, ParsedPdf

PDF_MAGIC = b"%PDF"


def has_pdf_signature(data: bytes) -> bool:
    return bytes(data[:4]) == PDF_MAGIC


def _page(index: int, txt: str) -> PageText:
    txt = (txt or "").rstrip("\n") + "\n"
    return PageText(page_index=index, text=txt, lines=normalize_lines(txt.splitlines()))


def pages_from_text(page_texts: Sequence[str]) -> ParsedPdf:
    """Already-extracted page strings -> ParsedPdf (no PDF involved)."""
    return ParsedPdf(pages=[_page(i, t) for i, t in enumerate(page_texts)])


def read_pdf_bytes(data: bytes) -> ParsedPdf:
    """
    Machine-readable PDF bytes -> text layer per page.
    No OCR: a document without any text raises PdfReadError.
    """
    if not has_pdf_signature(data):
        raise InvalidPdfError("File is not a valid PDF (missing %PDF signature)")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise PdfReadError(f"Cannot open PDF: {e}") from e

    pages: List[PageText] = []
    try:
        for i in range(doc.page_count):
            page = doc.load_page(i)
            pages.append(_page(i, page.get_text("text") or ""))
    except Exception as e:
        raise PdfReadError(f"Cannot read PDF text: {e}") from e
    finally:
        doc.close()

    # --- Guard: scanned/image-only PDF without extractable text layer ---
    if not any(p.text.strip() for p in pages):
        raise PdfReadError(
            "PDF has no extractable text layer (looks like a scan/image). "
            "OCR is not supported."
        )

    return ParsedPdf(pages=pages)


def read_pdf_file(pdf_path: str) -> ParsedPdf:
    p = Path(pdf_path)
    if not p.exists() or not p.is_file():
        raise PdfReadError(f"PDF not found: {pdf_path}")
    return read_pdf_bytes(p.read_bytes())
