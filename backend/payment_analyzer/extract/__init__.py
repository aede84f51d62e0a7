from .errors import ExtractError, InvalidPdfError, PdfReadError
from .pdf_reader import has_pdf_signature, pages_from_text, read_pdf_bytes, read_pdf_file
from .types import PageText, ParsedPdf

__all__ = [
    "ExtractError",
    "InvalidPdfError",
    "PageText",
    "ParsedPdf",
    "PdfReadError",
    "has_pdf_signature",
    "pages_from_text",
    "read_pdf_bytes",
    "read_pdf_file",
]
