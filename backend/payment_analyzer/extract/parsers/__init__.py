from .base import DataCheck, PdfParserBase
from .invoice import InvoiceParser
from .runsheet import RunsheetParser

__all__ = ["DataCheck", "InvoiceParser", "PdfParserBase", "RunsheetParser"]
