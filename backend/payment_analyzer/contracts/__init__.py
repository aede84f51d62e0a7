from .processing import (
    BatchValidation,
    FileError,
    FileMetadata,
    FileSetCheck,
    ManualEntry,
    ProcessedFile,
    ProcessingResult,
    ProcessingSummary,
)
from .uploads import UploadedFile
from .records import (
    FileKind,
    InvoiceEntry,
    InvoiceRecord,
    ParseResult,
    RawPage,
    RawText,
    RunsheetDay,
    RunsheetRecord,
)

__all__ = [
    "BatchValidation",
    "FileError",
    "FileKind",
    "FileMetadata",
    "FileSetCheck",
    "InvoiceEntry",
    "InvoiceRecord",
    "ManualEntry",
    "ParseResult",
    "ProcessedFile",
    "ProcessingResult",
    "ProcessingSummary",
    "RawPage",
    "RawText",
    "RunsheetDay",
    "RunsheetRecord",
    "UploadedFile",
]
