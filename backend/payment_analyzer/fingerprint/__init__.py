from .file_validation import FileValidationOptions, FileValidationService, format_file_size
from .fingerprint_service import (
    AnalysisMatch,
    FileComparison,
    FileFingerprint,
    FileFingerprintService,
    FileInfo,
    FileSetValidation,
    Fingerprint,
    FingerprintComparison,
    FingerprintStatus,
    PriorSubmission,
    detect_file_kind,
)

__all__ = [
    "AnalysisMatch",
    "FileComparison",
    "FileFingerprint",
    "FileFingerprintService",
    "FileInfo",
    "FileSetValidation",
    "FileValidationOptions",
    "FileValidationService",
    "Fingerprint",
    "FingerprintComparison",
    "FingerprintStatus",
    "PriorSubmission",
    "detect_file_kind",
    "format_file_size",
]
