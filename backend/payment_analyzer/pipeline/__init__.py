from .processor import (
    PdfProcessor,
    ProgressCallback,
    collect_warnings,
    determine_file_type,
    to_daily_data,
    validate_file_set,
)
from .worker import (
    ErrorEvent,
    PdfWorker,
    PdfWorkerClient,
    ProcessFilesRequest,
    ProgressEvent,
    ResultEvent,
    WorkerError,
    WorkerTerminated,
)

__all__ = [
    "ErrorEvent",
    "PdfProcessor",
    "PdfWorker",
    "PdfWorkerClient",
    "ProcessFilesRequest",
    "ProgressCallback",
    "ProgressEvent",
    "ResultEvent",
    "WorkerError",
    "WorkerTerminated",
    "collect_warnings",
    "determine_file_type",
    "to_daily_data",
    "validate_file_set",
]
