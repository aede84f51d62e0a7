from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .records import FileKind, ParseResult


class FileMetadata(BaseModel):
    """
    What is known about an uploaded file without reading its content.
    last_modified is epoch milliseconds, as sent by browsers.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    size: int = Field(..., ge=0)
    mime_type: str = ""
    last_modified: int = 0
    hash: Optional[str] = None


class ProcessedFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    type: FileKind
    hash: str
    parse_result: ParseResult
    metadata: FileMetadata


class FileError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_name: str
    error: str


class ProcessingSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_files: int = 0
    successful_files: int = 0
    failed_files: int = 0
    runsheet_count: int = 0
    invoice_count: int = 0
    unknown_count: int = 0


class BatchValidation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    is_updated: bool = False
    updated_files: List[str] = Field(default_factory=list)
    duplicate_files: List[FileMetadata] = Field(default_factory=list)
    existing_analysis: Optional[str] = None


class ProcessingResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    files: List[ProcessedFile] = Field(default_factory=list)
    runsheets: List[ProcessedFile] = Field(default_factory=list)
    invoices: List[ProcessedFile] = Field(default_factory=list)
    errors: List[FileError] = Field(default_factory=list)
    summary: ProcessingSummary = Field(default_factory=ProcessingSummary)
    validation: BatchValidation = Field(default_factory=BatchValidation)
    file_metadata: List[FileMetadata] = Field(default_factory=list)


class FileSetCheck(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ManualEntry(BaseModel):
    """One manually keyed day (no PDFs involved)."""

    model_config = ConfigDict(extra="forbid")

    date: date
    consignments: int = Field(..., ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    pickups: int = Field(default=0, ge=0)
    pickup_total: Decimal = Field(default=Decimal("0"), ge=0)
