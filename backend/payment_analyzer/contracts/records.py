from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator


# ----------------------------
# Common scalar types
# ----------------------------

TimeStr = Annotated[
    str,
    StringConstraints(
        pattern=r"^\d{2}:\d{2}$",  # HH:MM
        strip_whitespace=True,
    ),
]

IsoDateStr = Annotated[
    str,
    StringConstraints(
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        strip_whitespace=True,
    ),
]

FileKind = Literal["runsheet", "invoice", "unknown"]


# ----------------------------
# Raw text
# ----------------------------


class RawPage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page_number: int = Field(..., ge=1)
    text: str


class RawText(BaseModel):
    """Text layer of a PDF: full text is the page texts concatenated."""

    model_config = ConfigDict(extra="forbid")

    text: str = ""
    pages: List[RawPage] = Field(default_factory=list)


# ----------------------------
# Runsheet
# ----------------------------


class RunsheetDay(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: date
    consignments: int = Field(..., ge=0)
    consignment_ids: List[str] = Field(default_factory=list)


class RunsheetRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["runsheet"] = "runsheet"
    dates: List[date] = Field(default_factory=list)
    consignments_by_date: Dict[IsoDateStr, int] = Field(default_factory=dict)
    total_consignments: int = Field(default=0, ge=0)
    details: List[RunsheetDay] = Field(default_factory=list)

    @model_validator(mode="after")
    def _total_matches_days(self) -> "RunsheetRecord":
        if self.total_consignments != sum(self.consignments_by_date.values()):
            raise ValueError("total_consignments must equal the sum of per-date counts")
        return self


# ----------------------------
# Invoice
# ----------------------------


class InvoiceEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: date
    time: Optional[TimeStr] = None
    amount: Decimal = Field(..., decimal_places=2)
    service_type: str = "Standard"
    description: Optional[str] = None

    @property
    def is_pickup(self) -> bool:
        return "pickup" in self.service_type.lower()


class InvoiceRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["invoice"] = "invoice"
    entries: List[InvoiceEntry] = Field(default_factory=list)
    pickup_services: List[InvoiceEntry] = Field(default_factory=list)
    extra_drops: List[InvoiceEntry] = Field(default_factory=list)
    total_amount: Decimal = Decimal("0.00")
    document_total: Optional[Decimal] = None
    is_valid: bool = True
    dates: List[date] = Field(default_factory=list)
    validation_message: Optional[str] = None

    def all_entries(self) -> List[InvoiceEntry]:
        return [*self.entries, *self.pickup_services, *self.extra_drops]


ParsedRecord = Annotated[Union[RunsheetRecord, InvoiceRecord], Field(discriminator="kind")]


class ParseResult(BaseModel):
    """
    Outcome of one extractor run. Expected failures are reported here
    (success=False + error) instead of being raised.
    """

    model_config = ConfigDict(extra="forbid")

    success: bool
    data: Optional[ParsedRecord] = None
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    raw: RawText = Field(default_factory=RawText)

    @property
    def data_points(self) -> int:
        if isinstance(self.data, RunsheetRecord):
            return self.data.total_consignments
        if isinstance(self.data, InvoiceRecord):
            return len(self.data.entries)
        return 0
