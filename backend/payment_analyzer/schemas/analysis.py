"""
Request/response schemas for the analysis endpoints.

Money goes over the wire as a 2dp string ("12.50") so no float rounding
happens on either side.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..contracts.processing import FileMetadata, FileSetCheck, ManualEntry, ProcessingResult
from ..domain import DailyEntry, PaymentRules
from ..domain.values import Money
from ..fingerprint import Fingerprint, FingerprintComparison, PriorSubmission


class RulesIn(BaseModel):
    """Rate card; omitted fields take the standard defaults."""

    model_config = ConfigDict(extra="forbid")

    weekday_rate: Decimal = Field(default=Decimal("2.00"), ge=0)
    saturday_rate: Decimal = Field(default=Decimal("3.00"), ge=0)
    unloading_bonus: Decimal = Field(default=Decimal("30.00"), ge=0)
    attendance_bonus: Decimal = Field(default=Decimal("25.00"), ge=0)
    early_bonus: Decimal = Field(default=Decimal("50.00"), ge=0)
    version: int = Field(default=1, ge=1)

    def to_rules(self, user_id: str = "") -> PaymentRules:
        return PaymentRules(
            user_id=user_id,
            weekday_rate=Money.of(self.weekday_rate),
            saturday_rate=Money.of(self.saturday_rate),
            unloading_bonus=Money.of(self.unloading_bonus),
            attendance_bonus=Money.of(self.attendance_bonus),
            early_bonus=Money.of(self.early_bonus),
            version=self.version,
        )


# ----------------------------
# Daily payment
# ----------------------------


class DailyPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: dt.date
    consignments: int = Field(..., ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    pickups: int = Field(default=0, ge=0)
    pickup_total: Decimal = Field(default=Decimal("0"), ge=0)
    rules: RulesIn = Field(default_factory=RulesIn)


class DailyPaymentResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: dt.date
    day_name: str
    consignments: int
    rate: str
    base_payment: str
    pickups: int
    pickup_total: str
    unloading_bonus: str
    attendance_bonus: str
    early_bonus: str
    total_bonus: str
    expected_total: str
    paid_amount: str
    difference: str
    status: str

    @classmethod
    def from_entry(cls, entry: DailyEntry) -> "DailyPaymentResponse":
        return cls(
            date=entry.date,
            day_name=entry.day_name,
            consignments=int(entry.consignments),
            rate=entry.rate.to_json(),
            base_payment=entry.base_payment.to_json(),
            pickups=int(entry.pickups),
            pickup_total=entry.pickup_total.to_json(),
            unloading_bonus=entry.unloading_bonus.to_json(),
            attendance_bonus=entry.attendance_bonus.to_json(),
            early_bonus=entry.early_bonus.to_json(),
            total_bonus=entry.total_bonus.to_json(),
            expected_total=entry.expected_total.to_json(),
            paid_amount=entry.paid_amount.to_json(),
            difference=entry.difference.to_json(),
            status=entry.status.value,
        )


# ----------------------------
# Fingerprints
# ----------------------------


class ManualFingerprintRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str = ""
    start: dt.date
    end: dt.date
    entries: List[ManualEntry] = Field(default_factory=list)


class FingerprintResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fingerprint: str
    file_hashes: List[str] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)

    @classmethod
    def from_fingerprint(cls, fp: Fingerprint) -> "FingerprintResponse":
        return cls(fingerprint=fp.value, file_hashes=list(fp.file_hashes), metadata=dict(fp.metadata))


class PriorSubmissionIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fingerprint: str
    files: Optional[List[FileMetadata]] = None
    analysis_id: Optional[str] = None

    def to_prior(self) -> PriorSubmission:
        return PriorSubmission(
            fingerprint=self.fingerprint,
            files=tuple(self.files) if self.files is not None else None,
            analysis_id=self.analysis_id,
        )


class CompareFingerprintRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    current: str = Field(..., min_length=1)
    prior: List[PriorSubmissionIn] = Field(default_factory=list)
    files: Optional[List[FileMetadata]] = None


class ComparisonResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str
    matched_fingerprint: Optional[str] = None
    matched_analysis_id: Optional[str] = None
    updated_files: List[str] = Field(default_factory=list)

    @classmethod
    def from_comparison(cls, cmp: FingerprintComparison) -> "ComparisonResponse":
        return cls(**cmp.to_dict())


# ----------------------------
# Parse
# ----------------------------


class ParseResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    result: ProcessingResult
    file_set: FileSetCheck
    fingerprint: Optional[str] = None
