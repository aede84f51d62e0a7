from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .entries import DailyEntry, PaymentStatus
from .errors import DomainError
from .values import ConsignmentCount, DateRange, Money


class AnalysisSource(str, Enum):
    UPLOAD = "upload"
    MANUAL = "manual"
    IMPORT = "import"


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis:
    """
    A period of daily entries reconciled under one rules version.

    Entries are kept sorted by date. The constructor accepts entries as
    loaded from storage (duplicates included, so validation can report
    them); add_daily_entry() replaces an entry on the same date.
    """

    def __init__(
        self,
        *,
        user_id: str,
        fingerprint: str,
        source: AnalysisSource,
        period: DateRange,
        rules_version: int,
        daily_entries: Optional[Iterable[DailyEntry]] = None,
        status: AnalysisStatus = AnalysisStatus.PENDING,
        metadata: Optional[Dict[str, Any]] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        self.id = id or str(uuid.uuid4())
        self.user_id = user_id
        self.fingerprint = fingerprint
        self.source = AnalysisSource(source)
        self.period = period
        self.rules_version = rules_version
        self._status = AnalysisStatus(status)
        self._entries: List[DailyEntry] = sorted(daily_entries or [], key=lambda e: e.date)
        self._metadata: Dict[str, Any] = dict(metadata or {})
        self.created_at = created_at or _utcnow()
        self.updated_at = updated_at or self.created_at

    @property
    def status(self) -> AnalysisStatus:
        return self._status

    @property
    def daily_entries(self) -> List[DailyEntry]:
        return list(self._entries)

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    # -----------------------------
    # Entries
    # -----------------------------
    def add_daily_entry(self, entry: DailyEntry) -> None:
        if not self.period.contains(entry.date):
            raise DomainError(
                f"Daily entry date {entry.date.isoformat()} is outside analysis period "
                f"{self.period.format_range()}"
            )
        self._entries = [e for e in self._entries if e.date != entry.date]
        self._entries.append(entry)
        self._entries.sort(key=lambda e: e.date)
        self._touch()

    def remove_daily_entry(self, entry_date: date) -> None:
        self._entries = [e for e in self._entries if e.date != entry_date]
        self._touch()

    def get_daily_entry(self, entry_date: date) -> Optional[DailyEntry]:
        for e in self._entries:
            if e.date == entry_date:
                return e
        return None

    def update_status(self, status: AnalysisStatus) -> None:
        self._status = AnalysisStatus(status)
        self._touch()

    def update_metadata(self, metadata: Dict[str, Any]) -> None:
        self._metadata.update(metadata)
        self._touch()

    def is_complete(self) -> bool:
        return self._status == AnalysisStatus.COMPLETED and bool(self._entries)

    def has_errors(self) -> bool:
        return self._status == AnalysisStatus.ERROR

    def _touch(self) -> None:
        self.updated_at = _utcnow()

    # -----------------------------
    # Totals
    # -----------------------------
    @property
    def working_days_count(self) -> int:
        return sum(1 for e in self._entries if e.is_working_day)

    @property
    def total_consignments(self) -> ConsignmentCount:
        total = ConsignmentCount.zero()
        for e in self._entries:
            total = total.add(e.consignments)
        return total

    @property
    def base_total(self) -> Money:
        return Money.sum(e.base_payment for e in self._entries)

    @property
    def bonus_total(self) -> Money:
        return Money.sum(e.total_bonus for e in self._entries)

    @property
    def pickup_total(self) -> Money:
        return Money.sum(e.pickup_total for e in self._entries)

    @property
    def expected_total(self) -> Money:
        return Money.sum(e.expected_total for e in self._entries)

    @property
    def paid_total(self) -> Money:
        return Money.sum(e.paid_amount for e in self._entries)

    @property
    def difference_total(self) -> Money:
        return self.paid_total - self.expected_total

    @property
    def overall_status(self) -> PaymentStatus:
        diff = self.difference_total
        if diff.is_zero():
            return PaymentStatus.BALANCED
        return PaymentStatus.OVERPAID if diff.is_positive() else PaymentStatus.UNDERPAID

    # -----------------------------
    # Serialization
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "fingerprint": self.fingerprint,
            "source": self.source.value,
            "status": self._status.value,
            "period": self.period.to_dict(),
            "rules_version": self.rules_version,
            "daily_entries": [e.to_dict() for e in self._entries],
            "metadata": dict(self._metadata),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "totals": {
                "consignments": self.total_consignments.count,
                "base_total": self.base_total.to_json(),
                "bonus_total": self.bonus_total.to_json(),
                "pickup_total": self.pickup_total.to_json(),
                "expected_total": self.expected_total.to_json(),
                "paid_total": self.paid_total.to_json(),
                "difference_total": self.difference_total.to_json(),
                "overall_status": self.overall_status.value,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Analysis":
        created = data.get("created_at")
        updated = data.get("updated_at")
        return cls(
            id=data.get("id"),
            user_id=str(data.get("user_id") or ""),
            fingerprint=str(data.get("fingerprint") or ""),
            source=AnalysisSource(data.get("source") or AnalysisSource.UPLOAD.value),
            status=AnalysisStatus(data.get("status") or AnalysisStatus.PENDING.value),
            period=DateRange.from_dict(data["period"]),
            rules_version=int(data.get("rules_version") or 1),
            daily_entries=[DailyEntry.from_dict(e) for e in data.get("daily_entries") or []],
            metadata=data.get("metadata") or {},
            created_at=datetime.fromisoformat(created) if created else None,
            updated_at=datetime.fromisoformat(updated) if updated else None,
        )
