from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from .analysis import Analysis
from .entries import DailyEntry
from .rules import PaymentRules
from .values import Money


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    field: Optional[str] = None
    value: Any = None

    def to_dict(self) -> dict:
        out: dict = {"code": self.code, "message": self.message}
        if self.field:
            out["field"] = self.field
        if self.value is not None:
            out["value"] = self.value
        return out


@dataclass
class ValidationReport:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationReport") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def error_codes(self) -> List[str]:
        return [e.code for e in self.errors]

    def warning_codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


def _money_value(m: Money) -> str:
    return m.to_json()


class ValidationService:
    """
    Business-rule checks over analyses, entries and rule sets.

    Errors block forward progress; warnings only annotate.
    """

    def __init__(
        self,
        *,
        max_daily_consignments: int = 200,
        max_daily_payment: Decimal = Decimal("1000"),
        discrepancy_threshold: Decimal = Decimal("50"),
        max_weekday_rate: Decimal = Decimal("10"),
        max_saturday_rate: Decimal = Decimal("15"),
    ) -> None:
        self.max_daily_consignments = max_daily_consignments
        self.max_daily_payment = Money.of(max_daily_payment)
        self.discrepancy_threshold = Money.of(discrepancy_threshold)
        self.max_weekday_rate = Money.of(max_weekday_rate)
        self.max_saturday_rate = Money.of(max_saturday_rate)

    @classmethod
    def from_settings(cls, settings: Any) -> "ValidationService":
        return cls(
            max_daily_consignments=settings.max_daily_consignments,
            max_daily_payment=settings.max_daily_payment,
            discrepancy_threshold=settings.discrepancy_threshold,
            max_weekday_rate=settings.max_weekday_rate,
            max_saturday_rate=settings.max_saturday_rate,
        )

    # -----------------------------
    # Analysis
    # -----------------------------
    def validate_analysis(self, analysis: Analysis) -> ValidationReport:
        report = ValidationReport()
        entries = analysis.daily_entries

        if not entries:
            report.errors.append(
                ValidationIssue("NO_DAILY_ENTRIES", "Analysis must contain at least one daily entry")
            )

        missing = self._missing_working_days(analysis)
        if missing:
            report.warnings.append(
                ValidationIssue(
                    "MISSING_WORKING_DAYS",
                    "Missing entries for working days: " + ", ".join(d.isoformat() for d in missing),
                    value=[d.isoformat() for d in missing],
                )
            )

        duplicates = self._duplicate_dates(entries)
        if duplicates:
            report.errors.append(
                ValidationIssue(
                    "DUPLICATE_ENTRIES",
                    "Duplicate entries found for dates: " + ", ".join(d.isoformat() for d in duplicates),
                    value=[d.isoformat() for d in duplicates],
                )
            )

        for entry in entries:
            report.extend(self.validate_daily_entry(entry))

        large = self._large_discrepancies(entries)
        if large:
            report.warnings.append(
                ValidationIssue(
                    "LARGE_DISCREPANCIES",
                    f"Large payment discrepancies found on {len(large)} days",
                    value=[e.date.isoformat() for e in large],
                )
            )

        return report

    # -----------------------------
    # Single entry
    # -----------------------------
    def validate_daily_entry(self, entry: DailyEntry) -> ValidationReport:
        report = ValidationReport()
        count = entry.consignments.count

        if not entry.is_working_day and count > 0:
            report.warnings.append(
                ValidationIssue(
                    "SUNDAY_CONSIGNMENTS",
                    f"Consignments recorded on Sunday (non-working day) {entry.date.isoformat()}",
                    field="consignments",
                    value=count,
                )
            )

        if count == 0 and entry.paid_amount.is_positive():
            report.warnings.append(
                ValidationIssue(
                    "PAYMENT_WITHOUT_CONSIGNMENTS",
                    f"Payment received with zero consignments on {entry.date.isoformat()}",
                    field="paid_amount",
                    value=_money_value(entry.paid_amount),
                )
            )

        if count > self.max_daily_consignments:
            report.warnings.append(
                ValidationIssue(
                    "HIGH_CONSIGNMENT_COUNT",
                    f"Unusually high consignment count on {entry.date.isoformat()}",
                    field="consignments",
                    value=count,
                )
            )

        if entry.paid_amount > self.max_daily_payment:
            report.warnings.append(
                ValidationIssue(
                    "HIGH_PAYMENT_AMOUNT",
                    f"Unusually high payment amount on {entry.date.isoformat()}",
                    field="paid_amount",
                    value=_money_value(entry.paid_amount),
                )
            )

        if entry.paid_amount.is_negative():
            report.errors.append(
                ValidationIssue(
                    "NEGATIVE_PAYMENT",
                    "Payment amount cannot be negative",
                    field="paid_amount",
                    value=_money_value(entry.paid_amount),
                )
            )

        return report

    # -----------------------------
    # Rules
    # -----------------------------
    def validate_payment_rules(self, rules: PaymentRules) -> ValidationReport:
        report = ValidationReport()

        negative_checks = (
            ("weekday_rate", "NEGATIVE_WEEKDAY_RATE", "Weekday rate cannot be negative"),
            ("saturday_rate", "NEGATIVE_SATURDAY_RATE", "Saturday rate cannot be negative"),
            ("unloading_bonus", "NEGATIVE_UNLOADING_BONUS", "Unloading bonus cannot be negative"),
            ("attendance_bonus", "NEGATIVE_ATTENDANCE_BONUS", "Attendance bonus cannot be negative"),
            ("early_bonus", "NEGATIVE_EARLY_BONUS", "Early bonus cannot be negative"),
        )
        for attr, code, message in negative_checks:
            amount: Money = getattr(rules, attr)
            if amount.is_negative():
                report.errors.append(ValidationIssue(code, message, field=attr, value=_money_value(amount)))

        if rules.saturday_rate < rules.weekday_rate:
            report.warnings.append(
                ValidationIssue(
                    "SATURDAY_RATE_LOWER",
                    "Saturday rate is lower than weekday rate",
                    value={
                        "weekday": _money_value(rules.weekday_rate),
                        "saturday": _money_value(rules.saturday_rate),
                    },
                )
            )

        if rules.weekday_rate > self.max_weekday_rate:
            report.warnings.append(
                ValidationIssue(
                    "HIGH_WEEKDAY_RATE",
                    "Weekday rate seems unusually high",
                    field="weekday_rate",
                    value=_money_value(rules.weekday_rate),
                )
            )

        if rules.saturday_rate > self.max_saturday_rate:
            report.warnings.append(
                ValidationIssue(
                    "HIGH_SATURDAY_RATE",
                    "Saturday rate seems unusually high",
                    field="saturday_rate",
                    value=_money_value(rules.saturday_rate),
                )
            )

        return report

    # -----------------------------
    # Helpers
    # -----------------------------
    @staticmethod
    def _missing_working_days(analysis: Analysis) -> List[date]:
        have = {e.date for e in analysis.daily_entries}
        return [d for d in analysis.period.working_days() if d not in have]

    @staticmethod
    def _duplicate_dates(entries: Iterable[DailyEntry]) -> List[date]:
        seen: set = set()
        dups: List[date] = []
        for e in entries:
            if e.date in seen and e.date not in dups:
                dups.append(e.date)
            seen.add(e.date)
        return dups

    def _large_discrepancies(self, entries: Iterable[DailyEntry]) -> List[DailyEntry]:
        return [e for e in entries if e.difference.abs() > self.discrepancy_threshold]
