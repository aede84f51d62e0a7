from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .entries import CountLike, DailyEntry, MoneyLike
from .rules import Bonuses, PaymentRules
from .values import ConsignmentCount, Money


@dataclass(frozen=True)
class DayInput:
    """Raw per-day facts before rates and bonuses are applied."""

    consignments: int = 0
    paid_amount: Decimal = Decimal("0")
    pickups: int = 0
    pickup_total: Decimal = Decimal("0")


@dataclass(frozen=True)
class DayBonuses:
    unloading: Money
    attendance: Money
    early: Money
    total: Money


@dataclass(frozen=True)
class WeeklyStats:
    working_days: int
    total_consignments: int
    base_total: Money
    bonus_total: Money
    pickup_total: Money
    expected_total: Money
    paid_total: Money
    difference: Money
    average_consignments_per_day: Decimal
    average_payment_per_day: Money

    def to_dict(self) -> Dict[str, Any]:
        return {
            "working_days": self.working_days,
            "total_consignments": self.total_consignments,
            "base_total": self.base_total.to_json(),
            "bonus_total": self.bonus_total.to_json(),
            "pickup_total": self.pickup_total.to_json(),
            "expected_total": self.expected_total.to_json(),
            "paid_total": self.paid_total.to_json(),
            "difference": self.difference.to_json(),
            "average_consignments_per_day": str(self.average_consignments_per_day),
            "average_payment_per_day": self.average_payment_per_day.to_json(),
        }


class PaymentCalculator:
    """
    Pure calculations over one PaymentRules version. No state besides the
    rules, so a single instance can be shared between threads.
    """

    def __init__(self, rules: PaymentRules) -> None:
        self._rules = rules

    @property
    def rules(self) -> PaymentRules:
        return self._rules

    def calculate_daily_payment(
        self,
        entry_date: date,
        consignments: CountLike,
        pickups: CountLike = 0,
        pickup_total: MoneyLike = 0,
        paid_amount: MoneyLike = 0,
        analysis_id: str = "",
    ) -> DailyEntry:
        weekday = entry_date.weekday()
        rate = self._rules.get_rate_for_day(weekday)
        bonuses = self._rules.get_applicable_bonuses(weekday)
        count = ConsignmentCount.of(consignments)

        return DailyEntry(
            analysis_id=analysis_id,
            entry_date=entry_date,
            consignments=count,
            rate=rate,
            base_payment=rate.multiply(count.count),
            pickups=pickups,
            pickup_total=pickup_total,
            unloading_bonus=bonuses.unloading,
            attendance_bonus=bonuses.attendance,
            early_bonus=bonuses.early,
            paid_amount=paid_amount,
        )

    def calculate_expected_total(
        self,
        consignments: CountLike,
        entry_date: date,
        pickup_total: MoneyLike = 0,
    ) -> Money:
        weekday = entry_date.weekday()
        rate = self._rules.get_rate_for_day(weekday)
        bonuses = self._rules.get_applicable_bonuses(weekday)
        base = rate.multiply(ConsignmentCount.of(consignments).count)
        return base + bonuses.total + Money.of(pickup_total)

    def is_valid_payment_day(self, entry_date: date) -> bool:
        return entry_date.weekday() != 6

    def get_rate_for_day(self, entry_date: date) -> Money:
        return self._rules.get_rate_for_day(entry_date.weekday())

    def get_bonuses_for_day(self, entry_date: date) -> DayBonuses:
        b: Bonuses = self._rules.get_applicable_bonuses(entry_date.weekday())
        return DayBonuses(unloading=b.unloading, attendance=b.attendance, early=b.early, total=b.total)

    # -----------------------------
    # Aggregation
    # -----------------------------
    def calculate_weekly_stats(self, entries: Iterable[DailyEntry]) -> WeeklyStats:
        working = [e for e in entries if e.is_working_day]
        days = len(working)
        if days == 0:
            zero = Money.zero()
            return WeeklyStats(
                working_days=0,
                total_consignments=0,
                base_total=zero,
                bonus_total=zero,
                pickup_total=zero,
                expected_total=zero,
                paid_total=zero,
                difference=zero,
                average_consignments_per_day=Decimal("0"),
                average_payment_per_day=zero,
            )

        total_consignments = sum(e.consignments.count for e in working)
        expected_total = Money.sum(e.expected_total for e in working)
        paid_total = Money.sum(e.paid_amount for e in working)

        return WeeklyStats(
            working_days=days,
            total_consignments=total_consignments,
            base_total=Money.sum(e.base_payment for e in working),
            bonus_total=Money.sum(e.total_bonus for e in working),
            pickup_total=Money.sum(e.pickup_total for e in working),
            expected_total=expected_total,
            paid_total=paid_total,
            difference=paid_total - expected_total,
            average_consignments_per_day=(Decimal(total_consignments) / days).quantize(Decimal("0.01")),
            average_payment_per_day=Money(paid_total.amount / days),
        )

    @staticmethod
    def group_by_weeks(entries: Iterable[DailyEntry]) -> List[Tuple[date, List[DailyEntry]]]:
        """[(monday_of_week, entries sorted by date), ...] in week order."""
        weeks: Dict[date, List[DailyEntry]] = {}
        for e in entries:
            monday = e.date - timedelta(days=e.date.weekday())
            weeks.setdefault(monday, []).append(e)
        return [(monday, sorted(weeks[monday], key=lambda x: x.date)) for monday in sorted(weeks)]

    # -----------------------------
    # Builders
    # -----------------------------
    def build_entries(self, daily_data: Mapping[date, DayInput], analysis_id: str = "") -> List[DailyEntry]:
        out: List[DailyEntry] = []
        for day in sorted(daily_data):
            item = daily_data[day]
            out.append(
                self.calculate_daily_payment(
                    day,
                    item.consignments,
                    pickups=item.pickups,
                    pickup_total=item.pickup_total,
                    paid_amount=item.paid_amount,
                    analysis_id=analysis_id,
                )
            )
        return out

    def entries_from_manual(self, manual_entries: Iterable[Any], analysis_id: str = "") -> List[DailyEntry]:
        """
        Manual entries are any objects exposing date / consignments /
        paid_amount and optionally pickups / pickup_total (see ManualEntry).
        Later entries for the same date replace earlier ones.
        """
        data: Dict[date, DayInput] = {}
        for m in manual_entries:
            data[m.date] = DayInput(
                consignments=int(m.consignments),
                paid_amount=Decimal(str(m.paid_amount)),
                pickups=int(getattr(m, "pickups", 0) or 0),
                pickup_total=Decimal(str(getattr(m, "pickup_total", 0) or 0)),
            )
        return self.build_entries(data, analysis_id=analysis_id)
