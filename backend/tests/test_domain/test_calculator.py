"""
Tests for PaymentCalculator.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from payment_analyzer.contracts.processing import ManualEntry
from payment_analyzer.domain import DayInput, Money, PaymentCalculator, default_rules

TUESDAY = date(2025, 7, 1)
MONDAY = date(2025, 6, 30)
SATURDAY = date(2025, 7, 5)
SUNDAY = date(2025, 7, 6)


@pytest.fixture
def calc() -> PaymentCalculator:
    return PaymentCalculator(default_rules("driver-1"))


class TestDailyPayment:
    def test_tuesday_twenty_consignments(self, calc):
        e = calc.calculate_daily_payment(TUESDAY, 20)
        assert e.base_payment == Money.of(40)
        assert e.unloading_bonus == Money.of(30)
        assert e.attendance_bonus == Money.of(25)
        assert e.early_bonus == Money.of(50)
        assert e.expected_total == Money.of(145)

    def test_monday_has_no_unloading_bonus(self, calc):
        e = calc.calculate_daily_payment(MONDAY, 20)
        assert e.unloading_bonus.is_zero()
        assert e.attendance_bonus == Money.of(25)
        assert e.early_bonus == Money.of(50)
        assert e.expected_total == Money.of(115)

    def test_saturday_rate_and_bonuses(self, calc):
        e = calc.calculate_daily_payment(SATURDAY, 10)
        assert e.rate == Money.of(3)
        assert e.base_payment == Money.of(30)
        assert e.total_bonus == Money.of(30)

    def test_sunday(self, calc):
        assert not calc.is_valid_payment_day(SUNDAY)
        assert calc.get_bonuses_for_day(SUNDAY).total.is_zero()

    def test_pickups_and_paid(self, calc):
        e = calc.calculate_daily_payment(TUESDAY, 20, pickups=2, pickup_total="15.00", paid_amount="160.00")
        assert e.expected_total == Money.of(160)
        assert e.difference.is_zero()

    def test_expected_total_matches_entry(self, calc):
        for offset in range(7):
            d = MONDAY + timedelta(days=offset)
            assert calc.calculate_expected_total(12, d, "5.00") == calc.calculate_daily_payment(
                d, 12, pickup_total="5.00"
            ).expected_total


class TestAggregation:
    def test_weekly_stats_ignore_sunday(self, calc):
        entries = [
            calc.calculate_daily_payment(TUESDAY, 20, paid_amount=145),
            calc.calculate_daily_payment(SATURDAY, 10, paid_amount=50),
            calc.calculate_daily_payment(SUNDAY, 5, paid_amount=10),
        ]
        stats = calc.calculate_weekly_stats(entries)
        assert stats.working_days == 2
        assert stats.total_consignments == 30
        assert stats.expected_total == Money.of(205)
        assert stats.paid_total == Money.of(195)
        assert stats.difference == Money.of(-10)
        assert stats.average_consignments_per_day == Decimal("15.00")
        assert stats.average_payment_per_day == Money.of("97.50")

    def test_weekly_stats_empty(self, calc):
        stats = calc.calculate_weekly_stats([])
        assert stats.working_days == 0
        assert stats.expected_total.is_zero()
        assert stats.to_dict()["average_payment_per_day"] == "0.00"

    def test_group_by_weeks(self, calc):
        entries = [calc.calculate_daily_payment(d, 1) for d in (date(2025, 7, 8), TUESDAY, MONDAY)]
        weeks = calc.group_by_weeks(entries)
        assert [w for w, _ in weeks] == [MONDAY, date(2025, 7, 7)]
        assert [e.date for e in weeks[0][1]] == [MONDAY, TUESDAY]

    def test_build_entries_sorted(self, calc):
        data = {
            SATURDAY: DayInput(consignments=4, paid_amount=Decimal("42.00")),
            TUESDAY: DayInput(consignments=20, pickups=1, pickup_total=Decimal("12.00")),
        }
        entries = calc.build_entries(data, analysis_id="a1")
        assert [e.date for e in entries] == [TUESDAY, SATURDAY]
        assert entries[0].expected_total == Money.of(157)
        assert all(e.analysis_id == "a1" for e in entries)

    def test_entries_from_manual_last_wins(self, calc):
        manual = [
            ManualEntry(date=TUESDAY, consignments=5),
            ManualEntry(date=TUESDAY, consignments=20, paid_amount=Decimal("145")),
        ]
        (entry,) = calc.entries_from_manual(manual)
        assert int(entry.consignments) == 20
        assert entry.status.value == "balanced"
