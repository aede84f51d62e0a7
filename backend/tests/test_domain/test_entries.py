"""
Tests for DailyEntry derived values.
"""

from datetime import date

import pytest

from payment_analyzer.domain import DailyEntry, Money, PaymentStatus


def _entry(**overrides) -> DailyEntry:
    kwargs = dict(
        analysis_id="a1",
        entry_date=date(2025, 7, 1),
        consignments=20,
        rate="2.00",
        unloading_bonus=30,
        attendance_bonus=25,
        early_bonus=50,
        pickup_total="7.50",
        pickups=1,
        paid_amount="100.00",
    )
    kwargs.update(overrides)
    return DailyEntry(**kwargs)


def _component_sum(e: DailyEntry) -> Money:
    return e.base_payment + e.pickup_total + e.unloading_bonus + e.attendance_bonus + e.early_bonus


class TestDailyEntry:
    def test_expected_total_is_component_sum(self):
        e = _entry()
        assert e.base_payment == Money.of(40)
        assert e.expected_total == _component_sum(e) == Money.of("152.50")
        assert e.difference == Money.of("-52.50")
        assert e.status is PaymentStatus.UNDERPAID

    def test_update_paid_amount_recomputes(self):
        e = _entry()
        e.update_paid_amount("152.50")
        assert e.difference.is_zero()
        assert e.status is PaymentStatus.BALANCED
        e.update_paid_amount(200)
        assert e.status is PaymentStatus.OVERPAID

    def test_update_pickup_data_recomputes(self):
        e = _entry()
        e.update_pickup_data(3, "20.00")
        assert e.expected_total == _component_sum(e) == Money.of("165.00")
        assert e.difference == e.paid_amount - e.expected_total

    def test_explicit_base_payment_is_kept(self):
        e = _entry(base_payment="39.00")
        assert e.base_payment == Money.of(39)
        assert e.expected_total == _component_sum(e)

    def test_dict_round_trip_preserves_derived_values(self):
        e = _entry()
        again = DailyEntry.from_dict(e.to_dict())
        assert again.expected_total == e.expected_total
        assert again.difference == e.difference
        assert again.date == e.date
        assert again.id == e.id

    def test_day_helpers(self):
        e = _entry()
        assert e.day_name == "Tuesday"
        assert e.date_formatted == "01/07/2025"
        assert e.is_working_day
        assert not _entry(entry_date=date(2025, 7, 6)).is_working_day

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            _entry(consignments=-1)
