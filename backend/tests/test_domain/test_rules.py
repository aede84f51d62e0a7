"""
Tests for PaymentRules lookups and versioning.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from payment_analyzer.domain import Money, PaymentRules, RulesError, default_rules


@pytest.fixture
def rules() -> PaymentRules:
    return default_rules("driver-1")


class TestDayLookups:
    @pytest.mark.parametrize("weekday", range(7))
    def test_unloading_zero_only_on_sunday_and_monday(self, rules, weekday):
        b = rules.get_applicable_bonuses(weekday)
        assert b.unloading.is_zero() == (weekday in (6, 0))

    @pytest.mark.parametrize("weekday", range(7))
    def test_attendance_and_early_zero_only_off_weekdays(self, rules, weekday):
        b = rules.get_applicable_bonuses(weekday)
        off = weekday not in range(0, 5)
        assert b.attendance.is_zero() == off
        assert b.early.is_zero() == off

    def test_rate_for_day(self, rules):
        assert rules.get_rate_for_day(5) == Money.of("3.00")
        assert rules.get_rate_for_day(1) == Money.of("2.00")
        assert rules.get_rate_for_day(6) == Money.of("2.00")

    def test_bonus_total(self, rules):
        assert rules.get_applicable_bonuses(2).total == Money.of(105)
        assert rules.get_applicable_bonuses(5).total == Money.of(30)


class TestVersioning:
    def test_new_version_increments_and_keeps_original(self, rules):
        new = rules.create_new_version(weekday_rate=Money.of("2.50"))
        assert new.version == rules.version + 1
        assert new.weekday_rate == Money.of("2.50")
        assert rules.weekday_rate == Money.of("2.00")
        assert new.id != rules.id
        assert new.is_active

    def test_unknown_field_rejected(self, rules):
        with pytest.raises(RulesError):
            rules.create_new_version(hourly_rate=Money.of(1))

    def test_invalid_version(self):
        with pytest.raises(RulesError):
            PaymentRules(
                user_id="u",
                weekday_rate=Money.of(2),
                saturday_rate=Money.of(3),
                unloading_bonus=Money.of(0),
                attendance_bonus=Money.of(0),
                early_bonus=Money.of(0),
                version=0,
            )

    def test_supersede_deactivates_old(self, rules):
        old, new = rules.supersede(early_bonus=Money.of(40))
        assert not old.is_active
        assert old.valid_until == new.valid_from
        assert new.early_bonus == Money.of(40)

    def test_is_valid_for(self, rules):
        now = datetime.now(timezone.utc)
        assert rules.is_valid_for(now + timedelta(seconds=1))
        assert not rules.is_valid_for(date(2000, 1, 1))
        assert not rules.deactivate().is_valid_for(now)

    def test_dict_round_trip(self, rules):
        again = PaymentRules.from_dict(rules.to_dict())
        assert again == rules
