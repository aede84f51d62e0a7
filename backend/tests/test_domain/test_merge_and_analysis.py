"""
Tests for paid-amount merging and the Analysis aggregate.
"""

from datetime import date

import pytest

from payment_analyzer.domain import (
    Analysis,
    AnalysisSource,
    AnalysisStatus,
    DateRange,
    DomainError,
    MergeStrategy,
    Money,
    PaymentCalculator,
    PaymentStatus,
    default_rules,
    merge_paid_amount,
)


class TestMergePaidAmount:
    existing = Money.of(50)

    def test_replace(self):
        assert merge_paid_amount(MergeStrategy.REPLACE, self.existing, [Money.of(10), Money.of(5)]) == Money.of(15)

    def test_add(self):
        assert merge_paid_amount(MergeStrategy.ADD, self.existing, [Money.of(10)]) == Money.of(60)

    def test_max(self):
        assert merge_paid_amount(MergeStrategy.MAX, self.existing, [Money.of(10)]) == Money.of(50)
        assert merge_paid_amount(MergeStrategy.MAX, self.existing, [Money.of(60)]) == Money.of(60)

    def test_smart(self):
        assert merge_paid_amount(MergeStrategy.SMART, self.existing, [Money.of(10)]) == Money.of(10)
        assert merge_paid_amount("smart", self.existing, [Money.of(10), Money.of(1)]) == Money.of(61)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            merge_paid_amount("overwrite", self.existing, [])


class TestAnalysis:
    @pytest.fixture
    def analysis(self) -> Analysis:
        calc = PaymentCalculator(default_rules())
        a = Analysis(
            user_id="u",
            fingerprint="abc",
            source=AnalysisSource.UPLOAD,
            period=DateRange(date(2025, 6, 30), date(2025, 7, 6)),
            rules_version=1,
        )
        a.add_daily_entry(calc.calculate_daily_payment(date(2025, 7, 1), 20, paid_amount=145, analysis_id=a.id))
        a.add_daily_entry(calc.calculate_daily_payment(date(2025, 6, 30), 10, paid_amount=100, analysis_id=a.id))
        return a

    def test_entries_sorted_and_totals(self, analysis):
        assert [e.date for e in analysis.daily_entries] == [date(2025, 6, 30), date(2025, 7, 1)]
        assert analysis.total_consignments.count == 30
        assert analysis.expected_total == Money.of(240)
        assert analysis.paid_total == Money.of(245)
        assert analysis.overall_status is PaymentStatus.OVERPAID

    def test_same_date_replaces(self, analysis):
        calc = PaymentCalculator(default_rules())
        analysis.add_daily_entry(calc.calculate_daily_payment(date(2025, 7, 1), 5))
        assert len(analysis.daily_entries) == 2
        assert analysis.get_daily_entry(date(2025, 7, 1)).consignments.count == 5

    def test_outside_period_rejected(self, analysis):
        calc = PaymentCalculator(default_rules())
        with pytest.raises(DomainError):
            analysis.add_daily_entry(calc.calculate_daily_payment(date(2025, 7, 7), 5))

    def test_status_and_round_trip(self, analysis):
        analysis.update_status(AnalysisStatus.COMPLETED)
        assert analysis.is_complete()
        data = analysis.to_dict()
        assert data["totals"]["expected_total"] == "240.00"
        again = Analysis.from_dict(data)
        assert again.id == analysis.id
        assert again.expected_total == analysis.expected_total
        assert again.status is AnalysisStatus.COMPLETED
        assert again.period == analysis.period

    def test_remove_entry(self, analysis):
        analysis.remove_daily_entry(date(2025, 6, 30))
        assert analysis.get_daily_entry(date(2025, 6, 30)) is None
