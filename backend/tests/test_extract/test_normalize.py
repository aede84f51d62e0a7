"""
Tests for number and date normalisation helpers.
"""

from datetime import date
from decimal import Decimal

import pytest

from payment_analyzer.normalize.dates import dates_in_filename, expand_year, iso_date_in_filename, parse_dmy
from payment_analyzer.normalize.numbers import parse_money_token, to_decimal, to_pence


class TestNumbers:
    def test_money_tokens(self):
        assert parse_money_token("£1,234.56") == Decimal("1234.56")
        assert parse_money_token("45.5") == Decimal("45.50")
        assert parse_money_token("12.") == Decimal("12.00")

    def test_money_token_missing(self):
        with pytest.raises(ValueError):
            parse_money_token("n/a")

    def test_to_decimal_rejects_nan(self):
        with pytest.raises(ValueError):
            to_decimal(float("nan"))

    def test_to_pence(self):
        assert to_pence("45.50") == 4550
        assert to_pence(0.1) == 10


class TestDates:
    def test_parse_dmy(self):
        assert parse_dmy("01/07/2025") == date(2025, 7, 1)
        assert parse_dmy("1-7-25") == date(2025, 7, 1)
        assert parse_dmy("2025-07-01") == date(2025, 7, 1)
        assert parse_dmy("31/02/2025") is None
        assert parse_dmy("junk") is None

    def test_expand_year(self):
        assert expand_year(25) == 2025
        assert expand_year(75) == 1975
        assert expand_year(2025) == 2025

    def test_iso_in_filename(self):
        assert iso_date_in_filename("runsheetDV_2025-07-01.pdf") == date(2025, 7, 1)
        assert iso_date_in_filename("runsheet.pdf") is None

    def test_dates_in_filename(self):
        found = dates_in_filename("invoice_01-07-2025_to_2025-07-31.pdf")
        assert date(2025, 7, 1) in found
        assert date(2025, 7, 31) in found
        assert dates_in_filename("self_bill_05-07-25.pdf") == [date(2025, 7, 5)]
