"""Tests for statement display formatting."""

from datetime import date
from decimal import Decimal

import pytest

from soa_core.formatting import (
    format_capital,
    format_currency,
    format_date,
    format_etr,
    format_liability,
    format_number,
    format_prescribed_part,
    format_yes_no,
)
from soa_core.models import CalledUpCapital, CapitalBasis, Known, PrescribedPart, Uncertain


class TestFormatCurrency:
    """Whole pounds, rounded up, negatives in brackets."""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("0"), "0"),
            (Decimal("1234"), "1,234"),
            (Decimal("1234.01"), "1,235"),
            (Decimal("999999.5"), "1,000,000"),
            (Decimal("-1234.01"), "(1,235)"),
            (Decimal("-0.4"), "(1)"),
        ],
    )
    def test_amounts(self, amount, expected):
        assert format_currency(amount) == expected

    def test_none_is_not_applicable(self):
        assert format_currency(None) == "N/A"


class TestFormatLiability:
    """Claims deducted on Schedule B."""

    def test_nil(self):
        assert format_liability(Decimal("0")) == "NIL"

    def test_bracketed(self):
        assert format_liability(Decimal("4000")) == "(4,000)"


class TestSpecialValues:
    """N/A, TBC and the uncertain marker."""

    def test_prescribed_part(self):
        assert format_prescribed_part(PrescribedPart(net_property=Decimal("9999"))) == "N/A"
        assert format_prescribed_part(
            PrescribedPart(net_property=Decimal("14000"), amount=Decimal("5800"))
        ) == "5,800"

    def test_capital(self):
        assert format_capital(CalledUpCapital()) == "TBC"
        assert format_capital(CalledUpCapital(amount=Decimal("0"), basis=CapitalBasis.NOMINAL)) == "NIL"
        assert format_capital(
            CalledUpCapital(amount=Decimal("100"), basis=CapitalBasis.NOMINAL)
        ) == "(100)"

    def test_etr(self):
        assert format_etr(Uncertain()) == "uncertain"
        assert format_etr(Known(amount=Decimal("2500.10"))) == "2,501"


class TestListingFormats:
    """Schedule C and D values."""

    def test_number_rounds_up(self):
        assert format_number(Decimal("1000.20")) == "1,001"

    def test_date(self):
        assert format_date(date(2024, 3, 9)) == "09/03/2024"
        assert format_date(None) == ""

    def test_yes_no(self):
        assert format_yes_no(True) == "Yes"
        assert format_yes_no(False) == "No"
