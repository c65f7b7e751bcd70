"""Tests for the prescribed part and called-up capital."""

from decimal import Decimal

import pytest

from soa_core.capital import calculate_called_up_capital
from soa_core.models import CapitalBasis, Shareholder
from soa_core.prescribed_part import (
    PRESCRIBED_PART_CAP,
    calculate_prescribed_part,
)


class TestPrescribedPart:
    """Tests for the prescribed part bands."""

    @pytest.mark.parametrize(
        "net_property, expected",
        [
            (Decimal("0"), Decimal("0")),
            (Decimal("-2500"), Decimal("0")),
            (Decimal("10000"), Decimal("5000")),
            (Decimal("14000"), Decimal("5800")),
            (Decimal("50000"), Decimal("13000")),
            (Decimal("10000000"), Decimal("800000")),
        ],
    )
    def test_bands(self, net_property, expected):
        result = calculate_prescribed_part(net_property)
        assert result.applicable
        assert result.amount == expected

    def test_below_threshold_not_applicable(self):
        """Positive net property under 10,000 is shown as N/A."""
        result = calculate_prescribed_part(Decimal("9999"))
        assert not result.applicable
        assert result.amount is None
        assert result.arithmetic == Decimal("0")

    def test_cap_reached(self):
        """The cap applies from 3,985,000 upwards."""
        assert calculate_prescribed_part(Decimal("3985000")).amount == PRESCRIBED_PART_CAP
        assert calculate_prescribed_part(Decimal("3984995")).amount == Decimal("799999")

    def test_keeps_net_property(self):
        assert calculate_prescribed_part(Decimal("12345")).net_property == Decimal("12345")


class TestCalledUpCapital:
    """Tests for issued and called-up capital."""

    def test_empty_register_is_not_determinable(self):
        capital = calculate_called_up_capital(())
        assert not capital.determinable
        assert capital.basis == CapitalBasis.NOT_DETERMINABLE
        assert capital.arithmetic == Decimal("0")

    def test_nominal_when_nothing_paid(self):
        shareholders = [
            Shareholder(shares_held=100, nominal_value_per_share="1"),
            Shareholder(shares_held=50, nominal_value_per_share="0.50"),
        ]
        capital = calculate_called_up_capital(shareholders)
        assert capital.basis == CapitalBasis.NOMINAL
        assert capital.amount == Decimal("125")

    def test_paid_and_unpaid_once_any_is_entered(self):
        """Any paid or unpaid figure switches every holding to paid plus unpaid."""
        shareholders = [
            Shareholder(shares_held=100, nominal_value_per_share="1", amount_paid="100"),
            Shareholder(shares_held=1000, nominal_value_per_share="1"),
        ]
        capital = calculate_called_up_capital(shareholders)
        assert capital.basis == CapitalBasis.PAID_AND_UNPAID
        assert capital.amount == Decimal("100")

    def test_zero_nominal_register(self):
        """A register with no values is determinable and nil."""
        capital = calculate_called_up_capital([Shareholder(name="Member")])
        assert capital.determinable
        assert capital.amount == Decimal("0")
