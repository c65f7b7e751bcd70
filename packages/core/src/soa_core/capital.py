"""Issued and called-up share capital for the members' rank."""

from typing import Sequence

import structlog

from .models import ZERO, CalledUpCapital, CapitalBasis, Shareholder

logger = structlog.get_logger()


def calculate_called_up_capital(shareholders: Sequence[Shareholder]) -> CalledUpCapital:
    """Total called-up capital from Schedule D.

    Once any holding records an amount paid or unpaid, the register is read
    as paid-and-unpaid across every holding. Otherwise capital is the
    nominal value of the shares held. An empty register cannot be valued
    and is reported as TBC.
    """
    if not shareholders:
        return CalledUpCapital(amount=None, basis=CapitalBasis.NOT_DETERMINABLE)

    if any(s.amount_paid != 0 or s.amount_unpaid != 0 for s in shareholders):
        amount = sum((s.called_up_total for s in shareholders), ZERO)
        basis = CapitalBasis.PAID_AND_UNPAID
    else:
        amount = sum((s.nominal_total for s in shareholders), ZERO)
        basis = CapitalBasis.NOMINAL

    logger.debug(
        "called_up_capital_calculated",
        shareholders=len(shareholders),
        basis=basis.value,
        amount=str(amount),
    )
    return CalledUpCapital(amount=amount, basis=basis)


__all__ = ["calculate_called_up_capital"]
