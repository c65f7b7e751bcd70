"""Display rules for statement figures.

- Currency is shown as whole pounds, rounded up, thousands grouped.
- Negative figures (deficiencies and liabilities) are shown in brackets.
- A liability line of nil reads ``NIL``.
- An inapplicable prescribed part reads ``N/A``.
- Capital that cannot yet be valued reads ``TBC``.
- An uncertain estimate to realise reads ``uncertain``.

Rounding happens here only; every calculation keeps full precision.
"""

from datetime import date
from decimal import ROUND_CEILING, Decimal
from typing import Optional, Union

from .models import UNCERTAIN_MARKER, CalledUpCapital, Known, PrescribedPart, Uncertain

NOT_APPLICABLE = "N/A"
NIL = "NIL"
TO_BE_CONFIRMED = "TBC"


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def format_currency(amount: Optional[Decimal]) -> str:
    """Format an amount as whole pounds, bracketed when negative.

    Examples:
        >>> format_currency(Decimal("-1234.01"))
        '(1,235)'
        >>> format_currency(None)
        'N/A'
    """
    if amount is None:
        return NOT_APPLICABLE
    formatted = f"{_ceil(abs(amount)):,}"
    return f"({formatted})" if amount < 0 else formatted


def format_liability(amount: Decimal) -> str:
    """Format a claim deducted on Schedule B: NIL, or the bracketed amount."""
    if amount == 0:
        return NIL
    return format_currency(-amount)


def format_prescribed_part(prescribed_part: PrescribedPart) -> str:
    return format_currency(prescribed_part.amount)


def format_capital(capital: CalledUpCapital) -> str:
    """Called-up capital as a deduction; TBC when the register is empty."""
    if not capital.determinable:
        return TO_BE_CONFIRMED
    return format_liability(capital.amount)


def format_etr(value: Union[Known, Uncertain]) -> str:
    if value.is_uncertain:
        return UNCERTAIN_MARKER
    return format_currency(value.amount)


def format_number(amount: Decimal) -> str:
    """Format a listed amount (Schedules C and D): rounded up, grouped."""
    return f"{_ceil(amount):,}"


def format_date(value: Optional[date]) -> str:
    """dd/mm/yyyy, or blank when there is no date."""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


__all__ = [
    "NOT_APPLICABLE",
    "NIL",
    "TO_BE_CONFIRMED",
    "format_currency",
    "format_liability",
    "format_prescribed_part",
    "format_capital",
    "format_etr",
    "format_number",
    "format_date",
    "format_yes_no",
]
