"""Value types shared by every schedule: money and estimated-to-realise values.

Money is always ``Decimal``. User input arrives as strings ("£12,500",
"1500.00", "") or numbers and is parsed leniently: anything that does not
read as a number is zero, never an error.

An estimated-to-realise (ETR) figure is either a known amount or the
explicit marker ``uncertain``. The marker is kept as its own type so it
survives storage as the literal word, while contributing nothing to totals.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

Money = Decimal

ZERO = Decimal("0")

UNCERTAIN_MARKER = "uncertain"

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_HAS_LETTER = re.compile(r"[a-zA-Z]")


def parse_money(value: Any) -> Decimal:
    """Parse a user-entered amount, defaulting to zero.

    Currency symbols, thousands separators and whitespace are stripped
    before parsing.

    Examples:
        >>> parse_money("£12,500.50")
        Decimal('12500.50')
        >>> parse_money("n/a")
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if value == value else ZERO
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return ZERO
    try:
        parsed = Decimal(cleaned)
    except InvalidOperation:
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def parse_flag(value: Any) -> bool:
    """Read a yes/no field; anything unrecognised is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value != 0
    return str(value or "").strip().lower() in ("true", "yes", "y", "1")


class Known(BaseModel):
    """An ETR value that is a definite amount."""

    model_config = {"frozen": True}

    kind: Literal["known"] = "known"
    amount: Decimal = ZERO

    @property
    def is_uncertain(self) -> bool:
        return False


class Uncertain(BaseModel):
    """The practitioner cannot yet estimate what the asset will realise."""

    model_config = {"frozen": True}

    kind: Literal["uncertain"] = "uncertain"

    @property
    def is_uncertain(self) -> bool:
        return True


EtrValue = Annotated[Union[Known, Uncertain], Field(discriminator="kind")]


def parse_etr(value: Any) -> Union[Known, Uncertain]:
    """Parse an ETR entry.

    A string containing any letter is ``Uncertain`` (so "u", "Uncertain" and
    "TBC" all qualify); everything else is read as an amount.
    """
    if isinstance(value, (Known, Uncertain)):
        return value
    if isinstance(value, dict) and "kind" in value:
        if value["kind"] == "uncertain":
            return Uncertain()
        return Known(amount=parse_money(value.get("amount")))
    if isinstance(value, str) and _HAS_LETTER.search(value):
        return Uncertain()
    return Known(amount=parse_money(value))


def to_arithmetic(value: Union[Known, Uncertain]) -> Decimal:
    """Return the amount an ETR value contributes to a sum (zero when uncertain)."""
    if isinstance(value, Known):
        return value.amount
    return ZERO


def serialize_etr(value: Union[Known, Uncertain]) -> str:
    """Storage form of an ETR value: the literal marker or the amount as text."""
    if isinstance(value, Uncertain):
        return UNCERTAIN_MARKER
    return str(value.amount)


__all__ = [
    "Money",
    "ZERO",
    "UNCERTAIN_MARKER",
    "Known",
    "Uncertain",
    "EtrValue",
    "parse_money",
    "parse_flag",
    "parse_etr",
    "to_arithmetic",
    "serialize_etr",
]
