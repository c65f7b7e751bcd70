"""Creditor name matching used by the classifier.

Chargeholders are typed by hand into Schedule A, so the only link between
a section claim and a ledger creditor is the name. Matching is exact after
normalization (surrounding whitespace removed, case folded); there is no
fuzzy matching, because a wrong match moves money between ranks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .models import Creditor


def normalize_name(name: Optional[str]) -> str:
    """Normalize a name for comparison: trim, then case-fold.

    Examples:
        >>> normalize_name("  Barclays Bank PLC ")
        'barclays bank plc'
    """
    if not name:
        return ""
    return name.strip().casefold()


class MatchStatus(str, Enum):
    NONE = "none"
    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class NameMatch:
    """Outcome of looking a name up in the creditor ledger.

    ``creditor`` is the first match in ledger order; ``candidates`` holds
    every match so callers can report ambiguity.
    """
    name: str
    status: MatchStatus
    candidates: tuple[Creditor, ...] = ()

    @property
    def creditor(self) -> Optional[Creditor]:
        return self.candidates[0] if self.candidates else None

    @property
    def is_ambiguous(self) -> bool:
        return self.status == MatchStatus.AMBIGUOUS


def match_creditor(name: Optional[str], creditors: Iterable[Creditor]) -> NameMatch:
    """Find ledger creditors whose normalized name equals ``name``.

    A blank name never matches anything.
    """
    key = normalize_name(name)
    if not key:
        return NameMatch(name=name or "", status=MatchStatus.NONE)

    candidates = tuple(c for c in creditors if normalize_name(c.name) == key)
    if not candidates:
        status = MatchStatus.NONE
    elif len(candidates) == 1:
        status = MatchStatus.UNIQUE
    else:
        status = MatchStatus.AMBIGUOUS
    return NameMatch(name=name or "", status=status, candidates=candidates)


__all__ = [
    "normalize_name",
    "MatchStatus",
    "NameMatch",
    "match_creditor",
]
