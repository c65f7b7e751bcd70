"""Calculation results: section subtotals, creditor buckets and the waterfall."""

from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, Field

from .audit import AuditEntry, AuditWarning
from .values import ZERO


class SectionTotals(BaseModel):
    """Subtotals for one charge holder section."""
    model_config = {"frozen": True}

    section_id: str
    total_book: Decimal
    total_etr: Decimal
    total_claims: Decimal
    fixed_charge_surplus: Decimal
    derived_surplus: Decimal
    uncertain_count: int = 0

    @property
    def surplus_difference(self) -> Decimal:
        """Entered surplus minus the surplus implied by the section's own lines."""
        return self.fixed_charge_surplus - self.derived_surplus


class PoolTotals(BaseModel):
    """Subtotals for a global asset pool (floating or uncharged)."""
    model_config = {"frozen": True}

    total_book: Decimal = ZERO
    total_etr: Decimal = ZERO
    uncertain_count: int = 0


class ClaimLine(BaseModel):
    """A named claim shown as its own Schedule B row."""
    model_config = {"frozen": True}

    name: str
    amount: Decimal


class ClassifiedCreditors(BaseModel):
    """The creditor ledger partitioned into ranked buckets (positive magnitudes)."""
    model_config = {"frozen": True}

    post_moratorium: Decimal = ZERO
    pre_moratorium: Decimal = ZERO
    employee_preferential: Decimal = ZERO
    secondary_preferential: Decimal = ZERO
    floating_charge_holders: tuple[ClaimLine, ...] = ()
    unsecured_employees: Decimal = ZERO
    unsecured_by_type: dict[str, Decimal] = Field(default_factory=dict)
    recharacterised: tuple[ClaimLine, ...] = ()
    warnings: tuple[AuditWarning, ...] = ()

    @property
    def total_moratorium(self) -> Decimal:
        return self.post_moratorium + self.pre_moratorium

    @property
    def floating_charge_total(self) -> Decimal:
        return sum((line.amount for line in self.floating_charge_holders), ZERO)

    @property
    def trade_creditors(self) -> Decimal:
        return self.unsecured_by_type.get("trade_expense", ZERO)

    @property
    def other_unsecured(self) -> Decimal:
        return sum(
            (total for kind, total in self.unsecured_by_type.items() if kind != "trade_expense"),
            ZERO,
        )

    @property
    def recharacterised_total(self) -> Decimal:
        return sum((line.amount for line in self.recharacterised), ZERO)


class PrescribedPart(BaseModel):
    """Prescribed part of net property; ``amount`` is None when not applicable."""
    model_config = {"frozen": True}

    net_property: Decimal
    amount: Optional[Decimal] = None

    @property
    def applicable(self) -> bool:
        return self.amount is not None

    @property
    def arithmetic(self) -> Decimal:
        """Value used in the waterfall: not applicable counts as zero."""
        return self.amount if self.amount is not None else ZERO


class CapitalBasis(str, Enum):
    """Which register fields produced the called-up capital figure."""
    PAID_AND_UNPAID = "paid_and_unpaid"
    NOMINAL = "nominal"
    NOT_DETERMINABLE = "not_determinable"


class CalledUpCapital(BaseModel):
    """Issued and called-up capital; ``amount`` is None with an empty register."""
    model_config = {"frozen": True}

    amount: Optional[Decimal] = None
    basis: CapitalBasis = CapitalBasis.NOT_DETERMINABLE

    @property
    def determinable(self) -> bool:
        return self.amount is not None

    @property
    def arithmetic(self) -> Decimal:
        return self.amount if self.amount is not None else ZERO


class WaterfallResult(BaseModel):
    """Every Schedule B milestone, from assets available down to members.

    Claim fields hold positive magnitudes; milestone fields hold the running
    surplus (positive) or deficiency (negative) after each rank.
    """
    model_config = {"frozen": True}

    # Schedule A
    sections: tuple[SectionTotals, ...] = ()
    floating_pool: PoolTotals = Field(default_factory=PoolTotals)
    uncharged_pool: PoolTotals = Field(default_factory=PoolTotals)
    fixed_charge_surplus_total: Decimal = ZERO
    assets_for_preferential: Decimal = ZERO

    # Moratorium and preferential ranks
    post_moratorium: Decimal = ZERO
    pre_moratorium: Decimal = ZERO
    total_moratorium: Decimal = ZERO
    after_moratorium: Decimal = ZERO
    employee_preferential: Decimal = ZERO
    after_preferential: Decimal = ZERO
    secondary_preferential: Decimal = ZERO
    after_secondary_preferential: Decimal = ZERO

    # Prescribed part and floating charges
    prescribed_part: PrescribedPart
    assets_for_floating: Decimal = ZERO
    floating_charge_holders: tuple[ClaimLine, ...] = ()
    floating_charge_total: Decimal = ZERO
    after_floating: Decimal = ZERO
    assets_for_unsecured: Decimal = ZERO

    # Unsecured
    unsecured_employees: Decimal = ZERO
    trade_creditors: Decimal = ZERO
    other_unsecured: Decimal = ZERO
    recharacterised: tuple[ClaimLine, ...] = ()
    unsecured_claims: Decimal = ZERO
    after_unsecured: Decimal = ZERO

    # Members
    called_up_capital: CalledUpCapital
    after_members: Decimal = ZERO

    audit_log: tuple[AuditEntry, ...] = ()
    warnings: tuple[AuditWarning, ...] = ()

    def milestones(self) -> Iterator[tuple[str, Decimal]]:
        """The running totals in Schedule B order."""
        yield "assets_for_preferential", self.assets_for_preferential
        yield "after_moratorium", self.after_moratorium
        yield "after_preferential", self.after_preferential
        yield "after_secondary_preferential", self.after_secondary_preferential
        yield "prescribed_part", self.prescribed_part.arithmetic
        yield "assets_for_floating", self.assets_for_floating
        yield "after_floating", self.after_floating
        yield "assets_for_unsecured", self.assets_for_unsecured
        yield "unsecured_claims", self.unsecured_claims
        yield "after_unsecured", self.after_unsecured
        yield "after_members", self.after_members

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0


__all__ = [
    "SectionTotals",
    "PoolTotals",
    "ClaimLine",
    "ClassifiedCreditors",
    "PrescribedPart",
    "CapitalBasis",
    "CalledUpCapital",
    "WaterfallResult",
]
