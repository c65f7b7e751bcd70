"""Statement of Affairs document model.

A document is one version of a case's Statement of Affairs:

- Schedule A: assets, grouped into charge holder sections (fixed-charge
  assets netted against named chargeholders) plus two global pools,
  floating-charge assets and uncharged assets.
- Schedule B is not stored; it is the waterfall computed from A, the
  creditor ledger and D.
- Schedule C: creditor listings (company, consumer, employee).
- Schedule D: members (shareholders).

Every model is frozen. Edits go through ``soa_core.editing``, which returns
new documents, so a document is always a consistent snapshot.

The persisted JSON uses the camelCase schedule keys and the ``etr_value``
asset key; dump with ``by_alias=True`` to produce it.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from .ledger import format_address, new_id, parse_optional_date
from .values import ZERO, EtrValue, Known, parse_etr, parse_flag, parse_money, serialize_etr


# =============================================================================
# SCHEDULE A - ASSETS
# =============================================================================

class ChargeType(str, Enum):
    """Which Schedule A pool an asset sits in."""
    FIXED_CHARGE = "fixed_charge"
    FLOATING_CHARGE = "floating_charge"
    UNCHARGED = "uncharged"


class Asset(BaseModel):
    """A single asset line with book value and estimated realisation."""

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "description": "Freehold property",
                    "account_code": "FCR01",
                    "book_value": "250000",
                    "etr_value": "uncertain",
                }
            ]
        },
    }

    id: str = Field(default_factory=new_id)
    description: str = ""
    account_code: Optional[str] = None
    book_value: Decimal = ZERO
    estimated_to_realise: EtrValue = Field(
        default_factory=Known,
        alias="etr_value",
        description="Known amount, or the 'uncertain' marker",
    )

    @field_validator("book_value", mode="before")
    @classmethod
    def coerce_book_value(cls, v):
        return parse_money(v)

    @field_validator("estimated_to_realise", mode="before")
    @classmethod
    def coerce_etr(cls, v):
        return parse_etr(v)

    @field_validator("account_code", mode="before")
    @classmethod
    def blank_code_is_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_serializer("estimated_to_realise")
    def dump_etr(self, value) -> str:
        return serialize_etr(value)

    @property
    def is_blank(self) -> bool:
        """True for the placeholder rows the editor starts each table with."""
        return (
            not self.description
            and self.book_value == 0
            and not self.estimated_to_realise.is_uncertain
            and self.estimated_to_realise.amount == 0
        )


class ChargeHolderClaim(BaseModel):
    """Amount due to a named chargeholder, deducted within its section.

    Amounts are entered as positive magnitudes of the debt.
    """

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    name: str = ""
    amount: Decimal = ZERO

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return parse_money(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v):
        return "" if v is None else str(v)


class ChargeSection(BaseModel):
    """One pool of fixed-charge assets and the chargeholders secured on it.

    ``fixed_charge_surplus`` is entered by the practitioner and carried to
    Schedule B as-is; it is not derived from the assets and claims.
    """

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    assets: tuple[Asset, ...] = ()
    claims: tuple[ChargeHolderClaim, ...] = ()
    fixed_charge_surplus: Decimal = ZERO

    @field_validator("fixed_charge_surplus", mode="before")
    @classmethod
    def coerce_surplus(cls, v):
        return parse_money(v)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Older records used numeric timestamps as section ids
        return str(v)


class GlobalAssets(BaseModel):
    """Assets not tied to a charge holder section."""

    model_config = {"frozen": True}

    floating: tuple[Asset, ...] = ()
    uncharged: tuple[Asset, ...] = ()


class ScheduleA(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}

    charge_holder_sections: tuple[ChargeSection, ...] = Field(
        default=(), alias="chargeHolderSections"
    )
    global_assets: GlobalAssets = Field(
        default_factory=GlobalAssets, alias="globalAssets"
    )


# =============================================================================
# SCHEDULE C - CREDITORS
# =============================================================================

class _CreditorRow(BaseModel):
    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    name: str = ""
    address: str = ""
    amount: Decimal = ZERO

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return parse_money(v)

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v):
        return format_address(v)


class CompanyCreditorRow(_CreditorRow):
    """A company creditor as listed on Schedule C."""

    retention_of_title: bool = False
    security_details: str = ""
    security_date: Optional[date] = None
    security_value: Decimal = ZERO

    @field_validator("security_value", mode="before")
    @classmethod
    def coerce_security_value(cls, v):
        return parse_money(v)

    @field_validator("security_date", mode="before")
    @classmethod
    def coerce_security_date(cls, v):
        return parse_optional_date(v)

    @field_validator("retention_of_title", mode="before")
    @classmethod
    def coerce_retention_of_title(cls, v):
        return parse_flag(v)


class ConsumerCreditorRow(_CreditorRow):
    """A consumer creditor; consumers cannot claim retention of title."""

    security_details: str = ""
    security_date: Optional[date] = None
    security_value: Decimal = ZERO

    @field_validator("security_value", mode="before")
    @classmethod
    def coerce_security_value(cls, v):
        return parse_money(v)

    @field_validator("security_date", mode="before")
    @classmethod
    def coerce_security_date(cls, v):
        return parse_optional_date(v)


class EmployeeCreditorRow(_CreditorRow):
    """An employee creditor; amount is the whole claim."""


class ScheduleC(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}

    company_creditors: tuple[CompanyCreditorRow, ...] = Field(
        default=(), alias="companyCreditors"
    )
    consumer_creditors: tuple[ConsumerCreditorRow, ...] = Field(
        default=(), alias="consumerCreditors"
    )
    employee_creditors: tuple[EmployeeCreditorRow, ...] = Field(
        default=(), alias="employeeCreditors"
    )


# =============================================================================
# SCHEDULE D - MEMBERS
# =============================================================================

class Shareholder(BaseModel):
    """A member holding as shown on Schedule D (nominal value in pounds)."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    name: str = ""
    address: str = ""
    share_class: str = "Ordinary"
    shares_held: int = 0
    nominal_value_per_share: Decimal = ZERO
    amount_paid: Decimal = ZERO
    amount_unpaid: Decimal = ZERO

    @field_validator("nominal_value_per_share", "amount_paid", "amount_unpaid", mode="before")
    @classmethod
    def coerce_money(cls, v):
        return parse_money(v)

    @field_validator("shares_held", mode="before")
    @classmethod
    def coerce_shares(cls, v):
        return int(parse_money(v))

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v):
        return format_address(v)

    @property
    def nominal_total(self) -> Decimal:
        return self.shares_held * self.nominal_value_per_share

    @property
    def called_up_total(self) -> Decimal:
        return self.amount_paid + self.amount_unpaid


class ScheduleD(BaseModel):
    model_config = {"frozen": True}

    shareholders: tuple[Shareholder, ...] = ()


# =============================================================================
# DOCUMENT
# =============================================================================

class SoADocument(BaseModel):
    """One version of a case's Statement of Affairs."""

    model_config = {"frozen": True, "populate_by_name": True}

    case_id: str
    version: int = Field(default=1, ge=1)
    as_at_date: Optional[date] = None
    schedule_a: ScheduleA = Field(default_factory=ScheduleA, alias="scheduleA")
    schedule_c: ScheduleC = Field(default_factory=ScheduleC, alias="scheduleC")
    schedule_d: ScheduleD = Field(default_factory=ScheduleD, alias="scheduleD")

    @field_validator("as_at_date", mode="before")
    @classmethod
    def coerce_as_at_date(cls, v):
        return parse_optional_date(v)

    @property
    def sections(self) -> tuple[ChargeSection, ...]:
        return self.schedule_a.charge_holder_sections

    def iter_claims(self) -> Iterator[ChargeHolderClaim]:
        """Every chargeholder claim across all sections, in document order."""
        for section in self.sections:
            yield from section.claims

    def iter_assets(self) -> Iterator[Asset]:
        for section in self.sections:
            yield from section.assets
        yield from self.schedule_a.global_assets.floating
        yield from self.schedule_a.global_assets.uncharged

    def to_record(self) -> dict:
        """JSON-ready dict in the persisted (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "ChargeType",
    "Asset",
    "ChargeHolderClaim",
    "ChargeSection",
    "GlobalAssets",
    "ScheduleA",
    "CompanyCreditorRow",
    "ConsumerCreditorRow",
    "EmployeeCreditorRow",
    "ScheduleC",
    "Shareholder",
    "ScheduleD",
    "SoADocument",
]
