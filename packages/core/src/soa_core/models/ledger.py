"""Live case ledgers: creditors, employees and the shareholder register.

These records are owned by the wider case-management system. The engine
reads them to classify claims and to seed Schedules C and D; it never
writes them back.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .values import ZERO, parse_flag, parse_money


def new_id() -> str:
    """Return a fresh entity identifier."""
    return uuid4().hex


ADDRESS_PARTS = ("line1", "line2", "city", "county", "postcode")


def format_address(value: Any) -> str:
    """Flatten a structured address into one line.

    Examples:
        >>> format_address({"line1": "1 High St", "city": "Leeds", "postcode": "LS1 1AA"})
        '1 High St, Leeds, LS1 1AA'
    """
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return ", ".join(str(value[part]) for part in ADDRESS_PARTS if value.get(part))
    return str(value)


def parse_optional_date(value: Any) -> Optional[date]:
    """Read an ISO date leniently; blanks and garbage become None."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


class CreditorType(str, Enum):
    """How the case ledger classifies a creditor."""
    MORATORIUM = "moratorium"
    SECURED = "secured"
    UNSECURED = "unsecured"
    SECONDARY_PREFERENTIAL = "secondary_preferential"
    CONSUMER = "consumer"
    OTHER = "other"


class MoratoriumSubtype(str, Enum):
    """Moratorium debts are split into two ranks on Schedule B."""
    POST_MORATORIUM = "Post Moratorium Debt"
    PRE_MORATORIUM = "Pre Moratorium"


TRADE_EXPENSE = "trade_expense"


class Creditor(BaseModel):
    """A creditor record from the case ledger."""

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Barclays Bank plc",
                    "creditor_type": "secured",
                    "security_type": "Fixed & Floating",
                    "balance_owed": "125000.00",
                }
            ]
        },
    }

    id: str = Field(default_factory=new_id)
    name: str = Field(default="", validation_alias=AliasChoices("name", "creditor_name"))
    creditor_type: CreditorType = CreditorType.OTHER
    moratorium_subtype: Optional[MoratoriumSubtype] = Field(
        default=None,
        validation_alias=AliasChoices("moratorium_subtype", "moratorium_debt"),
    )
    security_type: str = Field(
        default="",
        description="Free text as entered on the ledger, e.g. 'Fixed & Floating'",
    )
    unsecured_creditor_type: Optional[str] = Field(
        default=None,
        description="Sub-classification for unsecured creditors, e.g. 'trade_expense'",
    )
    balance_owed: Decimal = ZERO
    address: str = ""
    retention_of_title: bool = False
    security_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("security_date", "security_date_of_creation"),
    )
    security_value: Decimal = ZERO

    @field_validator("balance_owed", "security_value", mode="before")
    @classmethod
    def coerce_money(cls, v):
        return parse_money(v)

    @field_validator("creditor_type", mode="before")
    @classmethod
    def coerce_creditor_type(cls, v):
        """Unknown ledger types fall back to OTHER rather than failing."""
        if isinstance(v, CreditorType):
            return v
        try:
            return CreditorType(str(v or "").strip().lower())
        except ValueError:
            return CreditorType.OTHER

    @field_validator("moratorium_subtype", mode="before")
    @classmethod
    def coerce_moratorium_subtype(cls, v):
        if isinstance(v, MoratoriumSubtype) or v is None:
            return v
        try:
            return MoratoriumSubtype(str(v).strip())
        except ValueError:
            return None

    @field_validator("security_date", mode="before")
    @classmethod
    def coerce_security_date(cls, v):
        return parse_optional_date(v)

    @field_validator("retention_of_title", mode="before")
    @classmethod
    def coerce_retention_of_title(cls, v):
        return parse_flag(v)

    @field_validator("security_type", "name", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v):
        return format_address(v)


class Employee(BaseModel):
    """An employee claimant with preferential and unsecured elements."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    name: str = Field(default="", validation_alias=AliasChoices("name", "full_name"))
    address: str = ""
    total_preferential_claim: Decimal = ZERO
    total_unsecured_claim: Decimal = ZERO

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v):
        return format_address(v)

    @field_validator("total_preferential_claim", "total_unsecured_claim", mode="before")
    @classmethod
    def coerce_money(cls, v):
        return parse_money(v)

    @property
    def total_claim(self) -> Decimal:
        """Preferential plus unsecured claim."""
        return self.total_preferential_claim + self.total_unsecured_claim


class RegisteredShareholder(BaseModel):
    """A holding on the company's register of members.

    The register records nominal value per share in pence.
    """

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    name: str = ""
    address: str = ""
    share_class: str = Field(
        default="Ordinary",
        validation_alias=AliasChoices("share_class", "share_type"),
    )
    shares_held: int = 0
    nominal_value_pence: Decimal = Field(
        default=ZERO,
        validation_alias=AliasChoices("nominal_value_pence", "nominal_value"),
    )

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v):
        return format_address(v)

    @field_validator("nominal_value_pence", mode="before")
    @classmethod
    def coerce_money(cls, v):
        return parse_money(v)

    @field_validator("shares_held", mode="before")
    @classmethod
    def coerce_shares(cls, v):
        return int(parse_money(v))

    @field_validator("share_class", mode="before")
    @classmethod
    def default_share_class(cls, v):
        return str(v) if v else "Ordinary"


class CaseLedger(BaseModel):
    """Everything the engine reads from the live case record."""

    model_config = {"frozen": True}

    case_id: str
    company_name: str = ""
    creditors: tuple[Creditor, ...] = ()
    employees: tuple[Employee, ...] = ()
    shareholders: tuple[RegisteredShareholder, ...] = ()


__all__ = [
    "new_id",
    "format_address",
    "parse_optional_date",
    "CreditorType",
    "MoratoriumSubtype",
    "TRADE_EXPENSE",
    "Creditor",
    "Employee",
    "RegisteredShareholder",
    "CaseLedger",
]
