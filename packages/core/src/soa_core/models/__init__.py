"""Data models for soa-core.

This package provides:
- Money and estimated-to-realise value types (values.py)
- Live case ledgers: creditors, employees, shareholder register (ledger.py)
- The Statement of Affairs document and its schedules (schedules.py)
- Audit entries and warnings (audit.py)
- Calculation results (results.py)
"""

from soa_core.models.values import (
    Money,
    ZERO,
    UNCERTAIN_MARKER,
    Known,
    Uncertain,
    EtrValue,
    parse_money,
    parse_flag,
    parse_etr,
    to_arithmetic,
    serialize_etr,
)

from soa_core.models.ledger import (
    new_id,
    format_address,
    parse_optional_date,
    CreditorType,
    MoratoriumSubtype,
    TRADE_EXPENSE,
    Creditor,
    Employee,
    RegisteredShareholder,
    CaseLedger,
)

from soa_core.models.schedules import (
    ChargeType,
    Asset,
    ChargeHolderClaim,
    ChargeSection,
    GlobalAssets,
    ScheduleA,
    CompanyCreditorRow,
    ConsumerCreditorRow,
    EmployeeCreditorRow,
    ScheduleC,
    Shareholder,
    ScheduleD,
    SoADocument,
)

from soa_core.models.audit import (
    AuditSeverity,
    WarningCode,
    AuditEntry,
    AuditWarning,
)

from soa_core.models.results import (
    SectionTotals,
    PoolTotals,
    ClaimLine,
    ClassifiedCreditors,
    PrescribedPart,
    CapitalBasis,
    CalledUpCapital,
    WaterfallResult,
)

__all__ = [
    # Values
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
    # Ledger
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
    # Schedules
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
    # Audit
    "AuditSeverity",
    "WarningCode",
    "AuditEntry",
    "AuditWarning",
    # Results
    "SectionTotals",
    "PoolTotals",
    "ClaimLine",
    "ClassifiedCreditors",
    "PrescribedPart",
    "CapitalBasis",
    "CalledUpCapital",
    "WaterfallResult",
]
