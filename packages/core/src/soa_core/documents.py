"""Creating, repairing and syncing Statement of Affairs documents.

Stored documents come from several generations of the editor and may be
partial: missing schedules, the older section shape
(``{"assets": {"fixed": [...]}, "creditors": {"fixed": [...]}}``), assets
keyed by ``name`` instead of ``description``, rows without ids.
``heal_document`` merges whatever is stored over an empty document so a
load always yields a complete, valid statement.

Schedules C and D are copies of the live ledgers. Syncing rebuilds the
schedule from the ledger and discards manual edits to it.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .models import (
    Asset,
    AuditSeverity,
    AuditWarning,
    CaseLedger,
    ChargeHolderClaim,
    ChargeSection,
    CompanyCreditorRow,
    ConsumerCreditorRow,
    CreditorType,
    EmployeeCreditorRow,
    GlobalAssets,
    ScheduleA,
    ScheduleC,
    ScheduleD,
    Shareholder,
    SoADocument,
    WarningCode,
    new_id,
)

logger = structlog.get_logger()

PENCE_PER_POUND = Decimal("100")


# =============================================================================
# EMPTY AND SEEDED DOCUMENTS
# =============================================================================

def empty_schedule_a() -> ScheduleA:
    """One section with a blank asset and claim, and a blank row in each pool."""
    return ScheduleA(
        charge_holder_sections=(
            ChargeSection(assets=(Asset(),), claims=(ChargeHolderClaim(),)),
        ),
        global_assets=GlobalAssets(floating=(Asset(),), uncharged=(Asset(),)),
    )


def empty_document(case_id: str, version: int = 1) -> SoADocument:
    return SoADocument(case_id=case_id, version=version, schedule_a=empty_schedule_a())


def build_schedule_c(ledger: CaseLedger) -> ScheduleC:
    """List the ledger's creditors and employees as Schedule C rows.

    Consumer creditors are listed separately from company creditors; every
    other creditor type is a company creditor.
    """
    company = []
    consumer = []
    for creditor in ledger.creditors:
        if creditor.creditor_type == CreditorType.CONSUMER:
            consumer.append(ConsumerCreditorRow(
                name=creditor.name,
                address=creditor.address,
                amount=creditor.balance_owed,
                security_details=creditor.security_type,
                security_date=creditor.security_date,
                security_value=creditor.security_value,
            ))
        else:
            company.append(CompanyCreditorRow(
                name=creditor.name,
                address=creditor.address,
                amount=creditor.balance_owed,
                retention_of_title=creditor.retention_of_title,
                security_details=creditor.security_type,
                security_date=creditor.security_date,
                security_value=creditor.security_value,
            ))

    employees = tuple(
        EmployeeCreditorRow(name=e.name, address=e.address, amount=e.total_claim)
        for e in ledger.employees
    )
    return ScheduleC(
        company_creditors=tuple(company),
        consumer_creditors=tuple(consumer),
        employee_creditors=employees,
    )


def build_schedule_d(ledger: CaseLedger) -> ScheduleD:
    """List the register of members as Schedule D rows.

    The register holds nominal value in pence; Schedule D shows pounds.
    Amounts paid and unpaid start at nil for the practitioner to complete.
    """
    return ScheduleD(shareholders=tuple(
        Shareholder(
            name=holding.name,
            address=holding.address,
            share_class=holding.share_class,
            shares_held=holding.shares_held,
            nominal_value_per_share=holding.nominal_value_pence / PENCE_PER_POUND,
        )
        for holding in ledger.shareholders
    ))


def seed_document(ledger: CaseLedger, version: int = 1) -> SoADocument:
    """A first draft for a case: empty Schedule A, C and D copied from the ledgers."""
    logger.info(
        "document_seeded",
        case_id=ledger.case_id,
        creditors=len(ledger.creditors),
        employees=len(ledger.employees),
        shareholders=len(ledger.shareholders),
    )
    return SoADocument(
        case_id=ledger.case_id,
        version=version,
        schedule_a=empty_schedule_a(),
        schedule_c=build_schedule_c(ledger),
        schedule_d=build_schedule_d(ledger),
    )


def sync_schedule_c(document: SoADocument, ledger: CaseLedger) -> SoADocument:
    """Replace Schedule C with a fresh copy of the creditor and employee ledgers."""
    logger.info("schedule_c_synced", case_id=document.case_id, version=document.version)
    return document.model_copy(update={"schedule_c": build_schedule_c(ledger)})


def sync_schedule_d(document: SoADocument, ledger: CaseLedger) -> SoADocument:
    """Replace Schedule D with a fresh copy of the register of members."""
    logger.info("schedule_d_synced", case_id=document.case_id, version=document.version)
    return document.model_copy(update={"schedule_d": build_schedule_d(ledger)})


def populate_missing_shareholders(document: SoADocument, ledger: CaseLedger) -> SoADocument:
    """Fill an empty Schedule D from the register; a non-empty one is left alone."""
    if document.schedule_d.shareholders or not ledger.shareholders:
        return document
    logger.info(
        "shareholders_populated_from_register",
        case_id=document.case_id,
        shareholders=len(ledger.shareholders),
    )
    return document.model_copy(update={"schedule_d": build_schedule_d(ledger)})


# =============================================================================
# HEALING
# =============================================================================

class _Repairs:
    """Collects what ``heal_document`` had to fix."""

    def __init__(self, case_id: str):
        self.case_id = case_id
        self.warnings: list[AuditWarning] = []

    def record(self, field_name: str, message: str) -> None:
        logger.info("document_repaired", case_id=self.case_id, field=field_name, repair=message)
        self.warnings.append(AuditWarning(
            code=WarningCode.DOCUMENT_REPAIRED,
            message=message,
            field_name=field_name,
            severity=AuditSeverity.INFO,
            requires_review=False,
        ))


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _rows(
    value: Any,
    field_name: str,
    repairs: _Repairs,
    model: Optional[type[BaseModel]] = None,
) -> list[dict]:
    """Keep the dict rows of a stored list, giving each one an id.

    With ``model``, a row that still fails validation is dropped so one bad
    row cannot cost the rest of the document.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        repairs.record(field_name, "Stored value was not a list and has been reset")
        return []

    rows = []
    for position, row in enumerate(value):
        if not isinstance(row, dict):
            repairs.record(f"{field_name}[{position}]", "Unreadable row dropped")
            continue
        row = {key: item for key, item in row.items() if item is not None}
        if row.get("id") in (None, ""):
            row["id"] = new_id()
            repairs.record(f"{field_name}[{position}]", "Missing id assigned")
        else:
            row["id"] = str(row["id"])
        if model is not None:
            try:
                model.model_validate(row)
            except PydanticValidationError as e:
                logger.warning(
                    "invalid_row_dropped",
                    case_id=repairs.case_id,
                    field=f"{field_name}[{position}]",
                    errors=e.error_count(),
                )
                repairs.record(f"{field_name}[{position}]", "Invalid row dropped")
                continue
        rows.append(row)
    return rows


def _heal_assets(value: Any, field_name: str, repairs: _Repairs) -> list[dict]:
    if isinstance(value, list):
        value = [_legacy_asset(row) for row in value]
    return _rows(value, field_name, repairs, Asset)


def _legacy_asset(row: Any) -> Any:
    """Older editors keyed the description as ``name``."""
    if not isinstance(row, dict):
        return row
    row = dict(row)
    name = row.pop("name", None)
    if not row.get("description") and name:
        row["description"] = name
    return row


def _heal_section(raw: dict, position: int, repairs: _Repairs) -> dict:
    field_name = f"scheduleA.chargeHolderSections[{position}]"
    section = dict(raw)

    assets = section.get("assets")
    if isinstance(assets, dict):
        logger.debug("legacy_section_assets_migrated", case_id=repairs.case_id, section=position)
        assets = assets.get("fixed")
    claims = section.get("claims")
    if claims is None and isinstance(section.get("creditors"), dict):
        logger.debug("legacy_section_creditors_migrated", case_id=repairs.case_id, section=position)
        claims = section["creditors"].get("fixed")

    if not section.get("id") and section.get("id") != 0:
        section["id"] = new_id()
        repairs.record(field_name, "Missing id assigned")

    return {
        "id": section["id"],
        "assets": _heal_assets(assets, f"{field_name}.assets", repairs),
        "claims": _rows(claims, f"{field_name}.claims", repairs, ChargeHolderClaim),
        "fixed_charge_surplus": section.get("fixed_charge_surplus"),
    }


def _heal_schedule_a(raw: Any, repairs: _Repairs) -> dict:
    default = empty_schedule_a().model_dump(by_alias=True)
    if not isinstance(raw, dict):
        repairs.record("scheduleA", "Schedule A missing; empty schedule used")
        return default

    sections_raw = raw.get("chargeHolderSections")
    if not isinstance(sections_raw, list) or not sections_raw:
        repairs.record("scheduleA.chargeHolderSections", "No charge holder sections; default section added")
        sections = default["chargeHolderSections"]
    else:
        sections = [
            _heal_section(section, position, repairs)
            for position, section in enumerate(sections_raw)
            if isinstance(section, dict)
        ] or default["chargeHolderSections"]

    pools_raw = raw.get("globalAssets")
    if not isinstance(pools_raw, dict):
        repairs.record("scheduleA.globalAssets", "Global assets missing; empty pools used")
        global_assets = default["globalAssets"]
    else:
        global_assets = {}
        for pool in ("floating", "uncharged"):
            if pool in pools_raw:
                global_assets[pool] = _heal_assets(
                    pools_raw[pool], f"scheduleA.globalAssets.{pool}", repairs
                )
            else:
                repairs.record(f"scheduleA.globalAssets.{pool}", "Pool missing; blank row used")
                global_assets[pool] = default["globalAssets"][pool]

    return {"chargeHolderSections": sections, "globalAssets": global_assets}


def _heal_schedule_c(raw: Any, repairs: _Repairs) -> dict:
    if raw is not None and not isinstance(raw, dict):
        repairs.record("scheduleC", "Schedule C unreadable; empty schedule used")
    raw = _as_dict(raw)
    return {
        key: _rows(raw.get(key), f"scheduleC.{key}", repairs, model)
        for key, model in (
            ("companyCreditors", CompanyCreditorRow),
            ("consumerCreditors", ConsumerCreditorRow),
            ("employeeCreditors", EmployeeCreditorRow),
        )
    }


def _heal_schedule_d(raw: Any, repairs: _Repairs) -> dict:
    if raw is not None and not isinstance(raw, dict):
        repairs.record("scheduleD", "Schedule D unreadable; empty schedule used")
    raw = _as_dict(raw)
    return {"shareholders": _rows(raw.get("shareholders"), "scheduleD.shareholders", repairs, Shareholder)}


def heal_document(
    raw: Any,
    case_id: str,
    version: Optional[int] = None,
) -> tuple[SoADocument, list[AuditWarning]]:
    """
    Build a valid document from a stored record, repairing what is missing.

    Args:
        raw: The stored document data (the schedules, optionally with
            ``version`` and ``as_at_date``); anything unreadable is replaced
        case_id: The case the record belongs to
        version: The record's version; taken from ``raw`` when omitted

    Returns:
        The healed document and one DOCUMENT_REPAIRED warning per repair
    """
    repairs = _Repairs(case_id)
    if not isinstance(raw, dict):
        if raw is not None:
            repairs.record("document", "Stored document unreadable; empty document used")
        raw = {}

    if version is None:
        try:
            version = max(int(raw.get("version") or 1), 1)
        except (TypeError, ValueError):
            version = 1

    data = {
        "case_id": case_id,
        "version": version,
        "as_at_date": raw.get("as_at_date"),
        "scheduleA": _heal_schedule_a(raw.get("scheduleA"), repairs),
        "scheduleC": _heal_schedule_c(raw.get("scheduleC"), repairs),
        "scheduleD": _heal_schedule_d(raw.get("scheduleD"), repairs),
    }

    try:
        document = SoADocument.model_validate(data)
    except PydanticValidationError as e:
        logger.error(
            "document_unrecoverable",
            case_id=case_id,
            version=version,
            errors=e.error_count(),
        )
        repairs.record("document", f"Stored document invalid ({e.error_count()} errors); empty document used")
        document = empty_document(case_id, version)

    if repairs.warnings:
        logger.info(
            "document_healed",
            case_id=case_id,
            version=version,
            repairs=len(repairs.warnings),
        )
    return document, repairs.warnings


__all__ = [
    "empty_schedule_a",
    "empty_document",
    "build_schedule_c",
    "build_schedule_d",
    "seed_document",
    "sync_schedule_c",
    "sync_schedule_d",
    "populate_missing_shareholders",
    "heal_document",
]
