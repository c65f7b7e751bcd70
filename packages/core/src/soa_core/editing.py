"""Pure update functions for a Statement of Affairs document.

Every function takes a document and returns a new one; the input is never
changed. Entities are addressed by their stable ``id``. Editing an id that
is not in the document raises ``EntityNotFoundError``.

Example:
    >>> from soa_core.documents import empty_document
    >>> doc = empty_document("case-1")
    >>> section = doc.sections[0]
    >>> doc = set_fixed_charge_surplus(doc, section.id, "10,000")
    >>> doc.sections[0].fixed_charge_surplus
    Decimal('10000')
"""

from enum import Enum
from typing import Any, Callable, Optional, Sequence, TypeVar

import structlog
from pydantic import BaseModel

from .accounts import Account
from .exceptions import EntityNotFoundError, ValidationError
from .models import (
    Asset,
    ChargeHolderClaim,
    ChargeSection,
    ChargeType,
    CompanyCreditorRow,
    ConsumerCreditorRow,
    EmployeeCreditorRow,
    Shareholder,
    SoADocument,
    parse_money,
)

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


class CreditorListing(str, Enum):
    """The three Schedule C listings."""
    COMPANY = "company"
    CONSUMER = "consumer"
    EMPLOYEE = "employee"


_LISTING_FIELDS = {
    CreditorListing.COMPANY: ("company_creditors", CompanyCreditorRow),
    CreditorListing.CONSUMER: ("consumer_creditors", ConsumerCreditorRow),
    CreditorListing.EMPLOYEE: ("employee_creditors", EmployeeCreditorRow),
}


# =============================================================================
# HELPERS
# =============================================================================

def _revise(item: M, changes: dict[str, Any]) -> M:
    """Apply changes through validation so entered text is parsed like a load."""
    data = item.model_dump()
    data.update(changes)
    data["id"] = item.id
    return type(item).model_validate(data)


def _index_of(items: Sequence[BaseModel], item_id: str) -> Optional[int]:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None


def _replace_at(items: tuple, index: int, item) -> tuple:
    return items[:index] + (item,) + items[index + 1:]


def _remove_at(items: tuple, index: int) -> tuple:
    return items[:index] + items[index + 1:]


def _with_sections(document: SoADocument, sections: tuple[ChargeSection, ...]) -> SoADocument:
    schedule_a = document.schedule_a.model_copy(update={"charge_holder_sections": sections})
    return document.model_copy(update={"schedule_a": schedule_a})


def _with_global_pool(document: SoADocument, pool: str, assets: tuple[Asset, ...]) -> SoADocument:
    global_assets = document.schedule_a.global_assets.model_copy(update={pool: assets})
    schedule_a = document.schedule_a.model_copy(update={"global_assets": global_assets})
    return document.model_copy(update={"schedule_a": schedule_a})


def _section_index(document: SoADocument, section_id: str) -> int:
    index = _index_of(document.sections, section_id)
    if index is None:
        raise EntityNotFoundError(
            f"Charge holder section {section_id} not found",
            entity_type="section",
            entity_id=section_id,
        )
    return index


def _edit_section(
    document: SoADocument,
    section_id: str,
    edit: Callable[[ChargeSection], ChargeSection],
) -> SoADocument:
    index = _section_index(document, section_id)
    sections = _replace_at(document.sections, index, edit(document.sections[index]))
    return _with_sections(document, sections)


def _edit_asset(
    document: SoADocument,
    asset_id: str,
    edit: Callable[[tuple[Asset, ...], int], tuple[Asset, ...]],
) -> SoADocument:
    """Find an asset in any pool and replace that pool's list with ``edit``'s result."""
    for section in document.sections:
        index = _index_of(section.assets, asset_id)
        if index is not None:
            return _edit_section(
                document,
                section.id,
                lambda s: s.model_copy(update={"assets": edit(s.assets, index)}),
            )

    global_assets = document.schedule_a.global_assets
    for pool in ("floating", "uncharged"):
        assets = getattr(global_assets, pool)
        index = _index_of(assets, asset_id)
        if index is not None:
            return _with_global_pool(document, pool, edit(assets, index))

    raise EntityNotFoundError(
        f"Asset {asset_id} not found",
        entity_type="asset",
        entity_id=asset_id,
    )


def _edit_claim(
    document: SoADocument,
    claim_id: str,
    edit: Callable[[tuple[ChargeHolderClaim, ...], int], tuple[ChargeHolderClaim, ...]],
) -> SoADocument:
    for section in document.sections:
        index = _index_of(section.claims, claim_id)
        if index is not None:
            return _edit_section(
                document,
                section.id,
                lambda s: s.model_copy(update={"claims": edit(s.claims, index)}),
            )
    raise EntityNotFoundError(
        f"Chargeholder claim {claim_id} not found",
        entity_type="claim",
        entity_id=claim_id,
    )


# =============================================================================
# SCHEDULE A - SECTIONS
# =============================================================================

def new_section() -> ChargeSection:
    """A section with one blank asset row and one blank claim row."""
    return ChargeSection(assets=(Asset(),), claims=(ChargeHolderClaim(),))


def add_section(document: SoADocument, section: Optional[ChargeSection] = None) -> SoADocument:
    section = section or new_section()
    logger.debug("section_added", case_id=document.case_id, section_id=section.id)
    return _with_sections(document, document.sections + (section,))


def remove_section(document: SoADocument, section_id: str) -> SoADocument:
    """Remove a charge holder section; the last section cannot be removed."""
    index = _section_index(document, section_id)
    if len(document.sections) == 1:
        raise ValidationError(
            "A statement must keep at least one charge holder section",
            field="charge_holder_sections",
            constraint="min_length=1",
        )
    return _with_sections(document, _remove_at(document.sections, index))


def set_fixed_charge_surplus(document: SoADocument, section_id: str, amount: Any) -> SoADocument:
    """Record the practitioner's fixed charge surplus for a section."""
    value = parse_money(amount)
    return _edit_section(
        document,
        section_id,
        lambda s: s.model_copy(update={"fixed_charge_surplus": value}),
    )


# =============================================================================
# SCHEDULE A - ASSETS
# =============================================================================

def add_asset(
    document: SoADocument,
    charge_type: ChargeType,
    section_id: Optional[str] = None,
    asset: Optional[Asset] = None,
) -> SoADocument:
    """
    Append an asset to a pool.

    Args:
        document: The document to edit
        charge_type: Fixed charge (requires ``section_id``), floating or uncharged
        section_id: The section for a fixed charge asset
        asset: The asset to add; a blank row when omitted
    """
    asset = asset or Asset()
    charge_type = ChargeType(charge_type)

    if charge_type == ChargeType.FIXED_CHARGE:
        if section_id is None:
            raise ValidationError(
                "A fixed charge asset must be added to a charge holder section",
                field="section_id",
                constraint="required for fixed_charge",
            )
        return _edit_section(
            document,
            section_id,
            lambda s: s.model_copy(update={"assets": s.assets + (asset,)}),
        )

    pool = "floating" if charge_type == ChargeType.FLOATING_CHARGE else "uncharged"
    assets = getattr(document.schedule_a.global_assets, pool)
    return _with_global_pool(document, pool, assets + (asset,))


def update_asset(document: SoADocument, asset_id: str, **changes: Any) -> SoADocument:
    """Change fields of an asset. ``etr_value`` is accepted for the estimate."""
    if "etr_value" in changes:
        changes["estimated_to_realise"] = changes.pop("etr_value")
    return _edit_asset(
        document,
        asset_id,
        lambda assets, i: _replace_at(assets, i, _revise(assets[i], changes)),
    )


def remove_asset(document: SoADocument, asset_id: str) -> SoADocument:
    return _edit_asset(document, asset_id, _remove_at)


def apply_account(document: SoADocument, asset_id: str, account: Account) -> SoADocument:
    """Code an asset to an account; the account name becomes the description."""
    return update_asset(
        document,
        asset_id,
        account_code=account.account_code,
        description=account.account_name,
    )


# =============================================================================
# SCHEDULE A - CHARGEHOLDER CLAIMS
# =============================================================================

def add_claim(
    document: SoADocument,
    section_id: str,
    claim: Optional[ChargeHolderClaim] = None,
) -> SoADocument:
    claim = claim or ChargeHolderClaim()
    return _edit_section(
        document,
        section_id,
        lambda s: s.model_copy(update={"claims": s.claims + (claim,)}),
    )


def update_claim(document: SoADocument, claim_id: str, **changes: Any) -> SoADocument:
    return _edit_claim(
        document,
        claim_id,
        lambda claims, i: _replace_at(claims, i, _revise(claims[i], changes)),
    )


def remove_claim(document: SoADocument, claim_id: str) -> SoADocument:
    return _edit_claim(document, claim_id, _remove_at)


# =============================================================================
# SCHEDULE C - CREDITOR LISTINGS
# =============================================================================

def _with_listing(document: SoADocument, field: str, rows: tuple) -> SoADocument:
    schedule_c = document.schedule_c.model_copy(update={field: rows})
    return document.model_copy(update={"schedule_c": schedule_c})


def add_creditor_row(
    document: SoADocument,
    listing: CreditorListing,
    row: Optional[BaseModel] = None,
) -> SoADocument:
    field, row_type = _LISTING_FIELDS[CreditorListing(listing)]
    row = row or row_type()
    if not isinstance(row, row_type):
        raise ValidationError(
            f"{type(row).__name__} cannot be added to the {listing} listing",
            field=field,
            constraint=row_type.__name__,
        )
    rows = getattr(document.schedule_c, field)
    return _with_listing(document, field, rows + (row,))


def _edit_creditor_row(
    document: SoADocument,
    row_id: str,
    edit: Callable[[tuple, int], tuple],
) -> SoADocument:
    for field, _row_type in _LISTING_FIELDS.values():
        rows = getattr(document.schedule_c, field)
        index = _index_of(rows, row_id)
        if index is not None:
            return _with_listing(document, field, edit(rows, index))
    raise EntityNotFoundError(
        f"Schedule C row {row_id} not found",
        entity_type="creditor_row",
        entity_id=row_id,
    )


def update_creditor_row(document: SoADocument, row_id: str, **changes: Any) -> SoADocument:
    return _edit_creditor_row(
        document,
        row_id,
        lambda rows, i: _replace_at(rows, i, _revise(rows[i], changes)),
    )


def remove_creditor_row(document: SoADocument, row_id: str) -> SoADocument:
    return _edit_creditor_row(document, row_id, _remove_at)


# =============================================================================
# SCHEDULE D - SHAREHOLDERS
# =============================================================================

def _with_shareholders(document: SoADocument, shareholders: tuple[Shareholder, ...]) -> SoADocument:
    schedule_d = document.schedule_d.model_copy(update={"shareholders": shareholders})
    return document.model_copy(update={"schedule_d": schedule_d})


def _shareholder_index(document: SoADocument, shareholder_id: str) -> int:
    index = _index_of(document.schedule_d.shareholders, shareholder_id)
    if index is None:
        raise EntityNotFoundError(
            f"Shareholder {shareholder_id} not found",
            entity_type="shareholder",
            entity_id=shareholder_id,
        )
    return index


def add_shareholder(document: SoADocument, shareholder: Optional[Shareholder] = None) -> SoADocument:
    shareholder = shareholder or Shareholder()
    return _with_shareholders(document, document.schedule_d.shareholders + (shareholder,))


def update_shareholder(document: SoADocument, shareholder_id: str, **changes: Any) -> SoADocument:
    index = _shareholder_index(document, shareholder_id)
    shareholders = document.schedule_d.shareholders
    revised = _revise(shareholders[index], changes)
    return _with_shareholders(document, _replace_at(shareholders, index, revised))


def remove_shareholder(document: SoADocument, shareholder_id: str) -> SoADocument:
    index = _shareholder_index(document, shareholder_id)
    return _with_shareholders(document, _remove_at(document.schedule_d.shareholders, index))


__all__ = [
    "CreditorListing",
    "new_section",
    "add_section",
    "remove_section",
    "set_fixed_charge_surplus",
    "add_asset",
    "update_asset",
    "remove_asset",
    "apply_account",
    "add_claim",
    "update_claim",
    "remove_claim",
    "add_creditor_row",
    "update_creditor_row",
    "remove_creditor_row",
    "add_shareholder",
    "update_shareholder",
    "remove_shareholder",
]
