"""Chart of accounts lookups for Schedule A assets.

Assets may be coded against the firm's chart of accounts so realisations
post to the right ledger account later. Fixed charge assets are coded
against "fixed charge realisations" accounts; floating and uncharged
assets against "asset realisations" accounts that are not fixed charge.
"""

from typing import Iterable, Optional

import structlog
from pydantic import BaseModel, Field

from .models import AuditSeverity, AuditWarning, ChargeType, SoADocument, WarningCode

logger = structlog.get_logger()

MAX_SUGGESTIONS = 15

FIXED_CHARGE_GROUP = "fixed charge realisations"
ASSET_REALISATIONS_GROUP = "asset realisations"


class Account(BaseModel):
    """A chart of accounts entry."""
    model_config = {"frozen": True}

    account_code: str
    account_name: str
    account_group: str = ""


class ChartOfAccounts(BaseModel):
    model_config = {"frozen": True}

    accounts: tuple[Account, ...] = Field(default_factory=tuple)

    @property
    def codes(self) -> set[str]:
        return {account.account_code for account in self.accounts}

    def get(self, account_code: Optional[str]) -> Optional[Account]:
        """Look an account up by its code."""
        if not account_code:
            return None
        for account in self.accounts:
            if account.account_code == account_code:
                return account
        return None


def _is_relevant(account: Account, charge_type: ChargeType) -> bool:
    group = account.account_group.lower()
    name = account.account_name.lower()

    if charge_type == ChargeType.FIXED_CHARGE:
        return group == FIXED_CHARGE_GROUP or FIXED_CHARGE_GROUP in name

    has_asset_realisations = group == ASSET_REALISATIONS_GROUP or ASSET_REALISATIONS_GROUP in name
    has_fixed_charge = "fixed charge" in group or "fixed charge" in name
    return has_asset_realisations and not has_fixed_charge


def suggest_accounts(
    chart: ChartOfAccounts,
    description: Optional[str],
    charge_type: ChargeType,
) -> list[Account]:
    """
    Suggest accounts for an asset.

    Args:
        chart: The firm's chart of accounts
        description: What the user has typed so far; matched against
            account names and codes
        charge_type: Which pool the asset is in

    Returns:
        Up to 15 accounts. When the description matches nothing, every
        account relevant to the pool is offered instead.
    """
    relevant = [a for a in chart.accounts if _is_relevant(a, charge_type)]

    term = (description or "").strip().lower()
    if term:
        matching = [
            a for a in relevant
            if term in a.account_name.lower() or term in a.account_code.lower()
        ]
        if matching:
            return matching[:MAX_SUGGESTIONS]

    return relevant[:MAX_SUGGESTIONS]


def _clear_unknown(assets: Iterable, known: set[str], warnings: list[AuditWarning]) -> tuple:
    cleaned = []
    for asset in assets:
        if asset.account_code and asset.account_code not in known:
            logger.warning(
                "unknown_account_code",
                asset_id=asset.id,
                account_code=asset.account_code,
            )
            warnings.append(AuditWarning(
                code=WarningCode.UNKNOWN_ACCOUNT_CODE,
                message=(
                    f"Account code '{asset.account_code}' is not in the chart of accounts; "
                    "the asset has been left uncoded"
                ),
                field_name=f"asset:{asset.id}.account_code",
                actual_value=asset.account_code,
                severity=AuditSeverity.WARNING,
                requires_review=False,
            ))
            asset = asset.model_copy(update={"account_code": None})
        cleaned.append(asset)
    return tuple(cleaned)


def validate_account_codes(
    document: SoADocument,
    chart: ChartOfAccounts,
) -> tuple[SoADocument, list[AuditWarning]]:
    """Clear account codes that are not in the chart.

    Returns the (possibly) updated document and one warning per cleared code.
    """
    known = chart.codes
    warnings: list[AuditWarning] = []

    schedule_a = document.schedule_a
    sections = tuple(
        section.model_copy(update={"assets": _clear_unknown(section.assets, known, warnings)})
        for section in schedule_a.charge_holder_sections
    )
    global_assets = schedule_a.global_assets.model_copy(update={
        "floating": _clear_unknown(schedule_a.global_assets.floating, known, warnings),
        "uncharged": _clear_unknown(schedule_a.global_assets.uncharged, known, warnings),
    })

    if not warnings:
        return document, warnings

    updated = document.model_copy(update={
        "schedule_a": schedule_a.model_copy(update={
            "charge_holder_sections": sections,
            "global_assets": global_assets,
        })
    })
    return updated, warnings


__all__ = [
    "MAX_SUGGESTIONS",
    "Account",
    "ChartOfAccounts",
    "suggest_accounts",
    "validate_account_codes",
]
