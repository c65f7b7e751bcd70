"""Schedule A subtotals: charge holder sections and the global asset pools."""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from .models import (
    ZERO,
    Asset,
    AuditSeverity,
    AuditWarning,
    ChargeSection,
    PoolTotals,
    SectionTotals,
    WarningCode,
    to_arithmetic,
)

logger = structlog.get_logger()

DEFAULT_SURPLUS_TOLERANCE = Decimal("1.00")


def summarise_pool(assets: Iterable[Asset]) -> PoolTotals:
    """Sum book values and ETRs for a list of assets.

    Uncertain ETRs add nothing to ``total_etr`` and are counted separately.
    """
    total_book = ZERO
    total_etr = ZERO
    uncertain = 0
    for asset in assets:
        total_book += asset.book_value
        total_etr += to_arithmetic(asset.estimated_to_realise)
        if asset.estimated_to_realise.is_uncertain:
            uncertain += 1
    return PoolTotals(total_book=total_book, total_etr=total_etr, uncertain_count=uncertain)


def summarise_section(section: ChargeSection) -> SectionTotals:
    """Subtotal a charge holder section.

    The entered ``fixed_charge_surplus`` is reported unchanged next to the
    surplus implied by the section's own lines (ETR less claims).
    """
    pool = summarise_pool(section.assets)
    total_claims = sum((claim.amount for claim in section.claims), ZERO)
    return SectionTotals(
        section_id=section.id,
        total_book=pool.total_book,
        total_etr=pool.total_etr,
        total_claims=total_claims,
        fixed_charge_surplus=section.fixed_charge_surplus,
        derived_surplus=pool.total_etr - total_claims,
        uncertain_count=pool.uncertain_count,
    )


def check_surplus(
    totals: SectionTotals,
    tolerance: Decimal = DEFAULT_SURPLUS_TOLERANCE,
) -> Optional[AuditWarning]:
    """Warn when the entered surplus disagrees with the section's own lines.

    Neither figure is treated as authoritative; the warning asks the
    practitioner to reconcile them.
    """
    difference = totals.surplus_difference
    if abs(difference) <= tolerance:
        return None

    logger.warning(
        "fixed_charge_surplus_mismatch",
        section_id=totals.section_id,
        entered=str(totals.fixed_charge_surplus),
        derived=str(totals.derived_surplus),
    )
    return AuditWarning(
        code=WarningCode.SURPLUS_MISMATCH,
        message=(
            "Fixed charge surplus entered for this section differs from "
            "estimated realisations less amounts due to chargeholders"
        ),
        field_name=f"section:{totals.section_id}.fixed_charge_surplus",
        expected_value=str(totals.derived_surplus),
        actual_value=str(totals.fixed_charge_surplus),
        severity=AuditSeverity.WARNING,
        requires_review=True,
    )


__all__ = [
    "DEFAULT_SURPLUS_TOLERANCE",
    "summarise_pool",
    "summarise_section",
    "check_surplus",
]
