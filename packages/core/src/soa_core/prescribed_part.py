"""Prescribed part of net property for unsecured creditors.

The prescribed part is the share of floating charge realisations set aside
for unsecured creditors before the floating charge holders are paid.

Bands as coded (Insolvency Act 1986 (Prescribed Part) Order):
- net property of nil or less: nothing
- net property below the threshold: not applicable (shown as N/A)
- otherwise 50% of the first 10,000 plus 20% of the excess, capped

The figures are reproduced exactly; they are not checked against the
current statutory order.
"""

from decimal import Decimal

import structlog

from .models import ZERO, PrescribedPart

logger = structlog.get_logger()


# =============================================================================
# PRESCRIBED PART BANDS
# =============================================================================

PRESCRIBED_PART_THRESHOLD = Decimal("10000")
PRESCRIBED_PART_BASE = Decimal("5000")
PRESCRIBED_PART_RATE = Decimal("0.20")
PRESCRIBED_PART_CAP = Decimal("800000")


def calculate_prescribed_part(net_property: Decimal) -> PrescribedPart:
    """Calculate the prescribed part for a given net property.

    Args:
        net_property: Surplus after secondary preferential creditors

    Returns:
        PrescribedPart; ``amount`` is None when net property is positive
        but under the threshold

    Examples:
        >>> calculate_prescribed_part(Decimal("50000")).amount
        Decimal('13000.00')
    """
    if net_property <= ZERO:
        return PrescribedPart(net_property=net_property, amount=ZERO)

    if net_property < PRESCRIBED_PART_THRESHOLD:
        logger.debug(
            "prescribed_part_not_applicable",
            net_property=str(net_property),
            threshold=str(PRESCRIBED_PART_THRESHOLD),
        )
        return PrescribedPart(net_property=net_property, amount=None)

    excess = net_property - PRESCRIBED_PART_THRESHOLD
    amount = min(PRESCRIBED_PART_BASE + PRESCRIBED_PART_RATE * excess, PRESCRIBED_PART_CAP)
    return PrescribedPart(net_property=net_property, amount=amount)


__all__ = [
    "PRESCRIBED_PART_THRESHOLD",
    "PRESCRIBED_PART_BASE",
    "PRESCRIBED_PART_RATE",
    "PRESCRIBED_PART_CAP",
    "calculate_prescribed_part",
]
