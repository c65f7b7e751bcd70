"""Partition the creditor and employee ledgers into Schedule B ranks.

Buckets, in the order they are deducted:

1. Moratorium debts (post-moratorium and priority pre-moratorium)
2. Preferential: employee preferential claims
3. Secondary preferential: HMRC
4. Debts secured by floating charges
5. Unsecured: employees, trade creditors, other creditors, and chargeholders
   named in a fixed charge section who hold no real security

A chargeholder already listed in a fixed charge section is dealt with in
that section and is never counted again as a floating charge holder.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

import structlog

from .matching import match_creditor, normalize_name
from .models import (
    ZERO,
    AuditSeverity,
    AuditWarning,
    ChargeSection,
    ClaimLine,
    ClassifiedCreditors,
    Creditor,
    CreditorType,
    Employee,
    MoratoriumSubtype,
    WarningCode,
)

logger = structlog.get_logger()


def _security_text(creditor: Creditor) -> str:
    return (creditor.security_type or "").strip().lower()


def holds_floating_charge(creditor: Creditor) -> bool:
    """Secured creditor whose security includes a floating charge."""
    security = _security_text(creditor)
    return creditor.creditor_type == CreditorType.SECURED and (
        "floating" in security or "fixed & floating" in security
    )


def holds_fixed_or_floating_charge(creditor: Creditor) -> bool:
    """Secured creditor whose security includes a fixed or a floating charge."""
    security = _security_text(creditor)
    return creditor.creditor_type == CreditorType.SECURED and (
        "fixed" in security or "floating" in security
    )


class CreditorClassifier:
    """
    Bucket a creditor ledger into Schedule B ranks without double counting.

    Classification is deterministic: the same sections and ledgers always
    give the same buckets and the same warnings, in the same order.
    """

    def __init__(self) -> None:
        self._warnings: list[AuditWarning] = []

    def _warn(self, warning: AuditWarning) -> None:
        self._warnings.append(warning)
        logger.warning(
            "creditor_classification_warning",
            code=warning.code.value,
            field=warning.field_name,
            detail=warning.message,
        )

    def _sum_balances(self, creditors: Iterable[Creditor]) -> Decimal:
        return sum((c.balance_owed for c in creditors), ZERO)

    def _moratorium(self, creditors: Sequence[Creditor], subtype: MoratoriumSubtype) -> Decimal:
        return self._sum_balances(
            c for c in creditors
            if c.creditor_type == CreditorType.MORATORIUM and c.moratorium_subtype == subtype
        )

    def _floating_charge_holders(
        self,
        sections: Sequence[ChargeSection],
        creditors: Sequence[Creditor],
    ) -> tuple[ClaimLine, ...]:
        fixed_section_names = {
            normalize_name(claim.name)
            for section in sections
            for claim in section.claims
            if claim.name and claim.name.strip()
        }
        lines = []
        for creditor in creditors:
            if not holds_floating_charge(creditor):
                continue
            if normalize_name(creditor.name) in fixed_section_names:
                logger.debug(
                    "floating_charge_holder_in_fixed_section",
                    creditor=creditor.name,
                )
                continue
            lines.append(ClaimLine(name=creditor.name, amount=creditor.balance_owed))
        return tuple(lines)

    def _unsecured_by_type(self, creditors: Sequence[Creditor]) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for creditor in creditors:
            if creditor.creditor_type != CreditorType.UNSECURED:
                continue
            kind = (creditor.unsecured_creditor_type or "").strip()
            if not kind:
                self._warn(AuditWarning(
                    code=WarningCode.UNSECURED_TYPE_MISSING,
                    message=(
                        f"Unsecured creditor '{creditor.name}' has no unsecured "
                        "creditor type and is left out of Schedule B"
                    ),
                    field_name=f"creditor:{creditor.id}.unsecured_creditor_type",
                    actual_value=str(creditor.balance_owed),
                ))
                continue
            totals[kind] += creditor.balance_owed
        return dict(totals)

    def _recharacterised(
        self,
        sections: Sequence[ChargeSection],
        creditors: Sequence[Creditor],
    ) -> tuple[ClaimLine, ...]:
        """Chargeholders in fixed sections whose ledger record shows no security.

        Their section claim is carried to the unsecured rank as a deficiency.
        """
        lines = []
        for section in sections:
            for claim in section.claims:
                if not claim.name or not claim.name.strip() or claim.amount == 0:
                    continue

                match = match_creditor(claim.name, creditors)
                if match.creditor is None:
                    self._warn(AuditWarning(
                        code=WarningCode.UNMATCHED_CHARGEHOLDER,
                        message=(
                            f"Chargeholder '{claim.name}' is not on the creditor ledger; "
                            "treated as properly secured"
                        ),
                        field_name=f"claim:{claim.id}.name",
                        severity=AuditSeverity.INFO,
                        requires_review=False,
                    ))
                    continue

                if match.is_ambiguous:
                    self._warn(AuditWarning(
                        code=WarningCode.AMBIGUOUS_CREDITOR_MATCH,
                        message=(
                            f"Chargeholder '{claim.name}' matches "
                            f"{len(match.candidates)} ledger creditors; the first was used"
                        ),
                        field_name=f"claim:{claim.id}.name",
                        expected_value="1",
                        actual_value=str(len(match.candidates)),
                    ))

                if not holds_fixed_or_floating_charge(match.creditor):
                    lines.append(ClaimLine(name=claim.name, amount=abs(claim.amount)))
                    logger.info(
                        "chargeholder_recharacterised_unsecured",
                        chargeholder=claim.name,
                        amount=str(abs(claim.amount)),
                    )
        return tuple(lines)

    def classify(
        self,
        sections: Sequence[ChargeSection],
        creditors: Sequence[Creditor],
        employees: Sequence[Employee],
    ) -> ClassifiedCreditors:
        """
        Partition the ledgers into ranked buckets.

        Args:
            sections: Schedule A charge holder sections (for chargeholder names)
            creditors: The live creditor ledger
            employees: The live employee ledger

        Returns:
            ClassifiedCreditors with positive bucket totals and any warnings
        """
        self._warnings = []
        sections = tuple(sections)
        creditors = tuple(creditors)

        result = ClassifiedCreditors(
            post_moratorium=self._moratorium(creditors, MoratoriumSubtype.POST_MORATORIUM),
            pre_moratorium=self._moratorium(creditors, MoratoriumSubtype.PRE_MORATORIUM),
            employee_preferential=sum(
                (e.total_preferential_claim for e in employees), ZERO
            ),
            secondary_preferential=self._sum_balances(
                c for c in creditors if c.creditor_type == CreditorType.SECONDARY_PREFERENTIAL
            ),
            floating_charge_holders=self._floating_charge_holders(sections, creditors),
            unsecured_employees=sum((e.total_unsecured_claim for e in employees), ZERO),
            unsecured_by_type=self._unsecured_by_type(creditors),
            recharacterised=self._recharacterised(sections, creditors),
            warnings=tuple(self._warnings),
        )

        logger.info(
            "creditors_classified",
            creditors=len(creditors),
            employees=len(employees),
            floating_charge_holders=len(result.floating_charge_holders),
            recharacterised=len(result.recharacterised),
            warnings=len(result.warnings),
        )
        return result


def classify_creditors(
    sections: Sequence[ChargeSection],
    creditors: Sequence[Creditor],
    employees: Sequence[Employee],
) -> ClassifiedCreditors:
    """Convenience wrapper around ``CreditorClassifier.classify``."""
    return CreditorClassifier().classify(sections, creditors, employees)


__all__ = [
    "holds_floating_charge",
    "holds_fixed_or_floating_charge",
    "CreditorClassifier",
    "classify_creditors",
]
