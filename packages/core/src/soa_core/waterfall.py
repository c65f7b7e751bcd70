"""Schedule B: the estimated deficiency/surplus at each rank of creditor.

The waterfall runs strictly in order; every step consumes the previous
step's figure:

1. Assets available for preferential creditors
   (fixed charge surpluses + floating ETR + uncharged ETR)
2. Less moratorium debts (post and priority pre-moratorium)
3. Less preferential creditors (employees)
4. Less secondary preferential creditors (HMRC)
5. Prescribed part of net property, set aside
6. Assets available for floating charge holders
7. Less debts secured by floating charges
8. Prescribed part brought back down for unsecured creditors
9. Unsecured claims
10. Surplus/deficiency as regards unsecured creditors
11. Less issued and called-up capital (members)

Claim amounts are positive magnitudes and are subtracted. Calculation is
pure: the same document and ledger always produce an equal result.
"""

from decimal import Decimal
from typing import Optional

import structlog

from .capital import calculate_called_up_capital
from .classifier import CreditorClassifier
from .models import (
    ZERO,
    AuditEntry,
    AuditWarning,
    CaseLedger,
    SoADocument,
    WaterfallResult,
)
from .prescribed_part import calculate_prescribed_part
from .sections import DEFAULT_SURPLUS_TOLERANCE, check_surplus, summarise_pool, summarise_section

logger = structlog.get_logger()


class WaterfallCalculator:
    """
    Compute every Schedule B milestone for a Statement of Affairs.

    Each step is recorded in an audit log and logged, so any figure on the
    statement can be traced to its inputs.
    """

    def __init__(self, surplus_tolerance: Decimal = DEFAULT_SURPLUS_TOLERANCE):
        """
        Initialize calculator.

        Args:
            surplus_tolerance: Allowed difference between an entered fixed
                charge surplus and the section's own assets less claims
                before a warning is raised
        """
        self.surplus_tolerance = surplus_tolerance
        self._audit_log: list[AuditEntry] = []
        self._warnings: list[AuditWarning] = []

    def _log_step(
        self,
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        self._audit_log.append(entry)
        logger.info(
            "waterfall_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def calculate(
        self,
        document: SoADocument,
        ledger: Optional[CaseLedger] = None,
    ) -> WaterfallResult:
        """
        Run the full waterfall.

        Args:
            document: The Statement of Affairs (Schedules A and D are read)
            ledger: Live creditor and employee ledgers used to classify
                claims; without one every creditor rank is nil

        Returns:
            WaterfallResult with every milestone, the audit log and warnings
        """
        self._audit_log = []
        self._warnings = []
        ledger = ledger or CaseLedger(case_id=document.case_id)

        logger.info(
            "waterfall_started",
            case_id=document.case_id,
            version=document.version,
        )

        # Schedule A
        sections = tuple(summarise_section(section) for section in document.sections)
        for totals in sections:
            warning = check_surplus(totals, self.surplus_tolerance)
            if warning is not None:
                self._warnings.append(warning)
        floating_pool = summarise_pool(document.schedule_a.global_assets.floating)
        uncharged_pool = summarise_pool(document.schedule_a.global_assets.uncharged)

        fixed_charge_surplus_total = sum((s.fixed_charge_surplus for s in sections), ZERO)
        assets_for_preferential = (
            fixed_charge_surplus_total + floating_pool.total_etr + uncharged_pool.total_etr
        )
        self._log_step(
            step="assets_for_preferential",
            input_value=(
                f"fixed surplus {fixed_charge_surplus_total} + floating {floating_pool.total_etr}"
                f" + uncharged {uncharged_pool.total_etr}"
            ),
            output_value=str(assets_for_preferential),
            source="Schedule A",
            notes=(
                f"{floating_pool.uncertain_count + uncharged_pool.uncertain_count}"
                " uncertain ETR values counted as nil"
            ),
        )

        classified = CreditorClassifier().classify(
            document.sections, ledger.creditors, ledger.employees
        )
        self._warnings.extend(classified.warnings)

        # Moratorium and preferential ranks
        total_moratorium = classified.total_moratorium
        after_moratorium = assets_for_preferential - total_moratorium
        self._log_step(
            step="after_moratorium",
            input_value=(
                f"{assets_for_preferential} - (post {classified.post_moratorium}"
                f" + pre {classified.pre_moratorium})"
            ),
            output_value=str(after_moratorium),
            source="Moratorium debts",
        )

        after_preferential = after_moratorium - classified.employee_preferential
        self._log_step(
            step="after_preferential",
            input_value=f"{after_moratorium} - {classified.employee_preferential}",
            output_value=str(after_preferential),
            source="Preferential creditors (employees)",
        )

        after_secondary = after_preferential - classified.secondary_preferential
        self._log_step(
            step="after_secondary_preferential",
            input_value=f"{after_preferential} - {classified.secondary_preferential}",
            output_value=str(after_secondary),
            source="Secondary preferential creditors (HMRC)",
        )

        # Prescribed part and floating charges
        prescribed_part = calculate_prescribed_part(after_secondary)
        self._log_step(
            step="prescribed_part",
            input_value=f"net property {after_secondary}",
            output_value=str(prescribed_part.amount) if prescribed_part.applicable else "N/A",
            source="Prescribed part",
        )

        assets_for_floating = after_secondary - prescribed_part.arithmetic
        self._log_step(
            step="assets_for_floating",
            input_value=f"{after_secondary} - {prescribed_part.arithmetic}",
            output_value=str(assets_for_floating),
            source="Prescribed part carried forward",
        )

        floating_charge_total = classified.floating_charge_total
        after_floating = assets_for_floating - floating_charge_total
        self._log_step(
            step="after_floating",
            input_value=f"{assets_for_floating} - {floating_charge_total}",
            output_value=str(after_floating),
            source="Debts secured by floating charges",
            notes=f"{len(classified.floating_charge_holders)} floating charge holders",
        )

        assets_for_unsecured = after_floating + prescribed_part.arithmetic
        self._log_step(
            step="assets_for_unsecured",
            input_value=f"{after_floating} + {prescribed_part.arithmetic}",
            output_value=str(assets_for_unsecured),
            source="Prescribed part brought down",
        )

        # Unsecured
        unsecured_claims = (
            classified.unsecured_employees
            + classified.trade_creditors
            + classified.other_unsecured
            + classified.recharacterised_total
        )
        self._log_step(
            step="unsecured_claims",
            input_value=(
                f"employees {classified.unsecured_employees} + trade {classified.trade_creditors}"
                f" + other {classified.other_unsecured}"
                f" + fixed charge deficiencies {classified.recharacterised_total}"
            ),
            output_value=str(unsecured_claims),
            source="Unsecured creditors",
        )

        after_unsecured = assets_for_unsecured - unsecured_claims
        self._log_step(
            step="after_unsecured",
            input_value=f"{assets_for_unsecured} - {unsecured_claims}",
            output_value=str(after_unsecured),
            source="Unsecured creditors",
        )

        # Members
        capital = calculate_called_up_capital(document.schedule_d.shareholders)
        after_members = after_unsecured - capital.arithmetic
        self._log_step(
            step="after_members",
            input_value=f"{after_unsecured} - {capital.arithmetic}",
            output_value=str(after_members),
            source="Issued and called up capital",
            notes=None if capital.determinable else "Capital TBC; counted as nil",
        )

        logger.info(
            "waterfall_completed",
            case_id=document.case_id,
            after_members=str(after_members),
            warnings=len(self._warnings),
        )

        return WaterfallResult(
            sections=sections,
            floating_pool=floating_pool,
            uncharged_pool=uncharged_pool,
            fixed_charge_surplus_total=fixed_charge_surplus_total,
            assets_for_preferential=assets_for_preferential,
            post_moratorium=classified.post_moratorium,
            pre_moratorium=classified.pre_moratorium,
            total_moratorium=total_moratorium,
            after_moratorium=after_moratorium,
            employee_preferential=classified.employee_preferential,
            after_preferential=after_preferential,
            secondary_preferential=classified.secondary_preferential,
            after_secondary_preferential=after_secondary,
            prescribed_part=prescribed_part,
            assets_for_floating=assets_for_floating,
            floating_charge_holders=classified.floating_charge_holders,
            floating_charge_total=floating_charge_total,
            after_floating=after_floating,
            assets_for_unsecured=assets_for_unsecured,
            unsecured_employees=classified.unsecured_employees,
            trade_creditors=classified.trade_creditors,
            other_unsecured=classified.other_unsecured,
            recharacterised=classified.recharacterised,
            unsecured_claims=unsecured_claims,
            after_unsecured=after_unsecured,
            called_up_capital=capital,
            after_members=after_members,
            audit_log=tuple(self._audit_log),
            warnings=tuple(self._warnings),
        )


def compute(
    document: SoADocument,
    ledger: Optional[CaseLedger] = None,
    surplus_tolerance: Decimal = DEFAULT_SURPLUS_TOLERANCE,
) -> WaterfallResult:
    """Compute the waterfall for a document; see ``WaterfallCalculator``."""
    return WaterfallCalculator(surplus_tolerance=surplus_tolerance).calculate(document, ledger)


__all__ = ["WaterfallCalculator", "compute"]
