"""Tests for the Schedule B waterfall."""

from decimal import Decimal

import pytest

from soa_core import WaterfallCalculator, compute, heal_document
from soa_core.models import (
    Asset,
    CaseLedger,
    ChargeHolderClaim,
    ChargeSection,
    Creditor,
    Employee,
    GlobalAssets,
    ScheduleA,
    ScheduleD,
    Shareholder,
    SoADocument,
    Uncertain,
    WaterfallResult,
    WarningCode,
)


@pytest.fixture
def document() -> SoADocument:
    """Fixed surplus 10,000, floating ETR 5,000, uncharged ETR 2,000."""
    return SoADocument(
        case_id="case-1",
        schedule_a=ScheduleA(
            charge_holder_sections=(
                ChargeSection(
                    id="s1",
                    assets=(Asset(id="a1", description="Freehold property", book_value="80000",
                                  estimated_to_realise="60000"),),
                    claims=(ChargeHolderClaim(id="k1", name="Barclays Bank plc", amount="50000"),),
                    fixed_charge_surplus="10000",
                ),
            ),
            global_assets=GlobalAssets(
                floating=(
                    Asset(id="a2", description="Stock", book_value="8000", estimated_to_realise="5000"),
                    Asset(id="a3", description="Work in progress", book_value="3000",
                          estimated_to_realise=Uncertain()),
                ),
                uncharged=(Asset(id="a4", description="Cash at bank", book_value="2000",
                                 estimated_to_realise="2000"),),
            ),
        ),
    )


@pytest.fixture
def ledger() -> CaseLedger:
    """Employee preferential 3,000 and trade creditors 4,000; the bank is in the fixed section."""
    return CaseLedger(
        case_id="case-1",
        company_name="Acme Widgets Ltd",
        creditors=(
            Creditor(id="c1", name="Barclays Bank plc", creditor_type="secured",
                     security_type="Fixed & Floating", balance_owed="50000"),
            Creditor(id="c2", name="Steel Supplies", creditor_type="unsecured",
                     unsecured_creditor_type="trade_expense", balance_owed="4000"),
        ),
        employees=(Employee(id="e1", name="Jane Smith", total_preferential_claim="3000"),),
    )


class TestWaterfallChain:
    """Each milestone follows from the one before it."""

    def test_literal_fixture(self, document, ledger):
        result = compute(document, ledger)

        assert result.assets_for_preferential == Decimal("17000")
        assert result.after_moratorium == Decimal("17000")
        assert result.after_preferential == Decimal("14000")
        assert result.after_secondary_preferential == Decimal("14000")
        assert result.prescribed_part.amount == Decimal("5800")
        assert result.assets_for_floating == Decimal("8200")
        assert result.floating_charge_total == Decimal("0")
        assert result.after_floating == Decimal("8200")
        assert result.assets_for_unsecured == Decimal("14000")
        assert result.trade_creditors == Decimal("4000")
        assert result.after_unsecured == Decimal("10000")
        assert result.after_members == Decimal("10000")

    def test_bank_in_fixed_section_not_a_floating_charge_holder(self, document, ledger):
        result = compute(document, ledger)
        assert result.floating_charge_holders == ()

    def test_chain_equalities(self, document, ledger):
        r = compute(document, ledger)
        assert r.after_moratorium == r.assets_for_preferential - r.total_moratorium
        assert r.after_preferential == r.after_moratorium - r.employee_preferential
        assert r.after_secondary_preferential == r.after_preferential - r.secondary_preferential
        assert r.assets_for_floating == r.after_secondary_preferential - r.prescribed_part.arithmetic
        assert r.after_floating == r.assets_for_floating - r.floating_charge_total
        assert r.assets_for_unsecured == r.after_floating + r.prescribed_part.arithmetic
        assert r.after_unsecured == r.assets_for_unsecured - r.unsecured_claims
        assert r.after_members == r.after_unsecured - r.called_up_capital.arithmetic

    def test_uncertain_counts_as_nil(self, document, ledger):
        result = compute(document, ledger)
        assert result.floating_pool.total_etr == Decimal("5000")
        assert result.floating_pool.uncertain_count == 1

    def test_audit_log_in_waterfall_order(self, document, ledger):
        result = compute(document, ledger)
        steps = [entry.step for entry in result.audit_log]
        assert steps == [
            "assets_for_preferential",
            "after_moratorium",
            "after_preferential",
            "after_secondary_preferential",
            "prescribed_part",
            "assets_for_floating",
            "after_floating",
            "assets_for_unsecured",
            "unsecured_claims",
            "after_unsecured",
            "after_members",
        ]

    def test_no_warnings_for_consistent_document(self, document, ledger):
        assert not compute(document, ledger).has_warnings


class TestWaterfallRanks:
    """Tests for each creditor rank's effect."""

    def test_moratorium_and_secondary_preferential(self, document, ledger):
        ledger = ledger.model_copy(update={"creditors": ledger.creditors + (
            Creditor(name="Landlord", creditor_type="moratorium",
                     moratorium_subtype="Post Moratorium Debt", balance_owed="1000"),
            Creditor(name="Bank charges", creditor_type="moratorium",
                     moratorium_subtype="Pre Moratorium", balance_owed="500"),
            Creditor(name="HMRC", creditor_type="secondary_preferential", balance_owed="2500"),
        )})
        result = compute(document, ledger)

        assert result.total_moratorium == Decimal("1500")
        assert result.after_moratorium == Decimal("15500")
        assert result.after_preferential == Decimal("12500")
        assert result.after_secondary_preferential == Decimal("10000")
        assert result.prescribed_part.amount == Decimal("5000")

    def test_prescribed_part_not_applicable_is_nil(self, document):
        """Under the threshold the prescribed part moves nothing."""
        ledger = CaseLedger(
            case_id="case-1",
            employees=(Employee(total_preferential_claim="8000"),),
        )
        result = compute(document, ledger)

        assert result.after_secondary_preferential == Decimal("9000")
        assert not result.prescribed_part.applicable
        assert result.assets_for_floating == Decimal("9000")
        assert result.assets_for_unsecured == Decimal("9000")

    def test_floating_charge_holder_deducted(self, document):
        ledger = CaseLedger(
            case_id="case-1",
            creditors=(
                Creditor(name="Barclays Bank plc", creditor_type="secured",
                         security_type="Fixed & Floating", balance_owed="50000"),
                Creditor(name="Invoice Finance Ltd", creditor_type="secured",
                         security_type="Floating", balance_owed="6000"),
            ),
        )
        result = compute(document, ledger)

        # prescribed part of 17,000 is 6,400
        assert result.assets_for_floating == Decimal("10600")
        assert result.floating_charge_total == Decimal("6000")
        assert result.after_floating == Decimal("4600")
        assert result.assets_for_unsecured == Decimal("11000")

    def test_recharacterised_claim_is_unsecured(self, document):
        ledger = CaseLedger(
            case_id="case-1",
            creditors=(Creditor(name="Barclays Bank plc", creditor_type="unsecured",
                                unsecured_creditor_type="bank_loan", balance_owed="50000"),),
        )
        result = compute(document, ledger)

        assert result.recharacterised[0].amount == Decimal("50000")
        assert result.other_unsecured == Decimal("50000")
        assert result.unsecured_claims == Decimal("100000")

    def test_called_up_capital_deducted(self, document, ledger):
        document = document.model_copy(update={"schedule_d": ScheduleD(shareholders=(
            Shareholder(name="A Director", shares_held=1000, nominal_value_per_share="1"),
        ))})
        result = compute(document, ledger)
        assert result.called_up_capital.amount == Decimal("1000")
        assert result.after_members == Decimal("9000")

    def test_without_ledger_every_creditor_rank_is_nil(self, document):
        result = compute(document)
        assert result.assets_for_preferential == Decimal("17000")
        assert result.after_unsecured == result.assets_for_unsecured
        assert result.unsecured_claims == Decimal("0")


class TestWaterfallWarnings:
    """Tests for warnings carried on the result."""

    def test_surplus_mismatch(self, document, ledger):
        section = document.sections[0].model_copy(update={"fixed_charge_surplus": Decimal("12000")})
        document = document.model_copy(update={
            "schedule_a": document.schedule_a.model_copy(update={"charge_holder_sections": (section,)})
        })
        result = compute(document, ledger)

        assert [w.code for w in result.warnings] == [WarningCode.SURPLUS_MISMATCH]
        assert result.assets_for_preferential == Decimal("19000")

    def test_tolerance_from_calculator(self, document, ledger):
        section = document.sections[0].model_copy(update={"fixed_charge_surplus": Decimal("10500")})
        document = document.model_copy(update={
            "schedule_a": document.schedule_a.model_copy(update={"charge_holder_sections": (section,)})
        })
        result = WaterfallCalculator(surplus_tolerance=Decimal("1000")).calculate(document, ledger)
        assert not result.has_warnings


class TestIdempotence:
    """Computing is pure."""

    def test_same_input_same_result(self, document, ledger):
        assert compute(document, ledger) == compute(document, ledger)

    def test_survives_serialization(self, document, ledger):
        """Computing a stored-and-reloaded document gives an equal result."""
        reloaded, warnings = heal_document(document.to_record(), "case-1")

        assert warnings == []
        assert reloaded == document
        assert compute(reloaded, ledger) == compute(document, ledger)

    def test_result_serializes(self, document, ledger):
        result = compute(document, ledger)
        assert WaterfallResult.model_validate_json(result.model_dump_json()) == result
