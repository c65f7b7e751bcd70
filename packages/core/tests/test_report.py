"""Tests for Statement of Affairs export."""

from decimal import Decimal

import pytest

from soa_core import StatementOfAffairsReport, compute, seed_document
from soa_core.editing import set_fixed_charge_surplus, update_asset, update_claim
from soa_core.models import CaseLedger, Creditor, Employee, RegisteredShareholder, SoADocument


@pytest.fixture
def ledger() -> CaseLedger:
    return CaseLedger(
        case_id="case-1",
        company_name="Acme <Widgets> Ltd",
        creditors=(
            Creditor(name="Barclays Bank plc", creditor_type="secured",
                     security_type="Fixed & Floating", balance_owed="50000"),
            Creditor(name="Steel Supplies", creditor_type="unsecured",
                     unsecured_creditor_type="trade_expense", balance_owed="4000"),
            Creditor(name="Old Lender", creditor_type="unsecured",
                     unsecured_creditor_type="loan", balance_owed="1500"),
        ),
        employees=(Employee(name="Jane Smith", total_preferential_claim="3000"),),
        shareholders=(
            RegisteredShareholder(name="A Director", shares_held=100, nominal_value_pence="100"),
        ),
    )


@pytest.fixture
def document(ledger) -> SoADocument:
    document = seed_document(ledger)
    section = document.sections[0]
    document = update_asset(document, section.assets[0].id, description="Freehold property",
                            book_value="80000", etr_value="60000")
    document = update_claim(document, section.claims[0].id, name="Barclays Bank plc", amount="50000")
    document = set_fixed_charge_surplus(document, section.id, "10000")
    document = update_asset(document, document.schedule_a.global_assets.floating[0].id,
                            description="Stock", book_value="8000", etr_value="uncertain")
    return document


class TestScheduleB:
    """Tests for the liabilities rows."""

    def test_rows_in_waterfall_order(self, document, ledger):
        rows = StatementOfAffairsReport().schedule_b_rows(compute(document, ledger))
        labels = [row.cells[0] for row in rows]

        order = [
            "Total Moratorium Claim",
            "Total Preferential Claim",
            "Total Secondary Preferential Creditors",
            "Estimated prescribed part of net property where applicable (to carry forward)",
            "Estimated total assets available for floating charge holders",
            "Total Floating Charge",
            "Estimated prescribed part of net property where applicable (brought down)",
            "Total Unsecured Creditors",
            "Total Issued Called Up Capital",
            "Estimated total deficiency/surplus as regards members",
        ]
        positions = [labels.index(label) for label in order]
        assert positions == sorted(positions)

    def test_values(self, document, ledger):
        rows = StatementOfAffairsReport().schedule_b_rows(compute(document, ledger))
        values = {row.cells[0]: row.cells[1] for row in rows}

        assert values["Moratorium debts"] == "NIL"
        assert values["Employee Claims"] == "(3,000)"
        assert values["Estimated deficiency/surplus as regards preferential creditors"] == "7,000"
        assert values["Estimated prescribed part of net property where applicable (to carry forward)"] == "N/A"
        assert values["No floating charge holders"] == "NIL"
        assert values["Trade Creditors"] == "(4,000)"
        assert values["Other Unsecured Creditors"] == "(1,500)"
        assert values["Ordinary Shares"] == "(100)"
        assert values["Estimated total deficiency/surplus as regards members"] == "1,400"

    def test_recharacterised_claim_row(self, document):
        ledger = CaseLedger(
            case_id="case-1",
            creditors=(Creditor(name="Barclays Bank plc", creditor_type="secured",
                                security_type="Personal guarantee", balance_owed="50000"),),
        )
        rows = StatementOfAffairsReport().schedule_b_rows(compute(document, ledger))
        values = {row.cells[0]: row.cells[1] for row in rows}
        assert values["Deficiency due to Barclays Bank plc"] == "(50,000)"

    def test_capital_tbc_without_members(self, document, ledger):
        document = document.model_copy(update={"schedule_d": document.schedule_d.model_copy(
            update={"shareholders": ()}
        )})
        rows = StatementOfAffairsReport().schedule_b_rows(compute(document, ledger))
        values = {row.cells[0]: row.cells[1] for row in rows}
        assert values["Ordinary Shares"] == "TBC"


class TestHtmlExport:
    """Tests for HTML output."""

    def test_schedules_in_order(self, document, ledger):
        html = StatementOfAffairsReport().generate(document, ledger, format="html")

        titles = [
            "A - Summary of Assets",
            "B - Summary of Liabilities",
            "C - Schedule of Creditors",
            "D - Schedule of Members",
        ]
        positions = [html.index(title) for title in titles]
        assert positions == sorted(positions)

    def test_escapes_text(self, document, ledger):
        html = StatementOfAffairsReport().generate(document, ledger)
        assert "Acme &lt;Widgets&gt; Ltd" in html
        assert "<Widgets>" not in html

    def test_uncertain_shown_as_marker(self, document, ledger):
        html = StatementOfAffairsReport().generate(document, ledger)
        assert "<td class=\"amount\">uncertain</td>" in html

    def test_blank_rows_hidden(self, document, ledger):
        report = StatementOfAffairsReport()
        report.generate(document, ledger)
        uncharged = report.sections[0].tables[2]
        assert [row.cells[0] for row in uncharged.rows] == ["Total Uncharged Assets"]

    def test_creditor_listings(self, document, ledger):
        report = StatementOfAffairsReport()
        report.generate(document, ledger)
        company, consumer, employees = report.sections[2].tables

        assert company.rows[0].cells[0] == "Barclays Bank plc"
        assert company.rows[-1].cells[2] == "55,500"
        assert consumer.rows[0].cells[0] == "No consumer creditors recorded."
        assert employees.rows[0].cells[:3] == ["Jane Smith", "", "3,000"]

    def test_members(self, document, ledger):
        report = StatementOfAffairsReport()
        report.generate(document, ledger)
        holder = report.sections[3].tables[0].rows[0]
        assert holder.cells == ["A Director", "", "Ordinary", "£100", "100", "£1", "£0"]

    def test_uses_supplied_result(self, document, ledger):
        result = compute(document, ledger)
        report = StatementOfAffairsReport()
        assert report.generate(document, ledger, result=result) == report.generate(document, ledger)

    def test_unknown_format(self, document):
        with pytest.raises(ValueError):
            StatementOfAffairsReport().generate(document, format="docx")


class TestPdfExport:
    """Tests for PDF output."""

    def test_pdf_bytes(self, document, ledger):
        pdf = StatementOfAffairsReport().generate(document, ledger, format="pdf")
        assert isinstance(pdf, bytes)
        assert pdf.startswith(b"%PDF")

    def test_pdf_without_ledger(self, document):
        pdf = StatementOfAffairsReport(surplus_tolerance=Decimal("5")).generate(document, format="pdf")
        assert pdf.startswith(b"%PDF")
