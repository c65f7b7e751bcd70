#!/usr/bin/env python3
"""
Statement of Affairs Demonstration

This script walks through the Statement of Affairs workflow:
1. Build the live case ledgers (creditors, employees, register of members)
2. Seed a document and enter Schedule A
3. Compute the Schedule B waterfall
4. Export the statement as HTML and PDF

A stored document (JSON, in the persisted camelCase shape) can be loaded
instead of the sample Schedule A; it is healed before use.

Usage:
    python examples/soa_demo.py
    python examples/soa_demo.py --output ./reports --format pdf
    python examples/soa_demo.py --document stored_soa.json
"""

import argparse
import json
import sys
from pathlib import Path

from soa_core import StatementOfAffairsReport, WaterfallCalculator, heal_document, seed_document
from soa_core.documents import populate_missing_shareholders
from soa_core.editing import (
    add_asset,
    add_claim,
    set_fixed_charge_surplus,
    update_asset,
    update_claim,
)
from soa_core.formatting import format_currency, format_prescribed_part
from soa_core.models import (
    Asset,
    CaseLedger,
    ChargeHolderClaim,
    ChargeType,
    Creditor,
    Employee,
    RegisteredShareholder,
    SoADocument,
)


def create_sample_ledger() -> CaseLedger:
    """Ledgers for a small trading company with a bank, HMRC and suppliers."""
    return CaseLedger(
        case_id="demo-case",
        company_name="Acme Widgets Ltd",
        creditors=(
            Creditor(name="Barclays Bank plc", creditor_type="secured",
                     security_type="Fixed & Floating", balance_owed="150000",
                     address="1 Churchill Place, London, E14 5HP"),
            Creditor(name="Asset Finance Ltd", creditor_type="secured",
                     security_type="Floating charge", balance_owed="12000"),
            Creditor(name="Equipment Leasing Co", creditor_type="secured",
                     security_type="Personal guarantee", balance_owed="8000"),
            Creditor(name="HM Revenue & Customs", creditor_type="secondary_preferential",
                     balance_owed="18500"),
            Creditor(name="Landlord Properties Ltd", creditor_type="moratorium",
                     moratorium_subtype="Post Moratorium Debt", balance_owed="3000"),
            Creditor(name="Steel Supplies", creditor_type="unsecured",
                     unsecured_creditor_type="trade_expense", balance_owed="24000",
                     retention_of_title=True),
            Creditor(name="Director Loan Account", creditor_type="unsecured",
                     unsecured_creditor_type="connected_party", balance_owed="15000"),
            Creditor(name="Mr A Customer", creditor_type="consumer", balance_owed="450"),
        ),
        employees=(
            Employee(name="Jane Smith", total_preferential_claim="4200", total_unsecured_claim="1800"),
            Employee(name="Tom Brown", total_preferential_claim="2600", total_unsecured_claim="900"),
        ),
        shareholders=(
            RegisteredShareholder(name="A Director", shares_held=1000, nominal_value_pence="100"),
            RegisteredShareholder(name="B Investor", share_class="A Ordinary", shares_held=500,
                                  nominal_value_pence="100"),
        ),
    )


def enter_schedule_a(document: SoADocument) -> SoADocument:
    """Fill Schedule A the way a practitioner would in the editor."""
    section = document.sections[0]
    document = update_asset(document, section.assets[0].id, description="Freehold property",
                            book_value="220000", etr_value="180000")
    document = update_claim(document, section.claims[0].id, name="Barclays Bank plc", amount="150000")
    document = add_claim(document, section.id, ChargeHolderClaim(name="Equipment Leasing Co", amount="8000"))
    document = set_fixed_charge_surplus(document, section.id, "22000")

    pools = document.schedule_a.global_assets
    document = update_asset(document, pools.floating[0].id, description="Stock",
                            book_value="40000", etr_value="15000")
    document = add_asset(document, ChargeType.FLOATING_CHARGE,
                         asset=Asset(description="Book debts", book_value="35000",
                                     estimated_to_realise="uncertain"))
    document = update_asset(document, pools.uncharged[0].id, description="Cash at bank",
                            book_value="6500", etr_value="6500")
    return document


def main():
    """Run the Statement of Affairs demonstration."""
    parser = argparse.ArgumentParser(
        description="Compute and export a sample Statement of Affairs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--document", "-d",
        type=str,
        default=None,
        help="Stored document JSON to load instead of the sample Schedule A"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=".",
        help="Output directory for reports (default: current directory)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=["html", "pdf", "both"],
        default="both",
        help="Report format (default: both)"
    )
    args = parser.parse_args()

    print("=" * 70)
    print("SOA CORE - Statement of Affairs Demo")
    print("=" * 70)
    print()

    # Step 1: Ledgers
    print("Step 1: Building case ledgers...")
    ledger = create_sample_ledger()
    print(f"  - Company: {ledger.company_name}")
    print(f"  - Creditors: {len(ledger.creditors)}")
    print(f"  - Employees: {len(ledger.employees)}")
    print(f"  - Members: {len(ledger.shareholders)}")
    print()

    # Step 2: Document
    if args.document:
        print(f"Step 2: Loading stored document {args.document}...")
        try:
            raw = json.loads(Path(args.document).read_text())
        except (OSError, json.JSONDecodeError) as e:
            print(f"  - Could not read document: {e}")
            sys.exit(1)
        document, repairs = heal_document(raw, ledger.case_id)
        document = populate_missing_shareholders(document, ledger)
        print(f"  - Version: {document.version}")
        print(f"  - Repairs made: {len(repairs)}")
    else:
        print("Step 2: Seeding document and entering Schedule A...")
        document = enter_schedule_a(seed_document(ledger))
        print(f"  - Charge holder sections: {len(document.sections)}")
        print(f"  - Assets: {sum(1 for a in document.iter_assets() if not a.is_blank)}")
    print()

    # Step 3: Waterfall
    print("Step 3: Computing Schedule B...")
    result = WaterfallCalculator().calculate(document, ledger)
    for name, value in result.milestones():
        label = name.replace("_", " ").capitalize()
        shown = format_prescribed_part(result.prescribed_part) if name == "prescribed_part" else format_currency(value)
        print(f"  - {label:<32} {shown:>12}")
    if result.warnings:
        print()
        print("  Warnings:")
        for warning in result.warnings:
            print(f"  - [{warning.code.value}] {warning.message}")
    print()

    # Step 4: Export
    print("Step 4: Exporting statement...")
    output = Path(args.output)
    output.mkdir(parents=True, exist_ok=True)
    report = StatementOfAffairsReport()

    if args.format in ("html", "both"):
        path = output / "statement_of_affairs.html"
        path.write_text(report.generate(document, ledger, format="html", result=result))
        print(f"  - Saved: {path}")
    if args.format in ("pdf", "both"):
        path = output / "statement_of_affairs.pdf"
        path.write_bytes(report.generate(document, ledger, format="pdf", result=result))
        print(f"  - Saved: {path}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
