"""Statement of Affairs export.

This module renders the four schedules in their fixed order:

- A: Summary of assets
- B: Summary of liabilities (the waterfall, one row per milestone)
- C: Schedule of creditors (company, consumer, employee)
- D: Schedule of members

The schedules are built once as plain tables and then written out as HTML
or as a PDF (reportlab).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from html import escape
from io import BytesIO
from typing import Optional, Union

import structlog
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .models import Asset, CaseLedger, SoADocument, WaterfallResult, ZERO
from .formatting import (
    format_capital,
    format_currency,
    format_date,
    format_etr,
    format_liability,
    format_number,
    format_prescribed_part,
    format_yes_no,
)
from .sections import DEFAULT_SURPLUS_TOLERANCE
from .waterfall import WaterfallCalculator

logger = structlog.get_logger()

GOLD = "#A57C00"
BLUE_SHADE = "#DBEAFE"

ASSET_COLUMNS = ["Book Value (£)", "Estimated to Realise (£)"]

COMPANY_CREDITOR_COLUMNS = [
    "Creditor Name",
    "Address",
    "Amount of debt (£)",
    "Is the creditor claiming retention of title?",
    "Details of any security held by creditor",
    "Date security given",
    "Value of Security",
]

CONSUMER_CREDITOR_COLUMNS = [
    "Creditor Name",
    "Address",
    "Amount of debt (£)",
    "Details of any security held by creditor",
    "Date security given",
    "Value of Security",
]

EMPLOYEE_CREDITOR_COLUMNS = [
    "Name of employee",
    "Address",
    "Amount of debt (£)",
    "Details of any security held by creditor",
    "Date security given",
    "Value of Security",
]

SHAREHOLDER_COLUMNS = [
    "Name of Shareholder",
    "Address",
    "Type of shares held",
    "The nominal amount of shares held",
    "No. of shares held",
    "The amount per share called up",
    "The total amount called up",
]


@dataclass
class ReportRow:
    """One table row; ``style`` is "", "bold", "shaded" or "heading"."""
    cells: list[str]
    style: str = ""


@dataclass
class ReportTable:
    columns: list[str]
    rows: list[ReportRow] = field(default_factory=list)
    title: Optional[str] = None
    note: Optional[str] = None


@dataclass
class ReportSection:
    """A schedule of the statement."""
    title: str
    tables: list[ReportTable] = field(default_factory=list)


def _pounds(amount: Decimal) -> str:
    return f"£{format_number(amount)}"


class StatementOfAffairsReport:
    """
    Generate the Statement of Affairs for export.

    Example:
        >>> report = StatementOfAffairsReport()
        >>> html = report.generate(document, ledger, format="html")
    """

    def __init__(self, surplus_tolerance: Decimal = DEFAULT_SURPLUS_TOLERANCE):
        self.surplus_tolerance = surplus_tolerance
        self._sections: list[ReportSection] = []

    def generate(
        self,
        document: SoADocument,
        ledger: Optional[CaseLedger] = None,
        format: str = "html",
        result: Optional[WaterfallResult] = None,
    ) -> Union[str, bytes]:
        """
        Generate the statement.

        Args:
            document: The Statement of Affairs to export
            ledger: Live ledgers, used to classify Schedule B claims
            format: "html" or "pdf"
            result: A waterfall already computed for this document; computed
                here when omitted

        Returns:
            HTML string, or bytes for PDF format
        """
        if format not in ("html", "pdf"):
            raise ValueError(f"Unsupported report format: {format}")

        if result is None:
            result = WaterfallCalculator(self.surplus_tolerance).calculate(document, ledger)

        self._document = document
        self._company_name = ledger.company_name if ledger is not None else ""
        self._sections = [
            self._schedule_a(document, result),
            self._schedule_b(result),
            self._schedule_c(document),
            self._schedule_d(document),
        ]

        logger.info(
            "report_generated",
            case_id=document.case_id,
            version=document.version,
            format=format,
        )

        if format == "pdf":
            return self._format_pdf()
        return self._format_html()

    @property
    def sections(self) -> list[ReportSection]:
        return self._sections

    # -------------------------------------------------------------------------
    # Schedule A
    # -------------------------------------------------------------------------

    def _asset_rows(self, assets: tuple[Asset, ...]) -> list[ReportRow]:
        return [
            ReportRow([asset.description, format_currency(asset.book_value), format_etr(asset.estimated_to_realise)])
            for asset in assets
            if not asset.is_blank
        ]

    def _schedule_a(self, document: SoADocument, result: WaterfallResult) -> ReportSection:
        section = ReportSection(title="A - Summary of Assets")

        for charge_section, totals in zip(document.sections, result.sections):
            table = ReportTable(columns=["Assets Subject to a Fixed Charge"] + ASSET_COLUMNS)
            table.rows.extend(self._asset_rows(charge_section.assets))
            table.rows.append(ReportRow(
                ["Total Fixed Assets", format_currency(totals.total_book), format_currency(totals.total_etr)],
                "bold",
            ))
            table.rows.append(ReportRow(["Less Amounts due to", "", ""], "bold"))
            for claim in charge_section.claims:
                if claim.name or claim.amount != 0:
                    table.rows.append(ReportRow([claim.name, "", format_currency(claim.amount)]))
            table.rows.append(ReportRow(
                ["Total Fixed Charges", "", format_currency(totals.total_claims)], "bold"
            ))
            table.rows.append(ReportRow(
                ["Fixed Charge Surplus (Deficiency)", "", format_currency(totals.fixed_charge_surplus)],
                "shaded",
            ))
            section.tables.append(table)

        global_assets = document.schedule_a.global_assets
        for heading, assets, pool, total_label in (
            ("Assets Subject to a Floating Charge", global_assets.floating, result.floating_pool,
             "Total Assets Subject to Floating Charge"),
            ("Uncharged Assets", global_assets.uncharged, result.uncharged_pool,
             "Total Uncharged Assets"),
        ):
            table = ReportTable(columns=[heading] + ASSET_COLUMNS)
            table.rows.extend(self._asset_rows(assets))
            table.rows.append(ReportRow(
                [total_label, format_currency(pool.total_book), format_currency(pool.total_etr)],
                "shaded",
            ))
            section.tables.append(table)

        section.tables.append(ReportTable(
            columns=["", ""],
            rows=[ReportRow(
                [
                    "Estimated total assets available for moratorium, priority pre-moratorium "
                    "and preferential creditors (carried from page A)",
                    format_currency(result.assets_for_preferential),
                ],
                "shaded",
            )],
        ))
        return section

    # -------------------------------------------------------------------------
    # Schedule B
    # -------------------------------------------------------------------------

    def schedule_b_rows(self, result: WaterfallResult) -> list[ReportRow]:
        """Schedule B, one row per line of the statement, in waterfall order."""
        rows = [
            ReportRow([
                "Estimated total assets available for moratorium, priority pre-moratorium "
                "and preferential creditors (carried from page A)",
                format_currency(result.assets_for_preferential),
            ], "bold"),
            ReportRow(["Liabilities", ""], "heading"),
            ReportRow(["Moratorium debts", format_liability(result.post_moratorium)]),
            ReportRow(["Priority pre-Moratorium debts", format_liability(result.pre_moratorium)]),
            ReportRow(["Total Moratorium Claim", format_currency(-result.total_moratorium)], "bold"),
            ReportRow([
                "Estimated deficiency/surplus available for preferential creditors",
                format_currency(result.after_moratorium),
            ], "shaded"),
            ReportRow(["Preferential creditors:", ""]),
            ReportRow(["Employee Claims", format_liability(result.employee_preferential)]),
            ReportRow(["Total Preferential Claim", format_currency(-result.employee_preferential)], "bold"),
            ReportRow([
                "Estimated deficiency/surplus as regards preferential creditors",
                format_currency(result.after_preferential),
            ], "shaded"),
            ReportRow(["Secondary Preferential creditors:", ""]),
            ReportRow(["HM Revenue & Customs", format_liability(result.secondary_preferential)]),
            ReportRow([
                "Total Secondary Preferential Creditors",
                format_currency(-result.secondary_preferential),
            ], "bold"),
            ReportRow([
                "Estimated deficiency/surplus as regards secondary preferential creditors",
                format_currency(result.after_secondary_preferential),
            ], "shaded"),
            ReportRow([
                "Estimated prescribed part of net property where applicable (to carry forward)",
                format_prescribed_part(result.prescribed_part),
            ]),
            ReportRow([
                "Estimated total assets available for floating charge holders",
                format_currency(result.assets_for_floating),
            ], "shaded"),
            ReportRow(["Debts secured by floating charges", ""]),
        ]

        if result.floating_charge_holders:
            rows.extend(
                ReportRow([holder.name, format_currency(-holder.amount)])
                for holder in result.floating_charge_holders
            )
        else:
            rows.append(ReportRow(["No floating charge holders", "NIL"]))

        rows.extend([
            ReportRow(["Total Floating Charge", format_currency(-result.floating_charge_total)], "bold"),
            ReportRow([
                "Estimated deficiency/surplus after floating charges",
                format_currency(result.after_floating),
            ], "shaded"),
            ReportRow([
                "Estimated prescribed part of net property where applicable (brought down)",
                format_prescribed_part(result.prescribed_part),
            ]),
            ReportRow([
                "Estimated deficiency/surplus as regards unsecured creditors",
                format_currency(result.assets_for_unsecured),
            ], "shaded"),
            ReportRow([
                "Unsecured non-preferential claims "
                "(excluding any shortfall to floating charge holders):",
                "",
            ]),
            ReportRow(["Unsecured Employees' Claims", format_liability(result.unsecured_employees)]),
            ReportRow(["Trade Creditors", format_liability(result.trade_creditors)]),
            ReportRow(["Other Unsecured Creditors", format_liability(result.other_unsecured)]),
        ])
        rows.extend(
            ReportRow([f"Deficiency due to {line.name}", format_currency(-line.amount)])
            for line in result.recharacterised
        )

        capital = result.called_up_capital
        rows.extend([
            ReportRow(["Total Unsecured Creditors", format_currency(-result.unsecured_claims)], "bold"),
            ReportRow([
                "Estimated surplus/deficiency as regards unsecured creditors",
                format_currency(result.after_unsecured),
            ], "heading"),
            ReportRow(["Issued and called up capital", ""]),
            ReportRow(["Ordinary Shares", format_capital(capital)]),
            ReportRow(["Total Issued Called Up Capital", format_currency(-capital.arithmetic)], "bold"),
            ReportRow([
                "Estimated total deficiency/surplus as regards members",
                format_currency(result.after_members),
            ], "heading"),
        ])
        return rows

    def _schedule_b(self, result: WaterfallResult) -> ReportSection:
        return ReportSection(
            title="B - Summary of Liabilities",
            tables=[ReportTable(columns=["", "Estimated to Realise (£)"], rows=self.schedule_b_rows(result))],
        )

    # -------------------------------------------------------------------------
    # Schedule C
    # -------------------------------------------------------------------------

    def _schedule_c(self, document: SoADocument) -> ReportSection:
        schedule_c = document.schedule_c
        section = ReportSection(title="C - Schedule of Creditors")

        company = ReportTable(
            title="COMPANY CREDITORS (excluding employees and consumers)",
            columns=COMPANY_CREDITOR_COLUMNS,
            note=(
                "You must include all creditors (excluding employees and certain consumers) and "
                "indicate any creditors under hire-purchase, chattel leasing or conditional sale "
                "agreements and any creditors claiming retention of title over property in the "
                "company's possession."
            ),
        )
        for row in schedule_c.company_creditors:
            company.rows.append(ReportRow([
                row.name,
                row.address,
                format_currency(row.amount),
                format_yes_no(row.retention_of_title),
                row.security_details,
                format_date(row.security_date),
                _pounds(row.security_value),
            ]))
        if not schedule_c.company_creditors:
            company.rows.append(ReportRow(["No company creditors recorded."] + [""] * 6))
        company_total = sum((r.amount for r in schedule_c.company_creditors), ZERO)
        company_security = sum((r.security_value for r in schedule_c.company_creditors), ZERO)
        company.rows.append(ReportRow(
            ["Total Company Creditors", "", format_currency(company_total), "", "", "",
             format_currency(company_security)],
            "heading",
        ))
        section.tables.append(company)

        consumer = ReportTable(title="CONSUMER CREDITORS", columns=CONSUMER_CREDITOR_COLUMNS)
        for row in schedule_c.consumer_creditors:
            consumer.rows.append(ReportRow([
                row.name,
                row.address,
                format_currency(row.amount),
                row.security_details,
                format_date(row.security_date),
                _pounds(row.security_value),
            ]))
        if not schedule_c.consumer_creditors:
            consumer.rows.append(ReportRow(["No consumer creditors recorded."] + [""] * 5))
        consumer.rows.append(ReportRow(
            ["Total Consumer Creditors", "",
             format_currency(sum((r.amount for r in schedule_c.consumer_creditors), ZERO)), "", "",
             format_currency(sum((r.security_value for r in schedule_c.consumer_creditors), ZERO))],
            "heading",
        ))
        section.tables.append(consumer)

        employees = ReportTable(title="EMPLOYEE CREDITORS", columns=EMPLOYEE_CREDITOR_COLUMNS)
        for row in schedule_c.employee_creditors:
            employees.rows.append(ReportRow(
                [row.name, row.address, format_currency(row.amount), "", "", _pounds(ZERO)]
            ))
        if not schedule_c.employee_creditors:
            employees.rows.append(ReportRow(["No employee creditors recorded."] + [""] * 5))
        employees.rows.append(ReportRow(
            ["Total Employee Creditors", "",
             format_currency(sum((r.amount for r in schedule_c.employee_creditors), ZERO)), "", "",
             _pounds(ZERO)],
            "heading",
        ))
        section.tables.append(employees)
        return section

    # -------------------------------------------------------------------------
    # Schedule D
    # -------------------------------------------------------------------------

    def _schedule_d(self, document: SoADocument) -> ReportSection:
        table = ReportTable(title="SHAREHOLDERS", columns=SHAREHOLDER_COLUMNS)
        for holder in document.schedule_d.shareholders:
            table.rows.append(ReportRow([
                holder.name,
                holder.address,
                holder.share_class or "Ordinary",
                _pounds(holder.nominal_total),
                format_number(Decimal(holder.shares_held)),
                _pounds(holder.nominal_value_per_share),
                _pounds(holder.called_up_total),
            ]))
        if not document.schedule_d.shareholders:
            table.rows.append(ReportRow(["None"] + [""] * 6))
        return ReportSection(title="D - Schedule of Members", tables=[table])

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def _title(self) -> str:
        company = self._company_name or "Unknown"
        return f"Statement of Affairs - {company}"

    def _format_html(self) -> str:
        """Format report as HTML."""
        document = self._document
        lines = [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            '<meta charset="UTF-8">',
            f"<title>{escape(self._title())}</title>",
            "<style>",
            "body { font-family: Arial, sans-serif; margin: 20px; color: #1e293b; }",
            "table { width: 100%; border-spacing: 2px; margin-bottom: 30px; table-layout: fixed; }",
            "th, td { padding: 8px 12px; text-align: left; vertical-align: middle; }",
            f"th, tr.heading td {{ background-color: {GOLD}; color: white; font-weight: bold; }}",
            f"tr.shaded td {{ background-color: {BLUE_SHADE}; font-weight: bold; }}",
            "tr.bold td { font-weight: bold; }",
            "td.amount { text-align: right; }",
            ".section-title { font-size: 20px; font-weight: bold; margin: 20px 0 10px; }",
            ".note { margin-bottom: 15px; font-size: 14px; }",
            ".page-break { page-break-after: always; }",
            "</style>",
            "</head>",
            "<body>",
            "<h1>Statement of Affairs</h1>",
            f'<p class="meta">Case: {escape(document.case_id)} &middot; Version {document.version}'
            f" &middot; As at {escape(format_date(document.as_at_date)) or 'not saved'}</p>",
        ]

        for position, section in enumerate(self._sections):
            if position:
                lines.append('<div class="page-break"></div>')
            lines.append(f'<div class="section-title">{escape(section.title)}</div>')
            for table in section.tables:
                if table.title:
                    lines.append(f"<h3>{escape(table.title)}</h3>")
                if table.note:
                    lines.append(f'<div class="note"><strong>Note:</strong> {escape(table.note)}</div>')
                lines.append("<table>")
                if any(table.columns):
                    lines.append(
                        "<thead><tr>"
                        + "".join(f"<th>{escape(c)}</th>" for c in table.columns)
                        + "</tr></thead>"
                    )
                lines.append("<tbody>")
                for row in table.rows:
                    css = f' class="{row.style}"' if row.style else ""
                    cells = "".join(
                        f'<td class="amount">{escape(cell)}</td>' if index else f"<td>{escape(cell)}</td>"
                        for index, cell in enumerate(row.cells)
                    )
                    lines.append(f"<tr{css}>{cells}</tr>")
                lines.append("</tbody>")
                lines.append("</table>")

        lines.append("</body>")
        lines.append("</html>")
        return "\n".join(lines)

    def _format_pdf(self) -> bytes:
        """Format report as PDF using reportlab."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            rightMargin=15 * mm,
            leftMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
            title=self._title(),
        )

        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(
            name="ScheduleTitle",
            parent=styles["Heading2"],
            fontSize=14,
            spaceAfter=10,
            textColor=colors.HexColor(GOLD),
        ))
        styles.add(ParagraphStyle(
            name="Cell",
            parent=styles["Normal"],
            fontSize=8,
            leading=10,
        ))
        styles.add(ParagraphStyle(
            name="Note",
            parent=styles["Normal"],
            fontSize=8,
            textColor=colors.grey,
            spaceAfter=6,
        ))

        elements = [Paragraph("Statement of Affairs", styles["Title"])]
        document = self._document
        elements.append(Paragraph(
            escape(
                f"Case {document.case_id}, version {document.version}, as at "
                f"{format_date(document.as_at_date) or 'not saved'}"
            ),
            styles["Normal"],
        ))
        elements.append(Spacer(1, 6 * mm))

        width = doc.width
        for position, section in enumerate(self._sections):
            if position:
                elements.append(PageBreak())
            elements.append(Paragraph(escape(section.title), styles["ScheduleTitle"]))
            for table in section.tables:
                if table.title:
                    elements.append(Paragraph(escape(table.title), styles["Heading4"]))
                if table.note:
                    elements.append(Paragraph(escape(table.note), styles["Note"]))
                elements.append(self._pdf_table(table, width, styles["Cell"]))
                elements.append(Spacer(1, 5 * mm))

        doc.build(elements)
        return buffer.getvalue()

    def _pdf_table(self, table: ReportTable, width: float, cell_style: ParagraphStyle) -> Table:
        column_count = len(table.columns)
        first = 0.5 if column_count <= 3 else 0.2
        other = (1 - first) / max(column_count - 1, 1)
        col_widths = [width * first] + [width * other] * (column_count - 1)

        has_header = any(table.columns)
        data = []
        if has_header:
            data.append([Paragraph(f"<b>{escape(c)}</b>", cell_style) for c in table.columns])
        data.extend(
            [Paragraph(escape(cell), cell_style) for cell in row.cells]
            for row in table.rows
        )

        commands = [
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]
        if has_header:
            commands.append(("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(GOLD)))
        offset = 1 if has_header else 0
        for index, row in enumerate(table.rows, start=offset):
            if row.style == "heading":
                commands.append(("BACKGROUND", (0, index), (-1, index), colors.HexColor(GOLD)))
            elif row.style == "shaded":
                commands.append(("BACKGROUND", (0, index), (-1, index), colors.HexColor(BLUE_SHADE)))

        pdf_table = Table(data, colWidths=col_widths, repeatRows=offset)
        pdf_table.setStyle(TableStyle(commands))
        return pdf_table


__all__ = [
    "ReportRow",
    "ReportTable",
    "ReportSection",
    "StatementOfAffairsReport",
]
