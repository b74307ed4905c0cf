"""ReportLab rendering of ordinary and merged invoices."""

from __future__ import annotations

import io
import logging
from decimal import Decimal
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.money import quantize_money
from ..core.enums import GstPaidBy, TaxType
from ..core.exceptions import DocumentError
from ..invoices.model import Invoice
from ..invoices.words import number_to_words

logger = logging.getLogger(__name__)

BRAND = colors.HexColor("#1a365d")
GRID = colors.HexColor("#cbd5e0")
HEADER_BG = colors.HexColor("#edf2f7")


def format_inr(amount: Decimal) -> str:
    """``Rs. 12,34,567.89`` (Indian digit grouping)."""
    value = quantize_money(amount)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail]) if groups else tail
    return f"{sign}Rs. {grouped}.{fraction}"


def _days(value: Decimal) -> str:
    return f"{value.normalize():f}" if value == value.to_integral_value() else f"{value:.2f}"


class InvoicePdfRenderer:
    def __init__(self, *, business_name: str, tagline: str = ""):
        self._business_name = business_name
        self._tagline = tagline

        styles = getSampleStyleSheet()
        self._normal = ParagraphStyle("InvNormal", parent=styles["Normal"], fontSize=9, leading=12)
        self._heading = ParagraphStyle(
            "InvHeading", parent=styles["Heading3"], textColor=BRAND, spaceBefore=8, spaceAfter=4
        )
        self._brand = ParagraphStyle(
            "InvBrand", parent=styles["Heading1"], alignment=TA_CENTER, textColor=BRAND, spaceAfter=2
        )
        self._centered = ParagraphStyle("InvCentered", parent=self._normal, alignment=TA_CENTER)
        self._title = ParagraphStyle(
            "InvTitle", parent=styles["Heading2"], alignment=TA_CENTER, spaceBefore=6, spaceAfter=6
        )
        self._right = ParagraphStyle("InvRight", parent=self._normal, alignment=TA_RIGHT)

    def render(self, invoice: Invoice, sources: Sequence[Invoice] = ()) -> bytes:
        """PDF bytes for ``invoice``; ``sources`` fill the merged-invoice summary."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
            title=invoice.invoice_number,
        )

        elements = []
        elements.extend(self._header(invoice))
        elements.append(self._info(invoice))
        elements.append(Spacer(1, 6))

        if invoice.is_merged:
            elements.extend(self._companies_included(invoice))
            if sources:
                elements.extend(self._source_summary(sources))
        else:
            elements.extend(self._bill_to(invoice))

        elements.extend(self._employees(invoice))
        elements.extend(self._bill_summary(invoice))
        elements.extend(self._footer(invoice))

        try:
            doc.build(elements)
        except Exception as e:
            raise DocumentError(f"Could not render {invoice.invoice_number}: {e}") from e

        pdf_bytes = buffer.getvalue()
        buffer.close()
        logger.debug("Rendered %s (%d bytes)", invoice.invoice_number, len(pdf_bytes))
        return pdf_bytes

    # -------- Sections --------
    def _p(self, text: str, style=None) -> Paragraph:
        return Paragraph(text, style or self._normal)

    def _header(self, invoice: Invoice) -> list:
        out = [self._p(escape(self._business_name), self._brand)]
        if self._tagline:
            out.append(self._p(escape(self._tagline), self._centered))
        out.append(HRFlowable(width="100%", thickness=1, color=BRAND, spaceBefore=4, spaceAfter=4))
        out.append(self._p("MERGED INVOICE" if invoice.is_merged else "INVOICE", self._title))
        return out

    def _info(self, invoice: Invoice) -> Table:
        due = invoice.due_date.strftime("%d/%m/%Y") if invoice.due_date else "-"
        left = (
            f"<b>Invoice No:</b> {escape(invoice.invoice_number)}<br/>"
            f"<b>Date:</b> {invoice.created_at.strftime('%d/%m/%Y')}<br/>"
            f"<b>Due Date:</b> {due}"
        )
        right = (
            f"<b>Status:</b> {invoice.status.value.upper()}<br/>"
            f"<b>Payment:</b> {invoice.payment_status.value.upper()}<br/>"
            f"<b>Tax:</b> {invoice.rates.tax_type.value.upper()}"
        )
        table = Table([[self._p(left), self._p(right, self._right)]], colWidths=[90 * mm, 90 * mm])
        table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        return table

    def _bill_to(self, invoice: Invoice) -> list:
        bill_to = invoice.bill_to
        lines = [f"<b>{escape(bill_to.name or invoice.company.name)}</b>"]
        if bill_to.address:
            lines.append(escape(bill_to.address))
        gst = bill_to.gst_number or invoice.company.gst_number
        if gst:
            lines.append(f"GSTIN: {escape(gst)}")
        if bill_to.contact_info:
            lines.append(escape(bill_to.contact_info))
        return [self._p("Bill To", self._heading), self._p("<br/>".join(lines))]

    def _companies_included(self, invoice: Invoice) -> list:
        names = [n.strip() for n in invoice.bill_to.name.split(" + ") if n.strip()]
        rows = "<br/>".join(f"{i}. {escape(n)}" for i, n in enumerate(names, start=1))
        out = [self._p("Companies Included", self._heading), self._p(rows or "-")]
        if invoice.bill_to.gst_number:
            out.append(self._p(f"GSTIN: {escape(invoice.bill_to.gst_number)}"))
        return out

    def _source_summary(self, sources: Sequence[Invoice]) -> list:
        data = [["Invoice No", "Company", "Employees", "Amount"]]
        for s in sources:
            data.append(
                [
                    s.invoice_number,
                    self._p(escape(s.company.name)),
                    str(s.attendance.total_employees),
                    format_inr(s.bill_details.total_amount),
                ]
            )
        table = Table(data, colWidths=[35 * mm, 80 * mm, 25 * mm, 40 * mm], repeatRows=1)
        table.setStyle(self._grid_style(numeric_from=2))
        return [self._p("Source Invoices", self._heading), table]

    def _employees(self, invoice: Invoice) -> list:
        merged = invoice.is_merged
        head = ["#", "Employee"] + (["Company"] if merged else []) + ["Present", "Regular", "OT", "Total"]
        data = [head]
        for i, e in enumerate(invoice.employees, start=1):
            row = [str(i), self._p(escape(e.name))]
            if merged:
                row.append(self._p(escape(e.source_company or "-")))
            row.extend([_days(e.present_days), _days(e.regular_days), _days(e.overtime_days), _days(e.total_days)])
            data.append(row)

        if merged:
            widths = [10 * mm, 55 * mm, 47 * mm, 17 * mm, 17 * mm, 17 * mm, 17 * mm]
        else:
            widths = [10 * mm, 90 * mm, 20 * mm, 20 * mm, 20 * mm, 20 * mm]
        table = Table(data, colWidths=widths, repeatRows=1)
        table.setStyle(self._grid_style(numeric_from=len(head) - 4))
        return [self._p(f"Employees ({len(invoice.employees)})", self._heading), table]

    def _bill_summary(self, invoice: Invoice) -> list:
        bill = invoice.bill_details
        rates = invoice.rates
        gst_label = "IGST (18%)" if rates.tax_type == TaxType.IGST else "GST (CGST 9% + SGST 9%)"
        if rates.gst_paid_by == GstPaidBy.PRINCIPAL_EMPLOYER:
            gst_label += " - payable by principal employer"

        lines = [
            ("Base Amount", bill.base_amount),
            ("Overtime Amount", bill.overtime_amount),
            ("PF (13%)", bill.pf_amount),
            ("ESIC (3.25%)", bill.esic_amount),
            (f"Bonus ({rates.bonus_rate.normalize():f}%)", bill.bonus_amount),
            (f"Service Charge ({rates.service_charge_rate.normalize():f}%)", bill.service_charge),
            (gst_label, bill.gst_amount),
        ]
        data = [[label, format_inr(amount)] for label, amount in lines if amount]
        data.append(["TOTAL AMOUNT", format_inr(bill.total_amount)])

        table = Table(data, colWidths=[130 * mm, 50 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, BRAND),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                ]
            )
        )
        words = number_to_words(bill.total_amount)
        return [
            self._p("Bill Summary", self._heading),
            table,
            Spacer(1, 4),
            self._p(f"<b>Amount in words:</b> {escape(words)}"),
        ]

    def _footer(self, invoice: Invoice) -> list:
        out = [Spacer(1, 10)]
        if invoice.notes:
            out.append(self._p("Notes", self._heading))
            out.append(self._p(escape(invoice.notes)))
        out.append(Spacer(1, 16))
        out.append(self._p("This is a computer-generated invoice.", self._centered))
        return out

    @staticmethod
    def _grid_style(*, numeric_from: int) -> TableStyle:
        return TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, GRID),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ALIGN", (numeric_from, 0), (-1, -1), "RIGHT"),
            ]
        )
