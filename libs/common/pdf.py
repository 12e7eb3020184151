"""
Invoice PDF generation using ReportLab.
"""

import io
from xml.sax.saxutils import escape
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from libs.common.currency import format_amount
from libs.common.datetime_utils import format_date

BRAND_COLOR = "#111827"
MUTED_COLOR = "#64748b"
BORDER_COLOR = "#e2e8f0"


@dataclass
class InvoiceLine:
    name: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class InvoicePayment:
    method_label: str
    status_label: str
    amount: Decimal
    transaction_id: Optional[str] = None


@dataclass
class OrderData:
    """Everything needed to render an invoice for one order."""

    order_id: str
    created_at: Optional[datetime]
    status_label: str
    customer_name: str
    customer_email: Optional[str]
    shipping_address: List[str]
    items: List[InvoiceLine] = field(default_factory=list)
    payments: List[InvoicePayment] = field(default_factory=list)
    original_total: Decimal = Decimal("0.00")
    total_paid: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    promotion_code: Optional[str] = None
    currency: str = "eur"


def generate_invoice_pdf(data: OrderData, company_name: str = "ShopBrands") -> bytes:
    """
    Render an order invoice.

    Returns PDF as bytes for email attachment or download.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=f"Invoice {data.order_id}",
    )

    styles = getSampleStyleSheet()
    elements = []

    title_style = ParagraphStyle(
        "InvoiceTitle",
        parent=styles["Heading1"],
        fontSize=22,
        textColor=colors.HexColor(BRAND_COLOR),
        spaceAfter=16,
    )
    heading_style = ParagraphStyle(
        "InvoiceHeading",
        parent=styles["Heading2"],
        fontSize=13,
        textColor=colors.HexColor(BRAND_COLOR),
        spaceBefore=18,
        spaceAfter=8,
    )
    normal_style = styles["Normal"]

    elements.append(Paragraph(escape(company_name), title_style))
    elements.append(Paragraph("Invoice", styles["Heading2"]))
    elements.append(Spacer(1, 12))

    info_data = [
        ["Order:", data.order_id],
        ["Date:", format_date(data.created_at)],
        ["Status:", data.status_label],
        ["Customer:", data.customer_name],
    ]
    if data.customer_email:
        info_data.append(["Email:", data.customer_email])
    info_table = Table(info_data, colWidths=[1.3 * inch, 4.5 * inch])
    info_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("TEXTCOLOR", (0, 0), (0, -1), colors.HexColor(MUTED_COLOR)),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(info_table)

    if data.shipping_address:
        elements.append(Paragraph("Shipping address", heading_style))
        for line in data.shipping_address:
            elements.append(Paragraph(escape(line), normal_style))

    # Line items
    elements.append(Paragraph("Items", heading_style))
    rows = [["Product", "Qty", "Unit price", "Subtotal"]]
    for line in data.items:
        rows.append(
            [
                line.name,
                str(line.quantity),
                format_amount(line.unit_price, data.currency),
                format_amount(line.subtotal, data.currency),
            ]
        )
    items_table = Table(rows, colWidths=[3 * inch, 0.7 * inch, 1.3 * inch, 1.3 * inch])
    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(BRAND_COLOR)),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor(BORDER_COLOR)),
                ("PADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(items_table)
    elements.append(Spacer(1, 12))

    totals = [["Total:", format_amount(data.original_total, data.currency)]]
    if data.discount_amount:
        label = "Discount"
        if data.promotion_code:
            label = f"Discount ({data.promotion_code})"
        totals.append(
            [f"{label}:", "-" + format_amount(data.discount_amount, data.currency)]
        )
    if data.total_paid is not None:
        totals.append(["Paid:", format_amount(data.total_paid, data.currency)])
    totals_table = Table(totals, colWidths=[4.9 * inch, 1.4 * inch])
    totals_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
            ]
        )
    )
    elements.append(totals_table)

    if data.payments:
        elements.append(Paragraph("Payments", heading_style))
        pay_rows = [["Method", "Status", "Amount", "Reference"]]
        for p in data.payments:
            pay_rows.append(
                [
                    p.method_label,
                    p.status_label,
                    format_amount(p.amount, data.currency),
                    p.transaction_id or "-",
                ]
            )
        pay_table = Table(
            pay_rows, colWidths=[1.4 * inch, 1.2 * inch, 1.2 * inch, 2.5 * inch]
        )
        pay_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor(BORDER_COLOR)),
                    ("PADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        elements.append(pay_table)

    elements.append(Spacer(1, 24))
    elements.append(
        Paragraph(
            f"Thank you for shopping with {company_name}.",
            ParagraphStyle(
                "Footer",
                parent=normal_style,
                fontSize=9,
                textColor=colors.HexColor(MUTED_COLOR),
            ),
        )
    )

    doc.build(elements)
    buffer.seek(0)
    return buffer.getvalue()
