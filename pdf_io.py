# -*- coding: utf-8 -*-
"""
Payment sheet: a PDF with the order register and one PromptPay QR code per
order, plus the same register as plain text.
"""
import io
from decimal import Decimal
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from order_qr import OrderPayment
from promptpay_fields import to_subunits
from promptpay_qr import payload_to_qr_image


def _baht(amount) -> Decimal:
    return Decimal(to_subunits(amount)) / 100


def _total(orders: List[OrderPayment]) -> Decimal:
    return sum((_baht(o.amount) for o in orders), Decimal("0"))


def build_payment_sheet_pdf(
    orders: List[OrderPayment],
    output_path: str,
    title: str = "Orders with PromptPay QR codes",
    ec_level: str = "M",
) -> None:
    """
    Builds PDF: title, order register (table with amounts and total),
    then for each order with a payload its QR code and payload text.
    """
    doc = SimpleDocTemplate(
        output_path,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )
    story = []
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        name="CustomTitle",
        parent=styles["Heading1"],
        fontSize=16,
        spaceAfter=8 * mm,
    )
    story.append(Paragraph(title, title_style))
    story.append(Spacer(1, 4 * mm))

    story.append(Paragraph("Order register", styles["Heading2"]))
    story.append(Spacer(1, 2 * mm))

    table_data = [
        ["#", "Order", "Amount (THB)", "QR"],
    ]
    for idx, o in enumerate(orders, 1):
        table_data.append([
            str(idx),
            str(o.order_id),
            f"{_baht(o.amount):.2f}",
            "Y" if o.payload else "-",
        ])
    table_data.append(["", "TOTAL", f"{_total(orders):.2f}", ""])

    t = Table(table_data, colWidths=[12 * mm, 60 * mm, 35 * mm, 18 * mm])
    t.setStyle(
        TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4472C4")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("ALIGN", (2, 0), (2, -1), "RIGHT"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 10),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
            ("BACKGROUND", (0, -1), (-1, -1), colors.HexColor("#E2EFDA")),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTSIZE", (0, 1), (-1, -1), 9),
        ])
    )
    story.append(t)
    story.append(Spacer(1, 10 * mm))

    story.append(Paragraph("PromptPay QR codes", styles["Heading2"]))
    story.append(Spacer(1, 2 * mm))

    qr_size = 45 * mm
    desc_width = 120 * mm
    pad = 5 * mm
    col0_width = desc_width + 2 * pad
    col1_width = qr_size + 2 * pad
    with_qr = [o for o in orders if o.payload]
    for idx, o in enumerate(with_qr, 1):
        qr_bytes = payload_to_qr_image(o.payload, ec_level=ec_level, box_size=5, border=2)
        img = Image(io.BytesIO(qr_bytes), width=qr_size, height=qr_size)

        # payload has no break points; 86 chars at size 6 fit the description column
        desc_para = Paragraph(
            f"<b>Order</b> {o.order_id}<br/>"
            f"{_baht(o.amount):.2f} THB<br/>"
            f"<font size='6'>{o.payload}</font>",
            styles["Normal"],
        )
        tbl = Table([[desc_para, img]], colWidths=[col0_width, col1_width])
        tbl.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), pad),
            ("RIGHTPADDING", (0, 0), (-1, -1), pad),
            ("TOPPADDING", (0, 0), (-1, -1), pad),
            ("BOTTOMPADDING", (0, 0), (-1, -1), pad),
            ("BOX", (0, 0), (-1, -1), 0.5, colors.lightgrey),
            ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#f8f9fa")),
        ]))
        story.append(tbl)
        if idx < len(with_qr):
            story.append(Spacer(1, 14 * mm))

    doc.build(story)


def format_order_register_text(orders: List[OrderPayment]) -> str:
    """Format order register as plain text (e.g. for logs or email body)."""
    lines = [
        "Order register",
        "",
        "#\tOrder\tAmount (THB)\tQR",
        "-" * 50,
    ]
    for idx, o in enumerate(orders, 1):
        lines.append(f"{idx}\t{o.order_id}\t{_baht(o.amount):.2f}\t{o.qr_path or '-'}")
    lines.append("-" * 50)
    lines.append(f"TOTAL\t\t{_total(orders):.2f}")
    return "\n".join(lines)
