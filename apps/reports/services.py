# apps/reports/services.py

import csv
import io
import logging
import math
from decimal import Decimal
from xml.sax.saxutils import escape

from django.db.models import Q
from django.utils import timezone

from apps.registrations.models import Registration
from .models import ReminderLog

logger = logging.getLogger(__name__)

STATUS_FILTERS = {
    "fully": Q(balance__lte=0),
    "partial": Q(amount_paid__gt=0, balance__gt=0),
    "unpaid": Q(amount_paid=0),
}

FILTER_LABELS = {
    "fully": "Fully Paid Members",
    "partial": "Partially Paid Members",
    "unpaid": "Unpaid Members",
}

CSV_HEADERS = ["Name", "Email", "Club", "Amount Paid", "Balance", "Status"]

PDF_HEADERS = [
    "Member Name",
    "Club",
    "Amount Paid",
    "Balance",
    "T-Shirt",
    "Dietary Needs",
    "District",
    "Gender",
    "Medical Cond.",
    "Phone",
    "Accommodation",
    "Status",
]


class ReportFilterError(ValueError):
    pass


def payment_label(amount_paid: Decimal, balance: Decimal) -> str:
    if balance <= 0:
        return "Fully Paid"
    if amount_paid > 0:
        return "Partially Paid"
    return "Unpaid"


def parse_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except ArithmeticError:
        raise ReportFilterError(f"Invalid amount filter: {amount}")
    # amount_paid: max_digits=12, decimal_places=2
    if not value.is_finite() or value.adjusted() >= 10:
        raise ReportFilterError(f"Invalid amount filter: {amount}")
    return value


def registrations_queryset(status_filter: str = None, amount=None):
    qs = Registration.objects.select_related("user").order_by("user__first_name", "user__last_name")

    if status_filter:
        if status_filter not in STATUS_FILTERS:
            raise ReportFilterError(f"Unknown status filter: {status_filter}")
        qs = qs.filter(STATUS_FILTERS[status_filter])

    if amount not in (None, ""):
        qs = qs.filter(amount_paid=parse_amount(amount))

    return qs


def build_report_rows(status_filter: str = None, amount=None) -> list:
    rows = []
    for reg in registrations_queryset(status_filter, amount):
        user = reg.user
        rows.append(
            {
                "user_id": user.pk,
                "registration_id": reg.pk,
                "fullName": user.full_name,
                "email": user.email,
                "club_name": user.club_name,
                "phone_number": user.phone_number,
                "gender": user.gender,
                "district": user.district,
                "t_shirt_size": user.t_shirt_size,
                "dietary_needs": user.dietary_needs,
                "accommodation": user.accommodation,
                "special_medical_conditions": user.special_medical_conditions,
                "amount_paid": reg.amount_paid,
                "balance": reg.balance,
                "payment_status": reg.payment_status,
            }
        )
    return rows


def summarize(rows: list) -> dict:
    return {
        "total": len(rows),
        "fully_paid": sum(1 for r in rows if r["balance"] <= 0),
        "partially_paid": sum(1 for r in rows if r["amount_paid"] > 0 and r["balance"] > 0),
        "unpaid": sum(1 for r in rows if r["amount_paid"] == 0),
        "total_paid": sum((r["amount_paid"] for r in rows), Decimal("0")),
    }


def filter_label(status_filter: str = None, amount=None) -> str:
    if status_filter:
        return FILTER_LABELS[status_filter]
    if amount not in (None, ""):
        return f"Payments of UGX {parse_amount(amount):,.0f}"
    return "All Payments"


# --------------------------------------------------------------
# Экспорт
# --------------------------------------------------------------


def export_csv(rows: list) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(
            [
                row["fullName"],
                row["email"],
                row["club_name"] or "",
                f"{row['amount_paid']:.0f}",
                f"{row['balance']:.0f}",
                payment_label(row["amount_paid"], row["balance"]),
            ]
        )
    return buffer.getvalue()


def _pdf_row(row: dict) -> list:
    return [
        row["fullName"],
        row["club_name"] or "-",
        f"UGX {row['amount_paid']:,.0f}",
        f"UGX {row['balance']:,.0f}",
        row["t_shirt_size"] or "-",
        row["dietary_needs"] or "Standard",
        row["district"] or "-",
        row["gender"] or "-",
        "Yes" if row["special_medical_conditions"] else "No",
        row["phone_number"] or "-",
        row["accommodation"] or "N/A",
        "Partial" if payment_label(row["amount_paid"], row["balance"]) == "Partially Paid"
        else payment_label(row["amount_paid"], row["balance"]),
    ]


def export_pdf(rows: list, label: str = "All Payments") -> bytes:
    """Отчёт по оплатам: таблица на A4 в альбомной ориентации."""
    from reportlab.lib import colors
    from reportlab.lib.enums import TA_CENTER
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import mm
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=10 * mm,
        leftMargin=10 * mm,
        topMargin=12 * mm,
        bottomMargin=15 * mm,
        title="Payment Report",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=18,
        alignment=TA_CENTER,
        spaceAfter=4,
    )
    meta_style = ParagraphStyle(
        "ReportMeta",
        parent=styles["Normal"],
        fontSize=10,
        alignment=TA_CENTER,
        spaceAfter=8,
    )
    cell_style = ParagraphStyle("ReportCell", parent=styles["Normal"], fontSize=7, leading=9)

    generated = timezone.localdate().strftime("%d/%m/%Y")
    content = [
        Paragraph("REI 25th Conference", meta_style),
        Paragraph("Payment Report", title_style),
        Paragraph(f"{label} | Generated: {generated}", meta_style),
        Spacer(1, 4 * mm),
    ]

    data = [PDF_HEADERS] + [
        [Paragraph(escape(str(value)), cell_style) for value in _pdf_row(row)] for row in rows
    ]
    col_widths = [mm * w for w in (32, 28, 24, 24, 14, 24, 22, 16, 18, 26, 24, 20)]

    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#006400")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 8),
                ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f2f2")]),
                ("GRID", (0, 0), (-1, -1), 0.1, colors.HexColor("#c8c8c8")),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    content.append(table)

    def draw_page_number(canvas, doc_):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.drawCentredString(
            doc_.pagesize[0] / 2,
            8 * mm,
            f"Page {canvas.getPageNumber()}",
        )
        canvas.restoreState()

    doc.build(content, onFirstPage=draw_page_number, onLaterPages=draw_page_number)

    pdf_bytes = buffer.getvalue()
    buffer.close()
    logger.info("Payment report PDF built: %s rows, %s bytes", len(rows), len(pdf_bytes))
    return pdf_bytes


# --------------------------------------------------------------
# Напоминания об оплате
# --------------------------------------------------------------


def _days_until(moment) -> int:
    remaining = (moment - timezone.now()).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining / 86400)


def reminder_status(log: ReminderLog = None) -> dict:
    if log is None:
        return {"canSend": True, "daysUntilNext": 0, "lastSent": None, "nextAvailable": None}

    days = _days_until(log.next_available)
    return {
        "userId": log.user_id,
        "lastSent": log.last_sent.isoformat(),
        "canSend": days == 0,
        "daysUntilNext": days,
        "nextAvailable": log.next_available.isoformat(),
    }


def reminder_status_for(user) -> dict:
    return reminder_status(ReminderLog.objects.filter(user=user).first())


def all_reminder_statuses() -> list:
    return [reminder_status(log) for log in ReminderLog.objects.order_by("-last_sent")]


def record_reminder(user) -> ReminderLog:
    log, _ = ReminderLog.objects.update_or_create(
        user=user,
        defaults={"last_sent": timezone.now()},
    )
    return log
