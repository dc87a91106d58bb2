"""PDF rendering of finance reports with reportlab"""

import io
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from moneywise.domain.exceptions import ReportRenderingError
from moneywise.domain.models import SummaryReport, TrendReport

logger = logging.getLogger(__name__)

_BLUE = colors.HexColor("#1e40af")
_DARK_BLUE = colors.HexColor("#1e3a8a")
_LIGHT_BG = colors.HexColor("#f8fafc")
_BORDER_COLOR = colors.HexColor("#e2e8f0")

_TABLE_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), _BLUE), ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
    ("ALIGN", (1, 0), (-1, -1), "RIGHT"), ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 9), ("GRID", (0, 0), (-1, -1), 1, _BORDER_COLOR),
    ("TOPPADDING", (0, 0), (-1, -1), 6), ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, _LIGHT_BG]),
])


def _money(v: float, currency: str) -> str:
    return f"{v:,.2f} {currency}"


def _table(rows: List[List[str]], col_widths: List[float]) -> Table:
    t = Table(rows, colWidths=col_widths)
    t.setStyle(_TABLE_STYLE)
    return t


def _build(title: str, sections: List[Any]) -> bytes:
    """Lay out a titled document and return the PDF bytes"""
    try:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            rightMargin=2*cm, leftMargin=2*cm, topMargin=2*cm, bottomMargin=2*cm,
        )
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle("T", parent=styles["Heading1"], fontSize=22, spaceAfter=24, textColor=_BLUE)
        heading_style = ParagraphStyle("H", parent=styles["Heading2"], fontSize=14, spaceBefore=16, spaceAfter=8, textColor=_DARK_BLUE)

        elements = [
            Paragraph(title, title_style),
            Paragraph(f"Generated on {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M')} UTC", styles["Normal"]),
            Spacer(1, 16),
        ]
        for heading, flowable in sections:
            elements.append(Paragraph(heading, heading_style))
            elements.append(flowable)
            elements.append(Spacer(1, 16))

        doc.build(elements)
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"PDF rendering failed: {e}")
        raise ReportRenderingError(f"Error rendering PDF: {e}") from e


def render_trends_pdf(report: TrendReport, currency: str) -> bytes:
    totals = _table(
        [
            ["Indicator", "Value"],
            ["Total income", _money(report.total_income, currency)],
            ["Total expense", _money(report.total_expense, currency)],
            ["Net balance", _money(report.net_balance, currency)],
        ],
        [8*cm, 6*cm],
    )
    rows = [["Category", "Income", "Expense"]]
    for name, totals_for in sorted(report.category_breakdown.items()):
        rows.append([name, _money(totals_for.income, currency), _money(totals_for.expense, currency)])

    return _build(
        "Income and Expense Report",
        [("Summary", totals), ("Category breakdown", _table(rows, [6*cm, 4.5*cm, 4.5*cm]))],
    )


def render_summary_pdf(report: SummaryReport) -> bytes:
    start = report.start_date.date().isoformat() if report.start_date else "beginning"
    end = report.end_date.date().isoformat() if report.end_date else "today"

    totals = _table(
        [
            ["Indicator", "Value"],
            ["Period", f"{start} to {end}"],
            ["Total income", _money(report.total_income, report.currency)],
            ["Total expense", _money(report.total_expense, report.currency)],
            ["Net balance", _money(report.net_balance, report.currency)],
        ],
        [8*cm, 6*cm],
    )
    rows = [["Date", "Category", "Type", "Amount"]]
    for line in report.transactions:
        rows.append([line.date.date().isoformat(), line.category, line.type, _money(line.amount, report.currency)])

    return _build(
        "Summary Report",
        [("Summary", totals), ("Transactions", _table(rows, [3.5*cm, 4.5*cm, 2.5*cm, 4.5*cm]))],
    )


def render_goal_progress_pdf(goals: List[Dict[str, Any]], currency: str) -> bytes:
    """Render goal rows shaped like the goal progress JSON report"""
    rows = [["Goal", "Target", "Saved", "Status", "Progress"]]
    for goal in goals:
        rows.append([
            goal["name"],
            _money(goal["targetAmount"], currency),
            _money(goal["currentAmount"], currency),
            goal["status"],
            f"{goal['progress']} %",
        ])

    return _build(
        "Goal Progress Report",
        [("Goals", _table(rows, [4.5*cm, 3.2*cm, 3.2*cm, 2.6*cm, 2*cm]))],
    )
