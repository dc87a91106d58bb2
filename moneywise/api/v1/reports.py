"""Report endpoints - trends, filtered summaries and goal progress as JSON or PDF"""

import time
from dataclasses import asdict
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.responses import Response

from moneywise.api.dependencies import get_current_user_id, get_currency_client, get_request_id
from moneywise.api.errors import OperationFailed, operation
from moneywise.api.v1.schemas import (
    Envelope,
    GoalProgressOut,
    ReportFormat,
    ReportOut,
    SummaryReportOut,
    TrendReportOut,
)
from moneywise.config import settings
from moneywise.domain.exceptions import ReportRenderingError
from moneywise.domain.ledger import goal_progress
from moneywise.domain.models import LedgerEntry, SummaryLine
from moneywise.domain.reports import build_summary, summarize_trends
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.database.repositories import (
    GoalRepository,
    ReportRepository,
    TransactionRepository,
)
from moneywise.infrastructure.database.session import get_db
from moneywise.infrastructure.observability.metrics import record_report
from moneywise.infrastructure.rendering.pdf import (
    render_goal_progress_pdf,
    render_summary_pdf,
    render_trends_pdf,
)
from moneywise.utils.date_utils import to_naive_utc

router = APIRouter()


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _render(failure_msg: str, render, *args) -> bytes:
    """Render a PDF, reporting failures under the endpoint's message"""
    try:
        return render(*args)
    except ReportRenderingError as e:
        raise OperationFailed(failure_msg, e.message) from e


def _timestamp() -> int:
    return int(time.time() * 1000)


@router.get("/reports/trends")
def generate_trends_report(
    request: Request,
    format: ReportFormat = "json",
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Income and expense totals with a per-category breakdown"""
    failure_msg = "Error generating report"
    with operation(db, failure_msg, get_request_id(request)):
        entries = [
            LedgerEntry(type=t.type, amount=t.amount, category=t.category, date=t.date)
            for t in TransactionRepository(db).find_transactions(user_id)
        ]
        trends = summarize_trends(entries)
        payload = TrendReportOut.model_validate(asdict(trends))

        report = ReportRepository(db).create_report(
            user_id=user_id,
            report_type="trends",
            data=payload.model_dump(mode="json", by_alias=True),
        )
        # Snapshot is only kept once the PDF has rendered
        response = None
        if format == "pdf":
            content = _render(failure_msg, render_trends_pdf, trends, settings.base_currency)
            response = _pdf_response(content, f"report_{report.id}.pdf")
        db.commit()
        record_report("trends", format)

        if response is not None:
            return response

        return Envelope[TrendReportOut](msg="Report generated successfully", data=payload)


@router.get("/reports/filter")
async def generate_summary_report(
    request: Request,
    format: ReportFormat = "json",
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    category: Optional[str] = None,
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    currency_client: CurrencyClient = Depends(get_currency_client),
):
    """
    Totals and transaction lines for a date range and optional category.

    Amounts are converted from base currency to `currency` line by line and
    the totals are summed from the converted amounts.
    """
    failure_msg = "Error generating summary report"
    with operation(db, failure_msg, get_request_id(request)):
        start_date = to_naive_utc(start_date)
        end_date = to_naive_utc(end_date)
        display_currency = (currency or settings.base_currency).upper()

        transactions = TransactionRepository(db).find_transactions(
            user_id, start_date=start_date, end_date=end_date, category=category
        )
        lines = [
            SummaryLine(
                date=t.date,
                category=t.category,
                type=t.type,
                amount=await currency_client.from_base(t.amount, display_currency),
            )
            for t in transactions
        ]
        summary = build_summary(lines, display_currency, start_date, end_date)
        payload = SummaryReportOut.model_validate(asdict(summary))

        ReportRepository(db).create_report(
            user_id=user_id,
            report_type="summary",
            data=payload.model_dump(mode="json", by_alias=True),
        )
        response = None
        if format == "pdf":
            content = _render(failure_msg, render_summary_pdf, summary)
            response = _pdf_response(content, f"summary_report_{_timestamp()}.pdf")
        db.commit()
        record_report("summary", format)

        if response is not None:
            return response

        return Envelope[SummaryReportOut](msg="Summary report generated successfully", data=payload)


@router.get("/reports/goal")
def generate_goal_progress_report(
    request: Request,
    format: ReportFormat = "json",
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Every goal of the caller with its progress percentage (capped at 100)"""
    failure_msg = "Error generating goal progress report"
    with operation(db, failure_msg, get_request_id(request)):
        goals = [
            GoalProgressOut(
                id=g.id,
                name=g.name,
                target_amount=g.target_amount,
                current_amount=g.current_amount,
                status=g.status,
                deadline=g.deadline,
                progress=goal_progress(g.current_amount, g.target_amount),
            )
            for g in GoalRepository(db).list_goals(user_id)
        ]
        data = [g.model_dump(mode="json", by_alias=True) for g in goals]

        ReportRepository(db).create_report(
            user_id=user_id,
            report_type="goal_progress",
            data={"goals": data},
        )
        response = None
        if format == "pdf":
            content = _render(failure_msg, render_goal_progress_pdf, data, settings.base_currency)
            response = _pdf_response(content, f"goal_progress_report_{_timestamp()}.pdf")
        db.commit()
        record_report("goal_progress", format)

        if response is not None:
            return response

        return Envelope[list[GoalProgressOut]](msg="Goal progress report generated successfully", data=goals)


@router.get("/reports/history", response_model=Envelope[list[ReportOut]])
def get_report_history(
    request: Request,
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Most recent report snapshots of the caller"""
    with operation(db, "Error retrieving reports", get_request_id(request)):
        reports = ReportRepository(db).get_reports_by_user(user_id, limit=limit)
        return Envelope(
            msg="Reports retrieved successfully",
            data=[ReportOut.model_validate(r) for r in reports],
        )
