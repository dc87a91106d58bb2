"""Report aggregation - income/expense trends, summaries and goal progress"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from moneywise.domain.ledger import money
from moneywise.domain.models import CategoryTotals, LedgerEntry, SummaryLine, SummaryReport, TrendReport


def summarize_trends(entries: Iterable[LedgerEntry]) -> TrendReport:
    """
    Partition transactions into income and expense totals.

    Every category seen gets an {income, expense} pair, so a category with
    only expenses reports income 0.
    """
    total_income = 0.0
    total_expense = 0.0
    breakdown: Dict[str, CategoryTotals] = {}

    for entry in entries:
        totals = breakdown.setdefault(entry.category, CategoryTotals())
        if entry.type == "income":
            total_income += entry.amount
            totals.income = money(totals.income + entry.amount)
        elif entry.type == "expense":
            total_expense += entry.amount
            totals.expense = money(totals.expense + entry.amount)

    return TrendReport(
        total_income=money(total_income),
        total_expense=money(total_expense),
        net_balance=money(total_income - total_expense),
        category_breakdown=breakdown,
    )


def build_summary(
    lines: List[SummaryLine],
    currency: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> SummaryReport:
    """Totals over lines whose amounts are already in the display currency"""
    total_income = sum(line.amount for line in lines if line.type == "income")
    total_expense = sum(line.amount for line in lines if line.type == "expense")

    return SummaryReport(
        start_date=start_date,
        end_date=end_date,
        total_income=money(total_income),
        total_expense=money(total_expense),
        net_balance=money(total_income - total_expense),
        currency=currency,
        transactions=lines,
    )
