"""Budget aggregation - spend against budget per category and period"""

from datetime import datetime
from typing import Iterable

from moneywise.domain.ledger import money, round_half_up
from moneywise.domain.models import BudgetUsage, LedgerEntry
from moneywise.utils.date_utils import period_bounds

# Share of the budget at which spending is flagged as close to the limit
NEAR_LIMIT_PERCENTAGE = 80


def spending_percentage(spent: float, budget_amount: float) -> int:
    """round(spent / budget * 100), half up"""
    if budget_amount <= 0:
        return 0
    return round_half_up(spent / budget_amount * 100)


def classify_spending(category: str, percentage: int) -> tuple[str, str]:
    """
    Map a spending percentage to a recommendation.

    Returns: (recommendation, message)
    """
    if percentage > 100:
        return (
            "over_budget",
            f"You have exceeded your {category} budget. Consider reducing spending in this category.",
        )
    elif percentage >= NEAR_LIMIT_PERCENTAGE:
        return (
            "near_limit",
            f"You have used {percentage}% of your {category} budget. Spend carefully for the rest of the period.",
        )
    else:
        return "on_track", f"Your {category} spending is within budget."


def evaluate_budget(
    category: str,
    duration: str,
    budget_amount: float,
    entries: Iterable[LedgerEntry],
    now: datetime,
) -> BudgetUsage:
    """
    Sum expense entries of the budget's category inside the current period
    and classify the result.
    """
    start, end = period_bounds(duration, now)

    spent = money(
        sum(
            e.amount
            for e in entries
            if e.type == "expense" and e.category == category and start <= e.date < end
        )
    )
    percentage = spending_percentage(spent, budget_amount)
    recommendation, message = classify_spending(category, percentage)

    return BudgetUsage(
        category=category,
        duration=duration,
        budget_amount=budget_amount,
        spent=spent,
        percentage=percentage,
        recommendation=recommendation,
        message=message,
        period_start=start,
        period_end=end,
    )
