"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

GOAL_IN_PROGRESS = "In Progress"
GOAL_COMPLETED = "Completed"
SAVINGS_GOAL_NAME = "Savings Goal"

TRANSACTION_TYPES = ("income", "expense")



@dataclass
class GoalBalance:
    """Amounts and status of a goal, in base currency"""

    name: str
    target_amount: float
    current_amount: float
    status: str = GOAL_IN_PROGRESS


@dataclass
class FundingOutcome:
    """Result of moving money from the Savings Goal into another goal"""

    target: GoalBalance
    savings: GoalBalance
    converted_amount: float
    applied_amount: float
    target_completed: bool


@dataclass
class LedgerEntry:
    """Transaction as seen by the aggregators"""

    type: str  # "income" or "expense"
    amount: float
    category: str
    date: datetime


@dataclass
class CategoryTotals:
    """Income and expense totals for one category"""

    income: float = 0.0
    expense: float = 0.0


@dataclass
class TrendReport:
    """Income/expense totals with per-category breakdown"""

    total_income: float
    total_expense: float
    net_balance: float
    category_breakdown: Dict[str, CategoryTotals] = field(default_factory=dict)


@dataclass
class SummaryLine:
    """Single transaction line of a summary report, in display currency"""

    date: datetime
    category: str
    type: str
    amount: float


@dataclass
class SummaryReport:
    """Totals over an optional date range and category"""

    start_date: Optional[datetime]
    end_date: Optional[datetime]
    total_income: float
    total_expense: float
    net_balance: float
    currency: str
    transactions: List[SummaryLine] = field(default_factory=list)


@dataclass
class GoalStats:
    """Aggregate statistics over a user's goals"""

    total_goals: int
    total_target_amount: float
    total_current_amount: float
    completed_goals: int
    completion_rate: float


@dataclass
class BudgetUsage:
    """Spend against a single budget over its current window"""

    category: str
    duration: str
    budget_amount: float
    spent: float
    percentage: int
    recommendation: str  # "on_track" | "near_limit" | "over_budget"
    message: str
    period_start: datetime
    period_end: datetime
