"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import datetime
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from moneywise.domain.models import TRANSACTION_TYPES
from moneywise.utils.date_utils import to_naive_utc, utcnow

T = TypeVar("T")

Duration = Literal["daily", "weekly", "monthly", "yearly"]
ReportFormat = Literal["json", "pdf"]


class CamelModel(BaseModel):
    """Base schema exposing camelCase JSON field names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    """Success envelope {msg, data}"""

    msg: str
    data: Optional[T] = None


class MessageResponse(BaseModel):
    msg: str


def _future_deadline(value: Optional[datetime]) -> Optional[datetime]:
    value = to_naive_utc(value)
    if value is not None and value <= utcnow():
        raise ValueError('"deadline" must be greater than "now"')
    return value


def _transaction_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in TRANSACTION_TYPES:
        raise ValueError("Invalid transaction type. Must be 'income' or 'expense'")
    return value


# ---- Goals ----

class GoalCreate(CamelModel):
    """Request body for POST /goals"""

    name: str = Field(..., min_length=3, max_length=200)
    target_amount: float = Field(..., gt=0, description="Target in `currency`")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    deadline: Optional[datetime] = None

    @field_validator("deadline")
    @classmethod
    def check_deadline(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _future_deadline(value)


class GoalUpdate(CamelModel):
    """Request body for PATCH /goals/{id}; omitted fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=3, max_length=200)
    target_amount: Optional[float] = Field(None, gt=0)
    current_amount: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    deadline: Optional[datetime] = None

    @field_validator("deadline")
    @classmethod
    def check_deadline(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _future_deadline(value)


class FundGoalRequest(CamelModel):
    """Request body for PATCH /goals/{id}/fund"""

    amount: Optional[float] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    transfer_token: Optional[str] = Field(None, min_length=1, max_length=128)


class GoalOut(CamelModel):
    id: uuid.UUID
    user_id: str
    name: str
    target_amount: float
    current_amount: float
    deadline: Optional[datetime] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GoalStatsOut(CamelModel):
    total_goals: int
    total_target_amount: float
    total_current_amount: float
    completed_goals: int
    completion_rate: float


class FundingResult(CamelModel):
    funded_goal: GoalOut
    savings_goal: GoalOut
    converted_amount: float
    applied_amount: float
    base_currency: str
    transfer_id: uuid.UUID


# ---- Budgets ----

class BudgetCreate(CamelModel):
    """Request body for POST /budget"""

    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0)
    duration: Duration = "monthly"
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class BudgetUpdate(CamelModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, gt=0)
    duration: Optional[Duration] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class BudgetOut(CamelModel):
    id: uuid.UUID
    user_id: str
    category: str
    amount: float
    duration: str
    currency: str
    created_at: Optional[datetime] = None


class Pagination(CamelModel):
    total_count: int
    page: int
    limit: int
    total_pages: int


class BudgetPage(CamelModel):
    """Paginated budget list"""

    msg: str
    data: List[BudgetOut]
    pagination: Pagination


class BudgetRecommendationOut(CamelModel):
    budget_id: uuid.UUID
    category: str
    duration: str
    budget_amount: float
    spent: float
    percentage: int
    recommendation: str
    message: str
    period_start: datetime
    period_end: datetime


# ---- Transactions ----

class RecurringInfo(CamelModel):
    is_recurring: bool = False
    frequency: Optional[Duration] = None


class TransactionCreate(CamelModel):
    """Request body for POST /transactions"""

    type: str
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    recurring: Optional[RecurringInfo] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, value: Optional[str]) -> Optional[str]:
        return _transaction_type(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TransactionUpdate(CamelModel):
    type: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    recurring: Optional[RecurringInfo] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, value: Optional[str]) -> Optional[str]:
        return _transaction_type(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TransactionOut(CamelModel):
    id: uuid.UUID
    user_id: str
    type: str
    amount: float
    category: str
    description: Optional[str] = None
    date: datetime
    tags: List[str] = Field(default_factory=list)
    recurring: Optional[RecurringInfo] = None
    created_at: Optional[datetime] = None


# ---- Categories ----

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: Literal["income", "expense"]
    active: bool = True


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[Literal["income", "expense"]] = None
    active: Optional[bool] = None


class CategoryOut(CamelModel):
    id: uuid.UUID
    name: str
    type: str
    active: bool


# ---- Notifications ----

class NotificationOut(CamelModel):
    id: uuid.UUID
    user_id: str
    title: str
    message: str
    read: bool
    created_at: Optional[datetime] = None


# ---- Reports ----

class CategoryTotalsOut(CamelModel):
    income: float
    expense: float


class TrendReportOut(CamelModel):
    total_income: float
    total_expense: float
    net_balance: float
    category_breakdown: Dict[str, CategoryTotalsOut]


class SummaryLineOut(CamelModel):
    date: datetime
    category: str
    type: str
    amount: float


class SummaryReportOut(CamelModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_income: float
    total_expense: float
    net_balance: float
    currency: str
    transactions: List[SummaryLineOut]


class GoalProgressOut(CamelModel):
    id: uuid.UUID
    name: str
    target_amount: float
    current_amount: float
    status: str
    deadline: Optional[datetime] = None
    progress: int


class ReportOut(CamelModel):
    id: uuid.UUID
    report_type: str
    data: Any
    created_at: Optional[datetime] = None
