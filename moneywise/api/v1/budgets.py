"""Budget endpoints - per-category spending limits and recommendations"""

import math
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from moneywise.api.dependencies import (
    get_category_registry,
    get_current_user_id,
    get_currency_client,
    get_request_id,
)
from moneywise.api.errors import operation, parse_id, unique_or_conflict
from moneywise.api.v1.schemas import (
    BudgetCreate,
    BudgetOut,
    BudgetPage,
    BudgetRecommendationOut,
    BudgetUpdate,
    Duration,
    Envelope,
    MessageResponse,
    Pagination,
)
from moneywise.config import settings
from moneywise.domain.budgeting import evaluate_budget
from moneywise.domain.categories import CategoryRegistry
from moneywise.domain.exceptions import ConflictError, NotFoundError
from moneywise.domain.models import LedgerEntry
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.database.repositories import BudgetRepository, TransactionRepository
from moneywise.infrastructure.database.session import get_db
from moneywise.utils.date_utils import utcnow

router = APIRouter()


def _page(msg: str, items, total: int, page: int, limit: int) -> BudgetPage:
    return BudgetPage(
        msg=msg,
        data=[BudgetOut.model_validate(b) for b in items],
        pagination=Pagination(
            total_count=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        ),
    )


@router.post("/budget", status_code=201, response_model=Envelope[BudgetOut])
async def create_budget(
    body: BudgetCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    categories: CategoryRegistry = Depends(get_category_registry),
    currency_client: CurrencyClient = Depends(get_currency_client),
):
    """Set a spending limit for a category; one budget per category"""
    with operation(db, "Error setting budget", get_request_id(request)):
        categories.require_active(body.category)

        budget_repo = BudgetRepository(db)
        if budget_repo.get_by_category(user_id, body.category):
            raise ConflictError("Budget already exists for this category.")

        currency = (body.currency or settings.base_currency).upper()
        amount = await currency_client.to_base(body.amount, currency)

        with unique_or_conflict(db, "Budget already exists for this category."):
            budget = budget_repo.create_budget(
                user_id=user_id,
                category=body.category,
                amount=amount,
                duration=body.duration,
                currency=currency,
            )
            db.commit()

        return Envelope(msg="Budget set successfully!", data=BudgetOut.model_validate(budget))


@router.patch("/budget/{budget_id}", response_model=Envelope[BudgetOut])
async def update_budget(
    budget_id: str,
    body: BudgetUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    categories: CategoryRegistry = Depends(get_category_registry),
    currency_client: CurrencyClient = Depends(get_currency_client),
):
    with operation(db, "Error updating budget", get_request_id(request)):
        budget_repo = BudgetRepository(db)
        budget = budget_repo.get_budget(user_id, parse_id(budget_id, "budget"))
        if not budget:
            raise NotFoundError("Budget not found")

        if body.category is not None and body.category != budget.category:
            categories.require_active(body.category)
            if budget_repo.get_by_category(user_id, body.category):
                raise ConflictError("Budget already exists for this category.")
            budget.category = body.category

        currency = (body.currency or budget.currency).upper()
        if body.amount is not None:
            budget.amount = await currency_client.to_base(body.amount, currency)
        if body.duration is not None:
            budget.duration = body.duration
        budget.currency = currency

        with unique_or_conflict(db, "Budget already exists for this category."):
            db.commit()

        return Envelope(msg="Budget updated successfully!", data=BudgetOut.model_validate(budget))


@router.delete("/budget/{budget_id}", response_model=MessageResponse)
def delete_budget(
    budget_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error deleting budget", get_request_id(request)):
        budget_repo = BudgetRepository(db)
        budget = budget_repo.get_budget(user_id, parse_id(budget_id, "budget"))
        if not budget:
            raise NotFoundError("Budget not found")

        budget_repo.delete_budget(budget)
        db.commit()

        return MessageResponse(msg="Budget deleted successfully")


@router.get("/budgets", response_model=BudgetPage)
def list_budgets(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error retrieving budgets", get_request_id(request)):
        items, total = BudgetRepository(db).list_budgets(user_id, page=page, limit=limit)
        if total == 0:
            raise NotFoundError("No budgets found.")

        return _page("Budgets retrieved successfully", items, total, page, limit)


@router.get("/budgets/filter", response_model=BudgetPage)
def filter_budgets(
    request: Request,
    category: Optional[str] = None,
    duration: Optional[Duration] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error filtering budgets", get_request_id(request)):
        items, total = BudgetRepository(db).list_budgets(
            user_id, category=category, duration=duration, page=page, limit=limit
        )
        if total == 0:
            raise NotFoundError("No budgets found for the given filters")

        return _page("Budgets retrieved successfully", items, total, page, limit)


@router.get("/budgets/recommendations", response_model=Envelope[list[BudgetRecommendationOut]])
def get_budget_recommendations(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Compare each budget with the expenses of its category in the current
    period (calendar day, ISO week, month or year containing now).
    """
    with operation(db, "Error generating budget recommendations", get_request_id(request)):
        budgets = BudgetRepository(db).all_budgets(user_id)
        if not budgets:
            raise NotFoundError("No budgets found for the user.")

        expenses = [
            LedgerEntry(type=t.type, amount=t.amount, category=t.category, date=t.date)
            for t in TransactionRepository(db).find_transactions(user_id, type="expense")
        ]
        now = utcnow()

        recommendations = []
        for budget in budgets:
            usage = evaluate_budget(budget.category, budget.duration, budget.amount, expenses, now)
            recommendations.append(
                BudgetRecommendationOut(
                    budget_id=budget.id,
                    category=usage.category,
                    duration=usage.duration,
                    budget_amount=usage.budget_amount,
                    spent=usage.spent,
                    percentage=usage.percentage,
                    recommendation=usage.recommendation,
                    message=usage.message,
                    period_start=usage.period_start,
                    period_end=usage.period_end,
                )
            )

        return Envelope(msg="Budget recommendations generated successfully", data=recommendations)
