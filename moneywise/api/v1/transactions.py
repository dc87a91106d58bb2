"""Transaction endpoints - income and expense entries"""

from datetime import datetime
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from moneywise.api.dependencies import (
    get_category_registry,
    get_current_user_id,
    get_currency_client,
    get_request_id,
)
from moneywise.api.errors import operation, parse_id
from moneywise.api.v1.schemas import (
    Envelope,
    MessageResponse,
    RecurringInfo,
    TransactionCreate,
    TransactionOut,
    TransactionUpdate,
)
from moneywise.domain.categories import CategoryRegistry
from moneywise.domain.exceptions import NotFoundError, ValidationError
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.database.repositories import TransactionRepository
from moneywise.infrastructure.database.session import get_db
from moneywise.utils.date_utils import to_naive_utc, utcnow

router = APIRouter()


def _split_tags(tags: Optional[List[str]]) -> List[str]:
    """Accept both ?tags=a&tags=b and ?tags=a,b"""
    if not tags:
        return []
    return [t.strip() for value in tags for t in value.split(",") if t.strip()]


def _recurring(info: Optional[RecurringInfo]) -> Optional[dict]:
    return info.model_dump(by_alias=True) if info is not None else None


def _tag_key(transaction) -> tuple:
    """Order by the transaction's tags, alphabetised and case-folded, then by date"""
    return (sorted(tag.lower() for tag in transaction.tags or []), transaction.date)


@router.post("/transactions", status_code=201, response_model=Envelope[TransactionOut])
async def create_transaction(
    body: TransactionCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    categories: CategoryRegistry = Depends(get_category_registry),
    currency_client: CurrencyClient = Depends(get_currency_client),
):
    """Record an income or expense; the amount is stored in base currency"""
    with operation(db, "Error adding transaction", get_request_id(request)):
        categories.require_active(body.category, body.type)
        amount = await currency_client.to_base(body.amount, body.currency)

        transaction = TransactionRepository(db).create_transaction(
            user_id=user_id,
            type=body.type,
            amount=amount,
            category=body.category,
            date=body.date or utcnow(),
            description=body.description,
            tags=body.tags,
            recurring=_recurring(body.recurring),
        )
        db.commit()

        return Envelope(msg="Transaction added!", data=TransactionOut.model_validate(transaction))


@router.get("/transactions", response_model=Envelope[list[TransactionOut]])
def list_transactions(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error retrieving transactions", get_request_id(request)):
        transactions = TransactionRepository(db).find_transactions(user_id)
        return Envelope(
            msg="Transactions retrieved successfully",
            data=[TransactionOut.model_validate(t) for t in transactions],
        )


@router.get("/transactions/filter", response_model=Envelope[list[TransactionOut]])
def filter_transactions(
    request: Request,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    category: Optional[str] = None,
    type: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Narrow the caller's transactions by date range, category, type or tags"""
    with operation(db, "Error filtering transactions", get_request_id(request)):
        if type is not None and type not in ("income", "expense"):
            raise ValidationError("Invalid transaction type. Must be 'income' or 'expense'")

        transactions = TransactionRepository(db).find_transactions(
            user_id,
            start_date=to_naive_utc(start_date),
            end_date=to_naive_utc(end_date),
            category=category,
            type=type,
            tags=_split_tags(tags),
        )
        return Envelope(
            msg="Transactions retrieved successfully",
            data=[TransactionOut.model_validate(t) for t in transactions],
        )


@router.get("/transactions/sort-by-tags", response_model=Envelope[list[TransactionOut]])
def sort_transactions_by_tags(
    request: Request,
    tags: Optional[List[str]] = Query(None),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Transactions carrying any of the given tags (all when none given), ordered by tag"""
    with operation(db, "Error sorting transactions by tags", get_request_id(request)):
        transactions = TransactionRepository(db).find_transactions(user_id, tags=_split_tags(tags))
        transactions.sort(key=_tag_key, reverse=sort_order == "desc")
        return Envelope(
            msg="Transactions retrieved successfully",
            data=[TransactionOut.model_validate(t) for t in transactions],
        )


@router.get("/transactions/{transaction_id}", response_model=Envelope[TransactionOut])
def get_transaction(
    transaction_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error retrieving transaction", get_request_id(request)):
        transaction = TransactionRepository(db).get_transaction(
            user_id, parse_id(transaction_id, "transaction")
        )
        if not transaction:
            raise NotFoundError("Transaction not found")

        return Envelope(
            msg="Transaction retrieved successfully",
            data=TransactionOut.model_validate(transaction),
        )


@router.patch("/transactions/{transaction_id}", response_model=Envelope[TransactionOut])
async def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    categories: CategoryRegistry = Depends(get_category_registry),
    currency_client: CurrencyClient = Depends(get_currency_client),
):
    with operation(db, "Error updating transaction", get_request_id(request)):
        transaction = TransactionRepository(db).get_transaction(
            user_id, parse_id(transaction_id, "transaction")
        )
        if not transaction:
            raise NotFoundError("Transaction not found")

        new_type = body.type or transaction.type
        new_category = body.category or transaction.category
        if body.type is not None or body.category is not None:
            categories.require_active(new_category, new_type)

        if body.amount is not None:
            transaction.amount = await currency_client.to_base(body.amount, body.currency)
        transaction.type = new_type
        transaction.category = new_category
        if body.description is not None:
            transaction.description = body.description
        if body.date is not None:
            transaction.date = body.date
        if body.tags is not None:
            transaction.tags = list(body.tags)
        if body.recurring is not None:
            transaction.recurring = _recurring(body.recurring)

        db.commit()

        return Envelope(
            msg="Transaction updated successfully",
            data=TransactionOut.model_validate(transaction),
        )


@router.delete("/transactions/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error deleting transaction", get_request_id(request)):
        transaction_repo = TransactionRepository(db)
        transaction = transaction_repo.get_transaction(user_id, parse_id(transaction_id, "transaction"))
        if not transaction:
            raise NotFoundError("Transaction not found")

        transaction_repo.delete_transaction(transaction)
        db.commit()

        return MessageResponse(msg="Transaction deleted successfully")
