"""Savings goal endpoints - CRUD, statistics and Savings Goal funding"""

import time
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from moneywise.api.dependencies import (
    get_current_user_id,
    get_currency_client,
    get_notification_client,
    get_request_id,
)
from moneywise.api.errors import OperationFailed, operation, parse_id, unique_or_conflict
from moneywise.api.v1.schemas import (
    Envelope,
    FundGoalRequest,
    FundingResult,
    GoalCreate,
    GoalOut,
    GoalStatsOut,
    GoalUpdate,
    MessageResponse,
)
from moneywise.config import settings
from moneywise.domain.exceptions import (
    ConflictError,
    DomainException,
    InsufficientFundsError,
    NotFoundError,
    NotificationDeliveryError,
    ValidationError,
)
from moneywise.domain.ledger import (
    GOAL_COMPLETED_SUBJECT,
    apply_funding,
    check_sufficient_funds,
    ensure_positive_amount,
    goal_completed_message,
    goal_status,
    money,
    summarize_goals,
    validate_goal_amounts,
)
from moneywise.domain.models import GOAL_COMPLETED, SAVINGS_GOAL_NAME, GoalBalance
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.clients.notifier import NotificationClient
from moneywise.infrastructure.database.models import Goal, GoalTransfer
from moneywise.infrastructure.database.repositories import (
    GoalRepository,
    NotificationRepository,
    TransferRepository,
)
from moneywise.infrastructure.database.session import get_db
from moneywise.infrastructure.observability.logging import log_transfer
from moneywise.infrastructure.observability.metrics import record_goal_completed, record_transfer

router = APIRouter()


def _balance(goal: Goal) -> GoalBalance:
    return GoalBalance(
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        status=goal.status,
    )


async def send_goal_completed_email(client: NotificationClient, user_id: str, goal_name: str) -> None:
    """Background task: email the user that a goal is complete"""
    try:
        await client.send_email(user_id, GOAL_COMPLETED_SUBJECT, goal_completed_message(goal_name))
    except NotificationDeliveryError as e:
        logging.error(f"Goal completion email failed: {e}", extra={"user_id": user_id})


def _announce_completion(
    db: Session,
    background_tasks: BackgroundTasks,
    notification_client: NotificationClient,
    user_id: str,
    goal: Goal,
) -> None:
    """Store the in-app notification now and queue the email for after the response"""
    NotificationRepository(db).create_notification(
        user_id=user_id,
        title=GOAL_COMPLETED_SUBJECT,
        message=goal_completed_message(goal.name),
    )
    background_tasks.add_task(send_goal_completed_email, notification_client, user_id, goal.name)


@router.post("/goals", response_model=Envelope[GoalOut])
async def create_goal(
    body: GoalCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    currency_client: CurrencyClient = Depends(get_currency_client),
):
    """Create a goal; the target is stored in base currency"""
    with operation(db, "Error creating goal", get_request_id(request)):
        target_amount = await currency_client.to_base(body.target_amount, body.currency)
        validate_goal_amounts(target_amount, 0.0)

        goal_repo = GoalRepository(db)
        if body.name == SAVINGS_GOAL_NAME and goal_repo.get_savings_goal(user_id):
            raise ConflictError("Savings Goal already exists")

        with unique_or_conflict(db, "Savings Goal already exists"):
            goal = goal_repo.create_goal(
                user_id=user_id,
                name=body.name,
                target_amount=target_amount,
                deadline=body.deadline,
            )
            db.commit()

        return Envelope(msg="Goal created successfully!", data=GoalOut.model_validate(goal))


@router.get("/goals", response_model=Envelope[list[GoalOut]])
def list_goals(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Something went wrong while retrieving goals", get_request_id(request)):
        goals = GoalRepository(db).list_goals(user_id)
        if not goals:
            raise NotFoundError("No goals found for this user.", details={"data": []})

        return Envelope(
            msg="User goals retrieved successfully",
            data=[GoalOut.model_validate(g) for g in goals],
        )


@router.get("/goals/stats", response_model=Envelope[GoalStatsOut])
def get_goal_stats(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Totals and completion rate over the caller's goals"""
    with operation(db, "Error fetching goal stats", get_request_id(request)):
        goals = GoalRepository(db).list_goals(user_id)
        stats = summarize_goals(_balance(g) for g in goals)

        return Envelope(
            msg="Goal statistics retrieved successfully",
            data=GoalStatsOut.model_validate(stats),
        )


@router.get("/goals/{goal_id}", response_model=Envelope[GoalOut])
def get_goal(
    goal_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error retrieving goal", get_request_id(request)):
        goal = GoalRepository(db).get_goal(user_id, parse_id(goal_id, "goal"))
        if not goal:
            raise NotFoundError("Goal not found")

        return Envelope(msg="Goal retrieved successfully", data=GoalOut.model_validate(goal))


@router.patch("/goals/{goal_id}", response_model=Envelope[GoalOut])
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    currency_client: CurrencyClient = Depends(get_currency_client),
    notification_client: NotificationClient = Depends(get_notification_client),
):
    """
    Partially update a goal.

    Amounts sent with `currency` are converted to base currency. Status is
    recomputed from the resulting amounts, so editing a goal up to its
    target completes it and editing it below reopens it.
    """
    with operation(db, "Error updating goal", get_request_id(request)):
        goal_repo = GoalRepository(db)
        goal = goal_repo.get_goal(user_id, parse_id(goal_id, "goal"))
        if not goal:
            raise NotFoundError("Goal not found")

        changes = body.model_dump(exclude_unset=True)

        if changes.get("name") == SAVINGS_GOAL_NAME:
            savings = goal_repo.get_savings_goal(user_id)
            if savings is not None and savings.id != goal.id:
                raise ConflictError("Savings Goal already exists")

        target_amount = goal.target_amount
        if body.target_amount is not None:
            target_amount = await currency_client.to_base(body.target_amount, body.currency)
        current_amount = goal.current_amount
        if body.current_amount is not None:
            current_amount = await currency_client.to_base(body.current_amount, body.currency)
        validate_goal_amounts(target_amount, current_amount)

        was_completed = goal.status == GOAL_COMPLETED

        if "name" in changes:
            goal.name = body.name
        if "deadline" in changes:
            goal.deadline = body.deadline
        goal.target_amount = target_amount
        goal.current_amount = current_amount
        goal.status = goal_status(current_amount, target_amount)

        completed_now = goal.status == GOAL_COMPLETED and not was_completed
        if completed_now:
            _announce_completion(db, background_tasks, notification_client, user_id, goal)

        with unique_or_conflict(db, "Savings Goal already exists"):
            db.commit()
        if completed_now:
            record_goal_completed()

        return Envelope(msg="Goal updated successfully", data=GoalOut.model_validate(goal))


@router.delete("/goals/{goal_id}", response_model=MessageResponse)
def delete_goal(
    goal_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error deleting goal", get_request_id(request)):
        goal_repo = GoalRepository(db)
        goal = goal_repo.get_goal(user_id, parse_id(goal_id, "goal"))
        if not goal:
            raise NotFoundError("Goal not found")

        goal_repo.delete_goal(goal)
        db.commit()

        return MessageResponse(msg="Goal deleted successfully")


def _funding_result(
    transfer: GoalTransfer,
    funded_goal: Goal,
    savings_goal: Goal,
) -> FundingResult:
    return FundingResult(
        funded_goal=GoalOut.model_validate(funded_goal),
        savings_goal=GoalOut.model_validate(savings_goal),
        converted_amount=transfer.converted_amount,
        applied_amount=transfer.applied_amount,
        base_currency=settings.base_currency,
        transfer_id=transfer.id,
    )


def _replay_transfer(
    goal_repo: GoalRepository,
    user_id: str,
    transfer: GoalTransfer,
    target_id,
    amount: float,
    currency: str,
) -> FundingResult:
    """Answer a retried request with the result of the transfer it already made"""
    if (
        transfer.target_goal_id != target_id
        or transfer.requested_amount != money(amount)
        or transfer.currency != currency
    ):
        raise ConflictError("Transfer token already used for a different request")

    funded_goal = goal_repo.get_goal(user_id, transfer.target_goal_id)
    savings_goal = goal_repo.get_goal(user_id, transfer.savings_goal_id)
    if funded_goal is None or savings_goal is None:
        raise NotFoundError("Goal to fund not found")
    return _funding_result(transfer, funded_goal, savings_goal)


@router.patch("/goals/{goal_id}/fund", response_model=Envelope[FundingResult])
async def fund_goal(
    goal_id: str,
    body: FundGoalRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    currency_client: CurrencyClient = Depends(get_currency_client),
    notification_client: NotificationClient = Depends(get_notification_client),
):
    """
    Move money from the caller's Savings Goal into another goal.

    Flow:
    1. Validate amount, replay if the transfer token was already used
    2. Convert the amount to base currency
    3. Lock the Savings Goal and check its balance
    4. Lock the target goal and apply the transfer
    5. Record the transfer and any completion notification
    6. Commit everything in one transaction, email after the response
    """
    start_time = time.time()
    request_id = get_request_id(request)
    base_currency = settings.base_currency
    currency = (body.currency or base_currency).upper()

    try:
        with operation(db, "Error funding goal", request_id):
            target_id = parse_id(goal_id, "goal")
            ensure_positive_amount(body.amount)

            goal_repo = GoalRepository(db)
            transfer_repo = TransferRepository(db)

            if body.transfer_token:
                previous = transfer_repo.get_by_token(user_id, body.transfer_token)
                if previous is not None:
                    result = _replay_transfer(goal_repo, user_id, previous, target_id, body.amount, currency)
                    record_transfer("replayed")
                    return Envelope(msg="Goal funded successfully", data=result)

            converted_amount = await currency_client.to_base(body.amount, currency)

            savings_goal = goal_repo.get_savings_goal(user_id, for_update=True)
            if not savings_goal:
                raise NotFoundError("Savings Goal not found")
            if savings_goal.id == target_id:
                raise ValidationError("Cannot fund the Savings Goal from itself")

            check_sufficient_funds(_balance(savings_goal), converted_amount, base_currency)

            target_goal = goal_repo.get_goal(user_id, target_id, for_update=True)
            if not target_goal:
                raise NotFoundError("Goal to fund not found")

            outcome = apply_funding(_balance(savings_goal), _balance(target_goal), converted_amount)

            target_goal.current_amount = outcome.target.current_amount
            target_goal.status = outcome.target.status
            savings_goal.current_amount = outcome.savings.current_amount
            savings_goal.status = outcome.savings.status

            transfer = transfer_repo.record_transfer(
                user_id=user_id,
                savings_goal_id=savings_goal.id,
                target_goal_id=target_goal.id,
                requested_amount=money(body.amount),
                currency=currency,
                converted_amount=outcome.converted_amount,
                applied_amount=outcome.applied_amount,
                transfer_token=body.transfer_token,
            )

            if outcome.target_completed:
                _announce_completion(db, background_tasks, notification_client, user_id, target_goal)

            # Another request may have committed the same transfer token first
            with unique_or_conflict(db, "Transfer with this token is already being processed"):
                db.commit()

            duration_ms = (time.time() - start_time) * 1000
            record_transfer("funded", outcome.target_completed)
            log_transfer(
                request_id,
                user_id,
                str(target_goal.id),
                outcome.converted_amount,
                outcome.applied_amount,
                outcome.target_completed,
                duration_ms,
            )

            return Envelope(
                msg="Goal funded successfully",
                data=_funding_result(transfer, target_goal, savings_goal),
            )

    except InsufficientFundsError:
        record_transfer("insufficient_funds")
        raise
    except DomainException:
        record_transfer("rejected")
        raise
    except OperationFailed:
        record_transfer("failed")
        raise
