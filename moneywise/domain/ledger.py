"""Goal ledger - lifecycle and funding rules for savings goals"""

import math
from typing import Iterable

from moneywise.domain.models import (
    GOAL_COMPLETED,
    GOAL_IN_PROGRESS,
    FundingOutcome,
    GoalBalance,
    GoalStats,
)
from moneywise.domain.exceptions import InsufficientFundsError, ValidationError


def money(value: float) -> float:
    """Round a monetary amount to 2 decimal places"""
    return round(float(value), 2)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)"""
    return int(math.floor(value + 0.5))


def goal_status(current_amount: float, target_amount: float) -> str:
    """A goal is Completed exactly when its balance equals its target"""
    return GOAL_COMPLETED if money(current_amount) == money(target_amount) else GOAL_IN_PROGRESS


def validate_goal_amounts(target_amount: float, current_amount: float) -> None:
    """
    Enforce 0 <= currentAmount <= targetAmount.

    Raises:
        ValidationError: If either bound is violated
    """
    if target_amount <= 0:
        raise ValidationError("targetAmount must be greater than 0")
    if current_amount < 0:
        raise ValidationError("currentAmount cannot be negative")
    if money(current_amount) > money(target_amount):
        raise ValidationError("currentAmount cannot exceed targetAmount")


def ensure_positive_amount(amount: float) -> None:
    if amount is None or amount <= 0:
        raise ValidationError("Invalid amount. Must be greater than 0")


def check_sufficient_funds(savings: GoalBalance, converted_amount: float, base_currency: str) -> None:
    """
    Reject transfers the Savings Goal cannot cover.

    Raises:
        InsufficientFundsError: With the balance, the requested amount and
            the base currency as response details
    """
    if money(converted_amount) > money(savings.current_amount):
        raise InsufficientFundsError(
            "Insufficient funds in Savings Goal",
            details={
                "savingsGoalCurrentAmount": savings.current_amount,
                "requestedAmount": converted_amount,
                "baseCurrency": base_currency,
            },
        )


def apply_funding(savings: GoalBalance, target: GoalBalance, converted_amount: float) -> FundingOutcome:
    """
    Move `converted_amount` (base currency) from the Savings Goal into `target`.

    Rules:
    - Target gains at most what it still needs, so it caps at targetAmount
    - Savings loses exactly what the target gained, so the sum of both
      balances is unchanged, and it never drops below 0
    - Statuses are recomputed from the new balances

    The inputs are not mutated; new balances are returned.

    Raises:
        ValidationError: Non-positive amount or target already completed
    """
    ensure_positive_amount(converted_amount)

    if target.status == GOAL_COMPLETED or money(target.current_amount) >= money(target.target_amount):
        raise ValidationError("Goal is already completed")

    converted = money(converted_amount)
    remaining = money(target.target_amount - target.current_amount)
    applied = min(converted, remaining)

    target_current = money(target.current_amount + applied)
    savings_current = max(money(savings.current_amount - applied), 0.0)

    new_target = GoalBalance(
        name=target.name,
        target_amount=target.target_amount,
        current_amount=target_current,
        status=goal_status(target_current, target.target_amount),
    )
    new_savings = GoalBalance(
        name=savings.name,
        target_amount=savings.target_amount,
        current_amount=savings_current,
        status=goal_status(savings_current, savings.target_amount),
    )

    return FundingOutcome(
        target=new_target,
        savings=new_savings,
        converted_amount=converted,
        applied_amount=applied,
        target_completed=new_target.status == GOAL_COMPLETED,
    )


def goal_progress(current_amount: float, target_amount: float) -> int:
    """Progress percentage, capped at 100"""
    if target_amount <= 0:
        return 0
    return min(100, round_half_up(current_amount / target_amount * 100))


def summarize_goals(goals: Iterable[GoalBalance]) -> GoalStats:
    goals = list(goals)
    total = len(goals)
    completed = sum(1 for g in goals if g.status == GOAL_COMPLETED)

    return GoalStats(
        total_goals=total,
        total_target_amount=money(sum(g.target_amount for g in goals)),
        total_current_amount=money(sum(g.current_amount for g in goals)),
        completed_goals=completed,
        completion_rate=(completed / total) * 100 if total > 0 else 0,
    )


GOAL_COMPLETED_SUBJECT = "Goal Completed!"


def goal_completed_message(goal_name: str) -> str:
    return f"Congratulations! You have successfully completed your goal: <strong>{goal_name}</strong>."
