"""Data access layer for finance entities, always scoped to the owning user"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from moneywise.infrastructure.database.models import (
    Budget,
    Category,
    Goal,
    GoalTransfer,
    MoneyTransaction,
    Notification,
    Report,
)
from moneywise.domain.models import SAVINGS_GOAL_NAME


class GoalRepository:
    """Repository for savings goals"""

    def __init__(self, db: Session):
        self.db = db

    def create_goal(
        self,
        user_id: str,
        name: str,
        target_amount: float,
        deadline: Optional[datetime] = None,
    ) -> Goal:
        db_goal = Goal(
            user_id=user_id,
            name=name,
            target_amount=target_amount,
            current_amount=0.0,
            deadline=deadline,
        )
        self.db.add(db_goal)
        self.db.flush()
        return db_goal

    def list_goals(self, user_id: str) -> List[Goal]:
        return (
            self.db.query(Goal)
            .filter(Goal.user_id == user_id)
            .order_by(Goal.created_at.asc())
            .all()
        )

    def get_goal(self, user_id: str, goal_id: uuid.UUID, for_update: bool = False) -> Optional[Goal]:
        """Fetch a goal owned by user; optionally lock the row until commit"""
        query = self.db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_savings_goal(self, user_id: str, for_update: bool = False) -> Optional[Goal]:
        query = self.db.query(Goal).filter(Goal.user_id == user_id, Goal.name == SAVINGS_GOAL_NAME)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def delete_goal(self, goal: Goal) -> None:
        self.db.delete(goal)
        self.db.flush()


class TransferRepository:
    """Repository for goal funding transfers"""

    def __init__(self, db: Session):
        self.db = db

    def record_transfer(
        self,
        user_id: str,
        savings_goal_id: uuid.UUID,
        target_goal_id: uuid.UUID,
        requested_amount: float,
        currency: str,
        converted_amount: float,
        applied_amount: float,
        transfer_token: Optional[str] = None,
    ) -> GoalTransfer:
        db_transfer = GoalTransfer(
            user_id=user_id,
            transfer_token=transfer_token,
            savings_goal_id=savings_goal_id,
            target_goal_id=target_goal_id,
            requested_amount=requested_amount,
            currency=currency,
            converted_amount=converted_amount,
            applied_amount=applied_amount,
        )
        self.db.add(db_transfer)
        self.db.flush()
        return db_transfer

    def get_by_token(self, user_id: str, transfer_token: str) -> Optional[GoalTransfer]:
        return (
            self.db.query(GoalTransfer)
            .filter(GoalTransfer.user_id == user_id, GoalTransfer.transfer_token == transfer_token)
            .first()
        )


class BudgetRepository:
    """Repository for category budgets"""

    def __init__(self, db: Session):
        self.db = db

    def create_budget(
        self,
        user_id: str,
        category: str,
        amount: float,
        duration: str,
        currency: str,
    ) -> Budget:
        db_budget = Budget(
            user_id=user_id,
            category=category,
            amount=amount,
            duration=duration,
            currency=currency,
        )
        self.db.add(db_budget)
        self.db.flush()
        return db_budget

    def get_budget(self, user_id: str, budget_id: uuid.UUID) -> Optional[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.id == budget_id, Budget.user_id == user_id)
            .first()
        )

    def get_by_category(self, user_id: str, category: str) -> Optional[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id, Budget.category == category)
            .first()
        )

    def list_budgets(
        self,
        user_id: str,
        category: Optional[str] = None,
        duration: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Budget], int]:
        """Paginated budgets for user; returns (page items, total count)"""
        query = self.db.query(Budget).filter(Budget.user_id == user_id)
        if category:
            query = query.filter(Budget.category == category)
        if duration:
            query = query.filter(Budget.duration == duration)

        total = query.count()
        items = (
            query.order_by(Budget.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def all_budgets(self, user_id: str) -> List[Budget]:
        return self.db.query(Budget).filter(Budget.user_id == user_id).all()

    def delete_budget(self, budget: Budget) -> None:
        self.db.delete(budget)
        self.db.flush()


class TransactionRepository:
    """Repository for income/expense transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        user_id: str,
        type: str,
        amount: float,
        category: str,
        date: datetime,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
        recurring: Optional[dict] = None,
    ) -> MoneyTransaction:
        db_transaction = MoneyTransaction(
            user_id=user_id,
            type=type,
            amount=amount,
            category=category,
            date=date,
            description=description,
            tags=tags or [],
            recurring=recurring,
        )
        self.db.add(db_transaction)
        self.db.flush()
        return db_transaction

    def get_transaction(self, user_id: str, transaction_id: uuid.UUID) -> Optional[MoneyTransaction]:
        return (
            self.db.query(MoneyTransaction)
            .filter(MoneyTransaction.id == transaction_id, MoneyTransaction.user_id == user_id)
            .first()
        )

    def find_transactions(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category: Optional[str] = None,
        type: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> List[MoneyTransaction]:
        """Transactions for user, oldest first, narrowed by the given filters"""
        query = self.db.query(MoneyTransaction).filter(MoneyTransaction.user_id == user_id)
        if start_date:
            query = query.filter(MoneyTransaction.date >= start_date)
        if end_date:
            query = query.filter(MoneyTransaction.date <= end_date)
        if category:
            query = query.filter(MoneyTransaction.category == category)
        if type:
            query = query.filter(MoneyTransaction.type == type)

        transactions = query.order_by(MoneyTransaction.date.asc()).all()

        # JSON containment differs per backend, so tags are matched in Python
        if tags:
            wanted = set(tags)
            transactions = [t for t in transactions if wanted.intersection(t.tags or [])]
        return transactions

    def delete_transaction(self, transaction: MoneyTransaction) -> None:
        self.db.delete(transaction)
        self.db.flush()


class CategoryRepository:
    """Repository for the global category registry"""

    def __init__(self, db: Session):
        self.db = db

    def create_category(self, name: str, type: str, active: bool = True) -> Category:
        db_category = Category(name=name, type=type, active=active)
        self.db.add(db_category)
        self.db.flush()
        return db_category

    def list_categories(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.name.asc()).all()

    def get_category(self, category_id: uuid.UUID) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    def delete_category(self, category: Category) -> None:
        self.db.delete(category)
        self.db.flush()


class NotificationRepository:
    """Repository for in-app notifications"""

    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, user_id: str, title: str, message: str) -> Notification:
        db_notification = Notification(user_id=user_id, title=title, message=message)
        self.db.add(db_notification)
        self.db.flush()
        return db_notification

    def list_notifications(self, user_id: str) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .all()
        )

    def get_notification(self, user_id: str, notification_id: uuid.UUID) -> Optional[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )


class ReportRepository:
    """Repository for generated report snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def create_report(self, user_id: str, report_type: str, data: Dict[str, Any]) -> Report:
        db_report = Report(user_id=user_id, report_type=report_type, data=data)
        self.db.add(db_report)
        self.db.flush()
        return db_report

    def get_reports_by_user(self, user_id: str, limit: int = 10) -> List[Report]:
        """Fetch recent reports for a user"""
        return (
            self.db.query(Report)
            .filter(Report.user_id == user_id)
            .order_by(Report.created_at.desc())
            .limit(limit)
            .all()
        )
