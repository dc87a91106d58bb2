"""SQLAlchemy ORM models for goals, budgets, transactions and reports"""

import uuid
from sqlalchemy import (
    Column,
    String,
    Boolean,
    Float,
    DateTime,
    Text,
    JSON,
    Uuid,
    UniqueConstraint,
    Index,
    text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from moneywise.domain.models import GOAL_IN_PROGRESS, SAVINGS_GOAL_NAME

_SAVINGS_GOAL_ROW = text(f"name = '{SAVINGS_GOAL_NAME}'")

Base = declarative_base()


class Goal(Base):
    """Savings goal, amounts in base currency"""

    __tablename__ = "goal"
    # At most one Savings Goal per user
    __table_args__ = (
        Index(
            "uq_goal_user_savings",
            "user_id",
            unique=True,
            postgresql_where=_SAVINGS_GOAL_ROW,
            sqlite_where=_SAVINGS_GOAL_ROW,
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, nullable=False, default=0.0)
    deadline = Column(DateTime, nullable=True)
    status = Column(Text, nullable=False, default=GOAL_IN_PROGRESS)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())


class GoalTransfer(Base):
    """Ledger record of a Savings Goal -> goal funding transfer"""

    __tablename__ = "goal_transfer"
    __table_args__ = (UniqueConstraint("user_id", "transfer_token", name="uq_goal_transfer_token"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    transfer_token = Column(Text, nullable=True)
    savings_goal_id = Column(Uuid, nullable=False)
    target_goal_id = Column(Uuid, nullable=False)
    requested_amount = Column(Float, nullable=False)
    currency = Column(Text, nullable=False)
    converted_amount = Column(Float, nullable=False)
    applied_amount = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Budget(Base):
    """Spending limit for one category over a recurring period"""

    __tablename__ = "budget"
    __table_args__ = (UniqueConstraint("user_id", "category", name="uq_budget_user_category"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    category = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    duration = Column(Text, nullable=False, default="monthly")
    currency = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class MoneyTransaction(Base):
    """Income or expense entry, amount in base currency"""

    __tablename__ = "money_transaction"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)
    recurring = Column(JSON, nullable=True)  # {"isRecurring": bool, "frequency": duration|null}
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Category(Base):
    """Global category registry entry"""

    __tablename__ = "category"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    type = Column(Text, nullable=False)
    active = Column(Boolean, nullable=False, default=True)


class Notification(Base):
    """In-app notification for a user"""

    __tablename__ = "notification"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Report(Base):
    """Snapshot of an aggregated report at generation time"""

    __tablename__ = "report"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    report_type = Column(Text, nullable=False)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
