"""Pytest fixtures for testing"""

import pytest
from typing import Generator, List, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from moneywise.api.main import create_app
from moneywise.api.dependencies import (
    get_current_user_id,
    get_currency_client,
    get_notification_client,
)
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.database.models import Base, Category
from moneywise.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# One LKR buys 0.5 USD, so 10 USD converts to 20 LKR
TEST_RATES = {"LKR": 1.0, "USD": 0.5, "EUR": 0.25}


class RecordingNotifier:
    """Notification client double that keeps sent emails in memory"""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    async def send_email(self, user_id: str, subject: str, message: str) -> None:
        self.sent.append((user_id, subject, message))


def make_currency_client() -> CurrencyClient:
    """Currency client with rates preloaded so no HTTP call is made"""
    client = CurrencyClient(base_currency="LKR")
    client._rates = dict(TEST_RATES)
    return client


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seed_categories(db: Session) -> None:
    """Registry with two expense categories, one income and one inactive"""
    db.add_all([
        Category(name="Food", type="expense", active=True),
        Category(name="Transport", type="expense", active=True),
        Category(name="Salary", type="income", active=True),
        Category(name="Legacy", type="expense", active=False),
    ])
    db.commit()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def identity() -> dict:
    """Caller identity; tests switch users by changing user_id"""
    return {"user_id": "user_1"}


@pytest.fixture
def client(db: Session, seed_categories, notifier: RecordingNotifier, identity: dict) -> TestClient:
    """Create FastAPI test client with test database and stubbed collaborators"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = lambda: identity["user_id"]
    app.dependency_overrides[get_currency_client] = make_currency_client
    app.dependency_overrides[get_notification_client] = lambda: notifier
    return TestClient(app)
