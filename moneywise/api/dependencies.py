"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from moneywise.config import settings
from moneywise.domain.categories import CategoryRegistry
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.clients.notifier import NotificationClient
from moneywise.infrastructure.database.repositories import CategoryRepository
from moneywise.infrastructure.database.session import get_db

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """
    Resolve the caller from a bearer JWT issued by the auth service.

    The user id is read from the `sub` claim, falling back to `userId`.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user_id = payload.get("sub") or payload.get("userId")
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return str(user_id)


def get_currency_client() -> CurrencyClient:
    """Provide exchange rate client instance"""
    return CurrencyClient()


def get_notification_client() -> NotificationClient:
    """Provide email notification client instance"""
    return NotificationClient()


def get_category_registry(db: Session = Depends(get_db)) -> CategoryRegistry:
    """Provide the category registry backed by the request's session"""
    return CategoryRegistry(CategoryRepository(db))
