"""In-app notification endpoints"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from moneywise.api.dependencies import get_current_user_id, get_request_id
from moneywise.api.errors import operation, parse_id
from moneywise.api.v1.schemas import Envelope, NotificationOut
from moneywise.domain.exceptions import NotFoundError
from moneywise.infrastructure.database.repositories import NotificationRepository
from moneywise.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/notifications", response_model=Envelope[list[NotificationOut]])
def list_notifications(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Caller's notifications, newest first"""
    with operation(db, "Error fetching notifications", get_request_id(request)):
        notifications = NotificationRepository(db).list_notifications(user_id)
        return Envelope(
            msg="Notifications fetched successfully",
            data=[NotificationOut.model_validate(n) for n in notifications],
        )


@router.patch("/notifications/{notification_id}/read", response_model=Envelope[NotificationOut])
def mark_notification_read(
    notification_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with operation(db, "Error updating notification", get_request_id(request)):
        notification = NotificationRepository(db).get_notification(
            user_id, parse_id(notification_id, "notification")
        )
        if not notification:
            raise NotFoundError("Notification not found")

        notification.read = True
        db.commit()

        return Envelope(
            msg="Notification marked as read",
            data=NotificationOut.model_validate(notification),
        )
