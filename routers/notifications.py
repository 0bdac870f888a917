# routers/notifications.py
"""
Notification API.

GET  /api/notifications: the caller's notifications, newest first.
POST /api/notifications/{id}/read: mark one as read.
POST /api/notifications/read-all: mark all of the caller's as read.
POST /api/notifications/payment-due: send rent due notices for leases in scope.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import get_current_actor
from database import get_session
from schemas.notification import (
     MarkAllReadResponse,
     NotificationListResponse,
     NotificationResponse,
     PaymentDueSweepResponse,
)
from services.access_scope import Actor
from services.clock import utcnow
from services.notification_service import NotificationService
from services.portfolio_service import PortfolioService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse, summary="List my notifications")
def list_notifications(
     unread_only: bool = Query(False),
     limit: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     notifications = NotificationService.list_for(db, actor, unread_only=unread_only, limit=limit)
     return NotificationListResponse(
          notifications=[NotificationResponse.model_validate(n) for n in notifications],
          unread=NotificationService.unread_count(db, actor),
     )


@router.post("/read-all", response_model=MarkAllReadResponse, summary="Mark all notifications read")
def mark_all_read(
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return MarkAllReadResponse(updated=NotificationService.mark_all_read(db, actor))


@router.post("/{notification_id}/read", response_model=NotificationResponse, summary="Mark a notification read")
def mark_read(
     notification_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return NotificationService.mark_read(db, actor, notification_id)


@router.post("/payment-due", response_model=PaymentDueSweepResponse, summary="Send rent due notices")
def send_payment_due_notices(
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """Normally run by a scheduled job; restricted managers reach only their units."""
     as_of = as_of or utcnow().date()
     sent = PortfolioService(db).send_payment_due_notices(actor, as_of)
     return PaymentDueSweepResponse(
          as_of=as_of,
          sent=len(sent),
          notifications=[NotificationResponse.model_validate(n) for n in sent],
     )
