# services/notification_service.py
"""
Notification Service - in-app notices for tenants.

Written by the payment ledger when a payment completes or fails, and by
the portfolio payment-due sweep for unpaid rent periods. Each user reads
and acknowledges only their own notifications.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import false
from sqlalchemy.orm import Session

from exceptions import NotFoundError
from models import Notification, NotificationPriority, NotificationType, Payment, PaymentStatus
from services.access_scope import Actor
from services.clock import utcnow

logger = logging.getLogger(__name__)

PAYMENT_OUTCOMES = {
     PaymentStatus.COMPLETED: (NotificationType.PAYMENT_RECEIVED, NotificationPriority.NORMAL, "Payment received"),
     PaymentStatus.FAILED: (NotificationType.PAYMENT_FAILED, NotificationPriority.HIGH, "Payment failed"),
}


class NotificationService:
     """Service class for creating and reading notifications."""

     @staticmethod
     def notify(
          db: Session,
          recipient_id: int,
          type: NotificationType,
          title: str,
          message: str,
          priority: NotificationPriority = NotificationPriority.NORMAL,
          payment_id: Optional[int] = None,
          lease_id: Optional[int] = None,
          period: Optional[Tuple[int, int]] = None,
          now: Optional[datetime] = None,
     ) -> Notification:
          year, month = period or (None, None)
          notification = Notification(
               recipient_id=recipient_id,
               type=type,
               priority=priority,
               title=title,
               message=message,
               payment_id=payment_id,
               lease_id=lease_id,
               period_year=year,
               period_month=month,
               is_read=False,
               created_at=now or utcnow(),
          )
          db.add(notification)
          return notification

     @staticmethod
     def payment_outcome(db: Session, payment: Payment, now: Optional[datetime] = None) -> Optional[Notification]:
          """
          Tell the tenant that a payment completed or failed.

          Returns None for any other status.
          """
          outcome = PAYMENT_OUTCOMES.get(payment.status)
          if outcome is None:
               return None
          type, priority, title = outcome
          if payment.status == PaymentStatus.COMPLETED:
               message = f"We received your {payment.type.value.replace('_', ' ')} payment of {payment.amount}."
          else:
               message = (
                    f"Your {payment.type.value.replace('_', ' ')} payment of {payment.amount} "
                    f"(transaction {payment.transaction_id}) could not be processed."
               )
          logger.debug("Notifying tenant %s: %s %s", payment.tenant_id, type.value, payment.transaction_id)
          return NotificationService.notify(
               db, payment.tenant_id, type, title, message,
               priority=priority, payment_id=payment.id, lease_id=payment.lease_id, now=now,
          )

     @staticmethod
     def payment_due_sent(
          db: Session,
          recipient_id: int,
          lease_id: int,
          period: Tuple[int, int],
          priority: NotificationPriority,
     ) -> bool:
          """Whether this rent period's notice at this priority already went out."""
          year, month = period
          return db.query(Notification.id).filter(
               Notification.recipient_id == recipient_id,
               Notification.type == NotificationType.PAYMENT_DUE,
               Notification.lease_id == lease_id,
               Notification.period_year == year,
               Notification.period_month == month,
               Notification.priority == priority,
          ).first() is not None

     @staticmethod
     def list_for(db: Session, actor: Actor, unread_only: bool = False, limit: int = 20) -> List[Notification]:
          """The actor's own notifications, newest first."""
          query = db.query(Notification).filter(Notification.recipient_id == actor.id)
          if unread_only:
               query = query.filter(Notification.is_read == false())
          return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

     @staticmethod
     def unread_count(db: Session, actor: Actor) -> int:
          return db.query(Notification).filter(
               Notification.recipient_id == actor.id,
               Notification.is_read == false(),
          ).count()

     @staticmethod
     def mark_read(db: Session, actor: Actor, notification_id: int, now: Optional[datetime] = None) -> Notification:
          """
          Raises:
               NotFoundError: No such notification for this user
          """
          notification = db.query(Notification).filter(
               Notification.id == notification_id,
               Notification.recipient_id == actor.id,
          ).first()
          if notification is None:
               raise NotFoundError("Notification not found")
          if not notification.is_read:
               notification.is_read = True
               notification.read_at = now or utcnow()
               db.flush()
          return notification

     @staticmethod
     def mark_all_read(db: Session, actor: Actor, now: Optional[datetime] = None) -> int:
          """Mark every unread notification of the actor as read; returns how many changed."""
          updated = db.query(Notification).filter(
               Notification.recipient_id == actor.id,
               Notification.is_read == false(),
          ).update(
               {Notification.is_read: True, Notification.read_at: now or utcnow()},
               synchronize_session=False,
          )
          db.flush()
          return updated
