import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class NotificationType(str, enum.Enum):
     PAYMENT_DUE = "payment_due"
     PAYMENT_RECEIVED = "payment_received"
     PAYMENT_FAILED = "payment_failed"


class NotificationPriority(str, enum.Enum):
     LOW = "low"
     NORMAL = "normal"
     HIGH = "high"


class Notification(Base):
     """
     Notification model - in-app message to one user about a payment or a
     rent period.

     payment_due rows carry the lease and the (period_year, period_month)
     they refer to; payment_received / payment_failed rows the payment.
     """
     __tablename__ = "notifications"
     __table_args__ = (
          Index("ix_notifications_recipient_read_created", "recipient_id", "is_read", "created_at"),
          Index("ix_notifications_lease_period", "lease_id", "period_year", "period_month"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
     type = Column(
          Enum(NotificationType, name="notification_type", create_constraint=True, values_callable=enum_values),
          nullable=False,
     )
     priority = Column(
          Enum(NotificationPriority, name="notification_priority", create_constraint=True,
               values_callable=enum_values),
          default=NotificationPriority.NORMAL,
          nullable=False,
     )
     title = Column(String(255), nullable=False)
     message = Column(Text, nullable=False)

     payment_id = Column(Integer, ForeignKey("payments.id"), nullable=True)
     lease_id = Column(Integer, ForeignKey("leases.id"), nullable=True)
     period_year = Column(Integer, nullable=True)
     period_month = Column(Integer, nullable=True)

     is_read = Column(Boolean, default=False, nullable=False)
     read_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, nullable=False)

     recipient = relationship("User")
     payment = relationship("Payment")
     lease = relationship("Lease")

     def __repr__(self):
          return f"<Notification(id={self.id}, recipient_id={self.recipient_id}, type='{self.type.value}')>"
