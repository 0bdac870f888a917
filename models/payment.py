"""
Payment model - append-only record of money received (or attempted).

A row is written once per transaction_id. Afterwards only its status may
move forward (pending -> processing -> completed | failed); amounts,
parties and the obligation period never change.
"""
import enum

from sqlalchemy import (
     Column, Integer, String, Numeric, Text, DateTime, ForeignKey, Enum, Index, CheckConstraint,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class PaymentType(str, enum.Enum):
     RENT = "rent"
     SERVICE_FEE = "service_fee"
     DEPOSIT = "deposit"
     LATE_FEE = "late_fee"
     OTHER = "other"


class PaymentMethod(str, enum.Enum):
     ACH = "ach"
     CREDIT_CARD = "credit_card"
     DEBIT_CARD = "debit_card"
     CASH = "cash"
     CHECK = "check"


class PaymentStatus(str, enum.Enum):
     PENDING = "pending"
     PROCESSING = "processing"
     COMPLETED = "completed"
     FAILED = "failed"
     REFUNDED = "refunded"


class Payment(Base):
     __tablename__ = "payments"
     __table_args__ = (
          CheckConstraint("amount >= 0", name="amount_non_negative"),
          Index("ix_payments_tenant_type_status", "tenant_id", "type", "status"),
          Index("ix_payments_unit_period", "unit_id", "month", "year"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
     unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)
     lease_id = Column(Integer, ForeignKey("leases.id"), nullable=True, index=True)
     service_request_id = Column(Integer, ForeignKey("service_requests.id"), nullable=True)

     type = Column(
          Enum(PaymentType, name="payment_type", create_constraint=True, values_callable=enum_values),
          nullable=False,
     )
     amount = Column(Numeric(12, 2), nullable=False)
     payment_method = Column(
          Enum(PaymentMethod, name="payment_method", create_constraint=True, values_callable=enum_values),
          nullable=False,
     )
     status = Column(
          Enum(PaymentStatus, name="payment_status", create_constraint=True, values_callable=enum_values),
          default=PaymentStatus.PENDING,
          nullable=False,
     )

     # Idempotency key; one row per processor transaction
     transaction_id = Column(String(255), nullable=False, unique=True, index=True)

     # Obligation period, rent only
     month = Column(Integer, nullable=True)
     year = Column(Integer, nullable=True)

     paid_at = Column(DateTime, nullable=True)
     notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, nullable=False, index=True)
     updated_at = Column(DateTime, nullable=True)

     # Relationships
     tenant = relationship("User")
     unit = relationship("Unit")
     lease = relationship("Lease")

     def __repr__(self):
          return (
               f"<Payment(id={self.id}, transaction_id='{self.transaction_id}', "
               f"amount={self.amount}, status='{self.status.value}')>"
          )
