# services/payment_ledger.py
"""
Payment Ledger Service - append-only payment records and rent obligation status.

Recording:
1. transaction_id is the idempotency key (unique in the payments table)
2. A replay of a completed transaction returns the stored row untouched
3. A replay of a non-completed transaction advances that row's status
4. Status only moves forward: pending -> processing -> completed | failed
5. The tenant must occupy a lease (any status) on the payment's unit
6. Reaching completed or failed notifies the tenant

Obligation status (one lease, one calendar month):
- inactive   as_of outside the lease period, or lease pending/terminated
- not-due    the period starts after as_of
- paid       completed rent for the period >= monthly rent
- partial    some, but not all, of the rent is paid
- due        nothing paid yet and the period has begun
Late fees come from the configured late fee policy (see late_fee_policy.py).
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterator, Optional, Tuple, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import NotFoundError, ValidationError
from models import Lease, LeaseStatus, Payment, PaymentStatus, PaymentType, Unit, User
from schemas.payment import ConfirmationEvent, PaymentCreate
from schemas.validation import parse_model
from services.clock import due_date_for, month_bounds, period_of, utcnow
from services.late_fee_policy import get_late_fee_policy
from services.lease_registry import LeaseRegistry
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
     PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
     PaymentStatus.PROCESSING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
     PaymentStatus.COMPLETED: frozenset(),
     PaymentStatus.FAILED: frozenset(),
     PaymentStatus.REFUNDED: frozenset(),
}

# Days overdue after which a notice is escalated, whatever the grace period
URGENT_AFTER_DAYS = 5

INACTIVE = "inactive"
NOT_DUE = "not-due"
PAID = "paid"
PARTIAL = "partial"
DUE = "due"


@dataclass(frozen=True)
class ObligationStatus:
     lease_id: int
     year: int
     month: int
     status: str
     monthly_rent: Decimal
     total_paid: Decimal
     remaining: Decimal
     due_date: date
     days_overdue: int
     days_until_due: int
     late_fee: Decimal
     overdue: bool
     urgent: bool

     @property
     def amount_due(self) -> Decimal:
          return self.remaining + self.late_fee

     def to_dict(self) -> dict:
          data = asdict(self)
          data["amount_due"] = self.amount_due
          return data


class PaymentHistory:
     """
     A tenant's payments, newest first.

     Iterating runs the query afresh, so the history can be walked more
     than once and always reflects the stored rows.
     """

     def __init__(
          self,
          db: Session,
          tenant_id: int,
          start: Optional[date] = None,
          end: Optional[date] = None,
          batch_size: int = 100,
     ):
          self.db = db
          self.tenant_id = tenant_id
          self.start = start
          self.end = end
          self.batch_size = batch_size

     def _query(self):
          query = self.db.query(Payment).filter(Payment.tenant_id == self.tenant_id)
          if self.start is not None:
               query = query.filter(Payment.created_at >= datetime.combine(self.start, time.min))
          if self.end is not None:
               # end date is inclusive
               query = query.filter(Payment.created_at < datetime.combine(self.end + timedelta(days=1), time.min))
          return query.order_by(Payment.created_at.desc(), Payment.id.desc())

     def __iter__(self) -> Iterator[Payment]:
          return iter(self._query().yield_per(self.batch_size))

     def count(self) -> int:
          return self._query().count()

     def page(self, page: int = 1, page_size: int = 50) -> list:
          offset = (page - 1) * page_size
          return self._query().offset(offset).limit(page_size).all()


class PaymentLedger:
     """Service class for payment recording and obligation status."""

     @staticmethod
     def record_payment(
          db: Session,
          payment: Union[PaymentCreate, dict],
          now: Optional[datetime] = None,
     ) -> Payment:
          """
          Record a payment, idempotently on transaction_id.

          Args:
               db: SQLAlchemy database session
               payment: PaymentCreate or an equivalent dict

          Returns:
               The stored Payment (new, advanced, or untouched replay)

          Raises:
               ValidationError: Malformed payment, unknown parties, or a
                    replay whose amount differs from the stored one
          """
          data = parse_model(PaymentCreate, payment)
          now = now or utcnow()

          existing = PaymentLedger._by_transaction(db, data.transaction_id)
          if existing is not None:
               return PaymentLedger._replay(db, existing, data.amount, data.status, data.paid_at, now)

          PaymentLedger._check_parties(db, data)
          record = Payment(
               tenant_id=data.tenant_id,
               unit_id=data.unit_id,
               lease_id=data.lease_id,
               service_request_id=data.service_request_id,
               type=data.type,
               amount=data.amount,
               payment_method=data.payment_method,
               status=data.status,
               transaction_id=data.transaction_id,
               month=data.month,
               year=data.year,
               paid_at=data.paid_at or (now if data.status == PaymentStatus.COMPLETED else None),
               notes=data.notes,
               created_at=now,
               updated_at=now,
          )
          db.add(record)
          try:
               db.flush()
          except IntegrityError:
               # Another request inserted the same transaction_id first
               db.rollback()
               existing = PaymentLedger._by_transaction(db, data.transaction_id)
               if existing is None:
                    raise
               return PaymentLedger._replay(db, existing, data.amount, data.status, data.paid_at, now)

          logger.info(
               "Payment recorded: %s %s %s for tenant %s (%s)",
               record.transaction_id, record.type.value, record.amount, record.tenant_id, record.status.value,
          )
          if NotificationService.payment_outcome(db, record, now=now) is not None:
               db.flush()
          return record

     @staticmethod
     def apply_confirmation(
          db: Session,
          event: Union[ConfirmationEvent, dict],
          now: Optional[datetime] = None,
     ) -> Payment:
          """
          Apply a processor confirmation to the payment it refers to.

          Safe to receive any number of times; a completed payment is never
          moved back.

          Raises:
               NotFoundError: No payment with this transaction_id
               ValidationError: Amount differs from the recorded amount
          """
          event = parse_model(ConfirmationEvent, event)
          payment = PaymentLedger._by_transaction(db, event.transaction_id)
          if payment is None:
               raise NotFoundError(f"Payment with transaction ID {event.transaction_id} not found")
          return PaymentLedger._replay(db, payment, event.amount, event.status, event.paid_at, now or utcnow())

     @staticmethod
     def confirm_with_processor(db: Session, processor, transaction_id: str, now: Optional[datetime] = None) -> Payment:
          """
          Pull the processor's state of a transaction and apply it.

          PaymentProcessingError from the processor propagates to the
          caller, which decides whether and when to retry.
          """
          event = processor.fetch_confirmation(transaction_id)
          return PaymentLedger.apply_confirmation(db, event, now=now)

     @staticmethod
     def compute_obligation_status(
          db: Session,
          lease: Union[Lease, int],
          as_of: date,
          period: Optional[Tuple[int, int]] = None,
          policy=None,
     ) -> ObligationStatus:
          """
          Classify one rent period of a lease as of a date.

          Args:
               db: SQLAlchemy database session
               lease: Lease or lease ID
               as_of: Date the status is evaluated on
               period: (year, month); defaults to the month containing as_of
               policy: Late fee policy; defaults to the configured one

          Raises:
               NotFoundError: Lease ID doesn't exist
          """
          if not isinstance(lease, Lease):
               lease_id = lease
               lease = db.query(Lease).filter(Lease.id == lease_id).first()
               if lease is None:
                    raise NotFoundError(f"Lease with ID {lease_id} not found")
          policy = policy or get_late_fee_policy()

          year, month = period or period_of(as_of)
          period_start, next_period_start = month_bounds(year, month)
          due_date = due_date_for(year, month, lease.rent_due_day)
          rent = Decimal(lease.monthly_rent)
          total_paid = PaymentLedger.rent_paid_for_period(db, lease.tenant_id, year, month)

          def build(status, remaining=Decimal("0"), days_overdue=0, late_fee=Decimal("0"), overdue=False, urgent=False):
               return ObligationStatus(
                    lease_id=lease.id,
                    year=year,
                    month=month,
                    status=status,
                    monthly_rent=rent,
                    total_paid=total_paid,
                    remaining=remaining,
                    due_date=due_date,
                    days_overdue=days_overdue,
                    days_until_due=max(0, (due_date - as_of).days),
                    late_fee=late_fee,
                    overdue=overdue,
                    urgent=urgent,
               )

          period_outside_lease = period_start >= lease.end_date or next_period_start <= lease.start_date
          if (
               lease.status in (LeaseStatus.PENDING, LeaseStatus.TERMINATED)
               or not lease.covers(as_of)
               or period_outside_lease
          ):
               return build(INACTIVE)

          if period_start > as_of:
               return build(NOT_DUE, remaining=max(Decimal("0"), rent - total_paid))

          if total_paid >= rent:
               return build(PAID)

          days_overdue = max(0, (as_of - due_date).days)
          return build(
               PARTIAL if total_paid > 0 else DUE,
               remaining=rent - total_paid,
               days_overdue=days_overdue,
               late_fee=policy.late_fee(lease, days_overdue),
               overdue=days_overdue > lease.grace_period_days,
               urgent=days_overdue > URGENT_AFTER_DAYS,
          )

     @staticmethod
     def rent_paid_for_period(db: Session, tenant_id: int, year: int, month: int) -> Decimal:
          """Sum of completed rent payments credited to a tenant's period."""
          total = (
               db.query(func.coalesce(func.sum(Payment.amount), 0))
               .filter(
                    Payment.tenant_id == tenant_id,
                    Payment.type == PaymentType.RENT,
                    Payment.status == PaymentStatus.COMPLETED,
                    Payment.month == month,
                    Payment.year == year,
               )
               .scalar()
          )
          return Decimal(str(total))

     @staticmethod
     def get_history(
          db: Session,
          tenant_id: int,
          start: Optional[date] = None,
          end: Optional[date] = None,
     ) -> PaymentHistory:
          """Lazy, restartable, newest-first view of a tenant's payments."""
          if start is not None and end is not None and end < start:
               raise ValidationError("History end date is before start date")
          return PaymentHistory(db, tenant_id, start=start, end=end)

     # ------------------------------------------------------------------
     # Helpers
     # ------------------------------------------------------------------

     @staticmethod
     def _by_transaction(db: Session, transaction_id: str) -> Optional[Payment]:
          return db.query(Payment).filter(Payment.transaction_id == transaction_id).first()

     @staticmethod
     def _check_parties(db: Session, data: PaymentCreate) -> None:
          if not db.query(User.id).filter(User.id == data.tenant_id).first():
               raise ValidationError(f"Unknown tenant {data.tenant_id}")
          if not db.query(Unit.id).filter(Unit.id == data.unit_id).first():
               raise ValidationError(f"Unknown unit {data.unit_id}")
          if data.lease_id is not None:
               lease = db.query(Lease).filter(Lease.id == data.lease_id).first()
               if lease is None or lease.unit_id != data.unit_id or data.tenant_id not in lease.occupant_ids():
                    raise ValidationError("Lease does not belong to the specified tenant and unit")
               return
          # Rent is credited per tenant, so the unit must be one the tenant leases
          if not any(lease.unit_id == data.unit_id for lease in LeaseRegistry.leases_for_occupant(db, data.tenant_id)):
               raise ValidationError(
                    f"Tenant {data.tenant_id} has no lease on unit {data.unit_id}",
                    detail={"tenant_id": data.tenant_id, "unit_id": data.unit_id},
               )

     @staticmethod
     def _replay(
          db: Session,
          payment: Payment,
          amount: Decimal,
          status: PaymentStatus,
          paid_at: Optional[datetime],
          now: datetime,
     ) -> Payment:
          if Decimal(payment.amount) != Decimal(amount):
               raise ValidationError(
                    f"Amount mismatch: recorded amount is {payment.amount}, received {amount}",
                    detail={"transaction_id": payment.transaction_id},
               )
          if payment.status == PaymentStatus.COMPLETED:
               logger.debug("Transaction %s already completed; replay ignored", payment.transaction_id)
               return payment
          PaymentLedger._advance(db, payment, status, paid_at, now)
          return payment

     @staticmethod
     def _advance(
          db: Session,
          payment: Payment,
          target: PaymentStatus,
          paid_at: Optional[datetime],
          now: datetime,
     ) -> bool:
          """Move a payment forward. Stale or backward events are ignored."""
          if target == payment.status:
               return False
          if target not in ALLOWED_TRANSITIONS[payment.status]:
               logger.warning(
                    "Ignoring status change %s -> %s for transaction %s",
                    payment.status.value, target.value, payment.transaction_id,
               )
               return False
          previous = payment.status
          payment.status = target
          payment.updated_at = now
          if target == PaymentStatus.COMPLETED:
               payment.paid_at = paid_at or now
          NotificationService.payment_outcome(db, payment, now=now)
          db.flush()
          logger.info(
               "Payment %s: %s -> %s", payment.transaction_id, previous.value, target.value,
          )
          return True
