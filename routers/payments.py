# routers/payments.py
"""
Payment API.

POST /api/payments: record a payment (idempotent on transaction_id).
POST /api/payments/webhook: processor confirmation callback.
POST /api/payments/{transaction_id}/confirm: pull the processor's state and apply it.
GET  /api/payments/history: a tenant's payments, newest first.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from auth import get_current_actor
from database import get_session
from exceptions import AccessDeniedError, ValidationError
from models import PaymentStatus
from schemas.payment import ConfirmationEvent, PaymentCreate, PaymentHistoryResponse, PaymentResponse
from services import access_scope
from services.access_scope import Actor
from services.payment_ledger import PaymentLedger
from services.payment_processor import PaymentProcessorClient

router = APIRouter(prefix="/api/payments", tags=["payments"])

TENANT_RECORDABLE_STATUSES = frozenset({PaymentStatus.PENDING, PaymentStatus.PROCESSING})


def get_processor() -> PaymentProcessorClient:
     return PaymentProcessorClient()


def _ensure_tenant_access(db: Session, actor: Actor, tenant_id: int) -> None:
     """Tenants may only touch their own payments; managers those of tenants in scope."""
     if actor.is_tenant:
          if tenant_id != actor.id:
               raise AccessDeniedError("You can only access your own payments")
          return
     scope = access_scope.require_manager(actor)
     visible = access_scope.accessible_tenant_ids(db, scope)
     if visible is not None and tenant_id not in visible:
          raise AccessDeniedError(
               "You do not have permission to access this tenant",
               detail={"tenant_id": tenant_id},
          )


@router.post(
     "",
     response_model=PaymentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment",
)
def record_payment(
     body: PaymentCreate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """
     Record a payment.

     Sending the same transaction_id again is safe: a completed payment is
     returned unchanged, any other status is moved forward.

     Tenants may only record pending or processing payments; completion
     comes from the processor (webhook or confirm). Managers may record
     settled payments such as cash or checks for tenants in their scope.
     """
     if actor.is_manager:
          access_scope.ensure_unit_access(access_scope.resolve(actor), body.unit_id)
     elif body.status not in TENANT_RECORDABLE_STATUSES:
          raise AccessDeniedError(
               "Only the payment processor can settle a tenant payment",
               detail={"status": body.status.value},
          )
     _ensure_tenant_access(db, actor, body.tenant_id)
     return PaymentLedger.record_payment(db, body)


@router.post("/webhook", response_model=PaymentResponse, summary="Payment processor webhook")
def payment_webhook(
     body: ConfirmationEvent,
     db: Session = Depends(get_session),
):
     """
     Receives the processor's payment result.

     Replays and out-of-order deliveries are safe; a completed payment is
     never moved back.
     """
     return PaymentLedger.apply_confirmation(db, body)


@router.post(
     "/{transaction_id}/confirm",
     response_model=PaymentResponse,
     summary="Confirm a payment with the processor",
)
def confirm_payment(
     transaction_id: str,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
     processor: PaymentProcessorClient = Depends(get_processor),
):
     """Returns 502 with `retryable: true` when the processor cannot be reached."""
     access_scope.require_manager(actor)
     return PaymentLedger.confirm_with_processor(db, processor, transaction_id)


@router.get("/history", response_model=PaymentHistoryResponse, summary="Payment history")
def payment_history(
     tenant_id: Optional[int] = Query(None, description="Defaults to the caller for tenants"),
     start: Optional[date] = Query(None),
     end: Optional[date] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=200),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     if tenant_id is None:
          if not actor.is_tenant:
               raise ValidationError("tenant_id is required")
          tenant_id = actor.id
     _ensure_tenant_access(db, actor, tenant_id)

     history = PaymentLedger.get_history(db, tenant_id, start=start, end=end)
     return PaymentHistoryResponse(
          payments=[PaymentResponse.model_validate(payment) for payment in history.page(page, page_size)],
          total=history.count(),
     )
