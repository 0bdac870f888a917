# routers/leases.py
"""
Lease API routes.

Managers create, activate, renew and terminate leases on units inside
their scope. Tenants can read the leases they occupy and their rent
status.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from auth import get_current_actor
from database import get_session
from exceptions import ValidationError
from models import LeaseStatus
from schemas.lease import (
     CoTenantAdd,
     LeaseCreate,
     LeaseListResponse,
     LeaseRenew,
     LeaseResponse,
     LeaseTerminate,
)
from schemas.payment import ObligationStatusResponse
from services.access_scope import Actor
from services.clock import utcnow
from services.lease_registry import LeaseRegistry
from services.payment_ledger import PaymentLedger

router = APIRouter(prefix="/api/leases", tags=["leases"])


@router.post(
     "",
     response_model=LeaseResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a lease",
)
def create_lease(
     body: LeaseCreate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """
     Bind a tenant to a unit.

     Returns 409 when the tenant or the unit already holds an active lease.
     Pass `status: pending` to create the lease for later activation.
     """
     lease = LeaseRegistry.create_lease(db, actor, body.tenant_id, body.unit_id, body.terms, status=body.status)
     return LeaseResponse.from_lease(lease)


@router.get("", response_model=LeaseListResponse, summary="List leases")
def list_leases(
     lease_status: Optional[LeaseStatus] = Query(None, alias="status"),
     tenant_id: Optional[int] = Query(None),
     unit_id: Optional[int] = Query(None),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     leases = LeaseRegistry.get_accessible_leases(
          db, actor, {"status": lease_status, "tenant_id": tenant_id, "unit_id": unit_id},
     )
     return LeaseListResponse(leases=[LeaseResponse.from_lease(lease) for lease in leases], total=len(leases))


@router.get("/{lease_id}", response_model=LeaseResponse, summary="Get lease by ID")
def get_lease(
     lease_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return LeaseResponse.from_lease(LeaseRegistry.get_lease(db, actor, lease_id))


@router.post("/{lease_id}/activate", response_model=LeaseResponse, summary="Activate a pending lease")
def activate_lease(
     lease_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return LeaseResponse.from_lease(LeaseRegistry.activate_lease(db, actor, lease_id))


@router.post("/{lease_id}/terminate", response_model=LeaseResponse, summary="Terminate a lease")
def terminate_lease(
     lease_id: int,
     body: LeaseTerminate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return LeaseResponse.from_lease(LeaseRegistry.terminate_lease(db, actor, lease_id, body.reason))


@router.post(
     "/{lease_id}/renew",
     response_model=LeaseResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Renew a lease",
)
def renew_lease(
     lease_id: int,
     body: LeaseRenew,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """Create the pending follow-on lease. The current lease is not modified."""
     renewal = LeaseRegistry.renew_lease(
          db,
          actor,
          lease_id,
          body.new_end_date,
          new_rent=body.monthly_rent,
          security_deposit=body.security_deposit,
          rent_due_day=body.rent_due_day,
          late_fee_amount=body.late_fee_amount,
          grace_period_days=body.grace_period_days,
          notes=body.notes,
     )
     return LeaseResponse.from_lease(renewal)


@router.post("/{lease_id}/tenants", response_model=LeaseResponse, summary="Add a co-tenant")
def add_co_tenant(
     lease_id: int,
     body: CoTenantAdd,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return LeaseResponse.from_lease(LeaseRegistry.add_co_tenant(db, actor, lease_id, body.tenant_id))


@router.get(
     "/{lease_id}/obligation",
     response_model=ObligationStatusResponse,
     summary="Rent status of a lease for one month",
)
def get_obligation_status(
     lease_id: int,
     as_of: Optional[date] = Query(None, description="Defaults to today (UTC)"),
     year: Optional[int] = Query(None, ge=2000),
     month: Optional[int] = Query(None, ge=1, le=12),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     if (year is None) != (month is None):
          raise ValidationError("Pass both year and month, or neither")
     lease = LeaseRegistry.get_lease(db, actor, lease_id)
     period = (year, month) if year is not None else None
     obligation = PaymentLedger.compute_obligation_status(db, lease, as_of or utcnow().date(), period=period)
     return obligation.to_dict()
