# routers/overview.py
"""
Portfolio read views: tenants, service requests, balances, the tenant
dashboard, and the lease reconciliation trigger.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import get_current_actor
from database import get_session
from exceptions import AccessDeniedError
from models import ServiceRequestStatus
from schemas.lease import LeaseResponse
from schemas.overview import (
     BalanceSummaryResponse,
     ReconcileResponse,
     ServiceRequestResponse,
     TenantDashboardResponse,
     TenantResponse,
)
from schemas.payment import PaymentResponse
from services import access_scope
from services.access_scope import Actor, FullScope
from services.clock import utcnow
from services.portfolio_service import PortfolioService

router = APIRouter(prefix="/api", tags=["overview"])


def _today(as_of: Optional[date]) -> date:
     return as_of or utcnow().date()


@router.get("/tenants", response_model=List[TenantResponse], summary="List visible tenants")
def list_tenants(
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return PortfolioService(db).visible_tenants(actor)


@router.get(
     "/service-requests",
     response_model=List[ServiceRequestResponse],
     summary="List visible service requests",
)
def list_service_requests(
     request_status: Optional[ServiceRequestStatus] = Query(None, alias="status"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return PortfolioService(db).visible_service_requests(actor, status=request_status)


@router.get("/balances", summary="Rent status of every visible active lease")
def list_balances(
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     balances = PortfolioService(db).balances(actor, _today(as_of))
     return {
          "balances": [
               {"unit_id": lease.unit_id, "tenant_id": lease.tenant_id, **status.to_dict()}
               for lease, status in balances
          ],
          "total": len(balances),
     }


@router.get("/balances/summary", response_model=BalanceSummaryResponse, summary="Balance totals")
def balance_summary(
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return PortfolioService(db).balance_summary(actor, _today(as_of))


@router.get("/dashboard", response_model=TenantDashboardResponse, summary="Tenant dashboard")
def tenant_dashboard(
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     dashboard = PortfolioService(db).tenant_dashboard(actor, _today(as_of))
     return TenantDashboardResponse(
          lease=LeaseResponse.from_lease(dashboard["lease"]),
          obligation=dashboard["obligation"].to_dict(),
          recent_payments=[PaymentResponse.model_validate(p) for p in dashboard["recent_payments"]],
          days_remaining=dashboard["days_remaining"],
          unread_notifications=dashboard["unread_notifications"],
     )


@router.post("/leases/reconcile", response_model=ReconcileResponse, summary="Expire and activate leases")
def reconcile_leases(
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """Normally run by a scheduled job; exposed for full managers."""
     if not isinstance(access_scope.require_manager(actor), FullScope):
          raise AccessDeniedError("Only full managers can run lease reconciliation")
     return PortfolioService(db).reconcile(_today(as_of))
