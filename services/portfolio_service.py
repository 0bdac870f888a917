# services/portfolio_service.py
"""
Portfolio Service - what an actor can see, and what is owed on it.

Thin orchestration over AccessScope, LeaseRegistry, PaymentLedger and
NotificationService.
Managers are filtered by unit scope; tenants see their own records;
technicians see the service requests assigned to them.
"""
import logging
from collections import Counter
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from exceptions import AccessDeniedError, NotFoundError
from models import (
     Lease, LeaseStatus, Notification, NotificationPriority, NotificationType, ServiceRequest, Unit, User, UserRole,
)
from services import access_scope
from services.access_scope import Actor
from services.clock import utcnow
from services.lease_registry import LeaseRegistry
from services.notification_service import NotificationService
from services.payment_ledger import DUE, PARTIAL, ObligationStatus, PaymentLedger

logger = logging.getLogger(__name__)


class PortfolioService:

     def __init__(self, db: Session, late_fee_policy=None):
          self.db = db
          self.late_fee_policy = late_fee_policy

     # ------------------------------------------------------------------
     # Visibility
     # ------------------------------------------------------------------

     def visible_units(self, actor: Actor) -> List[Unit]:
          if actor.is_manager:
               scope = access_scope.resolve(actor)
               query = access_scope.apply_unit_filter(self.db.query(Unit), scope, Unit.id)
               return access_scope.filter_units(scope, query.order_by(Unit.unit_number).all())
          if actor.is_tenant:
               unit_ids = {
                    lease.unit_id
                    for lease in LeaseRegistry.leases_for_occupant(self.db, actor.id, LeaseStatus.ACTIVE)
               }
               if not unit_ids:
                    return []
               return self.db.query(Unit).filter(Unit.id.in_(unit_ids)).order_by(Unit.unit_number).all()
          raise AccessDeniedError(f"Role '{actor.role.value}' cannot list units")

     def visible_tenants(self, actor: Actor) -> List[User]:
          """
          Tenants the manager may see.

          Restricted managers only see tenants (primary or co-tenant) of an
          active lease on one of their units.
          """
          scope = access_scope.require_manager(actor)
          pairs: List[Tuple[User, Optional[Lease]]] = []

          active_leases = access_scope.apply_unit_filter(
               self.db.query(Lease).filter(Lease.status == LeaseStatus.ACTIVE), scope, Lease.unit_id,
          ).all()
          for lease in active_leases:
               pairs.append((lease.tenant, lease))
               pairs.extend((co_tenant, lease) for co_tenant in lease.additional_tenants)

          if isinstance(scope, access_scope.FullScope):
               leaseless = (
                    self.db.query(User)
                    .filter(User.role == UserRole.TENANT)
                    .order_by(User.last_name, User.first_name)
                    .all()
               )
               pairs.extend((tenant, None) for tenant in leaseless)

          return access_scope.filter_tenants(scope, pairs)

     def visible_leases(self, actor: Actor, filters=None) -> List[Lease]:
          return LeaseRegistry.get_accessible_leases(self.db, actor, filters)

     def visible_service_requests(self, actor: Actor, status=None) -> List[ServiceRequest]:
          query = self.db.query(ServiceRequest)
          scope = None
          if actor.is_manager:
               scope = access_scope.resolve(actor)
               query = access_scope.apply_unit_filter(query, scope, ServiceRequest.unit_id)
          elif actor.is_tenant:
               query = query.filter(ServiceRequest.tenant_id == actor.id)
          elif actor.is_technician:
               query = query.filter(ServiceRequest.assigned_to_id == actor.id)
          else:
               raise AccessDeniedError(f"Role '{actor.role.value}' cannot list service requests")

          if status is not None:
               query = query.filter(ServiceRequest.status == status)
          requests = query.order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc()).all()
          if scope is not None:
               requests = access_scope.filter_service_requests(scope, requests)
          return requests

     # ------------------------------------------------------------------
     # Money
     # ------------------------------------------------------------------

     def balances(self, actor: Actor, as_of: date) -> List[Tuple[Lease, ObligationStatus]]:
          """Obligation status of the current month for every visible active lease."""
          leases = self.visible_leases(actor, {"status": LeaseStatus.ACTIVE})
          return [
               (lease, PaymentLedger.compute_obligation_status(self.db, lease, as_of, policy=self.late_fee_policy))
               for lease in leases
          ]

     def balance_summary(self, actor: Actor, as_of: date) -> dict:
          balances = self.balances(actor, as_of)
          counts = Counter(status.status for _, status in balances)
          outstanding = sum((status.remaining for _, status in balances), Decimal("0"))
          late_fees = sum((status.late_fee for _, status in balances), Decimal("0"))
          return {
               "as_of": as_of.isoformat(),
               "leases": len(balances),
               "by_status": dict(counts),
               "total_outstanding": outstanding,
               "total_late_fees": late_fees,
               "urgent_lease_ids": [lease.id for lease, status in balances if status.urgent],
          }

     def tenant_dashboard(self, actor: Actor, as_of: date, recent: int = 5) -> dict:
          """A tenant's current lease, what they owe this month, and recent payments."""
          if not actor.is_tenant:
               raise AccessDeniedError("Only tenants have a tenant dashboard")
          leases = LeaseRegistry.leases_for_occupant(self.db, actor.id, LeaseStatus.ACTIVE)
          if not leases:
               raise NotFoundError("No active lease found")
          # Prefer the lease the tenant holds as primary
          leases.sort(key=lambda lease: lease.tenant_id != actor.id)
          lease = leases[0]

          status = PaymentLedger.compute_obligation_status(self.db, lease, as_of, policy=self.late_fee_policy)
          history = PaymentLedger.get_history(self.db, actor.id)
          return {
               "lease": lease,
               "obligation": status,
               "recent_payments": history.page(1, recent),
               "days_remaining": max(0, (lease.end_date - as_of).days),
               "unread_notifications": NotificationService.unread_count(self.db, actor),
          }

     # ------------------------------------------------------------------
     # Time-driven maintenance
     # ------------------------------------------------------------------

     def reconcile(self, as_of: date) -> dict:
          """Expire finished leases and activate due renewals."""
          return LeaseRegistry.reconcile_lease_states(self.db, as_of)

     def send_payment_due_notices(self, actor: Actor, as_of: date, now: Optional[datetime] = None) -> List[Notification]:
          """
          Notify the occupants of every visible active lease with rent outstanding.

          A period gets one normal notice and, once it turns urgent, one
          high-priority notice. Running the sweep again sends nothing new.
          """
          access_scope.require_manager(actor)
          now = now or utcnow()
          sent = []
          for lease, status in self.balances(actor, as_of):
               if status.status not in (DUE, PARTIAL):
                    continue
               period = (status.year, status.month)
               label = f"{status.year}-{status.month:02d}"
               if status.urgent:
                    priority, title = NotificationPriority.HIGH, "Rent overdue"
                    message = (
                         f"Rent for {label} is {status.days_overdue} days overdue. "
                         f"Amount due: {status.amount_due}."
                    )
               else:
                    priority, title = NotificationPriority.NORMAL, "Rent due"
                    message = f"Rent of {status.remaining} for {label} is due on {status.due_date.isoformat()}."

               for tenant_id in sorted(lease.occupant_ids()):
                    if NotificationService.payment_due_sent(self.db, tenant_id, lease.id, period, priority):
                         continue
                    sent.append(NotificationService.notify(
                         self.db, tenant_id, NotificationType.PAYMENT_DUE, title, message,
                         priority=priority, lease_id=lease.id, period=period, now=now,
                    ))
          if sent:
               self.db.flush()
               logger.info("Sent %d payment due notices as of %s", len(sent), as_of)
          return sent
