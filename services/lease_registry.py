# services/lease_registry.py
"""
Lease Registry - creation, activation, termination and renewal of leases.

At most one active lease may exist per tenant and per unit. The database
enforces this with filtered unique indexes on leases.tenant_id and
leases.unit_id (WHERE status = 'active'); this module never checks for an
existing active lease before inserting or activating one. It writes the
row and turns the IntegrityError into a ConflictError.

State machine:
     pending -> active -> expired | terminated
     pending -> terminated
Nothing leaves expired or terminated.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import AccessDeniedError, ConflictError, ConsistencyError, NotFoundError, ValidationError
from models import Lease, LeaseStatus, ServiceRequest, ServiceRequestStatus, Unit, User, UserRole
from models.lease import lease_additional_tenants
from models.service_request import OPEN_REQUEST_STATUSES
from schemas.lease import LeaseFilter, LeaseTerms
from schemas.validation import parse_model
from services import access_scope
from services.access_scope import Actor
from services.clock import add_note, utcnow

logger = logging.getLogger(__name__)

ACTIVE_LEASE_CONFLICT = "Active lease already exists for this tenant or unit"


class LeaseRegistry:
     """Service class for lease lifecycle operations."""

     @staticmethod
     def create_lease(
          db: Session,
          actor: Actor,
          tenant_id: int,
          unit_id: int,
          terms: Union[LeaseTerms, dict],
          status: LeaseStatus = LeaseStatus.ACTIVE,
          now: Optional[datetime] = None,
     ) -> Lease:
          """
          Create a lease binding a tenant to a unit.

          Args:
               db: SQLAlchemy database session
               actor: Calling manager
               tenant_id: User ID of the primary tenant (role tenant)
               unit_id: ID of the unit
               terms: Lease terms (LeaseTerms or an equivalent dict)
               status: ACTIVE by default; PENDING for an approval workflow

          Returns:
               The new Lease, flushed

          Raises:
               AccessDeniedError: Actor is not a manager of this unit
               ValidationError: Malformed terms or initial status
               NotFoundError: Tenant or unit doesn't exist
               ConflictError: Tenant or unit already holds an active lease
          """
          scope = access_scope.require_manager(actor)
          access_scope.ensure_unit_access(scope, unit_id)
          terms = parse_model(LeaseTerms, terms)
          status = LeaseStatus(status)
          if status not in (LeaseStatus.ACTIVE, LeaseStatus.PENDING):
               raise ValidationError("A new lease must be 'active' or 'pending'")

          tenant = db.query(User).filter(User.id == tenant_id, User.role == UserRole.TENANT).first()
          if not tenant:
               raise NotFoundError(f"Tenant with ID {tenant_id} not found")
          unit = db.query(Unit).filter(Unit.id == unit_id).first()
          if not unit:
               raise NotFoundError(f"Unit with ID {unit_id} not found")

          now = now or utcnow()
          lease = Lease(
               tenant_id=tenant_id,
               unit_id=unit_id,
               start_date=terms.start_date,
               end_date=terms.end_date,
               monthly_rent=terms.monthly_rent,
               security_deposit=terms.security_deposit,
               rent_due_day=terms.rent_due_day,
               late_fee_amount=terms.late_fee_amount,
               grace_period_days=terms.grace_period_days,
               status=status,
               notes=terms.notes,
               created_at=now,
               updated_at=now,
          )
          db.add(lease)
          LeaseRegistry._flush_or_conflict(db, tenant_id=tenant_id, unit_id=unit_id)
          logger.info(
               "Lease %s created for tenant %s on unit %s (%s)",
               lease.id, tenant_id, unit_id, status.value,
          )
          return lease

     @staticmethod
     def activate_lease(db: Session, actor: Actor, lease_id: int, now: Optional[datetime] = None) -> Lease:
          """Move a pending lease to active. Already active is a no-op."""
          lease = LeaseRegistry._get_for_manager(db, actor, lease_id)
          if lease.status == LeaseStatus.ACTIVE:
               return lease
          if lease.status != LeaseStatus.PENDING:
               raise ConflictError(
                    f"Cannot activate a lease that is {lease.status.value}",
                    detail={"lease_id": lease.id},
               )
          lease.status = LeaseStatus.ACTIVE
          lease.updated_at = now or utcnow()
          LeaseRegistry._flush_or_conflict(db, tenant_id=lease.tenant_id, unit_id=lease.unit_id)
          logger.info("Lease %s activated", lease.id)
          return lease

     @staticmethod
     def terminate_lease(
          db: Session,
          actor: Actor,
          lease_id: int,
          reason: str,
          now: Optional[datetime] = None,
     ) -> Lease:
          """
          Terminate an active or pending lease early.

          Terminating an already terminated lease returns it unchanged.
          Open service requests of the tenant on the unit are cancelled.

          Raises:
               ValidationError: Empty reason
               ConflictError: Lease is expired
          """
          if not reason or not reason.strip():
               raise ValidationError("A termination reason is required")
          lease = LeaseRegistry._get_for_manager(db, actor, lease_id)

          if lease.status == LeaseStatus.TERMINATED:
               logger.info("Lease %s already terminated; nothing to do", lease.id)
               return lease
          if lease.status not in (LeaseStatus.ACTIVE, LeaseStatus.PENDING):
               raise ConflictError(
                    f"Cannot terminate a lease that is {lease.status.value}",
                    detail={"lease_id": lease.id},
               )

          now = now or utcnow()
          lease.status = LeaseStatus.TERMINATED
          lease.terminated_at = now
          lease.terminated_by_id = actor.id
          lease.notes = add_note(lease.notes, f"LEASE TERMINATED. Reason: {reason.strip()}", now.date())
          lease.updated_at = now

          open_requests = (
               db.query(ServiceRequest)
               .filter(
                    ServiceRequest.tenant_id == lease.tenant_id,
                    ServiceRequest.unit_id == lease.unit_id,
                    ServiceRequest.status.in_(OPEN_REQUEST_STATUSES),
               )
               .all()
          )
          for request in open_requests:
               request.status = ServiceRequestStatus.CANCELLED
               request.notes = add_note(request.notes, "Cancelled due to lease termination", now.date())
               request.updated_at = now

          db.flush()
          logger.info(
               "Lease %s terminated by user %s (%d open requests cancelled): %s",
               lease.id, actor.id, len(open_requests), reason,
          )
          return lease

     @staticmethod
     def renew_lease(
          db: Session,
          actor: Actor,
          lease_id: int,
          new_end_date: date,
          new_rent: Optional[Decimal] = None,
          security_deposit: Optional[Decimal] = None,
          rent_due_day: Optional[int] = None,
          late_fee_amount: Optional[Decimal] = None,
          grace_period_days: Optional[int] = None,
          notes: Optional[str] = None,
          now: Optional[datetime] = None,
     ) -> Lease:
          """
          Create the follow-on lease of an active lease.

          The renewal starts on the current lease's end_date with status
          pending and inherits every term not overridden. The current lease
          is left untouched; it expires on its own end date and the
          renewal is activated by reconcile_lease_states.

          Raises:
               ConflictError: Lease isn't active or was already renewed
               ValidationError: new_end_date not after the current end_date
          """
          current = LeaseRegistry._get_for_manager(db, actor, lease_id)
          if current.status != LeaseStatus.ACTIVE:
               raise ConflictError("Can only renew active leases", detail={"lease_id": current.id})
          if new_end_date <= current.end_date:
               raise ValidationError(
                    "Renewal end date must be after the current lease end date",
                    detail={"current_end_date": current.end_date.isoformat()},
               )

          existing = (
               db.query(Lease)
               .filter(
                    Lease.renewed_from_id == current.id,
                    Lease.status.in_((LeaseStatus.PENDING, LeaseStatus.ACTIVE)),
               )
               .first()
          )
          if existing:
               raise ConflictError(
                    "Lease already has a renewal",
                    detail={"lease_id": current.id, "renewal_id": existing.id},
               )

          terms = parse_model(LeaseTerms, {
               "start_date": current.end_date,
               "end_date": new_end_date,
               "monthly_rent": new_rent if new_rent is not None else current.monthly_rent,
               "security_deposit": security_deposit if security_deposit is not None else current.security_deposit,
               "rent_due_day": rent_due_day if rent_due_day is not None else current.rent_due_day,
               "late_fee_amount": late_fee_amount if late_fee_amount is not None else current.late_fee_amount,
               "grace_period_days": (
                    grace_period_days if grace_period_days is not None else current.grace_period_days
               ),
               "notes": notes or f"Renewal of lease {current.id}",
          })

          now = now or utcnow()
          renewal = Lease(
               tenant_id=current.tenant_id,
               unit_id=current.unit_id,
               start_date=terms.start_date,
               end_date=terms.end_date,
               monthly_rent=terms.monthly_rent,
               security_deposit=terms.security_deposit,
               rent_due_day=terms.rent_due_day,
               late_fee_amount=terms.late_fee_amount,
               grace_period_days=terms.grace_period_days,
               status=LeaseStatus.PENDING,
               notes=terms.notes,
               renewed_from_id=current.id,
               created_at=now,
               updated_at=now,
          )
          db.add(renewal)
          db.flush()
          logger.info("Lease renewed: current lease %s -> new lease %s", current.id, renewal.id)
          return renewal

     @staticmethod
     def add_co_tenant(db: Session, actor: Actor, lease_id: int, tenant_id: int) -> Lease:
          """Attach an additional tenant (roommate) to a lease."""
          lease = LeaseRegistry._get_for_manager(db, actor, lease_id)
          if lease.status not in (LeaseStatus.ACTIVE, LeaseStatus.PENDING):
               raise ConflictError(
                    f"Cannot add tenants to a lease that is {lease.status.value}",
                    detail={"lease_id": lease.id},
               )
          if tenant_id == lease.tenant_id:
               raise ValidationError("Primary tenant cannot also be a co-tenant")
          tenant = db.query(User).filter(User.id == tenant_id, User.role == UserRole.TENANT).first()
          if not tenant:
               raise NotFoundError(f"Tenant with ID {tenant_id} not found")
          if tenant not in lease.additional_tenants:
               lease.additional_tenants.append(tenant)
               db.flush()
          return lease

     # ------------------------------------------------------------------
     # Reads
     # ------------------------------------------------------------------

     @staticmethod
     def get_lease(db: Session, actor: Actor, lease_id: int) -> Lease:
          """
          Fetch one lease the actor may see.

          Managers see leases on units in their scope; tenants see leases
          they are the primary or an additional tenant on.
          """
          lease = db.query(Lease).filter(Lease.id == lease_id).first()
          if not lease:
               raise NotFoundError(f"Lease with ID {lease_id} not found")
          if actor.is_manager:
               access_scope.ensure_unit_access(access_scope.resolve(actor), lease.unit_id)
          elif not (actor.is_tenant and actor.id in lease.occupant_ids()):
               raise AccessDeniedError("You do not have permission to view this lease")
          return lease

     @staticmethod
     def get_accessible_leases(
          db: Session,
          actor: Actor,
          filters: Union[LeaseFilter, dict, None] = None,
     ) -> List[Lease]:
          """List leases visible to the actor, newest first."""
          filters = parse_model(LeaseFilter, filters or {})
          query = db.query(Lease)

          if actor.is_manager:
               scope = access_scope.resolve(actor)
               query = access_scope.apply_unit_filter(query, scope, Lease.unit_id)
          elif actor.is_tenant:
               scope = None
               query = query.filter(LeaseRegistry._occupant_clause(actor.id))
          else:
               raise AccessDeniedError(f"Role '{actor.role.value}' cannot list leases")

          if filters.status is not None:
               query = query.filter(Lease.status == filters.status)
          if filters.tenant_id is not None:
               query = query.filter(Lease.tenant_id == filters.tenant_id)
          if filters.unit_id is not None:
               query = query.filter(Lease.unit_id == filters.unit_id)

          leases = query.order_by(Lease.created_at.desc(), Lease.id.desc()).all()
          if scope is not None:
               leases = access_scope.filter_leases(scope, leases)
          return leases

     @staticmethod
     def find_active_lease(
          db: Session,
          tenant_id: Optional[int] = None,
          unit_id: Optional[int] = None,
     ) -> Optional[Lease]:
          """
          The active lease of a primary tenant or of a unit, if any.

          Raises:
               ConsistencyError: More than one active lease was found
          """
          if (tenant_id is None) == (unit_id is None):
               raise ValueError("Pass exactly one of tenant_id or unit_id")
          query = db.query(Lease).filter(Lease.status == LeaseStatus.ACTIVE)
          if tenant_id is not None:
               query = query.filter(Lease.tenant_id == tenant_id)
          else:
               query = query.filter(Lease.unit_id == unit_id)
          leases = query.all()
          if len(leases) > 1:
               LeaseRegistry._raise_duplicate_active(leases, tenant_id=tenant_id, unit_id=unit_id)
          return leases[0] if leases else None

     @staticmethod
     def leases_for_occupant(db: Session, tenant_id: int, status: Optional[LeaseStatus] = None) -> List[Lease]:
          """Leases where the user is the primary or an additional tenant."""
          query = db.query(Lease).filter(LeaseRegistry._occupant_clause(tenant_id))
          if status is not None:
               query = query.filter(Lease.status == status)
          return query.order_by(Lease.start_date.desc(), Lease.id.desc()).all()

     # ------------------------------------------------------------------
     # Time-driven transitions
     # ------------------------------------------------------------------

     @staticmethod
     def reconcile_lease_states(db: Session, as_of: date, now: Optional[datetime] = None) -> dict:
          """
          Apply the transitions that happen with the passage of time.

          1. Active leases whose end_date <= as_of become expired.
          2. Pending renewals whose period covers as_of become active,
             unless their tenant or unit still holds an active lease;
             those are left pending and reported as deferred.
          3. Pending renewals whose whole period ended before as_of are
             left pending and reported as stale; they need a manager to
             terminate them.

          Pending leases created outside a renewal wait for an explicit
          activate_lease call.
          """
          now = now or utcnow()
          expired = (
               db.query(Lease)
               .filter(Lease.status == LeaseStatus.ACTIVE, Lease.end_date <= as_of)
               .all()
          )
          for lease in expired:
               lease.status = LeaseStatus.EXPIRED
               lease.updated_at = now
          db.flush()

          due_renewals = (
               db.query(Lease)
               .filter(
                    Lease.status == LeaseStatus.PENDING,
                    Lease.renewed_from_id.isnot(None),
                    Lease.start_date <= as_of,
                    Lease.end_date > as_of,
               )
               .order_by(Lease.start_date, Lease.id)
               .all()
          )
          activated, deferred = [], []
          for lease in due_renewals:
               blocking = (
                    LeaseRegistry.find_active_lease(db, tenant_id=lease.tenant_id)
                    or LeaseRegistry.find_active_lease(db, unit_id=lease.unit_id)
               )
               if blocking is not None:
                    logger.warning(
                         "Renewal %s not activated: lease %s is still active",
                         lease.id, blocking.id,
                    )
                    deferred.append(lease.id)
                    continue
               lease.status = LeaseStatus.ACTIVE
               lease.updated_at = now
               LeaseRegistry._flush_or_conflict(db, tenant_id=lease.tenant_id, unit_id=lease.unit_id)
               activated.append(lease.id)

          stale = [
               lease_id
               for (lease_id,) in db.query(Lease.id)
               .filter(
                    Lease.status == LeaseStatus.PENDING,
                    Lease.renewed_from_id.isnot(None),
                    Lease.end_date <= as_of,
               )
               .order_by(Lease.id)
          ]
          if stale:
               logger.warning("Renewals %s ended while still pending", stale)

          if expired or activated:
               logger.info(
                    "Lease reconciliation as of %s: %d expired, %d activated, %d deferred",
                    as_of, len(expired), len(activated), len(deferred),
               )
          return {
               "expired": [lease.id for lease in expired],
               "activated": activated,
               "deferred": deferred,
               "stale": stale,
          }

     # ------------------------------------------------------------------
     # Helpers
     # ------------------------------------------------------------------

     @staticmethod
     def _get_for_manager(db: Session, actor: Actor, lease_id: int) -> Lease:
          scope = access_scope.require_manager(actor)
          lease = db.query(Lease).filter(Lease.id == lease_id).first()
          if not lease:
               raise NotFoundError(f"Lease with ID {lease_id} not found")
          access_scope.ensure_unit_access(scope, lease.unit_id)
          return lease

     @staticmethod
     def _occupant_clause(tenant_id: int):
          co_tenant_leases = (
               select(lease_additional_tenants.c.lease_id)
               .where(lease_additional_tenants.c.tenant_id == tenant_id)
          )
          return or_(Lease.tenant_id == tenant_id, Lease.id.in_(co_tenant_leases))

     @staticmethod
     def _flush_or_conflict(db: Session, tenant_id: int, unit_id: int) -> None:
          """Flush pending lease writes; a unique-index violation becomes ConflictError."""
          try:
               db.flush()
          except IntegrityError as exc:
               db.rollback()
               logger.warning(
                    "Rejected second active lease for tenant %s / unit %s: %s",
                    tenant_id, unit_id, exc.orig,
               )
               raise ConflictError(
                    ACTIVE_LEASE_CONFLICT,
                    detail={"tenant_id": tenant_id, "unit_id": unit_id},
               ) from exc

     @staticmethod
     def _raise_duplicate_active(leases: List[Lease], tenant_id=None, unit_id=None) -> None:
          ids = [lease.id for lease in leases]
          logger.critical(
               "CONSISTENCY VIOLATION: %d active leases for tenant=%s unit=%s: %s",
               len(leases), tenant_id, unit_id, ids,
          )
          raise ConsistencyError(
               "More than one active lease found",
               detail={"tenant_id": tenant_id, "unit_id": unit_id, "lease_ids": ids},
          )
