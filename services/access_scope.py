# services/access_scope.py
"""
Access scope - which units, leases, tenants and service requests an actor may see.

Managers are scoped by unit:
- manager / supervisor: FullScope (everything)
- restricted_manager: RestrictedScope built from their assigned units

Tenants and technicians are scoped by identity by the callers (their own
leases, payments and requests) and never resolve a unit scope.

Every read path that returns units, leases, tenants or service requests
goes through one of the filters below. Nothing here is cached: the actor,
including the assigned-unit set, is loaded fresh for each request.
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple, Union

from sqlalchemy import false
from sqlalchemy.orm import Session

from exceptions import AccessDeniedError, NotFoundError
from models import Lease, LeaseStatus, ManagerUnitAssignment, User, UserRole
from models.user import FULL_ACCESS_ROLES, MANAGER_ROLES, TECHNICIAN_ROLES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
     """The caller of a core operation, passed explicitly into every call."""
     id: int
     role: UserRole
     assigned_unit_ids: FrozenSet[int] = field(default_factory=frozenset)

     @property
     def is_manager(self) -> bool:
          return self.role in MANAGER_ROLES

     @property
     def is_tenant(self) -> bool:
          return self.role == UserRole.TENANT

     @property
     def is_technician(self) -> bool:
          return self.role in TECHNICIAN_ROLES


@dataclass(frozen=True)
class FullScope:
     def allows(self, unit_id: int) -> bool:
          return True


@dataclass(frozen=True)
class RestrictedScope:
     unit_ids: FrozenSet[int]

     def allows(self, unit_id: int) -> bool:
          return unit_id in self.unit_ids


Scope = Union[FullScope, RestrictedScope]


def load_actor(db: Session, user_id: int) -> Actor:
     """
     Build an Actor from the stored user record.

     Restricted managers get their assignment rows read in the same call,
     so a change to the assignment table is visible on the next request.
     """
     user = db.query(User).filter(User.id == user_id).first()
     if user is None or not user.is_active:
          raise NotFoundError(f"User with ID {user_id} not found")

     assigned: Set[int] = set()
     if user.role == UserRole.RESTRICTED_MANAGER:
          rows = (
               db.query(ManagerUnitAssignment.unit_id)
               .filter(ManagerUnitAssignment.user_id == user.id)
               .all()
          )
          assigned = {row[0] for row in rows}
     return Actor(id=user.id, role=user.role, assigned_unit_ids=frozenset(assigned))


def resolve(actor: Actor) -> Scope:
     """Compute the unit scope of a managing actor."""
     if actor.role in FULL_ACCESS_ROLES:
          return FullScope()
     if actor.role == UserRole.RESTRICTED_MANAGER:
          return RestrictedScope(unit_ids=frozenset(actor.assigned_unit_ids))
     raise AccessDeniedError(
          f"Role '{actor.role.value}' has no unit scope",
          detail={"actor_id": actor.id},
     )


def require_manager(actor: Actor) -> Scope:
     """Resolve the scope of an actor that must be a manager of some kind."""
     if not actor.is_manager:
          raise AccessDeniedError("Only managers can perform this operation")
     return resolve(actor)


def ensure_unit_access(scope: Scope, unit_id: int) -> None:
     if not scope.allows(unit_id):
          raise AccessDeniedError(
               "You do not have permission to access this unit",
               detail={"unit_id": unit_id},
          )


# ---------------------------------------------------------------------------
# Row filters (pure)
# ---------------------------------------------------------------------------

def filter_units(scope: Scope, units: Iterable) -> List:
     return [unit for unit in units if scope.allows(unit.id)]


def filter_leases(scope: Scope, leases: Iterable) -> List:
     return [lease for lease in leases if scope.allows(lease.unit_id)]


def filter_service_requests(scope: Scope, requests: Iterable) -> List:
     return [request for request in requests if scope.allows(request.unit_id)]


def filter_tenants(scope: Scope, tenants_via_lease: Iterable[Tuple[User, Optional[Lease]]]) -> List[User]:
     """
     Filter tenants given as (tenant, lease) pairs.

     FullScope keeps every tenant. RestrictedScope keeps a tenant only when
     the paired lease is active and on an allowed unit, so a tenant with no
     active lease is invisible to a restricted manager.
     """
     seen = set()
     visible = []
     for tenant, lease in tenants_via_lease:
          if tenant.id in seen:
               continue
          if isinstance(scope, RestrictedScope):
               if lease is None or lease.status != LeaseStatus.ACTIVE or not scope.allows(lease.unit_id):
                    continue
          seen.add(tenant.id)
          visible.append(tenant)
     return visible


# ---------------------------------------------------------------------------
# Query filters
# ---------------------------------------------------------------------------

def apply_unit_filter(query, scope: Scope, unit_column):
     """Restrict a query to rows whose unit column is inside the scope."""
     if isinstance(scope, RestrictedScope):
          if not scope.unit_ids:
               return query.filter(false())
          return query.filter(unit_column.in_(scope.unit_ids))
     return query


def accessible_tenant_ids(db: Session, scope: Scope) -> Optional[Set[int]]:
     """
     Tenant ids visible to the scope, or None for every tenant.

     Restricted scopes see tenants (primary and co-tenants) of active
     leases on their units only.
     """
     if isinstance(scope, FullScope):
          return None
     if not scope.unit_ids:
          return set()
     leases = (
          db.query(Lease)
          .filter(Lease.unit_id.in_(scope.unit_ids), Lease.status == LeaseStatus.ACTIVE)
          .all()
     )
     tenant_ids: Set[int] = set()
     for lease in leases:
          tenant_ids |= lease.occupant_ids()
     return tenant_ids
