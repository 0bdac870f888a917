# tests/test_access_scope.py
from types import SimpleNamespace

import pytest

from exceptions import AccessDeniedError, NotFoundError
from models import LeaseStatus, ManagerUnitAssignment, Unit, UserRole
from services import access_scope
from services.access_scope import Actor, FullScope, RestrictedScope


class TestResolve:

     @pytest.mark.parametrize("role", [UserRole.MANAGER, UserRole.SUPERVISOR])
     def test_full_access_roles(self, role):
          assert isinstance(access_scope.resolve(Actor(id=1, role=role)), FullScope)

     def test_restricted_manager_gets_assigned_units(self):
          actor = Actor(id=1, role=UserRole.RESTRICTED_MANAGER, assigned_unit_ids=frozenset({3, 4}))
          scope = access_scope.resolve(actor)
          assert scope == RestrictedScope(unit_ids=frozenset({3, 4}))
          assert scope.allows(3)
          assert not scope.allows(5)

     @pytest.mark.parametrize(
          "role",
          [UserRole.TENANT, UserRole.ELECTRICIAN, UserRole.PLUMBER, UserRole.BOARDING_MANAGER],
     )
     def test_other_roles_have_no_unit_scope(self, role):
          with pytest.raises(AccessDeniedError):
               access_scope.resolve(Actor(id=1, role=role))

     def test_require_manager_rejects_tenant(self):
          with pytest.raises(AccessDeniedError):
               access_scope.require_manager(Actor(id=1, role=UserRole.TENANT))


class TestLoadActor:

     def test_assignments_are_read_fresh(self, db, make_user, make_unit, assign_units):
          restricted = make_user(UserRole.RESTRICTED_MANAGER)
          unit_a, unit_b = make_unit(), make_unit()
          assign_units(restricted, unit_a)

          assert access_scope.load_actor(db, restricted.id).assigned_unit_ids == frozenset({unit_a.id})

          assign_units(restricted, unit_b)
          assert access_scope.load_actor(db, restricted.id).assigned_unit_ids == frozenset({unit_a.id, unit_b.id})

          db.query(ManagerUnitAssignment).filter(ManagerUnitAssignment.unit_id == unit_a.id).delete()
          db.commit()
          assert access_scope.load_actor(db, restricted.id).assigned_unit_ids == frozenset({unit_b.id})

     def test_missing_user(self, db):
          with pytest.raises(NotFoundError):
               access_scope.load_actor(db, 999)

     def test_inactive_user(self, db, make_user):
          user = make_user(UserRole.MANAGER, is_active=False)
          with pytest.raises(NotFoundError):
               access_scope.load_actor(db, user.id)


class TestRowFilters:

     def test_filter_units_and_leases(self):
          scope = RestrictedScope(unit_ids=frozenset({1, 2}))
          units = [SimpleNamespace(id=i) for i in (1, 2, 3)]
          leases = [SimpleNamespace(unit_id=i) for i in (1, 3)]

          assert [u.id for u in access_scope.filter_units(scope, units)] == [1, 2]
          assert [l.unit_id for l in access_scope.filter_leases(scope, leases)] == [1]
          assert len(access_scope.filter_units(FullScope(), units)) == 3

     def test_filter_service_requests(self):
          scope = RestrictedScope(unit_ids=frozenset({2}))
          requests = [SimpleNamespace(unit_id=1), SimpleNamespace(unit_id=2)]
          assert access_scope.filter_service_requests(scope, requests) == [requests[1]]

     def test_filter_tenants_requires_active_lease_on_allowed_unit(self):
          scope = RestrictedScope(unit_ids=frozenset({1}))
          on_unit = SimpleNamespace(id=10)
          elsewhere = SimpleNamespace(id=11)
          moved_out = SimpleNamespace(id=12)
          no_lease = SimpleNamespace(id=13)
          pairs = [
               (on_unit, SimpleNamespace(unit_id=1, status=LeaseStatus.ACTIVE)),
               (on_unit, SimpleNamespace(unit_id=1, status=LeaseStatus.ACTIVE)),
               (elsewhere, SimpleNamespace(unit_id=2, status=LeaseStatus.ACTIVE)),
               (moved_out, SimpleNamespace(unit_id=1, status=LeaseStatus.TERMINATED)),
               (no_lease, None),
          ]

          assert access_scope.filter_tenants(scope, pairs) == [on_unit]
          assert access_scope.filter_tenants(FullScope(), pairs) == [on_unit, elsewhere, moved_out, no_lease]

     def test_ensure_unit_access(self):
          with pytest.raises(AccessDeniedError):
               access_scope.ensure_unit_access(RestrictedScope(unit_ids=frozenset()), 1)
          access_scope.ensure_unit_access(FullScope(), 1)


class TestQueryFilters:

     def test_empty_restricted_scope_matches_nothing(self, db, make_unit):
          make_unit()
          query = access_scope.apply_unit_filter(db.query(Unit), RestrictedScope(unit_ids=frozenset()), Unit.id)
          assert query.all() == []

     def test_restricted_scope_limits_rows(self, db, make_unit):
          unit_a, _ = make_unit(), make_unit()
          query = access_scope.apply_unit_filter(
               db.query(Unit), RestrictedScope(unit_ids=frozenset({unit_a.id})), Unit.id,
          )
          assert [u.id for u in query.all()] == [unit_a.id]

     def test_accessible_tenant_ids(self, db, make_user, make_unit, make_lease):
          tenant_a, tenant_b = make_user(), make_user()
          unit_a, unit_b = make_unit(), make_unit()
          make_lease(tenant_a, unit_a)
          make_lease(tenant_b, unit_b)

          assert access_scope.accessible_tenant_ids(db, FullScope()) is None
          scope = RestrictedScope(unit_ids=frozenset({unit_a.id}))
          assert access_scope.accessible_tenant_ids(db, scope) == {tenant_a.id}
