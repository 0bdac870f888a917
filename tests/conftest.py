# tests/conftest.py
import os

# Settings read at import time by database.py, auth.py and late_fee_policy.py
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LATE_FEE_POLICY", "flat")

from datetime import date, datetime
from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import (
     Base,
     LeaseStatus,
     ManagerUnitAssignment,
     PropertyType,
     ServiceCategory,
     ServiceRequest,
     ServiceRequestStatus,
     Unit,
     User,
     UserRole,
)
from services.access_scope import load_actor
from services.lease_registry import LeaseRegistry

NOW = datetime(2026, 1, 1, 9, 0, 0)

_sequence = count(1)


@pytest.fixture
def engine():
     engine = create_engine(
          "sqlite://",
          connect_args={"check_same_thread": False},
          poolclass=StaticPool,
     )
     Base.metadata.create_all(engine)
     yield engine
     engine.dispose()


@pytest.fixture
def session_factory(engine):
     return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
     session = session_factory()
     yield session
     session.close()


@pytest.fixture
def make_user(db):
     def _make_user(role=UserRole.TENANT, first_name="Pat", last_name=None, is_active=True):
          n = next(_sequence)
          user = User(
               email=f"user{n}@example.com",
               first_name=first_name,
               last_name=last_name or f"User{n}",
               role=role,
               is_active=is_active,
               created_at=NOW,
          )
          db.add(user)
          db.commit()
          return user
     return _make_user


@pytest.fixture
def make_unit(db):
     def _make_unit(unit_number=None, monthly_rent=Decimal("1000.00")):
          n = next(_sequence)
          unit = Unit(
               unit_number=unit_number or f"U-{n}",
               street_address=f"{n} Main St",
               city="Springfield",
               state="IL",
               zip_code="62701",
               property_type=PropertyType.APARTMENT,
               bedrooms=2,
               bathrooms=Decimal("1.0"),
               square_feet=850,
               monthly_rent=monthly_rent,
               created_at=NOW,
          )
          db.add(unit)
          db.commit()
          return unit
     return _make_unit


@pytest.fixture
def assign_units(db):
     def _assign_units(manager, *units):
          for unit in units:
               db.add(ManagerUnitAssignment(user_id=manager.id, unit_id=unit.id))
          db.commit()
     return _assign_units


@pytest.fixture
def actor_for(db):
     def _actor_for(user):
          return load_actor(db, user.id)
     return _actor_for


@pytest.fixture
def manager(make_user, actor_for):
     return actor_for(make_user(UserRole.MANAGER, first_name="Morgan"))


@pytest.fixture
def make_lease(db, manager):
     def _make_lease(
          tenant,
          unit,
          start_date=date(2026, 1, 1),
          end_date=date(2027, 1, 1),
          monthly_rent=Decimal("1000.00"),
          rent_due_day=1,
          late_fee_amount=Decimal("50.00"),
          grace_period_days=5,
          status=LeaseStatus.ACTIVE,
     ):
          lease = LeaseRegistry.create_lease(
               db,
               manager,
               tenant.id,
               unit.id,
               {
                    "start_date": start_date,
                    "end_date": end_date,
                    "monthly_rent": monthly_rent,
                    "rent_due_day": rent_due_day,
                    "late_fee_amount": late_fee_amount,
                    "grace_period_days": grace_period_days,
               },
               status=status,
               now=NOW,
          )
          db.commit()
          return lease
     return _make_lease


@pytest.fixture
def make_service_request(db):
     def _make_service_request(tenant, unit, status=ServiceRequestStatus.PENDING, assigned_to=None):
          request = ServiceRequest(
               tenant_id=tenant.id,
               unit_id=unit.id,
               category=ServiceCategory.PLUMBING,
               title="Leaking sink",
               description="Kitchen sink drips constantly",
               status=status,
               assigned_to_id=assigned_to.id if assigned_to else None,
               created_at=NOW,
          )
          db.add(request)
          db.commit()
          return request
     return _make_service_request
