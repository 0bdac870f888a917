# tests/test_unit_service.py
from decimal import Decimal

import pytest

from exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from models import Unit, UserRole
from services.unit_service import UnitService

from conftest import NOW

NEW_UNIT = {
     "unit_number": "B-204",
     "street_address": "204 Oak Ave",
     "city": "Springfield",
     "state": "il",
     "zip_code": "62704",
     "property_type": "condo",
     "bedrooms": 1,
     "bathrooms": "1.5",
     "square_feet": 640,
     "monthly_rent": "1250.00",
     "amenities": ["parking", " laundry ", ""],
}


class TestCreateUnit:

     def test_full_manager_creates_unit(self, db, manager):
          unit = UnitService.create_unit(db, manager, NEW_UNIT, now=NOW)
          db.commit()
          assert unit.id is not None
          assert unit.state == "IL"
          assert unit.amenities == "parking,laundry"
          assert unit.monthly_rent == Decimal("1250.00")
          assert unit.created_at == NOW

     def test_duplicate_unit_number(self, db, manager):
          UnitService.create_unit(db, manager, NEW_UNIT)
          db.commit()
          with pytest.raises(ConflictError):
               UnitService.create_unit(db, manager, NEW_UNIT)

     def test_invalid_zip(self, db, manager):
          with pytest.raises(ValidationError):
               UnitService.create_unit(db, manager, dict(NEW_UNIT, zip_code="ABCDE"))

     def test_restricted_manager_cannot_create(self, db, make_user, actor_for):
          restricted = actor_for(make_user(UserRole.RESTRICTED_MANAGER))
          with pytest.raises(AccessDeniedError):
               UnitService.create_unit(db, restricted, NEW_UNIT)


class TestUpdateUnit:

     def test_only_given_fields_change(self, db, manager, make_unit):
          unit = make_unit()
          street = unit.street_address
          UnitService.update_unit(db, manager, unit.id, {"monthly_rent": "1100.00", "amenities": ["pool"]}, now=NOW)
          db.commit()
          assert unit.monthly_rent == Decimal("1100.00")
          assert unit.amenities == "pool"
          assert unit.street_address == street
          assert unit.updated_at == NOW

     def test_existing_lease_keeps_its_rent(self, db, manager, make_user, make_unit, make_lease):
          unit = make_unit()
          lease = make_lease(make_user(), unit, monthly_rent=Decimal("900.00"))
          UnitService.update_unit(db, manager, unit.id, {"monthly_rent": "1500.00"})
          db.commit()
          assert lease.monthly_rent == Decimal("900.00")

     def test_restricted_manager_edits_own_units_only(self, db, make_user, make_unit, assign_units, actor_for):
          restricted = make_user(UserRole.RESTRICTED_MANAGER)
          own_unit, other_unit = make_unit(), make_unit()
          assign_units(restricted, own_unit)
          actor = actor_for(restricted)

          UnitService.update_unit(db, actor, own_unit.id, {"bedrooms": 3})
          assert own_unit.bedrooms == 3
          with pytest.raises(AccessDeniedError):
               UnitService.update_unit(db, actor, other_unit.id, {"bedrooms": 3})


class TestDeleteUnit:

     def test_delete_unleased_unit(self, db, manager, make_unit):
          unit = make_unit()
          UnitService.delete_unit(db, manager, unit.id)
          db.commit()
          assert db.query(Unit).filter(Unit.id == unit.id).first() is None

     def test_active_lease_blocks_delete(self, db, manager, make_user, make_unit, make_lease):
          unit = make_unit()
          make_lease(make_user(), unit)
          with pytest.raises(ConflictError):
               UnitService.delete_unit(db, manager, unit.id)

     def test_missing_unit(self, db, manager):
          with pytest.raises(NotFoundError):
               UnitService.delete_unit(db, manager, 999)
