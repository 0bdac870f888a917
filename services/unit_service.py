# services/unit_service.py
"""
Unit Service - create, edit and delete rentable units.
"""
import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import AccessDeniedError, ConflictError, NotFoundError
from models import Lease, Unit
from schemas.unit import UnitCreate, UnitUpdate
from schemas.validation import parse_model
from services import access_scope
from services.access_scope import Actor, FullScope
from services.clock import utcnow
from services.lease_registry import LeaseRegistry

logger = logging.getLogger(__name__)


def _join_amenities(amenities) -> Optional[str]:
     return ",".join(a.strip() for a in amenities if a.strip()) or None


class UnitService:

     @staticmethod
     def create_unit(db: Session, actor: Actor, unit_data: Union[UnitCreate, dict], now: Optional[datetime] = None) -> Unit:
          """Create a unit. Full managers only."""
          scope = access_scope.require_manager(actor)
          if not isinstance(scope, FullScope):
               raise AccessDeniedError("Only full managers can create units")
          data = parse_model(UnitCreate, unit_data)
          now = now or utcnow()
          values = data.model_dump(exclude={"amenities", "state"})
          unit = Unit(
               **values,
               state=data.state.upper(),
               amenities=_join_amenities(data.amenities),
               created_at=now,
               updated_at=now,
          )
          db.add(unit)
          try:
               db.flush()
          except IntegrityError as exc:
               db.rollback()
               raise ConflictError(f"Unit number '{data.unit_number}' already exists") from exc
          logger.info("Unit %s (%s) created by user %s", unit.id, unit.unit_number, actor.id)
          return unit

     @staticmethod
     def update_unit(
          db: Session,
          actor: Actor,
          unit_id: int,
          changes: Union[UnitUpdate, dict],
          now: Optional[datetime] = None,
     ) -> Unit:
          """
          Edit a unit. Only provided fields change.

          Rent changes here affect future leases only; an existing lease
          keeps its own monthly_rent.
          """
          unit = UnitService.get_unit(db, actor, unit_id)
          data = parse_model(UnitUpdate, changes)
          updates = data.model_dump(exclude_unset=True)
          if "amenities" in updates:
               unit.amenities = _join_amenities(updates.pop("amenities") or [])
          if updates.get("state"):
               updates["state"] = updates["state"].upper()
          for field, value in updates.items():
               setattr(unit, field, value)
          unit.updated_at = now or utcnow()
          db.flush()
          return unit

     @staticmethod
     def delete_unit(db: Session, actor: Actor, unit_id: int) -> None:
          """
          Delete a unit that has never been leased.

          Raises:
               ConflictError: An active lease references the unit, or the
                    unit has lease history (leases are never deleted)
          """
          unit = UnitService.get_unit(db, actor, unit_id)
          if LeaseRegistry.find_active_lease(db, unit_id=unit.id) is not None:
               raise ConflictError("Cannot delete a unit with an active lease", detail={"unit_id": unit.id})
          if db.query(Lease.id).filter(Lease.unit_id == unit.id).first():
               raise ConflictError("Cannot delete a unit with lease history", detail={"unit_id": unit.id})
          db.delete(unit)
          db.flush()
          logger.info("Unit %s deleted by user %s", unit_id, actor.id)

     @staticmethod
     def get_unit(db: Session, actor: Actor, unit_id: int) -> Unit:
          scope = access_scope.require_manager(actor)
          unit = db.query(Unit).filter(Unit.id == unit_id).first()
          if not unit:
               raise NotFoundError(f"Unit with ID {unit_id} not found")
          access_scope.ensure_unit_access(scope, unit.id)
          return unit
