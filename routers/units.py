# routers/units.py
"""
Unit catalogue routes.

Managers see and edit units in their scope; only full managers create units.
Tenants can list the units they occupy.
"""
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from auth import get_current_actor
from database import get_session
from schemas.unit import UnitCreate, UnitResponse, UnitUpdate
from services.access_scope import Actor
from services.portfolio_service import PortfolioService
from services.unit_service import UnitService

router = APIRouter(prefix="/api/units", tags=["units"])


@router.post("", response_model=UnitResponse, status_code=status.HTTP_201_CREATED, summary="Create a unit")
def create_unit(
     body: UnitCreate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return UnitService.create_unit(db, actor, body)


@router.get("", response_model=List[UnitResponse], summary="List visible units")
def list_units(
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return PortfolioService(db).visible_units(actor)


@router.get("/{unit_id}", response_model=UnitResponse, summary="Get unit by ID")
def get_unit(
     unit_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return UnitService.get_unit(db, actor, unit_id)


@router.patch("/{unit_id}", response_model=UnitResponse, summary="Update a unit")
def update_unit(
     unit_id: int,
     body: UnitUpdate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     return UnitService.update_unit(db, actor, unit_id, body)


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a unit")
def delete_unit(
     unit_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     UnitService.delete_unit(db, actor, unit_id)
     return Response(status_code=status.HTTP_204_NO_CONTENT)
