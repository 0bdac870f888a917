"""
Pydantic schemas for the unit catalogue.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import PropertyType


class UnitCreate(BaseModel):
     unit_number: str = Field(..., min_length=1, max_length=50)
     street_address: str = Field(..., min_length=1, max_length=255)
     city: str = Field(..., min_length=1, max_length=100)
     state: str = Field(..., min_length=2, max_length=2)
     zip_code: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")
     building: Optional[str] = None
     property_type: PropertyType
     floor: Optional[int] = None
     bedrooms: int = Field(..., ge=0)
     bathrooms: Decimal = Field(..., ge=0)
     square_feet: int = Field(..., ge=0)
     monthly_rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     amenities: List[str] = []


class UnitUpdate(BaseModel):
     """Only provided fields are changed."""
     street_address: Optional[str] = Field(None, min_length=1, max_length=255)
     city: Optional[str] = Field(None, min_length=1, max_length=100)
     state: Optional[str] = Field(None, min_length=2, max_length=2)
     zip_code: Optional[str] = Field(None, pattern=r"^\d{5}(-\d{4})?$")
     building: Optional[str] = None
     property_type: Optional[PropertyType] = None
     floor: Optional[int] = None
     bedrooms: Optional[int] = Field(None, ge=0)
     bathrooms: Optional[Decimal] = Field(None, ge=0)
     square_feet: Optional[int] = Field(None, ge=0)
     monthly_rent: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     amenities: Optional[List[str]] = None


class UnitResponse(BaseModel):
     id: int
     unit_number: str
     street_address: str
     city: str
     state: str
     zip_code: str
     building: Optional[str] = None
     property_type: PropertyType
     floor: Optional[int] = None
     bedrooms: int
     bathrooms: Decimal
     square_feet: int
     monthly_rent: Decimal
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)
