"""
Pydantic schemas for lease operations.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from models import LeaseStatus


class LeaseTerms(BaseModel):
     """Commercial terms of a lease. The period is [start_date, end_date)."""
     start_date: date
     end_date: date
     monthly_rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     security_deposit: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     rent_due_day: int = Field(default=1, ge=1, le=28, description="Day of month rent is due")
     late_fee_amount: Decimal = Field(default=Decimal("50"), ge=0, max_digits=10, decimal_places=2)
     grace_period_days: int = Field(default=5, ge=0)
     notes: Optional[str] = None

     @model_validator(mode="after")
     def _check_period(self):
          if self.end_date <= self.start_date:
               raise ValueError("end_date must be after start_date")
          return self

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "start_date": "2026-01-01",
                    "end_date": "2027-01-01",
                    "monthly_rent": 1000.00,
                    "security_deposit": 1000.00,
                    "rent_due_day": 1,
                    "late_fee_amount": 50.00,
                    "grace_period_days": 5,
               }
          }
     )


class LeaseCreate(BaseModel):
     """Request body for POST /api/leases."""
     tenant_id: int = Field(..., gt=0)
     unit_id: int = Field(..., gt=0)
     terms: LeaseTerms
     status: LeaseStatus = Field(
          default=LeaseStatus.ACTIVE,
          description="Pass 'pending' to create the lease for later approval",
     )

     @model_validator(mode="after")
     def _check_initial_status(self):
          if self.status not in (LeaseStatus.ACTIVE, LeaseStatus.PENDING):
               raise ValueError("A new lease must be 'active' or 'pending'")
          return self


class LeaseRenew(BaseModel):
     """Request body for POST /api/leases/{lease_id}/renew. Omitted terms are carried over."""
     new_end_date: date
     monthly_rent: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     security_deposit: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     rent_due_day: Optional[int] = Field(None, ge=1, le=28)
     late_fee_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
     grace_period_days: Optional[int] = Field(None, ge=0)
     notes: Optional[str] = None


class LeaseTerminate(BaseModel):
     reason: str = Field(..., min_length=1, max_length=1000)


class CoTenantAdd(BaseModel):
     tenant_id: int = Field(..., gt=0)


class LeaseFilter(BaseModel):
     status: Optional[LeaseStatus] = None
     tenant_id: Optional[int] = None
     unit_id: Optional[int] = None


class LeaseResponse(BaseModel):
     id: int
     tenant_id: int
     unit_id: int
     start_date: date
     end_date: date
     monthly_rent: Decimal
     security_deposit: Decimal
     rent_due_day: int
     late_fee_amount: Decimal
     grace_period_days: int
     status: LeaseStatus
     notes: Optional[str] = None
     renewed_from_id: Optional[int] = None
     additional_tenant_ids: List[int] = []
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)

     @classmethod
     def from_lease(cls, lease) -> "LeaseResponse":
          response = cls.model_validate(lease)
          response.additional_tenant_ids = [t.id for t in lease.additional_tenants]
          return response


class LeaseListResponse(BaseModel):
     leases: List[LeaseResponse]
     total: int
