"""
Pydantic schemas for payment recording, processor confirmations and
obligation status.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from models import PaymentMethod, PaymentStatus, PaymentType


class PaymentCreate(BaseModel):
     """A payment to record. transaction_id is the idempotency key."""
     tenant_id: int = Field(..., gt=0)
     unit_id: int = Field(..., gt=0)
     lease_id: Optional[int] = Field(None, gt=0)
     type: PaymentType
     amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     payment_method: PaymentMethod
     status: PaymentStatus = PaymentStatus.PENDING
     transaction_id: str = Field(..., min_length=1, max_length=255)
     month: Optional[int] = Field(None, ge=1, le=12)
     year: Optional[int] = Field(None, ge=2020)
     paid_at: Optional[datetime] = None
     service_request_id: Optional[int] = None
     notes: Optional[str] = None

     @model_validator(mode="after")
     def _check_period(self):
          if self.type == PaymentType.RENT:
               if self.month is None or self.year is None:
                    raise ValueError("Rent payments must carry month and year")
          elif self.month is not None or self.year is not None:
               raise ValueError("Only rent payments carry month and year")
          if self.status == PaymentStatus.REFUNDED:
               raise ValueError("A payment cannot be recorded as refunded")
          return self

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenant_id": 7,
                    "unit_id": 3,
                    "type": "rent",
                    "amount": 1000.00,
                    "payment_method": "ach",
                    "status": "processing",
                    "transaction_id": "pi_3Nf8xYz",
                    "month": 1,
                    "year": 2026,
               }
          }
     )


class ConfirmationEvent(BaseModel):
     """Payment processor confirmation callback."""
     transaction_id: str = Field(..., min_length=1, max_length=255)
     amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     status: PaymentStatus
     paid_at: Optional[datetime] = None

     @model_validator(mode="after")
     def _check_status(self):
          if self.status not in (PaymentStatus.PROCESSING, PaymentStatus.COMPLETED, PaymentStatus.FAILED):
               raise ValueError("Confirmation status must be processing, completed or failed")
          return self


class PaymentResponse(BaseModel):
     id: int
     tenant_id: int
     unit_id: int
     lease_id: Optional[int] = None
     type: PaymentType
     amount: Decimal
     payment_method: PaymentMethod
     status: PaymentStatus
     transaction_id: str
     month: Optional[int] = None
     year: Optional[int] = None
     paid_at: Optional[datetime] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class PaymentHistoryResponse(BaseModel):
     payments: List[PaymentResponse]
     total: int


class ObligationStatusResponse(BaseModel):
     lease_id: int
     year: int
     month: int
     status: str
     monthly_rent: Decimal
     total_paid: Decimal
     remaining: Decimal
     due_date: date
     days_overdue: int
     days_until_due: int
     late_fee: Decimal
     overdue: bool
     urgent: bool
     amount_due: Decimal
