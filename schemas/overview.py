"""
Pydantic schemas for the portfolio read views.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict

from models import ServiceCategory, ServicePriority, ServiceRequestStatus, UserRole
from schemas.lease import LeaseResponse
from schemas.payment import ObligationStatusResponse, PaymentResponse


class TenantResponse(BaseModel):
     id: int
     email: str
     first_name: str
     last_name: str
     phone: Optional[str] = None
     role: UserRole

     model_config = ConfigDict(from_attributes=True)


class ServiceRequestResponse(BaseModel):
     id: int
     tenant_id: int
     unit_id: int
     category: ServiceCategory
     priority: ServicePriority
     title: str
     status: ServiceRequestStatus
     assigned_to_id: Optional[int] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class BalanceSummaryResponse(BaseModel):
     as_of: str
     leases: int
     by_status: Dict[str, int]
     total_outstanding: Decimal
     total_late_fees: Decimal
     urgent_lease_ids: List[int]


class TenantDashboardResponse(BaseModel):
     lease: LeaseResponse
     obligation: ObligationStatusResponse
     recent_payments: List[PaymentResponse]
     days_remaining: int
     unread_notifications: int = 0


class ReconcileResponse(BaseModel):
     expired: List[int]
     activated: List[int]
     deferred: List[int]
     stale: List[int] = []
