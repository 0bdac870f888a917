"""
Pydantic schemas for notifications.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

from models import NotificationPriority, NotificationType


class NotificationResponse(BaseModel):
     id: int
     type: NotificationType
     priority: NotificationPriority
     title: str
     message: str
     payment_id: Optional[int] = None
     lease_id: Optional[int] = None
     period_year: Optional[int] = None
     period_month: Optional[int] = None
     is_read: bool
     read_at: Optional[datetime] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
     notifications: List[NotificationResponse]
     unread: int


class MarkAllReadResponse(BaseModel):
     updated: int


class PaymentDueSweepResponse(BaseModel):
     as_of: date
     sent: int
     notifications: List[NotificationResponse]
