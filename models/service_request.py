import enum

from sqlalchemy import Column, Integer, String, Numeric, Text, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class ServiceCategory(str, enum.Enum):
     ELECTRICAL = "electrical"
     PLUMBING = "plumbing"
     GENERAL_REPAIR = "general_repair"
     HVAC = "hvac"
     APPLIANCE = "appliance"
     OTHER = "other"


class ServicePriority(str, enum.Enum):
     LOW = "low"
     MEDIUM = "medium"
     HIGH = "high"
     EMERGENCY = "emergency"


class ServiceRequestStatus(str, enum.Enum):
     PENDING = "pending"
     ASSIGNED = "assigned"
     IN_PROGRESS = "in_progress"
     COMPLETED = "completed"
     CANCELLED = "cancelled"


OPEN_REQUEST_STATUSES = frozenset({ServiceRequestStatus.PENDING, ServiceRequestStatus.ASSIGNED})


class ServiceRequest(Base):
     """
     ServiceRequest model - maintenance work raised by a tenant against a unit.
     Only read paths and the lease-termination cancellation touch it here.
     """
     __tablename__ = "service_requests"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     unit_id = Column(Integer, ForeignKey("units.id"), nullable=False, index=True)

     category = Column(
          Enum(ServiceCategory, name="service_category", create_constraint=True, values_callable=enum_values),
          nullable=False,
     )
     priority = Column(
          Enum(ServicePriority, name="service_priority", create_constraint=True, values_callable=enum_values),
          default=ServicePriority.MEDIUM,
          nullable=False,
     )
     title = Column(String(255), nullable=False)
     description = Column(Text, nullable=False)
     status = Column(
          Enum(ServiceRequestStatus, name="service_request_status", create_constraint=True,
               values_callable=enum_values),
          default=ServiceRequestStatus.PENDING,
          nullable=False,
     )
     assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
     fee = Column(Numeric(10, 2), nullable=False, default=10)
     is_paid = Column(Boolean, default=False, nullable=False)
     notes = Column(Text, nullable=True)

     created_at = Column(DateTime, nullable=False)
     updated_at = Column(DateTime, nullable=True)

     tenant = relationship("User", foreign_keys=[tenant_id])
     unit = relationship("Unit")
     assigned_to = relationship("User", foreign_keys=[assigned_to_id])

     def __repr__(self):
          return f"<ServiceRequest(id={self.id}, unit_id={self.unit_id}, status='{self.status.value}')>"
