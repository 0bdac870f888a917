import enum
from datetime import date

from sqlalchemy import (
     Column, Integer, Numeric, Date, Text, DateTime, ForeignKey, Enum, Index, Table, text,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class LeaseStatus(str, enum.Enum):
     """Lease lifecycle: pending -> active -> expired | terminated."""
     PENDING = "pending"
     ACTIVE = "active"
     EXPIRED = "expired"
     TERMINATED = "terminated"


TERMINAL_LEASE_STATUSES = frozenset({LeaseStatus.EXPIRED, LeaseStatus.TERMINATED})

# Filtered unique indexes: at most one active lease per tenant and per unit.
# The predicate is rendered per dialect so the database itself rejects the
# second active row, whatever order concurrent requests commit in.
_ACTIVE_ONLY = text("status = 'active'")


lease_additional_tenants = Table(
     "lease_additional_tenants",
     Base.metadata,
     Column("lease_id", Integer, ForeignKey("leases.id", ondelete="CASCADE"), primary_key=True),
     Column("tenant_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class Lease(Base):
     """
     Lease model - binds one primary tenant to one unit over [start_date, end_date).

     Leases are never deleted; terminated and expired rows stay for history.
     """
     __tablename__ = "leases"
     __table_args__ = (
          Index(
               "uq_leases_active_tenant",
               "tenant_id",
               unique=True,
               mssql_where=_ACTIVE_ONLY,
               postgresql_where=_ACTIVE_ONLY,
               sqlite_where=_ACTIVE_ONLY,
          ),
          Index(
               "uq_leases_active_unit",
               "unit_id",
               unique=True,
               mssql_where=_ACTIVE_ONLY,
               postgresql_where=_ACTIVE_ONLY,
               sqlite_where=_ACTIVE_ONLY,
          ),
          Index("ix_leases_tenant_status", "tenant_id", "status"),
          Index("ix_leases_unit_status", "unit_id", "status"),
          Index("ix_leases_dates", "start_date", "end_date"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
     unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)

     # Lease period, end exclusive
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=False)

     # Pricing
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     security_deposit = Column(Numeric(12, 2), nullable=False, default=0)

     # Payment terms
     rent_due_day = Column(Integer, nullable=False, default=1)  # 1-28
     late_fee_amount = Column(Numeric(10, 2), nullable=False, default=50)
     grace_period_days = Column(Integer, nullable=False, default=5)

     status = Column(
          Enum(LeaseStatus, name="lease_status", create_constraint=True, values_callable=enum_values),
          default=LeaseStatus.PENDING,
          nullable=False,
     )
     notes = Column(Text, nullable=True)

     renewed_from_id = Column(Integer, ForeignKey("leases.id"), nullable=True, index=True)
     terminated_at = Column(DateTime, nullable=True)
     terminated_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

     # Timestamps
     created_at = Column(DateTime, nullable=False)
     updated_at = Column(DateTime, nullable=True)

     # Relationships
     tenant = relationship("User", foreign_keys=[tenant_id])
     unit = relationship("Unit", back_populates="leases")
     additional_tenants = relationship("User", secondary=lease_additional_tenants)
     renewed_from = relationship("Lease", remote_side=[id])

     def covers(self, day: date) -> bool:
          """True when ``day`` falls inside [start_date, end_date)."""
          return self.start_date <= day < self.end_date

     def is_active_on(self, day: date) -> bool:
          return self.status == LeaseStatus.ACTIVE and self.covers(day)

     def occupant_ids(self) -> set:
          return {self.tenant_id} | {t.id for t in self.additional_tenants}

     def __repr__(self):
          return (
               f"<Lease(id={self.id}, tenant_id={self.tenant_id}, unit_id={self.unit_id}, "
               f"status='{self.status.value}')>"
          )
