import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class UserRole(str, enum.Enum):
     """
     Every role an actor can hold. Closed: a role string that is not listed
     here is rejected at the model boundary.
     """
     MANAGER = "manager"
     SUPERVISOR = "supervisor"
     RESTRICTED_MANAGER = "restricted_manager"
     BOARDING_MANAGER = "boarding_manager"
     TENANT = "tenant"
     ELECTRICIAN = "electrician"
     PLUMBER = "plumber"
     GENERAL_REPAIR = "general_repair"


FULL_ACCESS_ROLES = frozenset({UserRole.MANAGER, UserRole.SUPERVISOR})
MANAGER_ROLES = FULL_ACCESS_ROLES | {UserRole.RESTRICTED_MANAGER}
TECHNICIAN_ROLES = frozenset({UserRole.ELECTRICIAN, UserRole.PLUMBER, UserRole.GENERAL_REPAIR})


class User(Base):
     """
     User model - every actor (managers, tenants, technicians).
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     email = Column(String(255), unique=True, nullable=False, index=True)
     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     phone = Column(String(50), nullable=True)
     role = Column(
          Enum(UserRole, name="user_role", create_constraint=True, values_callable=enum_values),
          nullable=False,
     )
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, nullable=False)

     # Relationships
     unit_assignments = relationship(
          "ManagerUnitAssignment",
          back_populates="manager",
          cascade="all, delete-orphan",
     )

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}"

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"


class ManagerUnitAssignment(Base):
     """
     Units a restricted manager is allowed to see and act on.
     This table is the only source of a restricted manager's scope.
     """
     __tablename__ = "manager_unit_assignments"
     __table_args__ = (
          UniqueConstraint("user_id", "unit_id"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
     unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)

     manager = relationship("User", back_populates="unit_assignments")

     def __repr__(self):
          return f"<ManagerUnitAssignment(user_id={self.user_id}, unit_id={self.unit_id})>"
