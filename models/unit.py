import enum

from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, Enum
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class PropertyType(str, enum.Enum):
     APARTMENT = "apartment"
     HOUSE = "house"
     TOWNHOUSE = "townhouse"
     CONDO = "condo"
     DUPLEX = "duplex"
     STUDIO = "studio"
     OTHER = "other"


class Unit(Base):
     """
     Unit model - a rentable physical space.
     Occupancy is not stored; it is derived from the unit's active lease.
     """
     __tablename__ = "units"

     id = Column(Integer, primary_key=True, autoincrement=True)
     unit_number = Column(String(50), unique=True, nullable=False)

     # Address
     street_address = Column(String(255), nullable=False)
     city = Column(String(100), nullable=False)
     state = Column(String(2), nullable=False)
     zip_code = Column(String(10), nullable=False)
     building = Column(String(100), nullable=True)

     # Structure
     property_type = Column(
          Enum(PropertyType, name="property_type", create_constraint=True, values_callable=enum_values),
          nullable=False,
     )
     floor = Column(Integer, nullable=True)
     bedrooms = Column(Integer, nullable=False, default=0)
     bathrooms = Column(Numeric(3, 1), nullable=False, default=0)
     square_feet = Column(Integer, nullable=False, default=0)
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     amenities = Column(Text, nullable=True)  # Comma-separated

     # Timestamps
     created_at = Column(DateTime, nullable=False)
     updated_at = Column(DateTime, nullable=True)

     # Relationships
     leases = relationship("Lease", back_populates="unit")

     @property
     def full_address(self) -> str:
          return f"{self.street_address}, {self.city}, {self.state} {self.zip_code}"

     def __repr__(self):
          return f"<Unit(id={self.id}, unit_number='{self.unit_number}')>"
