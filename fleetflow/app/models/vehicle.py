"""
Vehicle database model.

Administrators register pool vehicles; staff reserve them on trips.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base
from fleetflow.app.models.enums import VehicleStatus


class Vehicle(Base):
    """
    Vehicle model.

    `total_mileage` is derived: it is only ever overwritten by the mileage
    aggregator from the vehicle's reported trips, never edited directly.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Vehicle identification
    license_plate = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    vehicle_type = Column(String(100), nullable=True)  # e.g., "SUV", "Sedan", "Van"

    # Status
    status = Column(Enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)  # False once retired

    # Odometer
    starting_odometer = Column(Integer, nullable=True)  # Reading before tracking began
    total_mileage = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, **kwargs):
        kwargs.setdefault("status", VehicleStatus.AVAILABLE)
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("total_mileage", 0)
        super().__init__(**kwargs)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.license_plate})"

    def __repr__(self):
        return f"<Vehicle(id={self.id}, plate='{self.license_plate}', total_mileage={self.total_mileage})>"
