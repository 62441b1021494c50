"""
Trip database model.

A trip is one outbound schedule entry logged by a staff member, optionally
reserving a pool vehicle. Trips with a vehicle carry a mileage sub-record
that the driver fills in after returning.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Time, Boolean, Enum, JSON
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base
from fleetflow.app.models.enums import TripCategory


class Trip(Base):
    """
    Trip model.

    Mileage sub-record lifecycle:
    - no vehicle: no mileage workflow at all
    - vehicle, not completed: pending report (possibly blocked by an earlier trip)
    - completed: start/end odometer and trip_distance are set
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Ownership (display name is denormalized for listings)
    owner_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    owner_name = Column(String(100), nullable=False)

    # Schedule window (same-day, local date semantics)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    # Details
    purpose = Column(String(500), nullable=False)
    category = Column(Enum(TripCategory), default=TripCategory.OTHER, nullable=False)
    project_name = Column(String(200), nullable=False, index=True)
    companion_ids = Column(JSON, nullable=False, default=list)

    # Vehicle reservation (NULL means no vehicle needed)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True, index=True)
    vehicle_label = Column(String(200), nullable=True)

    # Mileage sub-record
    start_odometer = Column(Integer, nullable=True)
    end_odometer = Column(Integer, nullable=True)
    trip_distance = Column(Integer, nullable=True)
    refueled = Column(Boolean, default=False, nullable=False)
    washed = Column(Boolean, default=False, nullable=False)
    mileage_completed = Column(Boolean, default=False, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, **kwargs):
        # Column defaults only apply at flush; unsaved trips need them too
        kwargs.setdefault("category", TripCategory.OTHER)
        kwargs.setdefault("companion_ids", [])
        kwargs.setdefault("refueled", False)
        kwargs.setdefault("washed", False)
        kwargs.setdefault("mileage_completed", False)
        super().__init__(**kwargs)

    @property
    def has_vehicle(self) -> bool:
        return self.vehicle_id is not None

    @property
    def is_reported(self) -> bool:
        return self.has_vehicle and bool(self.mileage_completed)

    def clear_mileage(self) -> None:
        """Drop the mileage sub-record (the trip no longer uses a vehicle)."""
        self.start_odometer = None
        self.end_odometer = None
        self.trip_distance = None
        self.refueled = False
        self.washed = False
        self.mileage_completed = False

    def __repr__(self):
        return f"<Trip(id={self.id}, date={self.date}, vehicle_id={self.vehicle_id}, reported={self.mileage_completed})>"
