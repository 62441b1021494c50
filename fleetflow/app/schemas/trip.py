"""
Trip schemas.

Schemas for trip scheduling, the calendar feed and collision pre-checks.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime, time
from fleetflow.app.models.enums import TripCategory


class TripWrite(BaseModel):
    """
    Schema for creating or replacing a trip.

    `vehicle_id` null means no vehicle is needed. The end-after-start rule is
    enforced when the trip is saved.
    """
    date: date
    start_time: time
    end_time: time
    purpose: str = Field(..., max_length=500, description="Purpose / destination")
    category: TripCategory = TripCategory.OTHER
    project_name: str = Field(..., max_length=200)
    companion_ids: List[int] = Field(default_factory=list, description="Other users attending")
    vehicle_id: Optional[int] = Field(None, description="Vehicle to reserve")


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    owner_id: int
    owner_name: str
    date: date
    start_time: time
    end_time: time
    purpose: str
    category: TripCategory
    project_name: str
    companion_ids: List[int]
    vehicle_id: Optional[int]
    vehicle_label: Optional[str]
    start_odometer: Optional[int]
    end_odometer: Optional[int]
    trip_distance: Optional[int]
    refueled: bool
    washed: bool
    mileage_completed: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripListResponse(BaseModel):
    """Schema for a calendar range of trips."""
    trips: List[TripResponse]
    total: int


class TripMutationResponse(BaseModel):
    """
    Result of a trip mutation.

    `vehicle_totals` maps every resynced vehicle id to its new total mileage.
    """
    trip: Optional[TripResponse] = None
    deleted_trip_id: Optional[int] = None
    vehicle_totals: Dict[int, int] = {}


class CollisionCheckRequest(BaseModel):
    """Dry-run of the double-booking check for a form."""
    date: date
    start_time: time
    end_time: time
    vehicle_id: Optional[int] = None
    trip_id: Optional[int] = Field(None, description="ID of the trip being edited, if any")


class CollisionCheckResponse(BaseModel):
    conflict: bool
    message: Optional[str] = None
    conflicting_trip_id: Optional[int] = None
