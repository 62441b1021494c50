"""
Mileage reporting schemas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from fleetflow.app.schemas.trip import TripResponse


class MileageReport(BaseModel):
    """Odometer readings reported by the driver after a trip."""
    vehicle_id: int
    start_odometer: int = Field(..., ge=0)
    end_odometer: int = Field(..., ge=0)
    refueled: bool = False
    washed: bool = False


class MileageCorrection(BaseModel):
    """Admin correction of a reported trip."""
    start_odometer: int = Field(..., ge=0)
    end_odometer: int = Field(..., ge=0)
    refueled: Optional[bool] = None
    washed: Optional[bool] = None


class MileageQueueItem(BaseModel):
    """A pending report, with whether it can be submitted and the pre-filled start."""
    trip: TripResponse
    blocked: bool
    implied_start: int
    blocking_trip_id: Optional[int] = None


class MileageQueueResponse(BaseModel):
    entries: List[MileageQueueItem]
    total: int
