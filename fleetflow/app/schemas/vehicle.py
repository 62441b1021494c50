"""
Vehicle Pydantic schemas.

Defines request and response models for vehicle management.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from fleetflow.app.models.enums import VehicleStatus


class VehicleCreate(BaseModel):
    """Schema for registering a new vehicle."""
    license_plate: str = Field(..., min_length=1, max_length=50, description="Unique license plate")
    name: str = Field(..., min_length=1, max_length=100, description="Display name (e.g., White SUV)")
    vehicle_type: Optional[str] = Field(None, max_length=100, description="Vehicle type (e.g., SUV, Van)")
    status: VehicleStatus = Field(default=VehicleStatus.AVAILABLE)
    starting_odometer: Optional[int] = Field(None, ge=0, description="Odometer reading before tracking began")


class VehicleUpdate(BaseModel):
    """Schema for updating an existing vehicle. Total mileage is derived and not editable."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    vehicle_type: Optional[str] = Field(None, max_length=100)
    status: Optional[VehicleStatus] = None
    starting_odometer: Optional[int] = Field(None, ge=0)


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    license_plate: str
    name: str
    vehicle_type: Optional[str]
    status: VehicleStatus
    is_active: bool
    starting_odometer: Optional[int]
    total_mileage: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    vehicles: List[VehicleResponse]
    total: int


class VehicleMileageSyncResponse(BaseModel):
    vehicle_id: int
    total_mileage: int
