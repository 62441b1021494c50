"""
Statistics schemas for the admin dashboard.
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import date


class StatsSummary(BaseModel):
    """Headline numbers for the period."""
    total_km: int
    vehicle_trips: int
    personnel_count: int


class VehicleStats(BaseModel):
    """Usage of one vehicle."""
    vehicle_id: int
    license_plate: str
    name: str
    days_used: int
    km: int


class ProjectStats(BaseModel):
    """Activity booked against one project."""
    project_name: str
    vehicle_days: int
    km: int
    hours: float
    headcount: int


class UserStats(BaseModel):
    """Time one user spent out (as owner or companion)."""
    user_id: int
    name: str
    days: int
    hours: float


class StatsReport(BaseModel):
    date_from: Optional[date]
    date_to: Optional[date]
    summary: StatsSummary
    vehicles: List[VehicleStats]
    projects: List[ProjectStats]
    users: List[UserStats]
