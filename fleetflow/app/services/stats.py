"""
Statistics Service.

Aggregates trips for the admin dashboard. READ-ONLY.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.app.domain.scheduling.aggregation import effective_trip_distance
from fleetflow.app.models.enums import TripCategory
from fleetflow.app.models.project import Project
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.user import User
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.schemas.stats import (
    ProjectStats, StatsReport, StatsSummary, UserStats, VehicleStats
)


def trip_hours(trip) -> float:
    """Length of the trip window in hours; inverted windows count as zero."""
    start = datetime.combine(trip.date, trip.start_time)
    end = datetime.combine(trip.date, trip.end_time)
    seconds = (end - start).total_seconds()
    return seconds / 3600 if seconds > 0 else 0.0


def reported_km(trip) -> int:
    return effective_trip_distance(trip) if trip.is_reported else 0


def headcount(trip) -> int:
    return 1 + len(trip.companion_ids or [])


class StatsService:

    @staticmethod
    def summarize(
        trips: List[Trip],
        vehicles: List[Vehicle],
        users: List[User],
        projects: List[Project],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> StatsReport:
        """
        Build the report from an in-memory snapshot.

        LEAVE trips are excluded from personnel counts and per-user time, but
        still count towards vehicle usage and distance.
        """
        working = [t for t in trips if t.category != TripCategory.LEAVE]

        summary = StatsSummary(
            total_km=sum(reported_km(t) for t in trips),
            vehicle_trips=sum(1 for t in trips if t.has_vehicle),
            personnel_count=sum(headcount(t) for t in working),
        )

        vehicle_stats = []
        for vehicle in vehicles:
            vehicle_trips = [t for t in trips if t.vehicle_id == vehicle.id]
            vehicle_stats.append(VehicleStats(
                vehicle_id=vehicle.id,
                license_plate=vehicle.license_plate,
                name=vehicle.name,
                days_used=len({t.date for t in vehicle_trips}),
                km=sum(reported_km(t) for t in vehicle_trips),
            ))

        project_stats = []
        for project in projects:
            project_trips = [t for t in trips if t.project_name == project.name]
            if not project_trips:
                continue
            project_stats.append(ProjectStats(
                project_name=project.name,
                vehicle_days=len({t.date for t in project_trips if t.has_vehicle}),
                km=sum(reported_km(t) for t in project_trips),
                hours=round(sum(trip_hours(t) for t in project_trips), 2),
                headcount=sum(headcount(t) for t in project_trips if t.category != TripCategory.LEAVE),
            ))

        user_stats = []
        for user in users:
            involved = [
                t for t in working
                if t.owner_id == user.id or user.id in (t.companion_ids or [])
            ]
            user_stats.append(UserStats(
                user_id=user.id,
                name=user.name,
                days=len({t.date for t in involved}),
                hours=round(sum(trip_hours(t) for t in involved), 2),
            ))

        return StatsReport(
            date_from=date_from,
            date_to=date_to,
            summary=summary,
            vehicles=vehicle_stats,
            projects=project_stats,
            users=user_stats,
        )

    @staticmethod
    async def build_report(
        db: AsyncSession,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> StatsReport:
        """Fetch the period's trips and reference data, then summarize."""
        query = select(Trip)
        if date_from:
            query = query.where(Trip.date >= date_from)
        if date_to:
            query = query.where(Trip.date <= date_to)

        trips = list((await db.execute(query)).scalars().all())
        vehicles = list((await db.execute(select(Vehicle).order_by(Vehicle.id))).scalars().all())
        users = list((await db.execute(select(User).order_by(User.id))).scalars().all())
        projects = list((await db.execute(select(Project).order_by(Project.name))).scalars().all())

        return StatsService.summarize(trips, vehicles, users, projects, date_from, date_to)
