"""
Trip API Endpoints.

Calendar feed, trip scheduling with vehicle double-booking protection, and
the collision pre-check used by the trip form. Trips can only be edited or
deleted by their owner or an admin.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fleetflow.app.db.session import get_db
from fleetflow.app.models.project import Project
from fleetflow.app.models.trip import Trip
from fleetflow.app.models.user import User
from fleetflow.app.schemas.trip import (
    TripWrite, TripResponse, TripListResponse, TripMutationResponse,
    CollisionCheckRequest, CollisionCheckResponse
)
from fleetflow.app.core.dependencies import get_current_user, get_trip_lifecycle
from fleetflow.app.core.exceptions import ResourceNotFoundError, TripValidationError
from fleetflow.app.core.guards import OwnershipGuard
from fleetflow.app.domain.scheduling.collision import CollisionCandidate, find_collision, format_collision
from fleetflow.app.domain.scheduling.lifecycle import TripLifecycleService, TripMutation
from fleetflow.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/trips", tags=["Trips"])
ownership_guard = OwnershipGuard()


async def _clean_companions(db: AsyncSession, companion_ids: List[int], owner_id: int) -> List[int]:
    """Deduplicate companions, drop the owner, and reject unknown users."""
    ids = list(dict.fromkeys(i for i in companion_ids if i != owner_id))
    if not ids:
        return []

    result = await db.execute(select(User.id).where(User.id.in_(ids)))
    known = set(result.scalars().all())
    missing = [i for i in ids if i not in known]
    if missing:
        raise TripValidationError("Unknown companions", details={"user_ids": missing})

    return ids


async def _ensure_project_exists(db: AsyncSession, project_name: str) -> None:
    result = await db.execute(select(Project.id).where(Project.name == project_name))
    if result.scalar_one_or_none() is None:
        raise TripValidationError(
            f"Unknown project '{project_name}'",
            details={"project_name": project_name}
        )


async def _mutation_response(db: AsyncSession, mutation: TripMutation) -> TripMutationResponse:
    await db.commit()
    trip = None
    if mutation.trip is not None:
        await db.refresh(mutation.trip)
        trip = TripResponse.model_validate(mutation.trip)

    return TripMutationResponse(
        trip=trip,
        deleted_trip_id=mutation.deleted_trip_id,
        vehicle_totals=mutation.vehicle_totals
    )


async def _get_trip_or_404(lifecycle: TripLifecycleService, trip_id: int) -> Trip:
    trip = await lifecycle.trips.get(trip_id)
    if trip is None:
        raise ResourceNotFoundError("Trip", trip_id)
    return trip


@router.get("", response_model=TripListResponse)
async def list_trips(
    date_from: Optional[date] = Query(None, description="First day (inclusive)"),
    date_to: Optional[date] = Query(None, description="Last day (inclusive)"),
    vehicle_id: Optional[int] = Query(None),
    owner_id: Optional[int] = Query(None),
    current_user: dict = Depends(get_current_user),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Calendar feed, in chronological order.

    Every user sees every trip: the calendar is shared so people can see
    who has which vehicle.
    """
    trips = await lifecycle.trips.list_filtered(
        date_from=date_from, date_to=date_to, vehicle_id=vehicle_id, owner_id=owner_id
    )
    return TripListResponse(
        trips=[TripResponse.model_validate(t) for t in trips],
        total=len(trips)
    )


@router.post("/check-collision", response_model=CollisionCheckResponse)
async def check_collision(
    check: CollisionCheckRequest,
    current_user: dict = Depends(get_current_user),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Dry-run the double-booking check for a trip form.

    Nothing is written. The same check runs again when the trip is saved.
    """
    if check.vehicle_id is None:
        return CollisionCheckResponse(conflict=False)

    candidate = CollisionCandidate(
        date=check.date,
        start_time=check.start_time,
        end_time=check.end_time,
        vehicle_id=check.vehicle_id,
        id=check.trip_id
    )
    conflict = find_collision(candidate, await lifecycle.trips.list_for_vehicle(check.vehicle_id))
    if conflict is None:
        return CollisionCheckResponse(conflict=False)

    return CollisionCheckResponse(
        conflict=True,
        message=format_collision(conflict),
        conflicting_trip_id=conflict.id
    )


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    current_user: dict = Depends(get_current_user),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    trip = await _get_trip_or_404(lifecycle, trip_id)
    return TripResponse.model_validate(trip)


@router.post("", response_model=TripMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripWrite,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Schedule a trip for the authenticated user.

    Raises 409 when the requested vehicle is already reserved in an
    overlapping window on the same day.
    """
    await _ensure_project_exists(db, trip_data.project_name)
    companions = await _clean_companions(db, trip_data.companion_ids, current_user["user_id"])

    trip = Trip(
        owner_id=current_user["user_id"],
        owner_name=current_user["name"],
        date=trip_data.date,
        start_time=trip_data.start_time,
        end_time=trip_data.end_time,
        purpose=trip_data.purpose,
        category=trip_data.category,
        project_name=trip_data.project_name,
        companion_ids=companions,
        vehicle_id=trip_data.vehicle_id
    )
    mutation = await lifecycle.create_or_update_trip(trip)

    await log_user_action(
        db, current_user, AuditAction.TRIP_CREATED, "trip", mutation.trip.id,
        metadata={"date": trip.date.isoformat(), "vehicle_id": trip.vehicle_id}
    )
    return await _mutation_response(db, mutation)


@router.put("/{trip_id}", response_model=TripMutationResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripWrite,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Replace a trip's schedule details (owner or admin).

    Reported mileage is kept unless the vehicle changes or is removed.
    Both the old and the new vehicle are resynced.
    """
    trip = await _get_trip_or_404(lifecycle, trip_id)
    ownership_guard.enforce(trip.owner_id, current_user, "trip")

    if trip_data.project_name != trip.project_name:
        await _ensure_project_exists(db, trip_data.project_name)
    companions = await _clean_companions(db, trip_data.companion_ids, trip.owner_id)

    previous_vehicle_id = trip.vehicle_id
    trip.date = trip_data.date
    trip.start_time = trip_data.start_time
    trip.end_time = trip_data.end_time
    trip.purpose = trip_data.purpose
    trip.category = trip_data.category
    trip.project_name = trip_data.project_name
    trip.companion_ids = companions
    trip.vehicle_id = trip_data.vehicle_id

    mutation = await lifecycle.create_or_update_trip(trip, previous_vehicle_id=previous_vehicle_id)

    await log_user_action(
        db, current_user, AuditAction.TRIP_UPDATED, "trip", trip.id,
        metadata={"previous_vehicle_id": previous_vehicle_id, "vehicle_id": trip.vehicle_id}
    )
    return await _mutation_response(db, mutation)


@router.delete("/{trip_id}", response_model=TripMutationResponse)
async def delete_trip(
    trip_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """Delete a trip (owner or admin). Its vehicle's total is recomputed."""
    trip = await _get_trip_or_404(lifecycle, trip_id)
    ownership_guard.enforce(trip.owner_id, current_user, "trip")

    mutation = await lifecycle.delete_trip(trip_id)

    await log_user_action(db, current_user, AuditAction.TRIP_DELETED, "trip", trip_id)
    return await _mutation_response(db, mutation)
