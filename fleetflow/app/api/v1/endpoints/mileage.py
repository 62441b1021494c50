"""
Mileage API Endpoints.

Drivers report odometer readings after a trip; the queue shows which of
their trips are still waiting and whether an earlier trip on the same
vehicle must be reported first. Admins can correct a reported trip.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from fleetflow.app.db.session import get_db
from fleetflow.app.schemas.mileage import (
    MileageReport, MileageCorrection, MileageQueueItem, MileageQueueResponse
)
from fleetflow.app.schemas.trip import TripMutationResponse, TripResponse
from fleetflow.app.core.dependencies import get_current_user, get_trip_lifecycle
from fleetflow.app.core.exceptions import ResourceNotFoundError
from fleetflow.app.core.guards import OwnershipGuard, is_admin, require_admin
from fleetflow.app.domain.scheduling.lifecycle import TripLifecycleService
from fleetflow.app.services.audit import log_user_action, AuditAction

router = APIRouter(tags=["Mileage"])
ownership_guard = OwnershipGuard()


@router.get("/mileage/queue", response_model=MileageQueueResponse)
async def get_mileage_queue(
    all_users: bool = Query(False, alias="all", description="Every user's pending trips (admin-only)"),
    current_user: dict = Depends(get_current_user),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Trips waiting for a mileage report, oldest first.

    Each entry carries whether it is blocked by an earlier unreported trip
    on the same vehicle and the start reading implied by the previous report.
    """
    if all_users and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    owner_id = None if all_users else current_user["user_id"]
    pending = await lifecycle.mileage_queue(owner_id=owner_id)

    entries = [
        MileageQueueItem(
            trip=TripResponse.model_validate(item.trip),
            blocked=item.entry.blocked,
            implied_start=item.entry.implied_start,
            blocking_trip_id=item.entry.blocking_trip_id
        )
        for item in pending
    ]
    return MileageQueueResponse(entries=entries, total=len(entries))


@router.post("/trips/{trip_id}/mileage", response_model=TripMutationResponse)
async def report_mileage(
    trip_id: int,
    report: MileageReport,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Report a trip's odometer readings once (owner or admin).

    Refused with 409 while an earlier trip on the same vehicle is unreported,
    and with 422 for an already reported trip (use the admin correction) or
    readings below the vehicle's last recorded odometer value.
    """
    trip = await lifecycle.trips.get(trip_id)
    if trip is None:
        raise ResourceNotFoundError("Trip", trip_id)
    ownership_guard.enforce(trip.owner_id, current_user, "trip")

    mutation = await lifecycle.report_mileage(
        trip_id,
        report.vehicle_id,
        report.start_odometer,
        report.end_odometer,
        refueled=report.refueled,
        washed=report.washed
    )

    await log_user_action(
        db, current_user, AuditAction.MILEAGE_REPORTED, "trip", trip_id,
        metadata={
            "vehicle_id": report.vehicle_id,
            "start_odometer": report.start_odometer,
            "end_odometer": report.end_odometer,
        }
    )
    await db.commit()
    await db.refresh(mutation.trip)

    return TripMutationResponse(
        trip=TripResponse.model_validate(mutation.trip),
        vehicle_totals=mutation.vehicle_totals
    )


@router.put("/admin/trips/{trip_id}/mileage", response_model=TripMutationResponse)
async def correct_mileage(
    trip_id: int,
    correction: MileageCorrection,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """Correct the readings of an already reported trip (admin-only)."""
    mutation = await lifecycle.correct_mileage(
        trip_id,
        correction.start_odometer,
        correction.end_odometer,
        refueled=correction.refueled,
        washed=correction.washed
    )

    await log_user_action(
        db, admin, AuditAction.MILEAGE_CORRECTED, "trip", trip_id,
        metadata={
            "start_odometer": correction.start_odometer,
            "end_odometer": correction.end_odometer,
        }
    )
    await db.commit()
    await db.refresh(mutation.trip)

    return TripMutationResponse(
        trip=TripResponse.model_validate(mutation.trip),
        vehicle_totals=mutation.vehicle_totals
    )
