"""
Vehicle API Endpoints.

Everyone can browse the vehicle pool; admins register, edit and retire
vehicles. Total mileage is derived from reported trips and only ever written
by the mileage sync.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fleetflow.app.db.session import get_db
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.schemas.vehicle import (
    VehicleCreate, VehicleUpdate, VehicleResponse, VehicleListResponse, VehicleMileageSyncResponse
)
from fleetflow.app.core.dependencies import get_current_user, get_trip_lifecycle
from fleetflow.app.core.guards import require_admin
from fleetflow.app.domain.scheduling.lifecycle import TripLifecycleService
from fleetflow.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


async def _get_vehicle_or_404(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()

    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    return vehicle


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    include_retired: bool = Query(False, description="Include retired vehicles"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the vehicle pool."""
    query = select(Vehicle).order_by(Vehicle.id)
    if not include_retired:
        query = query.where(Vehicle.is_active.is_(True))

    result = await db.execute(query)
    vehicles = result.scalars().all()

    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in vehicles],
        total=len(vehicles)
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await _get_vehicle_or_404(db, vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Register a vehicle (admin-only).

    A new vehicle has no reported trips, so its total starts at zero.
    """
    existing = await db.execute(
        select(Vehicle).where(Vehicle.license_plate == vehicle_data.license_plate)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Vehicle with license plate '{vehicle_data.license_plate}' already exists"
        )

    vehicle = Vehicle(
        license_plate=vehicle_data.license_plate,
        name=vehicle_data.name,
        vehicle_type=vehicle_data.vehicle_type,
        status=vehicle_data.status,
        starting_odometer=vehicle_data.starting_odometer,
        is_active=True
    )
    db.add(vehicle)
    await db.flush()

    await log_user_action(
        db, admin, AuditAction.VEHICLE_CREATED, "vehicle", vehicle.id,
        metadata={"license_plate": vehicle.license_plate}
    )
    await db.commit()
    await db.refresh(vehicle)

    return VehicleResponse.model_validate(vehicle)


@router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    vehicle_data: VehicleUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """
    Update vehicle details (admin-only).

    Changing the starting odometer resyncs the total mileage. Putting a
    vehicle into maintenance keeps its existing reservations.
    """
    vehicle = await _get_vehicle_or_404(db, vehicle_id)
    changes = vehicle_data.model_dump(exclude_unset=True)

    if changes.get("name", "") is None or changes.get("status", "") is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and status cannot be cleared"
        )

    baseline_changed = (
        "starting_odometer" in changes
        and changes["starting_odometer"] != vehicle.starting_odometer
    )

    for field, value in changes.items():
        setattr(vehicle, field, value)
    await db.flush()

    if baseline_changed:
        await lifecycle.sync_vehicle_mileage(vehicle.id)

    await log_user_action(
        db, admin, AuditAction.VEHICLE_UPDATED, "vehicle", vehicle.id,
        metadata={"fields": sorted(changes)}
    )
    await db.commit()
    await db.refresh(vehicle)

    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}", response_model=VehicleResponse)
async def retire_vehicle(
    vehicle_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Retire a vehicle (admin-only).

    Retired vehicles are kept so historical trips and totals stay readable,
    but they can no longer be reserved.
    """
    vehicle = await _get_vehicle_or_404(db, vehicle_id)

    if not vehicle.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Vehicle is already retired"
        )

    vehicle.is_active = False
    await log_user_action(db, admin, AuditAction.VEHICLE_RETIRED, "vehicle", vehicle.id)
    await db.commit()
    await db.refresh(vehicle)

    return VehicleResponse.model_validate(vehicle)


@router.post("/{vehicle_id}/sync-mileage", response_model=VehicleMileageSyncResponse)
async def sync_vehicle_mileage(
    vehicle_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    lifecycle: TripLifecycleService = Depends(get_trip_lifecycle)
):
    """Recompute a vehicle's total mileage from all of its reported trips (admin-only)."""
    await _get_vehicle_or_404(db, vehicle_id)

    total = await lifecycle.sync_vehicle_mileage(vehicle_id)

    await log_user_action(
        db, admin, AuditAction.VEHICLE_MILEAGE_SYNCED, "vehicle", vehicle_id,
        metadata={"total_mileage": total}
    )
    await db.commit()

    return VehicleMileageSyncResponse(vehicle_id=vehicle_id, total_mileage=total)
