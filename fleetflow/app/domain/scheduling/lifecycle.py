"""
Trip Record Lifecycle (Domain Logic).

Orchestrates validation, collision detection, mileage reporting and vehicle
total resynchronisation around every trip mutation.

Every mutating operation returns a TripMutation describing exactly what
changed (the saved trip and the recomputed vehicle totals) so callers can
apply it without re-fetching everything.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fleetflow.app.core.exceptions import (
    MileageReportBlockedError,
    MileageValidationError,
    ResourceNotFoundError,
    TripCollisionError,
    TripValidationError,
)
from fleetflow.app.domain.scheduling.aggregation import compute_vehicle_total
from fleetflow.app.domain.scheduling.collision import find_collision, format_collision
from fleetflow.app.domain.scheduling.reconciliation import (
    MileageQueueEntry,
    build_mileage_queue,
    compute_mileage_queue_entry,
)
from fleetflow.app.models.enums import VehicleStatus
from fleetflow.app.models.trip import Trip
from fleetflow.app.repositories.interfaces import TripRepoIface, VehicleRepoIface

logger = logging.getLogger(__name__)


@dataclass
class TripMutation:
    """Result of a trip mutation."""
    trip: Optional[Trip]
    vehicle_totals: Dict[int, int] = field(default_factory=dict)
    deleted_trip_id: Optional[int] = None


@dataclass
class PendingMileage:
    """A trip waiting for its mileage report, with its reconciliation result."""
    trip: Trip
    entry: MileageQueueEntry


class TripLifecycleService:

    def __init__(
        self,
        trips: TripRepoIface,
        vehicles: VehicleRepoIface,
        include_starting_odometer: bool = False,
    ):
        self.trips = trips
        self.vehicles = vehicles
        self.include_starting_odometer = include_starting_odometer

    # Aggregation

    async def sync_vehicle_mileage(self, vehicle_id: int) -> int:
        """
        Recompute a vehicle's total mileage from all of its reported trips.

        Performs exactly one vehicle write. Idempotent: with no trip changes in
        between, repeated calls store the same total.

        Returns:
            The new total
        """
        vehicle = await self.vehicles.get(vehicle_id)
        trips = await self.trips.list_for_vehicle(vehicle_id)

        total = compute_vehicle_total(
            trips,
            vehicle_id,
            starting_odometer=vehicle.starting_odometer if vehicle is not None else None,
            include_starting_odometer=self.include_starting_odometer,
        )

        if vehicle is None:
            logger.warning("Skipping mileage sync for missing vehicle %s", vehicle_id)
            return total

        await self.vehicles.set_total_mileage(vehicle, total)
        logger.info("Vehicle %s total mileage set to %s", vehicle_id, total)
        return total

    async def _resync(self, *vehicle_ids: Optional[int]) -> Dict[int, int]:
        totals = {}
        for vehicle_id in vehicle_ids:
            if vehicle_id is not None and vehicle_id not in totals:
                totals[vehicle_id] = await self.sync_vehicle_mileage(vehicle_id)
        return totals

    # Validation

    async def validate_trip(self, trip: Trip, previous_vehicle_id: Optional[int] = None) -> None:
        """
        Reject user-correctable problems before anything is persisted.

        Raises:
            TripValidationError: bad window, missing fields, unavailable vehicle
            MileageValidationError: inconsistent odometer readings
            ResourceNotFoundError: unknown vehicle
        """
        if trip.end_time <= trip.start_time:
            raise TripValidationError(
                "End time must be later than start time",
                details={"start_time": str(trip.start_time), "end_time": str(trip.end_time)}
            )

        if not (trip.purpose or "").strip():
            raise TripValidationError("Purpose is required")

        if not (trip.project_name or "").strip():
            raise TripValidationError("Project is required")

        if trip.vehicle_id is not None:
            vehicle = await self.vehicles.get(trip.vehicle_id)
            if vehicle is None:
                raise ResourceNotFoundError("Vehicle", trip.vehicle_id)

            # Existing reservations survive a vehicle going into maintenance
            newly_reserved = trip.id is None or trip.vehicle_id != previous_vehicle_id
            if newly_reserved and (not vehicle.is_active or vehicle.status == VehicleStatus.MAINTENANCE):
                raise TripValidationError(
                    f"Vehicle {vehicle.label} is not available for reservation",
                    details={"vehicle_id": vehicle.id, "status": vehicle.status.value}
                )

            trip.vehicle_label = vehicle.label

        if trip.mileage_completed:
            self._validate_odometer(trip.start_odometer, trip.end_odometer)

    @staticmethod
    def _validate_odometer(start: Optional[int], end: Optional[int]) -> None:
        if start is None or end is None:
            raise MileageValidationError("Both start and end odometer readings are required")
        if start < 0:
            raise MileageValidationError("Odometer readings cannot be negative")
        if end <= start:
            raise MileageValidationError(
                "End odometer must be greater than start odometer",
                details={"start_odometer": start, "end_odometer": end}
            )

    async def ensure_no_collision(self, trip: Trip) -> None:
        """
        Run the collision detector against a fresh snapshot of the vehicle's trips.

        Raises:
            TripCollisionError: the vehicle is already reserved in an overlapping window
        """
        if trip.vehicle_id is None:
            return

        snapshot = await self.trips.list_for_vehicle(trip.vehicle_id)
        conflict = find_collision(trip, snapshot)
        if conflict is None:
            return

        logger.warning(
            "Collision on vehicle %s at %s: trip %s overlaps trip %s",
            trip.vehicle_id, trip.date, trip.id, conflict.id
        )
        raise TripCollisionError(
            format_collision(conflict),
            conflicting_trip_id=conflict.id,
            details={
                "owner_name": conflict.owner_name,
                "date": conflict.date.isoformat(),
                "start_time": conflict.start_time.strftime("%H:%M"),
                "end_time": conflict.end_time.strftime("%H:%M"),
            }
        )

    # Mutations

    async def create_or_update_trip(self, trip: Trip, previous_vehicle_id: Optional[int] = None) -> TripMutation:
        """
        Validate, collision-check and persist a trip, then resync mileage.

        Args:
            trip: New or edited trip
            previous_vehicle_id: Vehicle the trip reserved before this edit,
                so a trip moved off a vehicle also resyncs the old one

        Returns:
            TripMutation with the saved trip and recomputed vehicle totals
        """
        # Readings belong to the old vehicle's odometer
        moved = previous_vehicle_id is not None and trip.vehicle_id != previous_vehicle_id
        if trip.vehicle_id is None or moved:
            trip.clear_mileage()
        if trip.vehicle_id is None:
            trip.vehicle_label = None

        await self.validate_trip(trip, previous_vehicle_id)
        await self.ensure_no_collision(trip)

        if trip.mileage_completed and trip.start_odometer is not None and trip.end_odometer is not None:
            trip.trip_distance = trip.end_odometer - trip.start_odometer

        saved = await self.trips.save(trip)
        totals = await self._resync(saved.vehicle_id, previous_vehicle_id)

        return TripMutation(trip=saved, vehicle_totals=totals)

    async def delete_trip(self, trip_id: int) -> TripMutation:
        """
        Delete a trip and resync its vehicle.

        The trip is read first: once deleted there is no way to learn which
        vehicle needs resyncing.
        """
        trip = await self.trips.get(trip_id)
        if trip is None:
            raise ResourceNotFoundError("Trip", trip_id)

        vehicle_id = trip.vehicle_id
        await self.trips.delete(trip)
        totals = await self._resync(vehicle_id)

        return TripMutation(trip=None, vehicle_totals=totals, deleted_trip_id=trip_id)

    async def report_mileage(
        self,
        trip_id: int,
        vehicle_id: int,
        start: int,
        end: int,
        refueled: bool = False,
        washed: bool = False,
    ) -> TripMutation:
        """
        Record a trip's first odometer readings and resync the vehicle total.

        Refused while an earlier trip on the same vehicle is still unreported.
        The readings must not reach back before the implied start, i.e. the
        end reading of the latest earlier reported trip (or the baseline).
        Once reported, a trip can only be changed through correct_mileage.

        Raises:
            ResourceNotFoundError: unknown trip
            MileageValidationError: no vehicle, wrong vehicle, already
                reported, or readings inconsistent with the odometer history
            MileageReportBlockedError: an earlier trip must be reported first
        """
        trip = await self.trips.get(trip_id)
        if trip is None:
            raise ResourceNotFoundError("Trip", trip_id)

        if trip.vehicle_id is None:
            raise MileageValidationError("This trip does not use a vehicle")

        if trip.vehicle_id != vehicle_id:
            raise MileageValidationError(
                "Vehicle does not match the trip's reservation",
                details={"trip_vehicle_id": trip.vehicle_id, "vehicle_id": vehicle_id}
            )

        if trip.is_reported:
            raise MileageValidationError(
                "Mileage has already been reported for this trip; ask an admin to correct it",
                details={"trip_id": trip_id}
            )

        self._validate_odometer(start, end)

        vehicle = await self.vehicles.get(vehicle_id)
        entry = compute_mileage_queue_entry(trip, await self.trips.list_for_vehicle(vehicle_id), vehicle)
        if entry.blocked:
            logger.warning("Mileage report for trip %s blocked by trip %s", trip_id, entry.blocking_trip_id)
            raise MileageReportBlockedError(trip_id, entry.blocking_trip_id)

        if end <= entry.implied_start:
            raise MileageValidationError(
                "End odometer must be greater than the vehicle's last recorded reading",
                details={"end_odometer": end, "implied_start": entry.implied_start}
            )
        if start < entry.implied_start:
            raise MileageValidationError(
                "Start odometer cannot be lower than the vehicle's last recorded reading",
                details={"start_odometer": start, "implied_start": entry.implied_start}
            )

        return await self._record_mileage(trip, start, end, refueled, washed)

    async def correct_mileage(
        self,
        trip_id: int,
        start: int,
        end: int,
        refueled: Optional[bool] = None,
        washed: Optional[bool] = None,
    ) -> TripMutation:
        """
        Admin correction of an already reported trip's readings.

        Never blocked. The trip stays reported; the vehicle total is recomputed.
        """
        trip = await self.trips.get(trip_id)
        if trip is None:
            raise ResourceNotFoundError("Trip", trip_id)

        if not trip.is_reported:
            raise MileageValidationError("Only reported trips can be corrected")

        self._validate_odometer(start, end)

        return await self._record_mileage(
            trip,
            start,
            end,
            refueled=trip.refueled if refueled is None else refueled,
            washed=trip.washed if washed is None else washed,
        )

    async def _record_mileage(self, trip: Trip, start: int, end: int, refueled: bool, washed: bool) -> TripMutation:
        trip.start_odometer = start
        trip.end_odometer = end
        trip.trip_distance = end - start
        trip.refueled = bool(refueled)
        trip.washed = bool(washed)
        trip.mileage_completed = True

        saved = await self.trips.save(trip)
        totals = await self._resync(saved.vehicle_id)

        return TripMutation(trip=saved, vehicle_totals=totals)

    # Read model

    async def mileage_queue(self, owner_id: Optional[int] = None) -> List[PendingMileage]:
        """
        Pending mileage reports with blocking status and pre-filled start.

        Args:
            owner_id: Only list this user's trips (None lists everyone's)
        """
        trips = await self.trips.list_all()
        vehicles = {vehicle.id: vehicle for vehicle in await self.vehicles.list_all()}
        by_id = {trip.id: trip for trip in trips}

        return [
            PendingMileage(trip=by_id[entry.trip_id], entry=entry)
            for entry in build_mileage_queue(trips, vehicles, owner_id=owner_id)
        ]
