"""In-memory fake repository implementations for the scheduling core."""

from datetime import date
from typing import Dict, List, Optional

from fleetflow.app.models.trip import Trip
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.repositories.interfaces import TripRepoIface, VehicleRepoIface
from fleetflow.app.domain.scheduling.reconciliation import chronological_key


class TripRepoFake(TripRepoIface):
    """In-memory fake implementation of the trips repository."""

    def __init__(self, trips: Optional[List[Trip]] = None):
        self._trips: Dict[int, Trip] = {}
        self._counter = 0
        self.saves = 0
        for trip in trips or []:
            self._store(trip)

    def _store(self, trip: Trip) -> Trip:
        if trip.id is None:
            self._counter += 1
            trip.id = self._counter
        else:
            self._counter = max(self._counter, trip.id)
        self._trips[trip.id] = trip
        return trip

    async def get(self, trip_id: int) -> Optional[Trip]:
        return self._trips.get(trip_id)

    async def list_all(self) -> List[Trip]:
        return sorted(self._trips.values(), key=chronological_key)

    async def list_for_vehicle(self, vehicle_id: int) -> List[Trip]:
        return [trip for trip in await self.list_all() if trip.vehicle_id == vehicle_id]

    async def list_filtered(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        owner_id: Optional[int] = None,
    ) -> List[Trip]:
        return [
            trip for trip in await self.list_all()
            if (date_from is None or trip.date >= date_from)
            and (date_to is None or trip.date <= date_to)
            and (vehicle_id is None or trip.vehicle_id == vehicle_id)
            and (owner_id is None or trip.owner_id == owner_id)
        ]

    async def save(self, trip: Trip) -> Trip:
        self.saves += 1
        return self._store(trip)

    async def delete(self, trip: Trip) -> None:
        self._trips.pop(trip.id, None)


class VehicleRepoFake(VehicleRepoIface):
    """In-memory fake implementation of the vehicles repository. Counts total writes."""

    def __init__(self, vehicles: Optional[List[Vehicle]] = None):
        self._vehicles: Dict[int, Vehicle] = {}
        self.total_writes: List[tuple] = []
        for index, vehicle in enumerate(vehicles or [], start=1):
            if vehicle.id is None:
                vehicle.id = index
            self._vehicles[vehicle.id] = vehicle

    async def get(self, vehicle_id: int) -> Optional[Vehicle]:
        return self._vehicles.get(vehicle_id)

    async def list_all(self) -> List[Vehicle]:
        return [self._vehicles[key] for key in sorted(self._vehicles)]

    async def set_total_mileage(self, vehicle: Vehicle, total: int) -> Vehicle:
        vehicle.total_mileage = total
        self.total_writes.append((vehicle.id, total))
        return vehicle
