"""
SQLAlchemy repositories.

Repositories flush but never commit; the endpoint owning the session commits
once the whole operation has succeeded.
"""

from datetime import date
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.app.models.trip import Trip
from fleetflow.app.models.vehicle import Vehicle
from fleetflow.app.repositories.interfaces import TripRepoIface, VehicleRepoIface


class SqlTripRepository(TripRepoIface):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, trip_id: int) -> Optional[Trip]:
        result = await self.db.execute(select(Trip).where(Trip.id == trip_id))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Trip]:
        result = await self.db.execute(select(Trip).order_by(Trip.date, Trip.start_time, Trip.id))
        return list(result.scalars().all())

    async def list_for_vehicle(self, vehicle_id: int) -> List[Trip]:
        result = await self.db.execute(
            select(Trip).where(Trip.vehicle_id == vehicle_id).order_by(Trip.date, Trip.start_time, Trip.id)
        )
        return list(result.scalars().all())

    async def list_filtered(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        owner_id: Optional[int] = None,
    ) -> List[Trip]:
        query = select(Trip)
        if date_from:
            query = query.where(Trip.date >= date_from)
        if date_to:
            query = query.where(Trip.date <= date_to)
        if vehicle_id is not None:
            query = query.where(Trip.vehicle_id == vehicle_id)
        if owner_id is not None:
            query = query.where(Trip.owner_id == owner_id)

        result = await self.db.execute(query.order_by(Trip.date, Trip.start_time, Trip.id))
        return list(result.scalars().all())

    async def save(self, trip: Trip) -> Trip:
        self.db.add(trip)
        await self.db.flush()
        return trip

    async def delete(self, trip: Trip) -> None:
        await self.db.delete(trip)
        await self.db.flush()


class SqlVehicleRepository(VehicleRepoIface):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, vehicle_id: int) -> Optional[Vehicle]:
        result = await self.db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Vehicle]:
        result = await self.db.execute(select(Vehicle).order_by(Vehicle.id))
        return list(result.scalars().all())

    async def set_total_mileage(self, vehicle: Vehicle, total: int) -> Vehicle:
        vehicle.total_mileage = total
        await self.db.flush()
        return vehicle
