"""Repository interfaces for the scheduling core."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List

from fleetflow.app.models.trip import Trip
from fleetflow.app.models.vehicle import Vehicle


class TripRepoIface(ABC):
    """Interface for trips repository."""

    @abstractmethod
    async def get(self, trip_id: int) -> Optional[Trip]:
        """Get trip by ID."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Trip]:
        """List every trip."""
        pass

    @abstractmethod
    async def list_for_vehicle(self, vehicle_id: int) -> List[Trip]:
        """List all trips reserving a vehicle."""
        pass

    @abstractmethod
    async def list_filtered(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        owner_id: Optional[int] = None,
    ) -> List[Trip]:
        """List trips in a date range (inclusive), chronologically."""
        pass

    @abstractmethod
    async def save(self, trip: Trip) -> Trip:
        """Insert or update a trip."""
        pass

    @abstractmethod
    async def delete(self, trip: Trip) -> None:
        """Delete a trip."""
        pass


class VehicleRepoIface(ABC):
    """Interface for vehicles repository."""

    @abstractmethod
    async def get(self, vehicle_id: int) -> Optional[Vehicle]:
        """Get vehicle by ID."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Vehicle]:
        """List every vehicle, retired ones included."""
        pass

    @abstractmethod
    async def set_total_mileage(self, vehicle: Vehicle, total: int) -> Vehicle:
        """Overwrite the vehicle's derived total mileage."""
        pass
