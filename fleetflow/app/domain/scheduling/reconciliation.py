"""
Mileage reconciliation.

Trips on a vehicle must report their odometer readings in chronological
order: a trip's starting odometer is the previous trip's ending odometer, so
an unreported earlier trip leaves every later starting value unknown.

For a pending trip this module works out
- whether it is blocked by an earlier pending trip on the same vehicle, and
- the starting odometer to pre-fill, taken from the latest earlier reported
  trip, or the vehicle's baseline when there is none.

Everything here is a pure read over an in-memory snapshot.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class MileageQueueEntry:
    trip_id: int
    vehicle_id: int
    blocked: bool
    implied_start: int
    blocking_trip_id: Optional[int] = None


def chronological_key(trip):
    """
    Ordering key: date, then start time.

    The id only breaks (date, start_time) ties, which would themselves be a
    collision, so that the order stays deterministic.
    """
    return (trip.date, trip.start_time, trip.id if trip.id is not None else 0)


def is_earlier(trip, other) -> bool:
    """True if `trip` comes strictly before `other` on the vehicle's timeline."""
    return chronological_key(trip) < chronological_key(other)


def vehicle_baseline(vehicle) -> int:
    if vehicle is None or vehicle.starting_odometer is None:
        return 0
    return vehicle.starting_odometer


def compute_mileage_queue_entry(trip, vehicle_trips: Iterable, vehicle) -> MileageQueueEntry:
    """
    Compute blocking status and implied start for one pending trip.

    Args:
        trip: A trip with a vehicle that has not reported mileage yet
        vehicle_trips: Trips of the same vehicle (others are ignored)
        vehicle: The vehicle record, used for the baseline odometer

    Returns:
        MileageQueueEntry with blocked flag, implied start and the earliest
        pending trip that blocks this one
    """
    earliest_pending = None
    latest_reported = None

    for other in vehicle_trips:
        if other.vehicle_id != trip.vehicle_id or other.id == trip.id:
            continue
        if not is_earlier(other, trip):
            continue

        if other.mileage_completed:
            if other.end_odometer is None:
                continue
            if latest_reported is None or is_earlier(latest_reported, other):
                latest_reported = other
        elif earliest_pending is None or is_earlier(other, earliest_pending):
            earliest_pending = other

    implied_start = latest_reported.end_odometer if latest_reported is not None else vehicle_baseline(vehicle)

    return MileageQueueEntry(
        trip_id=trip.id,
        vehicle_id=trip.vehicle_id,
        blocked=earliest_pending is not None,
        implied_start=implied_start,
        blocking_trip_id=earliest_pending.id if earliest_pending is not None else None,
    )


def build_mileage_queue(
    trips: Iterable,
    vehicles: Dict[int, object],
    owner_id: Optional[int] = None,
) -> List[MileageQueueEntry]:
    """
    Build the pending mileage-report queue.

    Blocking always considers every trip on the vehicle, whoever owns it;
    `owner_id` only narrows which pending trips are listed.

    Args:
        trips: Snapshot of all trips
        vehicles: Vehicle records keyed by id
        owner_id: Only list this user's pending trips

    Returns:
        Entries in chronological order of their trips
    """
    by_vehicle: Dict[int, list] = {}
    for trip in trips:
        if trip.vehicle_id is not None:
            by_vehicle.setdefault(trip.vehicle_id, []).append(trip)

    pending = [
        trip
        for vehicle_trips in by_vehicle.values()
        for trip in vehicle_trips
        if not trip.mileage_completed and (owner_id is None or trip.owner_id == owner_id)
    ]
    pending.sort(key=chronological_key)

    return [
        compute_mileage_queue_entry(trip, by_vehicle[trip.vehicle_id], vehicles.get(trip.vehicle_id))
        for trip in pending
    ]
