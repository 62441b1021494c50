"""
Vehicle total-mileage aggregation.

A vehicle's total is always recomputed from all of its reported trips and
written over the stored value, never incremented. This keeps the total
correct after lost updates, out-of-band edits and deletions.
"""

from typing import Iterable, Optional


def effective_trip_distance(trip) -> int:
    """
    Distance of one reported trip.

    Uses the stored trip_distance, or end - start when it is missing.
    Non-positive values count as zero.
    """
    distance = trip.trip_distance
    if distance is None:
        if trip.start_odometer is None or trip.end_odometer is None:
            return 0
        distance = trip.end_odometer - trip.start_odometer
    return max(distance, 0)


def compute_vehicle_total(
    trips: Iterable,
    vehicle_id: int,
    starting_odometer: Optional[int] = None,
    include_starting_odometer: bool = False,
) -> int:
    """
    Sum the distances of a vehicle's reported trips.

    Args:
        trips: Snapshot of trips (any vehicle)
        vehicle_id: Vehicle to total
        starting_odometer: The vehicle's baseline reading, if recorded
        include_starting_odometer: Add the baseline to the sum

    Returns:
        The vehicle's total mileage
    """
    total = sum(
        effective_trip_distance(trip)
        for trip in trips
        if trip.vehicle_id == vehicle_id and trip.mileage_completed
    )
    if include_starting_odometer and starting_odometer:
        total += starting_odometer
    return total
