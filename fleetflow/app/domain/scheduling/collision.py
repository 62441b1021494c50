"""
Vehicle double-booking detection.

Pure functions over an already-fetched snapshot of trips. Callers must run
the check again right before every save; a check done when a form was opened
says nothing about the data at submit time.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Optional


@dataclass(frozen=True)
class CollisionCandidate:
    """A proposed booking window that is checked but never stored."""
    date: date
    start_time: time
    end_time: time
    vehicle_id: Optional[int] = None
    id: Optional[int] = None


def windows_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """
    Half-open interval overlap on the same day.

    Touching endpoints (one window ends exactly when the other starts) do not
    overlap.
    """
    return a_start < b_end and a_end > b_start


def find_collision(candidate, existing_trips: Iterable):
    """
    Return the first existing trip that double-books the candidate's vehicle.

    The candidate needs `date`, `start_time`, `end_time`, `vehicle_id` and,
    when it is an edit of a stored trip, `id`. A candidate without a vehicle
    never collides.
    """
    if getattr(candidate, "vehicle_id", None) is None:
        return None

    candidate_id = getattr(candidate, "id", None)

    for other in existing_trips:
        # Editing in place must not collide with the stored version of itself
        if candidate_id is not None and other.id == candidate_id:
            continue
        if other.vehicle_id != candidate.vehicle_id or other.date != candidate.date:
            continue
        if windows_overlap(candidate.start_time, candidate.end_time, other.start_time, other.end_time):
            return other

    return None


def format_collision(conflict) -> str:
    return (
        f"Vehicle already reserved by {conflict.owner_name} "
        f"({conflict.start_time:%H:%M} - {conflict.end_time:%H:%M})"
    )


def check_collision(candidate, existing_trips: Iterable) -> Optional[str]:
    """
    Decide whether saving the candidate would double-book its vehicle.

    Returns:
        A message naming the conflicting owner and window, or None
    """
    conflict = find_collision(candidate, existing_trips)
    if conflict is None:
        return None
    return format_collision(conflict)
