"""
Enumerations shared by the scheduling models.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Manages users, vehicles and projects; may edit any trip
        USER: Staff member logging their own trips (default role)
    """
    ADMIN = "ADMIN"
    USER = "USER"


class TripCategory(str, enum.Enum):
    """Trip category enumeration."""
    MEETING = "MEETING"
    FIELDWORK = "FIELDWORK"
    LEAVE = "LEAVE"  # Excluded from personnel statistics
    OTHER = "OTHER"


class VehicleStatus(str, enum.Enum):
    """Vehicle availability enumeration."""
    AVAILABLE = "AVAILABLE"  # Can be reserved
    MAINTENANCE = "MAINTENANCE"  # Under maintenance, cannot be reserved
