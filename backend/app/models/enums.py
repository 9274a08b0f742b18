"""
Enumerations shared by the user and geo-tracking models.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Full access to every field agent's history
        MANAGER: Supervises a team of field agents
        STAFF: Field agent emitting geo-tracking pings (default role)
    """
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class ActivityType(str, enum.Enum):
    """Device-reported motion activity attached to a ping."""
    STILL = "still"
    IN_VEHICLE = "in_vehicle"
