"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    Caller roles.

    - OWNER / ADMIN / STAFF: tenant membership roles
    - CLIENT: end customer booking appointments
    - SUPERADMIN: platform operator
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CLIENT = "CLIENT"
    SUPERADMIN = "SUPERADMIN"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


# Service/staff catalog, assignments, availability and time off
ROLES_CAN_MANAGE_CATALOG = frozenset({Role.OWNER, Role.ADMIN})

# Appointment status changes, reschedules and notes
ROLES_CAN_UPDATE_APPOINTMENTS = frozenset({Role.OWNER, Role.ADMIN, Role.STAFF})
