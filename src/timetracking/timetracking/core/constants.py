"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

EARTH_RADIUS_METERS = 6_371_000

# Grace added to every site radius to absorb GPS rounding.
GEOFENCE_BUFFER_METERS = 25

SECONDS_PER_HOUR = Decimal(3600)
MONEY_QUANTUM = Decimal("0.01")

MAX_NOTES_LENGTH = 1000
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

MYSQL_DUPLICATE_KEY_ERRNO = 1062

ALREADY_CHECKED_IN_MESSAGE = "You are already checked in. Please check out first."
NO_ACTIVE_CHECK_IN_MESSAGE = "No active check-in found. Please check in first."
