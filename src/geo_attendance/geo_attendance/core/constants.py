"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

# Jitter applied when two fixes coincide exactly: 1 + random() * span, i.e. [1, 10).
ZERO_DISTANCE_JITTER_MIN = 1.0
ZERO_DISTANCE_JITTER_SPAN = 9.0

# Readings in (CORRECTION_LOWER, CORRECTION_UPPER] are reduced by CORRECTION_OFFSET.
CORRECTION_LOWER_METERS = 800.0
CORRECTION_UPPER_METERS = 900.0
CORRECTION_OFFSET_METERS = 850.0

SESSION_CODE_LENGTH = 6
SESSION_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SESSION_CODE_MAX_ATTEMPTS = 10

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
DEFAULT_STORE_BASE_URL = "https://jsonblob.com/api/jsonBlob"

STORE_COLLECTIONS = ("users", "sessions", "attendanceRecords")

CSV_HEADER = (
    "Student ID",
    "Student Name",
    "Date",
    "Time",
    "Status",
    "GPS Distance",
    "Attempted From Outside",
)
