"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Times of day are minutes since midnight in the business timezone.
"""

DEFAULT_BUSINESS_TIMEZONE = "Asia/Kuala_Lumpur"
DEFAULT_SCAN_TIMEOUT_SECONDS = 15.0

EARTH_RADIUS_METERS = 6_371_000.0

WORKDAY_START_MINUTES = 8 * 60
EARLY_CHECKOUT_ANCHOR_MINUTES = 17 * 60
EVENING_OT_MINUTES = 19 * 60
NIGHT_OT_MINUTES = 22 * 60

FULL_DAY_HOURS = 9.0
EVENING_OT_HOURS = 2.0
NIGHT_OT_HOURS = 4.0

DEFAULT_LATE_BUFFER_MINUTES = 5
DEFAULT_EARLY_CHECKOUT_BUFFER_MINUTES = 5
DEFAULT_OT_EARLY_BUFFER_MINUTES = 15
DEFAULT_OT_LATE_BUFFER_MINUTES = 60
