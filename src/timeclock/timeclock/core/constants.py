"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

STANDARD_DAY_SECONDS = 8 * 3600
GRACE_SECONDS = 10
MIN_SHIFT_SECONDS = 60
CLOCK_IN_DEBOUNCE_SECONDS = 2
SYNC_DELAY_SECONDS = 60
TICK_SECONDS = 1

RING_CIRCUMFERENCE = 691

PAID_DAY_MINUTES = 480
LEAVE_MINUTES = {
    "Paid Off": PAID_DAY_MINUTES,
    "Sick Day": 0,
    "Day Off": 0,
}

DEFAULT_HISTORY_LIMIT = 15
BADGE_CAP = 9
STATUS_SCAN_LIMIT = 1000

EXPORT_FILENAME = "timetracker_backup.json"

# Shown while a shift is running.
MOTIVATIONAL_QUOTES = (
    "Precision in every move.",
    "Calm is a superpower.",
    "Be the solution.",
    "Make it look easy.",
    "Quality over speed.",
    "Safety first, speed second.",
    "Focus on the details.",
    "Stay professional.",
)
