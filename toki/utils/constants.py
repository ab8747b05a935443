"""Constants and default values."""

# Reminder statuses
STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"
STATUS_DEACTIVATED = "deactivated"

# Dispatch outcomes
OUTCOME_DELIVERED = "delivered"
OUTCOME_DELIVERY_FAILED = "delivery_failed"
OUTCOME_STORE_FAILED = "store_failed"

# Locales
SUPPORTED_LOCALES = ("zh", "ja")
DEFAULT_LOCALE = "zh"
AUTO_LOCALE = "auto"  # detect from each message

# Default timezone
DEFAULT_TIMEZONE = "Asia/Taipei"

# Time of day used when a date is given without one
DEFAULT_HOUR = 9
DEFAULT_MINUTE = 0

# Unresolved text is scheduled this far ahead
FALLBACK_OFFSET_MINUTES = 60

# Limits
MAX_REMINDERS_PER_USER = 100
MAX_CONTENT_LENGTH = 200
MIN_CUSTOM_INTERVAL_DAYS = 1
MAX_CUSTOM_INTERVAL_DAYS = 365
