"""Constants for lifetasks.

This module centralizes magic numbers and default values used throughout the application.
"""


# Task defaults
DEFAULT_STATUS = "To Do"
DEFAULT_PRIORITY = 0

# Calendar dates are naive and stored as strings
DATE_FORMAT = "%Y-%m-%d"

# Recurrence: current month plus the next two
MATERIALIZE_MONTHS = 3

# School class modules
MODULE_PENDING = "pending"
MODULE_COMPLETED = "completed"
DEFAULT_CLASS_COLOR = "#4a90d9"
