"""Bin types and schedule limits."""

from enum import Enum


class BinCategory(str, Enum):
    RECYCLING = "recycle"
    GARDEN_WASTE = "garden"
    GENERAL = "general"


BIN_CATEGORY_VALUES = [category.value for category in BinCategory]

# Furthest back a last-collection date may be entered
MAX_BACKDATE_DAYS = 30

# Holiday runs longer than a year mean the holiday table is corrupt
MAX_HOLIDAY_ADVANCE_DAYS = 366

# Concurrent schedule edits retried before giving up
MAX_SCHEDULE_UPDATE_RETRIES = 3

DEFAULT_NOTIFY_DAYS_BEFORE = 1

# Holiday calendars are keyed by these region codes
JURISDICTIONS = {
    "GB-ENG": "England",
    "GB-WLS": "Wales",
    "GB-SCT": "Scotland",
    "GB-NIR": "Northern Ireland",
}
