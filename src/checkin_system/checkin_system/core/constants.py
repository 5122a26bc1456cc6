"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

BADGE_PREFIX = "REG"
BADGE_RANDOM_LENGTH = 6
BADGE_UID_MAX_ATTEMPTS = 5
BADGE_UID_PATTERN = r"^[A-Z0-9]{6,20}$"
DEFAULT_BADGE_PRINT_TEMPLATE = "TPL_A6_V1"

QR_PAYLOAD_TYPE = "badge"
QR_PAYLOAD_VERSION = "1.0"
QR_DEFAULT_SIZE_PX = 256
QR_DEFAULT_MARGIN = 2

DEFAULT_PERFORMER = "system"
DEFAULT_LOCATION = "main"

EVENT_CATEGORIES = (
    "delegate",
    "faculty",
    "chairperson",
    "exhibitor",
    "staff",
    "speaker",
    "organizer",
)

MAX_INPUT_LENGTH = 1000
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100
DEFAULT_ADMIN_PAGE_SIZE = 100
DEFAULT_EVENTS_LIMIT = 50
TOP_EVENTS_LIMIT = 10

# name -> (window seconds, max requests)
RATE_LIMITS = {
    "default": (15 * 60, 100),
    "registration": (15 * 60, 5),
    "checkin": (60, 10),
    "search": (60, 30),
    "admin": (60, 100),
}
