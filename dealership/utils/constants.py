# dealership/utils/constants.py

"""
Global constants for roles, statuses, catalog paging and form rules.
These constants are imported by models, services and controllers.
"""

# Date/time formats (test-drive bookings)
DATE_FMT = "%Y-%m-%d"
TIME_FMT = "%H:%M"

# Filter value meaning "no constraint on this field"
WILDCARD = "Todos"

# Catalog paging
PAGE_SIZE = 9

# Admin listing rules
MAX_SERVICES = 3
MAX_VEHICLE_IMAGES = 8
FEATURED_COUNT = 3


class Role:
    ADMIN = "admin"
    USER = "user"


class TestDriveStatus:
    __test__ = False  # keep pytest from collecting this as a test class

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Table:
    VEHICLES = "vehicles"
    SERVICES = "services"
    USERS = "users"
    FAVORITES = "user_favorites"
    CONTACT = "contact_submissions"
    NEWSLETTER = "newsletter_subscriptions"
    TEST_DRIVES = "test_drives"
    FINANCING = "financing_applications"


class Bucket:
    VEHICLE_IMAGES = "vehicle-images"
    SERVICE_IMAGES = "service-images"


# --- Test drives ---
TEST_DRIVE_SLOTS = ("09:00", "10:00", "11:00", "12:00", "14:00", "15:00", "16:00")
TEST_DRIVE_WINDOW_DAYS = 30

# --- Financing ---
DEFAULT_TERM_MONTHS = 48
DEFAULT_ANNUAL_RATE = 0.0699
MIN_NET_INCOME = 200_000
EMPLOYMENT_STATUSES = {"dependiente", "independiente", "jubilado", "otro"}

