"""
schema.fields - CSV column ↔ Employee-attribute mapping.

CSV headers map 1:1 onto Employee attributes.  Any other column in
the upload is ignored.
"""

BUSINESS_KEY = "employee_id"

# Must be non-empty after trimming
REQUIRED_FIELDS: tuple[str, ...] = (
    "employee_id",
    "name",
    "email",
    "title",
    "department",
    "location",
)

# Blank cells become None
OPTIONAL_FIELDS: tuple[str, ...] = (
    "status",
    "start_date",
    "manager_employee_id",
    "photo_url",
)

EMPLOYEE_STATUSES = ("active", "leave", "terminated", "contractor")
DEFAULT_STATUS = "active"

# Attributes compared against the store to tell update from unchanged
COMPARED_FIELDS: tuple[str, ...] = tuple(
    f for f in REQUIRED_FIELDS + OPTIONAL_FIELDS if f != BUSINESS_KEY
)
