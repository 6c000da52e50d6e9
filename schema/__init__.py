"""
schema - Employee attribute schema shared by the import engine and
the storage services.

Public API:
    fields.REQUIRED_FIELDS / OPTIONAL_FIELDS / COMPARED_FIELDS
    fields.EMPLOYEE_STATUSES / DEFAULT_STATUS
"""

from schema.fields import (                         # noqa: F401
    BUSINESS_KEY,
    REQUIRED_FIELDS,
    OPTIONAL_FIELDS,
    COMPARED_FIELDS,
    EMPLOYEE_STATUSES,
    DEFAULT_STATUS,
)
