"""
services - Storage collaborators sitting between the import engine/API and DB.
"""

from services.employee_store import EmployeeStore, StoreError                # noqa: F401
from services.import_job_log import ImportJobLog, JobAlreadyFinished         # noqa: F401
