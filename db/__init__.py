"""
db - Database layer.

Public API:
    init_db(url)         → create engine + tables
    dispose_db()         → release the engine
    get_session()        → new Session
    Employee, ImportJob  → ORM models
"""

from db.engine import init_db, dispose_db, get_session     # noqa: F401
from db.models import Base, Employee, ImportJob            # noqa: F401
