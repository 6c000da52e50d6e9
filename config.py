"""
PeopleDir - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR      = Path(__file__).resolve().parent
CSV_SEED_PATH = Path(os.environ.get("PEOPLEDIR_CSV_SEED", BASE_DIR / "roster_seed.csv"))

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("PEOPLEDIR_DB", f"sqlite:///{BASE_DIR / 'peopledir.sqlite'}")
# Concurrent imports against one SQLite file wait this long for the write lock
SQLITE_BUSY_TIMEOUT_MS = int(os.environ.get("PEOPLEDIR_SQLITE_BUSY_TIMEOUT_MS", "5000"))

# ── Server ─────────────────────────────────────────────────────────────
HOST      = os.environ.get("PEOPLEDIR_HOST", "0.0.0.0")
PORT      = int(os.environ.get("PEOPLEDIR_PORT", "5000"))
DEBUG     = os.environ.get("PEOPLEDIR_DEBUG", "0") == "1"
SECRET    = os.environ.get("PEOPLEDIR_SECRET", "peopledir-dev-key-change-in-prod")
LOG_LEVEL = os.environ.get("PEOPLEDIR_LOG_LEVEL", "INFO").upper()

# ── Imports ────────────────────────────────────────────────────────────
MAX_UPLOAD_BYTES = int(os.environ.get("PEOPLEDIR_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
DEFAULT_UPLOADER = "system@local.internal"
RECENT_JOBS_LIMIT = 20

# ── Roles ──────────────────────────────────────────────────────────────
# Roles come from the upstream auth provider; only these may run imports.
IMPORT_ROLES = frozenset({"admin", "hr_editor"})
ALL_ROLES    = IMPORT_ROLES | {"viewer"}
