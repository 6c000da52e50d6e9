"""
import_engine.row_processor - Validate and normalise one CSV row.

Single-responsibility: given a parsed row, return a RowOutcome that
either carries normalised Employee attributes or is rejected with
every applicable reason.  Data-quality problems never raise.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from schema.fields import (
    BUSINESS_KEY, REQUIRED_FIELDS, OPTIONAL_FIELDS,
    EMPLOYEE_STATUSES, DEFAULT_STATUS,
)
from import_engine.csv_parser import ParsedRow
from import_engine.outcome import RowOutcome

# Something before "@", and a dot somewhere after it
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]*\.[^@\s]*[^@\s.]$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class RowProcessor:
    """
    Stateless row normaliser.  Rules are checked in a fixed order and
    every failing rule contributes one reason.
    """

    def process(self, row: ParsedRow) -> RowOutcome:
        values = {k: _clean(row.values.get(k)) for k in REQUIRED_FIELDS + OPTIONAL_FIELDS}
        outcome = RowOutcome(row_number=row.row_number, employee_id=values[BUSINESS_KEY])

        reasons: list[str] = []

        # 1-2. Required fields
        for name in REQUIRED_FIELDS:
            if not values[name]:
                reasons.append(f"{name} is required")

        # 3. Email shape
        email = values["email"].lower()
        if email and not _EMAIL_RE.match(email):
            reasons.append("invalid email format")

        # 4. Status
        status = self._normalize_status(values["status"])
        if status is None:
            reasons.append("invalid status value")

        # 5. Start date
        start_date = None
        if values["start_date"]:
            start_date = self._parse_date(values["start_date"])
            if start_date is None:
                reasons.append("invalid start_date")

        # 6. Manager self-reference
        manager = values["manager_employee_id"] or None
        if manager and manager == values[BUSINESS_KEY]:
            reasons.append("manager_employee_id cannot reference self")

        if reasons:
            outcome.reject(*reasons)
            return outcome

        outcome.attributes = {
            "employee_id": values["employee_id"],
            "name": values["name"],
            "email": email,
            "title": values["title"],
            "department": values["department"],
            "location": values["location"],
            "status": status,
            "start_date": start_date,
            "manager_employee_id": manager,
            "photo_url": values["photo_url"] or None,
        }
        return outcome

    # ── Private helpers ────────────────────────────────────────────────

    @staticmethod
    def _normalize_status(raw: str) -> str | None:
        """Return the canonical status, DEFAULT_STATUS when blank, None when unknown."""
        if not raw:
            return DEFAULT_STATUS
        lowered = raw.lower()
        return lowered if lowered in EMPLOYEE_STATUSES else None

    @staticmethod
    def _parse_date(raw: str) -> date | None:
        if not _ISO_DATE_RE.match(raw):
            return None
        try:
            return datetime.strptime(raw, "%Y-%m-%d").date()
        except ValueError:
            return None


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""
