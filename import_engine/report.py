"""
import_engine.report - Structured result of a CSV import run.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from import_engine.outcome import RowOutcome, CREATE, UPDATE, UNCHANGED, REJECT

ERROR_CSV_HEADER = ("row_number", "employee_id", "errors")
REASON_SEPARATOR = "; "


@dataclass
class ImportReport:
    total_rows: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    rejected_rows: list[dict] = field(default_factory=list)   # [{rowNumber, employeeId, errors}]
    warnings: list[dict] = field(default_factory=list)        # [{rowNumber, employeeId, messages}]
    fatal_errors: list[str] = field(default_factory=list)

    @property
    def rejected(self) -> int:
        return len(self.rejected_rows)

    @property
    def is_fatal(self) -> bool:
        return bool(self.fatal_errors)

    def add_fatal(self, message: str):
        self.fatal_errors.append(message)

    def add_rejection(self, row: int, employee_id: str, reasons: list[str]):
        self.rejected_rows.append(
            {"rowNumber": row, "employeeId": employee_id, "errors": list(reasons)}
        )

    def record(self, outcome: RowOutcome):
        """Tally one final outcome."""
        if outcome.action == CREATE:
            self.created += 1
        elif outcome.action == UPDATE:
            self.updated += 1
        elif outcome.action == UNCHANGED:
            self.unchanged += 1
        elif outcome.action == REJECT:
            self.add_rejection(outcome.row_number, outcome.employee_id, outcome.reasons)

        if outcome.warnings and outcome.action != REJECT:
            self.warnings.append({
                "rowNumber": outcome.row_number,
                "employeeId": outcome.employee_id,
                "messages": list(outcome.warnings),
            })

    def error_csv(self) -> str | None:
        """Rejected rows as a downloadable CSV, or None if nothing was rejected."""
        if not self.rejected_rows:
            return None
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(ERROR_CSV_HEADER)
        for r in sorted(self.rejected_rows, key=lambda r: r["rowNumber"]):
            writer.writerow([r["rowNumber"], r["employeeId"], REASON_SEPARATOR.join(r["errors"])])
        return buf.getvalue()

    def to_dict(self) -> dict:
        return {
            "totalRows": self.total_rows,
            "createdCount": self.created,
            "updatedCount": self.updated,
            "unchangedCount": self.unchanged,
            "rejectedCount": self.rejected,
            "rejectedRows": sorted(self.rejected_rows, key=lambda r: r["rowNumber"]),
            "warnings": self.warnings,
            "fatalErrors": self.fatal_errors,
            "errorCsv": self.error_csv(),
        }
