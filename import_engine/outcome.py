"""
import_engine.outcome - Per-row verdict carried through one import run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

CREATE = "create"
UPDATE = "update"
UNCHANGED = "unchanged"
REJECT = "reject"


@dataclass
class RowOutcome:
    row_number: int
    employee_id: str
    action: str | None = None              # None until reconciled
    attributes: dict[str, Any] | None = None
    reasons: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return self.action == REJECT

    def reject(self, *reasons: str) -> None:
        self.action = REJECT
        self.reasons.extend(reasons)
