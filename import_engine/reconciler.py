"""
import_engine.reconciler - Classify validated rows against a store snapshot.

Works on the whole batch at once so that duplicate keys and manager
links can be judged with full knowledge of the file.  The snapshot is
taken once by the caller and never re-queried here.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Mapping

from schema.fields import COMPARED_FIELDS
from import_engine.outcome import RowOutcome, CREATE, UPDATE, UNCHANGED

Snapshot = Mapping[str, Mapping[str, Any]]


def reconcile(candidates: Iterable[RowOutcome], snapshot: Snapshot) -> list[RowOutcome]:
    """
    Assign create / update / unchanged / reject to every candidate.

    Candidates are the outcomes that passed row validation.  They are
    mutated in place and returned in their original order.
    """
    candidates = list(candidates)

    # Pass 1: key → outcomes, in file order
    by_key: dict[str, list[RowOutcome]] = defaultdict(list)
    for outcome in candidates:
        by_key[outcome.employee_id].append(outcome)

    for key, group in by_key.items():
        if len(group) > 1:
            for outcome in group:
                outcome.reject(f"duplicate employee_id within import batch {key}")

    # Pass 2: existence check
    for outcome in candidates:
        if outcome.rejected:
            continue
        current = snapshot.get(outcome.employee_id)
        if current is None:
            outcome.action = CREATE
        elif differs(outcome.attributes, current):
            outcome.action = UPDATE
        else:
            outcome.action = UNCHANGED

    flag_unresolved_managers(candidates, snapshot)
    return candidates


def flag_unresolved_managers(outcomes: list[RowOutcome], snapshot: Snapshot) -> None:
    """
    Warn on every non-rejected row whose manager is neither stored nor
    another non-rejected row of the batch.  Safe to call again once
    write failures have rejected more rows; a warning is added once.
    """
    batch_keys = {o.employee_id for o in outcomes if not o.rejected}
    for outcome in outcomes:
        if outcome.rejected:
            continue
        manager = outcome.attributes.get("manager_employee_id")
        if manager and manager not in snapshot and manager not in batch_keys:
            message = (
                f"manager_employee_id {manager} does not match any existing "
                f"or imported employee"
            )
            if message not in outcome.warnings:
                outcome.warnings.append(message)


def differs(incoming: Mapping[str, Any], current: Mapping[str, Any]) -> bool:
    """True when any compared attribute differs from the stored value."""
    for name in COMPARED_FIELDS:
        if _comparable(incoming.get(name)) != _comparable(current.get(name)):
            return True
    return False


def _comparable(value: Any) -> Any:
    # Stores may hand back "" where the import normalised to None
    if value == "":
        return None
    return value
