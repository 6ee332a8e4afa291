"""Materialize recurring task definitions into concrete calendar tasks."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from lifetasks.models.constants import MATERIALIZE_MONTHS
from lifetasks.models.recurrence import RecurringTaskDefinition
from lifetasks.models.task import Task
from lifetasks.models.task_factory import create_task_base
from lifetasks.recurrence.expand import add_months, expand, format_date
from lifetasks.recurrence.store import RecurrenceStore, SqlRecurrenceStore

logger = logging.getLogger(__name__)


class ReconcileFailure(BaseModel):
    """One isolated failure during a reconciliation pass."""

    definition_id: str
    title: str
    date: Optional[str] = Field(None, description="Candidate date; None when persisting the ledger failed")
    stage: str = Field(..., description="'load' (definitions could not be read), 'lookup', 'create' or 'persist'")
    reason: str


class ReconcileResult:
    """Result of a reconciliation pass."""

    def __init__(self, definitions: List[RecurringTaskDefinition]):
        self.definitions = definitions
        self.created: List[Task] = []
        self.failures: List[ReconcileFailure] = []

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def ok(self) -> bool:
        return not self.failures


def _normalize_today(today: Union[date, datetime]) -> date:
    # datetime is a subclass of date; strip time-of-day.
    if isinstance(today, datetime):
        return today.date()
    return today


def _reason(e: Exception) -> str:
    return f"{type(e).__name__}: {str(e)}"


def _materialize_definition_month(
    definition: RecurringTaskDefinition,
    target_month: date,
    floor: str,
    store: RecurrenceStore,
    result: ReconcileResult,
) -> None:
    for day in expand(definition.frequency, target_month):
        # Never backfill into the past. YYYY-MM-DD strings order like dates.
        if day < floor:
            continue
        if day in definition.generated_dates:
            continue

        try:
            existing = store.list_task_instances(day, definition.context)
        except Exception as e:
            logger.warning(f"Lookup failed for recurring task {definition.id} on {day}: {_reason(e)}")
            result.failures.append(
                ReconcileFailure(
                    definition_id=definition.id, title=definition.title, date=day, stage="lookup", reason=_reason(e)
                )
            )
            continue
        if any(t.title == definition.title for t in existing):
            continue

        task = create_task_base(
            user_id=definition.user_id,
            date=day,
            context=definition.context,
            title=definition.title,
            notes="",
            status=definition.status,
            completed=False,
        )
        try:
            created = store.create_task_instance(task)
            reason = "store reported failure"
        except Exception as e:
            created = False
            reason = _reason(e)
        if not created:
            # Left out of the ledger so the next pass retries it.
            logger.warning(f"Failed to create recurring task {definition.id} on {day}: {reason}")
            result.failures.append(
                ReconcileFailure(
                    definition_id=definition.id, title=definition.title, date=day, stage="create", reason=reason
                )
            )
            continue

        definition.generated_dates.append(day)
        result.created.append(task)


def reconcile(
    definitions: List[RecurringTaskDefinition],
    today: Union[date, datetime],
    store: RecurrenceStore,
) -> ReconcileResult:
    """Create missing tasks for active definitions over the current month and the next two.

    Definitions are updated in place (their `generated_dates` ledger grows) and every
    definition is written back through the store, whether or not it produced new dates.
    Failures are isolated per candidate / per definition and collected on the result.
    """
    today = _normalize_today(today)
    floor = format_date(today)
    result = ReconcileResult(definitions)

    for month_offset in range(MATERIALIZE_MONTHS):
        target_month = add_months(today, month_offset)
        for definition in definitions:
            if not definition.active:
                continue
            _materialize_definition_month(definition, target_month, floor, store, result)

    for definition in definitions:
        try:
            store.persist_definition(definition)
        except Exception as e:
            logger.warning(f"Failed to persist ledger for recurring task {definition.id}: {_reason(e)}")
            result.failures.append(
                ReconcileFailure(
                    definition_id=definition.id, title=definition.title, stage="persist", reason=_reason(e)
                )
            )

    logger.info(
        f"Reconciled {len(definitions)} recurring tasks for {floor}: "
        f"{result.created_count} created, {len(result.failures)} failures"
    )
    return result


def materialize_recurring_tasks(
    db: Session,
    *,
    user_id: str,
    today: Optional[Union[date, datetime]] = None,
) -> ReconcileResult:
    """Run a reconciliation pass for one user against the database."""
    store = SqlRecurrenceStore(db, user_id)
    definitions = store.list_recurring_definitions()
    return reconcile(definitions, today or date.today(), store)
