"""Recurring task expansion and materialization for lifetasks."""

from lifetasks.recurrence.expand import expand, add_months, days_in_month
from lifetasks.recurrence.materialize import reconcile, materialize_recurring_tasks, ReconcileResult, ReconcileFailure
from lifetasks.recurrence.lifecycle import (
    delete_recurring_definition,
    toggle_recurring_definition,
    set_definition_active,
    CascadeDeleteError,
)
from lifetasks.recurrence.store import RecurrenceStore, SqlRecurrenceStore

__all__ = [
    "expand",
    "add_months",
    "days_in_month",
    "reconcile",
    "materialize_recurring_tasks",
    "ReconcileResult",
    "ReconcileFailure",
    "delete_recurring_definition",
    "toggle_recurring_definition",
    "set_definition_active",
    "CascadeDeleteError",
    "RecurrenceStore",
    "SqlRecurrenceStore",
]
