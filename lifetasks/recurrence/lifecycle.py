"""Toggle and delete operations for recurring task definitions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from lifetasks.models.recurrence import RecurringTaskDefinition
from lifetasks.recurrence.store import RecurrenceStore

logger = logging.getLogger(__name__)


class CascadeDeleteError(Exception):
    """A cascading delete left storage half-updated.

    The matching tasks were removed but the definition itself could not be deleted,
    so it will keep generating tasks until the delete is retried.
    """

    def __init__(self, definition_id: str, title: str, instances_deleted: int, cause: Exception):
        self.definition_id = definition_id
        self.title = title
        self.instances_deleted = instances_deleted
        self.cause = cause
        super().__init__(
            f"Deleted {instances_deleted} tasks titled {title!r} but failed to delete "
            f"recurring task {definition_id} ({type(cause).__name__}: {cause}); retry the delete"
        )


def set_definition_active(
    store: RecurrenceStore, definition_id: str, active: bool
) -> Optional[RecurringTaskDefinition]:
    """Set the active flag. Already generated tasks and the ledger are left untouched."""
    definition = store.get_definition(definition_id)
    if definition is None:
        return None
    definition.active = bool(active)
    definition.updated_at = datetime.utcnow()
    store.persist_definition(definition)
    return definition


def toggle_recurring_definition(store: RecurrenceStore, definition_id: str) -> Optional[RecurringTaskDefinition]:
    definition = store.get_definition(definition_id)
    if definition is None:
        return None
    return set_definition_active(store, definition_id, not definition.active)


def delete_recurring_definition(
    store: RecurrenceStore,
    definition_id: str,
    *,
    delete_instances: bool = False,
) -> Optional[int]:
    """Delete a definition, optionally removing every task that shares its title.

    The cascade is keyed on title alone: it also removes tasks the user created by hand
    with the same title, on any date and in any context.

    Returns the number of tasks removed (0 without cascade), or None if the definition
    does not exist. Raises CascadeDeleteError if tasks were removed but the definition
    delete then failed.
    """
    definition = store.get_definition(definition_id)
    if definition is None:
        return None

    removed = 0
    if delete_instances:
        # Tasks first: if this fails nothing has changed and the caller can retry.
        removed = store.delete_task_instances_by_title(definition.title)

    try:
        deleted = store.delete_definition(definition_id)
    except Exception as e:
        if delete_instances:
            logger.error(f"Cascade delete for recurring task {definition_id} left orphaned state: {type(e).__name__}: {e}")
            raise CascadeDeleteError(definition_id, definition.title, removed, e) from e
        raise
    if not deleted and delete_instances:
        raise CascadeDeleteError(
            definition_id, definition.title, removed, LookupError("definition vanished during delete")
        )

    logger.info(f"Deleted recurring task {definition_id} ({removed} tasks removed)")
    return removed
