"""Storage contract used by recurring-task materialization.

The reconciler only talks to storage through `RecurrenceStore`, scoped to a single
user. `SqlRecurrenceStore` backs it with the SQLAlchemy repositories; tests can
substitute an in-memory implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy.orm import Session

from lifetasks.database.recurring_task_repository import RecurringTaskRepository
from lifetasks.database.repository import TaskRepository
from lifetasks.models.recurrence import RecurringTaskDefinition
from lifetasks.models.task import Task, TaskContext

logger = logging.getLogger(__name__)


class RecurrenceStore(ABC):
    """Per-user storage operations needed to materialize recurring tasks."""

    @abstractmethod
    def list_recurring_definitions(self) -> List[RecurringTaskDefinition]:
        """All definitions, active or not."""

    @abstractmethod
    def get_definition(self, definition_id: str) -> Optional[RecurringTaskDefinition]:
        """A single definition, or None."""

    @abstractmethod
    def list_task_instances(self, date: str, context: TaskContext) -> List[Task]:
        """Tasks stored on `date` within `context`."""

    @abstractmethod
    def create_task_instance(self, task: Task) -> bool:
        """Persist a new task. Returns False (or raises) on failure."""

    @abstractmethod
    def persist_definition(self, definition: RecurringTaskDefinition) -> None:
        """Write back the ledger and active flag (and other editable fields)."""

    @abstractmethod
    def delete_definition(self, definition_id: str) -> bool:
        """Delete a definition. Returns False if it did not exist."""

    @abstractmethod
    def delete_task_instances_by_title(self, title: str) -> int:
        """Delete every task with this exact title on any date/context; returns the count."""


class SqlRecurrenceStore(RecurrenceStore):
    def __init__(self, db: Session, user_id: str):
        self.user_id = user_id
        self.task_repo = TaskRepository(db)
        self.recurring_repo = RecurringTaskRepository(db)

    def list_recurring_definitions(self) -> List[RecurringTaskDefinition]:
        return self.recurring_repo.list_all(self.user_id)

    def get_definition(self, definition_id: str) -> Optional[RecurringTaskDefinition]:
        return self.recurring_repo.get(self.user_id, definition_id)

    def list_task_instances(self, date: str, context: TaskContext) -> List[Task]:
        return self.task_repo.get_for_date(self.user_id, date, context)

    def create_task_instance(self, task: Task) -> bool:
        if task.user_id != self.user_id:
            logger.error(f"Refusing to create task {task.id} for another user")
            return False
        self.task_repo.create(task)
        return True

    def persist_definition(self, definition: RecurringTaskDefinition) -> None:
        self.recurring_repo.update(definition)

    def delete_definition(self, definition_id: str) -> bool:
        return self.recurring_repo.delete(self.user_id, definition_id)

    def delete_task_instances_by_title(self, title: str) -> int:
        return self.task_repo.delete_by_title(self.user_id, title)
