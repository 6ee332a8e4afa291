"""Task creation factory for lifetasks.

This module centralizes creation logic so every stored entity gets a fresh id,
consistent timestamps and the default values from `constants`.
"""

import uuid
from datetime import datetime
from typing import Optional

from lifetasks.models.task import Task, BacklogTask, TaskContext
from lifetasks.models.recurrence import RecurringTaskDefinition
from lifetasks.models.school import ClassModule, SchoolClass
from lifetasks.models.constants import DEFAULT_STATUS, DEFAULT_PRIORITY, MODULE_PENDING


def create_task_base(
    user_id: str,
    date: str,
    context: TaskContext,
    title: str,
    notes: Optional[str] = None,
    status: Optional[str] = None,
    completed: Optional[bool] = None,
    priority: Optional[int] = None,
) -> Task:
    """Create a calendar task with defaults, allowing overrides.

    Args:
        user_id: User ID who owns this task (required)
        date: Calendar date (YYYY-MM-DD)
        context: Life context
        title: Task title (required)
        notes: Task notes (defaults to empty)
        status: Status tag (defaults to DEFAULT_STATUS)
        completed: Completion flag (defaults to False)
        priority: Ordering weight (defaults to DEFAULT_PRIORITY)

    Returns:
        Task object with a fresh id and creation timestamp
    """
    now = datetime.utcnow()
    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        date=date,
        context=context,
        title=title,
        notes=notes if notes is not None else "",
        status=status if status is not None else DEFAULT_STATUS,
        completed=completed if completed is not None else False,
        priority=priority if priority is not None else DEFAULT_PRIORITY,
        created_at=now,
        updated_at=now,
    )


def create_backlog_task_base(
    user_id: str,
    context: TaskContext,
    title: str,
    notes: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[int] = None,
) -> BacklogTask:
    """Create an unscheduled backlog task with defaults."""
    now = datetime.utcnow()
    return BacklogTask(
        id=str(uuid.uuid4()),
        user_id=user_id,
        context=context,
        title=title,
        notes=notes if notes is not None else "",
        status=status if status is not None else DEFAULT_STATUS,
        completed=False,
        priority=priority if priority is not None else DEFAULT_PRIORITY,
        created_at=now,
        updated_at=now,
    )


def create_recurring_definition_base(
    user_id: str,
    title: str,
    context: TaskContext,
    frequency: str,
    status: Optional[str] = None,
) -> RecurringTaskDefinition:
    """Create a new recurring definition: active, with an empty ledger."""
    now = datetime.utcnow()
    return RecurringTaskDefinition(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        context=context,
        status=status if status is not None else DEFAULT_STATUS,
        frequency=frequency,
        active=True,
        generated_dates=[],
        created_at=now,
        updated_at=now,
    )


def create_class_base(user_id: str, name: str, color: str) -> SchoolClass:
    now = datetime.utcnow()
    return SchoolClass(id=str(uuid.uuid4()), user_id=user_id, name=name, color=color, created_at=now, updated_at=now)


def create_module_base(
    user_id: str,
    class_id: str,
    module_number: int,
    name: str,
    week_number: Optional[int] = None,
) -> ClassModule:
    """Create a pending module for a class."""
    now = datetime.utcnow()
    return ClassModule(
        id=str(uuid.uuid4()),
        user_id=user_id,
        class_id=class_id,
        module_number=module_number,
        name=name,
        week_number=week_number,
        status=MODULE_PENDING,
        completed=False,
        created_at=now,
        updated_at=now,
    )
