"""Data models for lifetasks."""

from lifetasks.models.task import Task, BacklogTask, TaskContext
from lifetasks.models.recurrence import Frequency, RecurringTaskDefinition, frequency_label
from lifetasks.models.school import SchoolClass, ClassModule
from lifetasks.models.user import User

__all__ = [
    "Task",
    "BacklogTask",
    "TaskContext",
    "Frequency",
    "RecurringTaskDefinition",
    "frequency_label",
    "SchoolClass",
    "ClassModule",
    "User",
]
