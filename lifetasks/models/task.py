"""Task data models for lifetasks."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class TaskContext(str, Enum):
    """Life context a task belongs to."""
    WORK = "work"
    RESCUE = "rescue"
    PERSONAL = "personal"
    SCHOOL = "school"


def validate_date_str(value: str) -> str:
    """Ensure a calendar date is a canonical YYYY-MM-DD string."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return parsed.strftime("%Y-%m-%d")


class Task(BaseModel):
    """A concrete task placed on a calendar date."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    date: str = Field(..., description="Calendar date (YYYY-MM-DD, naive)")
    context: TaskContext = Field(..., description="Life context")
    title: str = Field(..., description="Task title")
    notes: str = Field("", description="Task notes")
    status: str = Field("To Do", description="Free-form status tag (e.g. 'To Do', 'In Progress')")
    completed: bool = Field(False, description="Whether the task is done")
    priority: int = Field(0, description="Manual ordering weight within a day")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    @field_validator("date")
    @classmethod
    def _validate_date(cls, v):
        return validate_date_str(v)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class BacklogTask(BaseModel):
    """An unscheduled task waiting in a context's backlog."""

    id: str = Field(..., description="Unique backlog task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    context: TaskContext = Field(..., description="Life context")
    title: str = Field(..., description="Task title")
    notes: str = Field("", description="Task notes")
    status: str = Field("To Do", description="Free-form status tag")
    completed: bool = Field(False, description="Whether the task is done")
    priority: int = Field(0, description="Manual ordering weight")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
