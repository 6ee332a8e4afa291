"""SQLAlchemy database models for lifetasks."""

from datetime import datetime
from typing import Union, TypeVar, Type
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, Index

from lifetasks.database.database import Base
from lifetasks.models.task import TaskContext
from lifetasks.models.constants import DEFAULT_STATUS, MODULE_PENDING

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class TaskDB(Base):
    """Database model for a calendar Task."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_date", "user_id", "date"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Naive calendar date, YYYY-MM-DD
    date = Column(String, nullable=False)
    context = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default=DEFAULT_STATUS)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from lifetasks.models.task import Task
        return Task(
            id=self.id,
            user_id=self.user_id,
            date=self.date,
            context=value_to_enum(self.context, TaskContext, TaskContext.PERSONAL),
            title=self.title,
            notes=self.notes or "",
            status=self.status,
            completed=bool(self.completed),
            priority=self.priority or 0,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            date=task.date,
            context=enum_to_value(task.context),
            title=task.title,
            notes=task.notes,
            status=task.status,
            completed=task.completed,
            priority=task.priority,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class BacklogTaskDB(Base):
    """Database model for an unscheduled backlog task."""

    __tablename__ = "backlog_tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    context = Column(String, nullable=False)
    title = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default=DEFAULT_STATUS)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from lifetasks.models.task import BacklogTask
        return BacklogTask(
            id=self.id,
            user_id=self.user_id,
            context=value_to_enum(self.context, TaskContext, TaskContext.PERSONAL),
            title=self.title,
            notes=self.notes or "",
            status=self.status,
            completed=bool(self.completed),
            priority=self.priority or 0,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            context=enum_to_value(task.context),
            title=task.title,
            notes=task.notes,
            status=task.status,
            completed=task.completed,
            priority=task.priority,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class RecurringTaskDB(Base):
    """Database model for a recurring task definition (template + frequency + ledger)."""

    __tablename__ = "recurring_tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False)
    context = Column(String, nullable=False)
    status = Column(String, nullable=False, default=DEFAULT_STATUS)
    frequency = Column(String, nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    # Ledger of materialized dates (JSON array of YYYY-MM-DD strings)
    generated_dates = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from lifetasks.models.recurrence import RecurringTaskDefinition
        return RecurringTaskDefinition(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            context=value_to_enum(self.context, TaskContext, TaskContext.PERSONAL),
            status=self.status,
            frequency=self.frequency,
            active=bool(self.active),
            generated_dates=list(self.generated_dates or []),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, definition):
        """Create database model from Pydantic model."""
        return cls(
            id=definition.id,
            user_id=definition.user_id,
            title=definition.title,
            context=enum_to_value(definition.context),
            status=definition.status,
            frequency=definition.frequency,
            active=definition.active,
            generated_dates=list(definition.generated_dates),
            created_at=definition.created_at,
            updated_at=definition.updated_at,
        )


class SchoolClassDB(Base):
    """Database model for a school class."""

    __tablename__ = "classes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    color = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        from lifetasks.models.school import SchoolClass
        return SchoolClass(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            color=self.color,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, school_class):
        return cls(
            id=school_class.id,
            user_id=school_class.user_id,
            name=school_class.name,
            color=school_class.color,
            created_at=school_class.created_at,
            updated_at=school_class.updated_at,
        )


class ClassModuleDB(Base):
    """Database model for a module of a school class."""

    __tablename__ = "class_modules"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)

    module_number = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    # Academic week; NULL while unassigned
    week_number = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default=MODULE_PENDING)
    completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        from lifetasks.models.school import ClassModule
        return ClassModule(
            id=self.id,
            user_id=self.user_id,
            class_id=self.class_id,
            module_number=self.module_number,
            name=self.name,
            week_number=self.week_number,
            status=self.status or MODULE_PENDING,
            completed=bool(self.completed),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, module):
        return cls(
            id=module.id,
            user_id=module.user_id,
            class_id=module.class_id,
            module_number=module.module_number,
            name=module.name,
            week_number=module.week_number,
            status=module.status,
            completed=module.completed,
            created_at=module.created_at,
            updated_at=module.updated_at,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)

    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from lifetasks.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
