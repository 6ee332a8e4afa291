"""Repository layer for calendar task database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from lifetasks.models.task import Task, TaskContext
from lifetasks.database.models import TaskDB, enum_to_value

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id} on {task.date}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks for a user ordered by date, then creation time."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
        ).order_by(TaskDB.date, TaskDB.created_at).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_for_date(self, user_id: str, date: str, context: TaskContext) -> List[Task]:
        """Get the tasks stored for one (date, context) cell of the calendar."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.date == date,
            TaskDB.context == enum_to_value(context),
        ).order_by(TaskDB.priority, TaskDB.created_at).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def update(self, task: Task) -> Task:
        """Update an existing task (user_id must match task.user_id)."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task.id,
            TaskDB.user_id == task.user_id,
        ).first()
        if not task_db:
            raise ValueError(f"Task {task.id} not found")

        task_db.date = task.date
        task_db.context = enum_to_value(task.context)
        task_db.title = task.title
        task_db.notes = task.notes
        task_db.status = task.status
        task_db.completed = task.completed
        task_db.priority = task.priority
        task_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, task_id: str) -> bool:
        """Delete a task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete_by_title(self, user_id: str, title: str) -> int:
        """Delete every task of a user whose title equals `title`, on any date or context."""
        try:
            affected = (
                self.db.query(TaskDB)
                .filter(TaskDB.user_id == user_id, TaskDB.title == title)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Deleted {affected} tasks titled {title[:50]!r} for user {user_id}")
            return int(affected)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete tasks by title for user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def clear_all(self, user_id: str) -> int:
        """Delete all calendar tasks for a user."""
        try:
            affected = (
                self.db.query(TaskDB)
                .filter(TaskDB.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Cleared {affected} tasks for user {user_id}")
            return int(affected)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to clear tasks for user {user_id}: {type(e).__name__}: {str(e)}")
            raise
