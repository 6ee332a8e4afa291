"""Repository for BacklogTask database operations."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from lifetasks.database.models import BacklogTaskDB, TaskDB, enum_to_value
from lifetasks.models.task import BacklogTask, Task

logger = logging.getLogger(__name__)


class BacklogRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, task: BacklogTask) -> BacklogTask:
        try:
            row = BacklogTaskDB.from_pydantic(task)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created backlog task {task.id}: {task.title[:50]}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create backlog task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[BacklogTask]:
        row = (
            self.db.query(BacklogTaskDB)
            .filter(BacklogTaskDB.user_id == user_id, BacklogTaskDB.id == task_id)
            .first()
        )
        return row.to_pydantic() if row else None

    def get_all(self, user_id: str) -> List[BacklogTask]:
        rows = (
            self.db.query(BacklogTaskDB)
            .filter(BacklogTaskDB.user_id == user_id)
            .order_by(BacklogTaskDB.created_at)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def update(self, task: BacklogTask) -> BacklogTask:
        row = (
            self.db.query(BacklogTaskDB)
            .filter(BacklogTaskDB.user_id == task.user_id, BacklogTaskDB.id == task.id)
            .first()
        )
        if row is None:
            raise ValueError(f"Backlog task {task.id} not found")
        row.context = enum_to_value(task.context)
        row.title = task.title
        row.notes = task.notes
        row.status = task.status
        row.completed = task.completed
        row.priority = task.priority
        row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update backlog task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, task_id: str) -> bool:
        row = (
            self.db.query(BacklogTaskDB)
            .filter(BacklogTaskDB.user_id == user_id, BacklogTaskDB.id == task_id)
            .first()
        )
        if row is None:
            return False
        try:
            self.db.delete(row)
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete backlog task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def schedule(self, item_id: str, task: Task) -> Task:
        """Replace backlog item `item_id` with calendar task `task` in one commit.

        Raises:
            ValueError: if the backlog item does not exist for task.user_id
        """
        row = (
            self.db.query(BacklogTaskDB)
            .filter(BacklogTaskDB.user_id == task.user_id, BacklogTaskDB.id == item_id)
            .first()
        )
        if row is None:
            raise ValueError(f"Backlog task {item_id} not found")
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.delete(row)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Scheduled backlog task {item_id} on {task.date} as {task.id}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to schedule backlog task {item_id}: {type(e).__name__}: {str(e)}")
            raise

    def move_from_calendar(self, task_id: str, item: BacklogTask) -> BacklogTask:
        """Replace calendar task `task_id` with backlog item `item` in one commit.

        Raises:
            ValueError: if the calendar task does not exist for item.user_id
        """
        task_db = (
            self.db.query(TaskDB)
            .filter(TaskDB.user_id == item.user_id, TaskDB.id == task_id)
            .first()
        )
        if task_db is None:
            raise ValueError(f"Task {task_id} not found")
        try:
            row = BacklogTaskDB.from_pydantic(item)
            self.db.add(row)
            self.db.delete(task_db)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Moved task {task_id} to the {row.context} backlog")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to move task {task_id} to backlog: {type(e).__name__}: {str(e)}")
            raise
