"""Repository for RecurringTaskDefinition database operations."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from lifetasks.database.models import RecurringTaskDB, enum_to_value
from lifetasks.models.recurrence import RecurringTaskDefinition

logger = logging.getLogger(__name__)


class RecurringTaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id: str, definition_id: str) -> Optional[RecurringTaskDB]:
        return (
            self.db.query(RecurringTaskDB)
            .filter(
                RecurringTaskDB.user_id == user_id,
                RecurringTaskDB.id == definition_id,
            )
            .first()
        )

    def create(self, definition: RecurringTaskDefinition) -> RecurringTaskDefinition:
        row = RecurringTaskDB.from_pydantic(definition)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created recurring task {definition.id}: {definition.title[:50]}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create recurring task: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, definition_id: str) -> Optional[RecurringTaskDefinition]:
        row = self._row(user_id, definition_id)
        return row.to_pydantic() if row else None

    def list_all(self, user_id: str) -> List[RecurringTaskDefinition]:
        rows = (
            self.db.query(RecurringTaskDB)
            .filter(RecurringTaskDB.user_id == user_id)
            .order_by(RecurringTaskDB.created_at)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def list_active(self, user_id: str) -> List[RecurringTaskDefinition]:
        rows = (
            self.db.query(RecurringTaskDB)
            .filter(
                RecurringTaskDB.user_id == user_id,
                RecurringTaskDB.active.is_(True),
            )
            .order_by(RecurringTaskDB.created_at)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def update(self, definition: RecurringTaskDefinition) -> RecurringTaskDefinition:
        """Write back every mutable field, including the generated-dates ledger."""
        row = self._row(definition.user_id, definition.id)
        if row is None:
            raise ValueError(f"Recurring task {definition.id} not found")
        row.title = definition.title
        row.context = enum_to_value(definition.context)
        row.status = definition.status
        row.frequency = definition.frequency
        row.active = definition.active
        # New list object so the JSON column is flagged dirty.
        row.generated_dates = list(definition.generated_dates)
        row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update recurring task {definition.id}: {type(e).__name__}: {str(e)}")
            raise

    def set_active(self, user_id: str, definition_id: str, active: bool) -> Optional[RecurringTaskDefinition]:
        row = self._row(user_id, definition_id)
        if row is None:
            return None
        row.active = bool(active)
        row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to toggle recurring task {definition_id}: {type(e).__name__}: {str(e)}")
            raise

    def deactivate_all(self, user_id: str) -> int:
        try:
            affected = (
                self.db.query(RecurringTaskDB)
                .filter(RecurringTaskDB.user_id == user_id)
                .update(
                    {RecurringTaskDB.active: False, RecurringTaskDB.updated_at: datetime.utcnow()},
                    synchronize_session=False,
                )
            )
            self.db.commit()
            return int(affected)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to deactivate recurring tasks for user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, definition_id: str) -> bool:
        row = self._row(user_id, definition_id)
        if row is None:
            return False
        try:
            self.db.delete(row)
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete recurring task {definition_id}: {type(e).__name__}: {str(e)}")
            raise
