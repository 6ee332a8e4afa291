"""Repositories for school classes and class modules."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lifetasks.database.models import ClassModuleDB, SchoolClassDB
from lifetasks.models.constants import MODULE_COMPLETED, MODULE_PENDING
from lifetasks.models.school import ClassModule, SchoolClass

logger = logging.getLogger(__name__)


class SchoolClassRepository:
    """Repository for SchoolClass database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id: str, class_id: str) -> Optional[SchoolClassDB]:
        return (
            self.db.query(SchoolClassDB)
            .filter(SchoolClassDB.user_id == user_id, SchoolClassDB.id == class_id)
            .first()
        )

    def create(self, school_class: SchoolClass) -> SchoolClass:
        try:
            row = SchoolClassDB.from_pydantic(school_class)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created class {school_class.id}: {school_class.name[:50]}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create class {school_class.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, class_id: str) -> Optional[SchoolClass]:
        row = self._row(user_id, class_id)
        return row.to_pydantic() if row else None

    def get_all(self, user_id: str) -> List[SchoolClass]:
        rows = (
            self.db.query(SchoolClassDB)
            .filter(SchoolClassDB.user_id == user_id)
            .order_by(SchoolClassDB.created_at)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def update(self, school_class: SchoolClass) -> SchoolClass:
        row = self._row(school_class.user_id, school_class.id)
        if row is None:
            raise ValueError(f"Class {school_class.id} not found")
        row.name = school_class.name
        row.color = school_class.color
        row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update class {school_class.id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, class_id: str) -> bool:
        """Delete a class together with all of its modules."""
        row = self._row(user_id, class_id)
        if row is None:
            return False
        try:
            removed = (
                self.db.query(ClassModuleDB)
                .filter(ClassModuleDB.user_id == user_id, ClassModuleDB.class_id == class_id)
                .delete(synchronize_session=False)
            )
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted class {class_id} and {removed} modules")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete class {class_id}: {type(e).__name__}: {str(e)}")
            raise


class ClassModuleRepository:
    """Repository for ClassModule database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id: str, module_id: str) -> Optional[ClassModuleDB]:
        return (
            self.db.query(ClassModuleDB)
            .filter(ClassModuleDB.user_id == user_id, ClassModuleDB.id == module_id)
            .first()
        )

    def _commit(self, row: ClassModuleDB, action: str) -> ClassModule:
        try:
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to {action} module {row.id}: {type(e).__name__}: {str(e)}")
            raise

    def next_module_number(self, user_id: str, class_id: str) -> int:
        highest = (
            self.db.query(func.max(ClassModuleDB.module_number))
            .filter(ClassModuleDB.user_id == user_id, ClassModuleDB.class_id == class_id)
            .scalar()
        )
        return (highest or 0) + 1

    def create(self, module: ClassModule) -> ClassModule:
        """Create a module; its class must exist for the same user.

        Raises:
            ValueError: if the class does not exist
        """
        owner = (
            self.db.query(SchoolClassDB)
            .filter(SchoolClassDB.user_id == module.user_id, SchoolClassDB.id == module.class_id)
            .first()
        )
        if owner is None:
            raise ValueError(f"Class {module.class_id} not found")
        try:
            row = ClassModuleDB.from_pydantic(module)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created module {module.module_number} of class {module.class_id}: {module.name[:50]}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create module {module.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, module_id: str) -> Optional[ClassModule]:
        row = self._row(user_id, module_id)
        return row.to_pydantic() if row else None

    def get_all(self, user_id: str, class_id: Optional[str] = None) -> List[ClassModule]:
        """Modules ordered by class, then module number."""
        query = self.db.query(ClassModuleDB).filter(ClassModuleDB.user_id == user_id)
        if class_id is not None:
            query = query.filter(ClassModuleDB.class_id == class_id)
        rows = query.order_by(ClassModuleDB.class_id, ClassModuleDB.module_number).all()
        return [row.to_pydantic() for row in rows]

    def update(self, module: ClassModule) -> ClassModule:
        row = self._row(module.user_id, module.id)
        if row is None:
            raise ValueError(f"Module {module.id} not found")
        row.module_number = module.module_number
        row.name = module.name
        row.week_number = module.week_number
        row.status = module.status
        row.completed = module.completed
        row.updated_at = datetime.utcnow()
        return self._commit(row, "update")

    def assign_week(self, user_id: str, module_id: str, week_number: Optional[int]) -> Optional[ClassModule]:
        """Plan a module for an academic week; None unassigns it."""
        row = self._row(user_id, module_id)
        if row is None:
            return None
        row.week_number = week_number
        row.updated_at = datetime.utcnow()
        return self._commit(row, "assign week for")

    def toggle_completed(self, user_id: str, module_id: str) -> Optional[ClassModule]:
        """Flip completion; status follows the flag."""
        row = self._row(user_id, module_id)
        if row is None:
            return None
        row.completed = not bool(row.completed)
        row.status = MODULE_COMPLETED if row.completed else MODULE_PENDING
        row.updated_at = datetime.utcnow()
        return self._commit(row, "toggle")

    def delete(self, user_id: str, module_id: str) -> bool:
        row = self._row(user_id, module_id)
        if row is None:
            return False
        try:
            self.db.delete(row)
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete module {module_id}: {type(e).__name__}: {str(e)}")
            raise
