"""FastAPI web application for lifetasks."""

import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from lifetasks.auth.dependencies import get_current_user
from lifetasks.database.backlog_repository import BacklogRepository
from lifetasks.database.database import get_db
from lifetasks.database.recurring_task_repository import RecurringTaskRepository
from lifetasks.database.repository import TaskRepository
from lifetasks.database.school_repository import ClassModuleRepository, SchoolClassRepository
from lifetasks.models.constants import DEFAULT_CLASS_COLOR, MODULE_COMPLETED, MODULE_PENDING
from lifetasks.models.recurrence import Frequency, RecurringTaskDefinition, frequency_label
from lifetasks.models.school import ClassModule, SchoolClass
from lifetasks.models.task import BacklogTask, Task, TaskContext, validate_date_str
from lifetasks.models.task_factory import (
    create_backlog_task_base,
    create_class_base,
    create_module_base,
    create_recurring_definition_base,
    create_task_base,
)
from lifetasks.models.user import User
from lifetasks.recurrence.lifecycle import (
    CascadeDeleteError,
    delete_recurring_definition,
    toggle_recurring_definition,
)
from lifetasks.recurrence.materialize import ReconcileFailure, ReconcileResult, materialize_recurring_tasks
from lifetasks.recurrence.store import SqlRecurrenceStore

logger = logging.getLogger(__name__)

app = FastAPI(
    title="lifetasks API",
    description="Tasks across life contexts: calendar, backlog, recurring tasks and school classes",
    version="0.1.0",
)


# Request models
class TaskCreateRequest(BaseModel):
    date: str
    context: TaskContext
    title: str = Field(..., min_length=1)
    notes: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[int] = None

    @field_validator("date")
    @classmethod
    def _validate_date(cls, v):
        return validate_date_str(v)


class TaskUpdateRequest(BaseModel):
    date: Optional[str] = None
    context: Optional[TaskContext] = None
    title: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[int] = None

    @field_validator("date")
    @classmethod
    def _validate_date(cls, v):
        return validate_date_str(v) if v is not None else None


class BacklogCreateRequest(BaseModel):
    context: TaskContext
    title: str = Field(..., min_length=1)
    notes: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[int] = None


class BacklogUpdateRequest(BaseModel):
    context: Optional[TaskContext] = None
    title: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[int] = None


class BacklogScheduleRequest(BaseModel):
    date: str

    @field_validator("date")
    @classmethod
    def _validate_date(cls, v):
        return validate_date_str(v)


class RecurringCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    context: TaskContext
    frequency: Frequency
    status: Optional[str] = None


class RecurringUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    context: Optional[TaskContext] = None
    frequency: Optional[Frequency] = None
    status: Optional[str] = None
    active: Optional[bool] = None


class ClassCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    color: str = DEFAULT_CLASS_COLOR


class ClassUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None


class ModuleCreateRequest(BaseModel):
    class_id: str
    name: str = Field(..., min_length=1)
    module_number: Optional[int] = Field(None, ge=1, description="Defaults to the next number in the class")
    week_number: Optional[int] = Field(None, ge=1)


class ModuleUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    module_number: Optional[int] = Field(None, ge=1)
    completed: Optional[bool] = None


class ModuleWeekRequest(BaseModel):
    week_number: Optional[int] = Field(None, ge=1, description="Academic week; null unassigns the module")


# Response models
class TaskResponse(BaseModel):
    task: Task


class TaskListResponse(BaseModel):
    """Tasks grouped by date, then by context."""
    tasks: Dict[str, Dict[str, List[Task]]]
    count: int


class BacklogTaskResponse(BaseModel):
    task: BacklogTask


class BacklogListResponse(BaseModel):
    backlog: Dict[str, List[BacklogTask]]
    count: int


class RecurringTaskView(RecurringTaskDefinition):
    frequency_label: str


class GenerationSummary(BaseModel):
    created_count: int
    created: List[Task] = Field(default_factory=list)
    failures: List[ReconcileFailure] = Field(default_factory=list)


class RecurringTaskResponse(BaseModel):
    recurring_task: RecurringTaskView
    generation: Optional[GenerationSummary] = None


class RecurringListResponse(BaseModel):
    recurring_tasks: List[RecurringTaskView]
    count: int


class DeleteResponse(BaseModel):
    deleted: bool
    instances_deleted: int = 0


class ClearResponse(BaseModel):
    tasks_deleted: int
    recurring_deactivated: int


class ClassView(SchoolClass):
    modules: List[ClassModule] = Field(default_factory=list)


class ClassResponse(BaseModel):
    school_class: ClassView


class ClassListResponse(BaseModel):
    classes: List[ClassView]
    count: int


class ModuleResponse(BaseModel):
    module: ClassModule


class ModuleListResponse(BaseModel):
    modules: List[ClassModule]
    count: int


def _view(definition: RecurringTaskDefinition) -> RecurringTaskView:
    return RecurringTaskView(**definition.model_dump(), frequency_label=frequency_label(definition.frequency))


def _summary(result: ReconcileResult) -> GenerationSummary:
    return GenerationSummary(created_count=result.created_count, created=result.created, failures=result.failures)


def _generate(db: Session, user_id: str, today: Optional[date] = None) -> GenerationSummary:
    """Reconcile recurring tasks; a storage failure degrades to an empty summary."""
    try:
        return _summary(materialize_recurring_tasks(db, user_id=user_id, today=today))
    except Exception as e:
        logger.error(f"Recurring task generation failed for user {user_id}: {type(e).__name__}: {str(e)}")
        return GenerationSummary(
            created_count=0,
            failures=[
                ReconcileFailure(definition_id="", title="", stage="load", reason=f"{type(e).__name__}: {str(e)}")
            ],
        )


def _group_by_date_and_context(tasks: List[Task]) -> Dict[str, Dict[str, List[Task]]]:
    grouped: Dict[str, Dict[str, List[Task]]] = {}
    for task in tasks:
        day = grouped.setdefault(task.date, {c.value: [] for c in TaskContext})
        day.setdefault(task.context, []).append(task)
    return grouped


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Calendar tasks
@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    tasks = TaskRepository(db).get_all(user.id)
    return TaskListResponse(tasks=_group_by_date_and_context(tasks), count=len(tasks))


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = create_task_base(
        user_id=user.id,
        date=request.date,
        context=request.context,
        title=request.title,
        notes=request.notes,
        status=request.status,
        completed=request.completed,
        priority=request.priority,
    )
    try:
        return TaskResponse(task=TaskRepository(db).create(task))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    task = TaskRepository(db).get(user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return TaskResponse(task=task)


@app.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = TaskRepository(db)
    task = repo.get(user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    updated = task.model_copy(update=request.model_dump(exclude_unset=True, exclude_none=True))
    try:
        return TaskResponse(task=repo.update(updated))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update task: {str(e)}")


@app.delete("/tasks/all/clear", response_model=ClearResponse)
def clear_all_tasks(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete every calendar task and deactivate (but keep) every recurring task."""
    try:
        deleted = TaskRepository(db).clear_all(user.id)
        deactivated = RecurringTaskRepository(db).deactivate_all(user.id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to clear tasks: {str(e)}")
    return ClearResponse(tasks_deleted=deleted, recurring_deactivated=deactivated)


@app.delete("/tasks/{task_id}", response_model=DeleteResponse)
def delete_task(task_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deleted = TaskRepository(db).delete(user.id, task_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete task: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return DeleteResponse(deleted=True)


@app.post("/tasks/{task_id}/backlog", response_model=BacklogTaskResponse, status_code=status.HTTP_201_CREATED)
def move_task_to_backlog(task_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Take a task off the calendar and put it back in its context's backlog."""
    task = TaskRepository(db).get(user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    item = create_backlog_task_base(
        user_id=user.id,
        context=task.context,
        title=task.title,
        notes=task.notes,
        status=task.status,
        priority=task.priority,
    )
    try:
        moved = BacklogRepository(db).move_from_calendar(task_id, item)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to move task to backlog: {str(e)}")
    return BacklogTaskResponse(task=moved)


# Backlog
@app.get("/backlog", response_model=BacklogListResponse)
def list_backlog(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    tasks = BacklogRepository(db).get_all(user.id)
    grouped: Dict[str, List[BacklogTask]] = {c.value: [] for c in TaskContext}
    for task in tasks:
        grouped.setdefault(task.context, []).append(task)
    return BacklogListResponse(backlog=grouped, count=len(tasks))


@app.post("/backlog", response_model=BacklogTaskResponse, status_code=status.HTTP_201_CREATED)
def create_backlog_task(
    request: BacklogCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = create_backlog_task_base(
        user_id=user.id,
        context=request.context,
        title=request.title,
        notes=request.notes,
        status=request.status,
        priority=request.priority,
    )
    try:
        return BacklogTaskResponse(task=BacklogRepository(db).create(task))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create backlog task: {str(e)}")


@app.put("/backlog/{task_id}", response_model=BacklogTaskResponse)
def update_backlog_task(
    task_id: str,
    request: BacklogUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = BacklogRepository(db)
    task = repo.get(user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Backlog task {task_id} not found")
    updated = task.model_copy(update=request.model_dump(exclude_unset=True, exclude_none=True))
    try:
        return BacklogTaskResponse(task=repo.update(updated))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update backlog task: {str(e)}")


@app.delete("/backlog/{task_id}", response_model=DeleteResponse)
def delete_backlog_task(task_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deleted = BacklogRepository(db).delete(user.id, task_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete backlog task: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Backlog task {task_id} not found")
    return DeleteResponse(deleted=True)


@app.post("/backlog/{task_id}/schedule", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def schedule_backlog_task(
    task_id: str,
    request: BacklogScheduleRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Move a backlog item onto a calendar date."""
    backlog_repo = BacklogRepository(db)
    item = backlog_repo.get(user.id, task_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Backlog task {task_id} not found")
    task = create_task_base(
        user_id=user.id,
        date=request.date,
        context=item.context,
        title=item.title,
        notes=item.notes,
        status=item.status,
        completed=item.completed,
        priority=item.priority,
    )
    try:
        created = backlog_repo.schedule(task_id, task)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to schedule backlog task: {str(e)}")
    return TaskResponse(task=created)


# Recurring tasks
@app.get("/recurring-tasks", response_model=RecurringListResponse)
def list_recurring_tasks(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    definitions = RecurringTaskRepository(db).list_all(user.id)
    return RecurringListResponse(recurring_tasks=[_view(d) for d in definitions], count=len(definitions))


@app.post("/recurring-tasks", response_model=RecurringTaskResponse, status_code=status.HTTP_201_CREATED)
def create_recurring_task(
    request: RecurringCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = RecurringTaskRepository(db)
    definition = create_recurring_definition_base(
        user_id=user.id,
        title=request.title,
        context=request.context,
        frequency=request.frequency.value,
        status=request.status,
    )
    try:
        repo.create(definition)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create recurring task: {str(e)}")
    generation = _generate(db, user.id)
    return RecurringTaskResponse(recurring_task=_view(repo.get(user.id, definition.id)), generation=generation)


@app.post("/recurring-tasks/generate", response_model=GenerationSummary)
def generate_recurring_tasks(
    today: Optional[date] = Query(None, description="Override the current date (YYYY-MM-DD)"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Materialize recurring tasks for the current month and the next two.

    Called by the client on load. Failures are reported in the body, never as an error status.
    """
    return _generate(db, user.id, today)


@app.put("/recurring-tasks/{definition_id}", response_model=RecurringTaskResponse)
def update_recurring_task(
    definition_id: str,
    request: RecurringUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = RecurringTaskRepository(db)
    definition = repo.get(user.id, definition_id)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Recurring task {definition_id} not found")
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "frequency" in changes:
        changes["frequency"] = request.frequency.value
    changes["updated_at"] = datetime.utcnow()
    try:
        updated = repo.update(definition.model_copy(update=changes))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update recurring task: {str(e)}")
    generation = _generate(db, user.id) if updated.active else None
    # Re-read: generation may have grown the ledger.
    return RecurringTaskResponse(recurring_task=_view(repo.get(user.id, definition_id)), generation=generation)


@app.post("/recurring-tasks/{definition_id}/toggle", response_model=RecurringTaskResponse)
def toggle_recurring_task(
    definition_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Flip the active flag. Re-activation generates from today forward, with no catch-up."""
    try:
        definition = toggle_recurring_definition(SqlRecurrenceStore(db, user.id), definition_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to toggle recurring task: {str(e)}")
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Recurring task {definition_id} not found")
    generation = _generate(db, user.id) if definition.active else None
    refreshed = RecurringTaskRepository(db).get(user.id, definition_id)
    return RecurringTaskResponse(recurring_task=_view(refreshed), generation=generation)


@app.delete("/recurring-tasks/{definition_id}", response_model=DeleteResponse)
def delete_recurring_task(
    definition_id: str,
    delete_instances: bool = Query(False, description="Also delete every task with the same title"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        removed = delete_recurring_definition(
            SqlRecurrenceStore(db, user.id), definition_id, delete_instances=delete_instances
        )
    except CascadeDeleteError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete recurring task: {str(e)}")
    if removed is None:
        raise HTTPException(status_code=404, detail=f"Recurring task {definition_id} not found")
    return DeleteResponse(deleted=True, instances_deleted=removed)


# School classes and modules
def _class_view(school_class: SchoolClass, modules: List[ClassModule]) -> ClassView:
    return ClassView(**school_class.model_dump(), modules=[m for m in modules if m.class_id == school_class.id])


@app.get("/classes", response_model=ClassListResponse)
def list_classes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Classes in creation order, each with its modules."""
    classes = SchoolClassRepository(db).get_all(user.id)
    modules = ClassModuleRepository(db).get_all(user.id)
    return ClassListResponse(classes=[_class_view(c, modules) for c in classes], count=len(classes))


@app.post("/classes", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
def create_class(
    request: ClassCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    school_class = create_class_base(user_id=user.id, name=request.name, color=request.color)
    try:
        created = SchoolClassRepository(db).create(school_class)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create class: {str(e)}")
    return ClassResponse(school_class=_class_view(created, []))


@app.put("/classes/{class_id}", response_model=ClassResponse)
def update_class(
    class_id: str,
    request: ClassUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = SchoolClassRepository(db)
    school_class = repo.get(user.id, class_id)
    if school_class is None:
        raise HTTPException(status_code=404, detail=f"Class {class_id} not found")
    updated = school_class.model_copy(update=request.model_dump(exclude_unset=True, exclude_none=True))
    try:
        saved = repo.update(updated)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update class: {str(e)}")
    return ClassResponse(school_class=_class_view(saved, ClassModuleRepository(db).get_all(user.id, class_id)))


@app.delete("/classes/{class_id}", response_model=DeleteResponse)
def delete_class(class_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a class and all of its modules."""
    try:
        deleted = SchoolClassRepository(db).delete(user.id, class_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete class: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Class {class_id} not found")
    return DeleteResponse(deleted=True)


@app.get("/modules", response_model=ModuleListResponse)
def list_modules(
    class_id: Optional[str] = Query(None, description="Only modules of this class"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    modules = ClassModuleRepository(db).get_all(user.id, class_id)
    return ModuleListResponse(modules=modules, count=len(modules))


@app.post("/modules", response_model=ModuleResponse, status_code=status.HTTP_201_CREATED)
def create_module(
    request: ModuleCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = ClassModuleRepository(db)
    module = create_module_base(
        user_id=user.id,
        class_id=request.class_id,
        module_number=request.module_number or repo.next_module_number(user.id, request.class_id),
        name=request.name,
        week_number=request.week_number,
    )
    try:
        return ModuleResponse(module=repo.create(module))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create module: {str(e)}")


@app.put("/modules/{module_id}", response_model=ModuleResponse)
def update_module(
    module_id: str,
    request: ModuleUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = ClassModuleRepository(db)
    module = repo.get(user.id, module_id)
    if module is None:
        raise HTTPException(status_code=404, detail=f"Module {module_id} not found")
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "completed" in changes:
        changes["status"] = MODULE_COMPLETED if changes["completed"] else MODULE_PENDING
    try:
        return ModuleResponse(module=repo.update(module.model_copy(update=changes)))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update module: {str(e)}")


@app.put("/modules/{module_id}/week", response_model=ModuleResponse)
def assign_module_week(
    module_id: str,
    request: ModuleWeekRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Plan a module for an academic week, or unassign it with a null week."""
    try:
        module = ClassModuleRepository(db).assign_week(user.id, module_id, request.week_number)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to assign module week: {str(e)}")
    if module is None:
        raise HTTPException(status_code=404, detail=f"Module {module_id} not found")
    return ModuleResponse(module=module)


@app.post("/modules/{module_id}/toggle", response_model=ModuleResponse)
def toggle_module(module_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        module = ClassModuleRepository(db).toggle_completed(user.id, module_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to toggle module: {str(e)}")
    if module is None:
        raise HTTPException(status_code=404, detail=f"Module {module_id} not found")
    return ModuleResponse(module=module)


@app.delete("/modules/{module_id}", response_model=DeleteResponse)
def delete_module(module_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deleted = ClassModuleRepository(db).delete(user.id, module_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete module: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Module {module_id} not found")
    return DeleteResponse(deleted=True)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
