"""School classes and their modules."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from lifetasks.models.constants import MODULE_COMPLETED, MODULE_PENDING


class SchoolClass(BaseModel):
    """A course the user is taking; groups its modules."""

    id: str = Field(..., description="Unique class identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this class")
    name: str = Field(..., description="Class name")
    color: str = Field(..., description="Display color (e.g. '#4a90d9')")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ClassModule(BaseModel):
    """A numbered unit of work within a class, optionally assigned to an academic week."""

    id: str = Field(..., description="Unique module identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this module")
    class_id: str = Field(..., description="Owning class")
    module_number: int = Field(..., ge=1, description="Position within the class, starting at 1")
    name: str = Field(..., description="Module name")
    week_number: Optional[int] = Field(None, ge=1, description="Academic week the module is planned for")
    status: str = Field(MODULE_PENDING, description=f"'{MODULE_PENDING}' or '{MODULE_COMPLETED}'")
    completed: bool = Field(False, description="Whether the module is done")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
