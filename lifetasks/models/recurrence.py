"""Recurrence models for lifetasks.

A recurring task definition is a template (title, context, status) plus one of a
small fixed set of frequency codes. Concrete tasks are materialized from it for a
rolling window of months; `generated_dates` is the ledger of dates already produced.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

from lifetasks.models.task import TaskContext, validate_date_str


class Frequency(str, Enum):
    DAILY = "daily"  # Monday through Friday
    EVERYDAY = "everyday"
    WEEKLY_MON = "weekly-mon"
    WEEKLY_TUE = "weekly-tue"
    WEEKLY_WED = "weekly-wed"
    WEEKLY_THU = "weekly-thu"
    WEEKLY_FRI = "weekly-fri"
    WEEKLY_SAT = "weekly-sat"
    WEEKLY_SUN = "weekly-sun"
    MONTHLY_1 = "monthly-1"
    MONTHLY_15 = "monthly-15"
    MONTHLY_LAST = "monthly-last"
    MONTHLY_FIRST_MON = "monthly-first-mon"
    MONTHLY_FIRST_FRI = "monthly-first-fri"


FREQUENCY_LABELS: dict[str, str] = {
    Frequency.DAILY.value: "Daily (Mon-Fri)",
    Frequency.EVERYDAY.value: "Every Day",
    Frequency.WEEKLY_MON.value: "Weekly on Monday",
    Frequency.WEEKLY_TUE.value: "Weekly on Tuesday",
    Frequency.WEEKLY_WED.value: "Weekly on Wednesday",
    Frequency.WEEKLY_THU.value: "Weekly on Thursday",
    Frequency.WEEKLY_FRI.value: "Weekly on Friday",
    Frequency.WEEKLY_SAT.value: "Weekly on Saturday",
    Frequency.WEEKLY_SUN.value: "Weekly on Sunday",
    Frequency.MONTHLY_1.value: "Monthly on 1st",
    Frequency.MONTHLY_15.value: "Monthly on 15th",
    Frequency.MONTHLY_LAST.value: "Monthly on Last Day",
    Frequency.MONTHLY_FIRST_MON.value: "Monthly 1st Monday",
    Frequency.MONTHLY_FIRST_FRI.value: "Monthly 1st Friday",
}


def frequency_label(frequency: str) -> str:
    """Human-readable label for a frequency code (the code itself if unknown)."""
    return FREQUENCY_LABELS.get(frequency, frequency)


class RecurringTaskDefinition(BaseModel):
    """Recurring task template.

    Notes:
    - `frequency` is kept as a plain string: stored definitions with an unrecognized
      code still load, and simply expand to no dates.
    - `generated_dates` is append-only and keeps insertion order.
    """

    id: str = Field(..., description="Unique definition identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this definition")
    title: str = Field(..., description="Title copied onto generated tasks; also the dedup key")
    context: TaskContext = Field(..., description="Context generated tasks are placed in")
    status: str = Field("To Do", description="Status copied verbatim onto generated tasks")
    frequency: str = Field(..., description="Frequency code, see Frequency")
    active: bool = Field(True, description="Inactive definitions are skipped by materialization")
    generated_dates: List[str] = Field(
        default_factory=list, description="Dates (YYYY-MM-DD) already materialized"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("generated_dates")
    @classmethod
    def _validate_generated_dates(cls, v):
        # Deduplicate but preserve order
        seen = set()
        out: List[str] = []
        for day in v:
            day = validate_date_str(day)
            if day not in seen:
                seen.add(day)
                out.append(day)
        return out

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
