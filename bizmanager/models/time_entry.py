"""Time entry model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from bizmanager.utils.dates import UtcDatetime


class TimeEntryBase(BaseModel):
    """Base time entry fields."""

    project_id: Optional[str] = None
    task_id: Optional[str] = None
    description: str = ""
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_hours: Optional[float] = None
    billable: bool = True


class TimeEntryCreate(BaseModel):
    """Manual time entry creation model. Both bounds are required."""

    project_id: Optional[str] = None
    task_id: Optional[str] = None
    description: str = ""
    start_time: UtcDatetime
    end_time: UtcDatetime
    billable: bool = True

    @model_validator(mode="after")
    def check_bounds(self) -> "TimeEntryCreate":
        if self.end_time < self.start_time:
            raise ValueError("End time cannot be before start time")
        return self


class TimeEntryUpdate(BaseModel):
    """Time entry update model."""

    project_id: Optional[str] = None
    task_id: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[UtcDatetime] = None
    end_time: Optional[UtcDatetime] = None
    billable: Optional[bool] = None


class TimeEntry(TimeEntryBase):
    """Full time entry model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    running: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class TimerState(BaseModel):
    """A running entry together with its elapsed time at a given instant."""

    entry: TimeEntry
    elapsed_seconds: int
