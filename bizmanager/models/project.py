"""Project model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    """Project lifecycle states."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELED = "canceled"


ACTIVE_PROJECT_STATUSES = frozenset({ProjectStatus.NOT_STARTED, ProjectStatus.IN_PROGRESS})


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str = Field(min_length=1)
    client_id: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    progress: int = Field(default=0, ge=0, le=100)


class ProjectCreate(ProjectBase):
    """Project creation model."""

    pass


class ProjectUpdate(BaseModel):
    """Project update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1)
    client_id: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    progress: Optional[int] = Field(default=None, ge=0, le=100)


class Project(ProjectBase):
    """Full project model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_by: str
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @property
    def is_active(self) -> bool:
        """Active projects are those not yet started or in progress."""
        return self.status in ACTIVE_PROJECT_STATUSES
