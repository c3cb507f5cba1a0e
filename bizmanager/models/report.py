"""Report and dashboard response models."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class RangeKeyword(str, Enum):
    """User-selectable report ranges."""

    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"
    LAST_3_MONTHS = "last-3-months"
    LAST_6_MONTHS = "last-6-months"
    THIS_YEAR = "this-year"
    CUSTOM = "custom"


class DateRange(BaseModel):
    """Inclusive instant range used to bound every aggregation."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class MonthlyRevenue(BaseModel):
    period: str
    income: float = 0.0


class ProjectHours(BaseModel):
    project_id: str
    project: str
    hours: float = 0.0
    value: float = 0.0


class ClientRevenue(BaseModel):
    client_id: str
    client: str
    revenue: float = 0.0


class MonthlyHours(BaseModel):
    period: str
    billable: float = 0.0
    non_billable: float = 0.0


class SummaryStats(BaseModel):
    total_revenue: float = 0.0
    billable_hours: float = 0.0
    non_billable_hours: float = 0.0
    active_project_count: int = 0
    active_client_count: int = 0


class DashboardStats(BaseModel):
    client_count: int = 0
    active_project_count: int = 0
    pending_invoice_count: int = 0
    draft_invoice_count: int = 0
    overdue_invoice_count: int = 0
    pending_task_count: int = 0
    revenue: float = 0.0
