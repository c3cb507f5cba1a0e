"""Dashboard service - landing page counters computed per request."""
import logging
import math
from datetime import datetime
from typing import Optional

from bizmanager.models.invoice import InvoiceStatus
from bizmanager.models.report import DashboardStats
from bizmanager.services.client_service import ClientService
from bizmanager.services.invoice_service import InvoiceService
from bizmanager.services.project_service import ProjectService
from bizmanager.services.task_service import TaskService


logger = logging.getLogger(__name__)


def start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def start_of_next_month(moment: datetime) -> datetime:
    first = start_of_month(moment)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


class DashboardService:
    """Service computing the dashboard counters."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.clients = ClientService(db)
        self.projects = ProjectService(db)
        self.invoices = InvoiceService(db)
        self.tasks = TaskService(db)

    async def monthly_revenue(self, now: Optional[datetime] = None) -> float:
        """
        Sum of amounts paid within the calendar month containing ``now``.

        Falls back to the invoice total when no paid amount was recorded.
        """
        now = now or datetime.utcnow()
        cursor = self.invoices.invoices.find({
            "status": InvoiceStatus.PAID.value,
            "paid_at": {"$gte": start_of_month(now), "$lt": start_of_next_month(now)},
        })
        paid_docs = await cursor.to_list(length=None)

        revenue = 0.0
        for doc in paid_docs:
            amount = doc.get("paid_amount")
            if amount is None:
                amount = doc.get("total")
            if not isinstance(amount, (int, float)) or not math.isfinite(amount):
                logger.warning(
                    "Skipping invoice %s in monthly_revenue: bad amount %r",
                    doc.get("_id"), amount,
                )
                continue
            revenue += amount
        return revenue

    async def get_stats(self, user_id: str, now: Optional[datetime] = None) -> DashboardStats:
        """
        Counters for the landing view of ``user_id``.

        Invoice, client and project counters are business-wide; pending tasks
        are the open tasks assigned to the user.
        """
        now = now or datetime.utcnow()
        return DashboardStats(
            client_count=await self.clients.count_clients(),
            active_project_count=await self.projects.count_active_projects(),
            pending_invoice_count=await self.invoices.count_by_status(InvoiceStatus.SENT),
            draft_invoice_count=await self.invoices.count_by_status(InvoiceStatus.DRAFT),
            overdue_invoice_count=await self.invoices.count_overdue(now),
            pending_task_count=await self.tasks.count_pending(user_id),
            revenue=await self.monthly_revenue(now),
        )
