"""Report service - fetches collections and runs the aggregations."""
from bizmanager.config import settings
from bizmanager.models.report import (
    ClientRevenue,
    DateRange,
    MonthlyHours,
    MonthlyRevenue,
    ProjectHours,
    SummaryStats,
)
from bizmanager.services import aggregation
from bizmanager.services.client_service import ClientService
from bizmanager.services.invoice_service import InvoiceService
from bizmanager.services.project_service import ProjectService
from bizmanager.services.timer_service import TimerService


class ReportService:
    """
    Per-request reporting for one user.

    Every call fetches the full collections and leaves all range and status
    filtering to ``aggregation``; nothing is cached between calls.
    """

    def __init__(self, db, hourly_rate: float | None = None):
        """Initialize service with database connection."""
        self.db = db
        self.hourly_rate = settings.hourly_rate if hourly_rate is None else hourly_rate
        self.clients = ClientService(db)
        self.invoices = InvoiceService(db)
        self.projects = ProjectService(db)
        self.timers = TimerService(db)

    async def revenue_by_month(self, date_range: DateRange) -> list[MonthlyRevenue]:
        invoices = await self.invoices.list_invoices()
        return aggregation.revenue_by_month(invoices, date_range)

    async def hours_by_project(self, user_id: str, date_range: DateRange) -> list[ProjectHours]:
        projects = await self.projects.list_projects()
        entries = await self.timers.list_entries_by_user(user_id)
        return aggregation.hours_by_project(projects, entries, date_range, self.hourly_rate)

    async def revenue_by_client(self, date_range: DateRange) -> list[ClientRevenue]:
        clients = await self.clients.list_clients()
        invoices = await self.invoices.list_invoices()
        return aggregation.revenue_by_client(clients, invoices, date_range)

    async def hours_by_month(self, user_id: str, date_range: DateRange) -> list[MonthlyHours]:
        entries = await self.timers.list_entries_by_user(user_id)
        return aggregation.hours_by_month(entries, date_range)

    async def summary(self, user_id: str, date_range: DateRange) -> SummaryStats:
        invoices = await self.invoices.list_invoices()
        entries = await self.timers.list_entries_by_user(user_id)
        projects = await self.projects.list_projects()
        return aggregation.summary_stats(date_range, invoices, entries, projects)
