"""Report rollups over already-fetched collections.

Every function here is a pure function of its arguments: callers fetch the
full, unfiltered collections and all range/status filtering happens here.
A record that cannot be interpreted is skipped with a warning so a single
corrupt row never blanks out a whole report.
"""
import logging
import math
from typing import Iterable, Optional

from bizmanager.models.client import Client
from bizmanager.models.invoice import Invoice, InvoiceStatus
from bizmanager.models.project import Project
from bizmanager.models.report import (
    ClientRevenue,
    DateRange,
    MonthlyHours,
    MonthlyRevenue,
    ProjectHours,
    SummaryStats,
)
from bizmanager.models.time_entry import TimeEntry
from bizmanager.utils.date_range import iter_months, month_key, month_label


logger = logging.getLogger(__name__)


def _finite(value: float, field: str) -> float:
    if value is None or not math.isfinite(value):
        raise ValueError(f"{field} is not a finite number: {value!r}")
    return value


def entry_hours(entry: TimeEntry) -> Optional[float]:
    """
    Duration of a closed entry in hours, or None while it is running.

    Raises:
        ValueError: If the stored duration is negative or not finite
    """
    if entry.duration_hours is None:
        return None
    hours = _finite(entry.duration_hours, "duration_hours")
    if hours < 0:
        raise ValueError(f"negative duration: {hours}")
    return hours


def _paid_total(invoice: Invoice) -> float:
    return _finite(invoice.total, "total")


def _skip(kind: str, record, operation: str, exc: Exception) -> None:
    logger.warning(
        "Skipping %s %s in %s: %s",
        kind, getattr(record, "id", "<unknown>"), operation, exc,
    )


def revenue_by_month(invoices: Iterable[Invoice], date_range: DateRange) -> list[MonthlyRevenue]:
    """Paid invoice totals per calendar month, one bucket for every month in range."""
    buckets = {
        key: MonthlyRevenue(period=month_label(*key))
        for key in iter_months(date_range)
    }

    for invoice in invoices:
        try:
            if invoice.status != InvoiceStatus.PAID or not date_range.contains(invoice.issue_date):
                continue
            buckets[month_key(invoice.issue_date)].income += _paid_total(invoice)
        except (ValueError, TypeError, KeyError) as exc:
            _skip("invoice", invoice, "revenue_by_month", exc)

    return list(buckets.values())


def hours_by_project(
    projects: Iterable[Project],
    time_entries: Iterable[TimeEntry],
    date_range: DateRange,
    hourly_rate: float,
) -> list[ProjectHours]:
    """
    Logged hours and billable value per project.

    Only projects with hours in range are returned, ordered by hours
    descending; ties keep the order the projects were fetched in.
    """
    stats = {
        project.id: ProjectHours(project_id=project.id, project=project.name)
        for project in projects
    }

    for entry in time_entries:
        try:
            if entry.project_id is None or not date_range.contains(entry.start_time):
                continue
            hours = entry_hours(entry)
            if hours is None:
                continue
            bucket = stats.get(entry.project_id)
            if bucket is None:
                continue
            bucket.hours += hours
            if entry.billable:
                bucket.value += hours * hourly_rate
        except (ValueError, TypeError) as exc:
            _skip("time entry", entry, "hours_by_project", exc)

    rows = [row for row in stats.values() if row.hours > 0]
    return sorted(rows, key=lambda row: row.hours, reverse=True)


def revenue_by_client(
    clients: Iterable[Client],
    invoices: Iterable[Invoice],
    date_range: DateRange,
) -> list[ClientRevenue]:
    """Paid revenue per client in range; clients without revenue are left out."""
    stats = {
        client.id: ClientRevenue(client_id=client.id, client=client.name)
        for client in clients
    }

    for invoice in invoices:
        try:
            if invoice.status != InvoiceStatus.PAID or not date_range.contains(invoice.issue_date):
                continue
            bucket = stats.get(invoice.client_id)
            if bucket is None:
                continue
            bucket.revenue += _paid_total(invoice)
        except (ValueError, TypeError) as exc:
            _skip("invoice", invoice, "revenue_by_client", exc)

    rows = [row for row in stats.values() if row.revenue > 0]
    return sorted(rows, key=lambda row: row.revenue, reverse=True)


def hours_by_month(time_entries: Iterable[TimeEntry], date_range: DateRange) -> list[MonthlyHours]:
    """Billable and non-billable hours per calendar month, dense like revenue."""
    buckets = {
        key: MonthlyHours(period=month_label(*key))
        for key in iter_months(date_range)
    }

    for entry in time_entries:
        try:
            if not date_range.contains(entry.start_time):
                continue
            hours = entry_hours(entry)
            if hours is None:
                continue
            bucket = buckets[month_key(entry.start_time)]
            if entry.billable:
                bucket.billable += hours
            else:
                bucket.non_billable += hours
        except (ValueError, TypeError, KeyError) as exc:
            _skip("time entry", entry, "hours_by_month", exc)

    return list(buckets.values())


def summary_stats(
    date_range: DateRange,
    invoices: Iterable[Invoice],
    time_entries: Iterable[TimeEntry],
    projects: Iterable[Project],
) -> SummaryStats:
    """
    Headline numbers for a report range.

    ``active_client_count`` counts distinct clients with any invoice issued in
    range, whatever its status. ``active_project_count`` is not range bound.
    """
    stats = SummaryStats()
    active_clients = set()

    for invoice in invoices:
        try:
            if not date_range.contains(invoice.issue_date):
                continue
            active_clients.add(invoice.client_id)
            if invoice.status == InvoiceStatus.PAID:
                stats.total_revenue += _paid_total(invoice)
        except (ValueError, TypeError) as exc:
            _skip("invoice", invoice, "summary_stats", exc)

    for entry in time_entries:
        try:
            if not date_range.contains(entry.start_time):
                continue
            hours = entry_hours(entry)
            if hours is None:
                continue
            if entry.billable:
                stats.billable_hours += hours
            else:
                stats.non_billable_hours += hours
        except (ValueError, TypeError) as exc:
            _skip("time entry", entry, "summary_stats", exc)

    stats.active_project_count = sum(1 for project in projects if project.is_active)
    stats.active_client_count = len(active_clients)
    return stats
