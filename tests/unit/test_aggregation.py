"""Tests for the report aggregations."""
import logging
from datetime import datetime

import pytest

from bizmanager.models.client import Client
from bizmanager.models.invoice import Invoice
from bizmanager.models.project import Project
from bizmanager.models.report import DateRange
from bizmanager.models.time_entry import TimeEntry
from bizmanager.services import aggregation


CREATED = datetime(2024, 1, 1)

MARCH_2024 = DateRange(start=datetime(2024, 3, 1), end=datetime(2024, 3, 31, 23, 59, 59, 999999))
Q1_2024 = DateRange(start=datetime(2024, 1, 1), end=datetime(2024, 3, 31, 23, 59, 59, 999999))


def make_invoice(id, client_id, total, status, issue_date):
    return Invoice(
        _id=id,
        invoice_number=f"INV-{id}",
        client_id=client_id,
        issue_date=issue_date,
        status=status,
        total=total,
        created_by="user123",
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_entry(id, start_time, duration_hours, billable=True, project_id=None):
    return TimeEntry(
        _id=id,
        user_id="user123",
        project_id=project_id,
        start_time=start_time,
        end_time=None,
        duration_hours=duration_hours,
        billable=billable,
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_project(id, name, status="in_progress", client_id="c1"):
    return Project(
        _id=id,
        name=name,
        client_id=client_id,
        status=status,
        created_by="user123",
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_client(id, name):
    return Client(_id=id, name=name, created_by="user123", created_at=CREATED, updated_at=CREATED)


class TestRevenueByMonth:
    """Tests for the monthly revenue series."""

    def test_march_scenario(self):
        """Only the paid invoice contributes to March."""
        invoices = [
            make_invoice("i1", "c1", 500, "paid", datetime(2024, 3, 5)),
            make_invoice("i2", "c2", 300, "draft", datetime(2024, 3, 10)),
        ]

        result = aggregation.revenue_by_month(invoices, MARCH_2024)

        assert [(row.period, row.income) for row in result] == [("Mar 2024", 500)]

    def test_every_month_has_a_bucket(self):
        """Months without invoices are present with zero income."""
        invoices = [make_invoice("i1", "c1", 120, "paid", datetime(2024, 2, 14))]

        result = aggregation.revenue_by_month(invoices, Q1_2024)

        assert [row.period for row in result] == ["Jan 2024", "Feb 2024", "Mar 2024"]
        assert [row.income for row in result] == [0, 120, 0]

    def test_empty_input_still_dense(self):
        result = aggregation.revenue_by_month([], Q1_2024)
        assert len(result) == 3
        assert all(row.income == 0 for row in result)

    def test_range_spanning_year_boundary(self):
        date_range = DateRange(start=datetime(2023, 11, 1), end=datetime(2024, 2, 29, 23, 59, 59))
        result = aggregation.revenue_by_month([], date_range)
        assert [row.period for row in result] == ["Nov 2023", "Dec 2023", "Jan 2024", "Feb 2024"]

    def test_out_of_range_and_unpaid_ignored(self):
        invoices = [
            make_invoice("i1", "c1", 100, "paid", datetime(2024, 4, 1)),
            make_invoice("i2", "c1", 100, "sent", datetime(2024, 3, 2)),
            make_invoice("i3", "c1", 100, "overdue", datetime(2024, 3, 3)),
            make_invoice("i4", "c1", 40, "paid", datetime(2024, 3, 31, 23, 0)),
        ]

        result = aggregation.revenue_by_month(invoices, MARCH_2024)

        assert result[0].income == 40

    def test_malformed_invoice_is_skipped(self, caplog):
        """A bad total is logged and left out; the rest still counts."""
        bad = make_invoice("bad", "c1", 10, "paid", datetime(2024, 3, 5))
        bad.total = float("nan")
        invoices = [bad, make_invoice("good", "c1", 75, "paid", datetime(2024, 3, 6))]

        with caplog.at_level(logging.WARNING):
            result = aggregation.revenue_by_month(invoices, MARCH_2024)

        assert result[0].income == 75
        assert "bad" in caplog.text


class TestHoursByProject:
    """Tests for per-project hours."""

    def test_hours_and_billable_value(self):
        projects = [make_project("p1", "Website")]
        entries = [
            make_entry("e1", datetime(2024, 3, 4), 2.0, billable=True, project_id="p1"),
            make_entry("e2", datetime(2024, 3, 5), 1.0, billable=False, project_id="p1"),
        ]

        result = aggregation.hours_by_project(projects, entries, MARCH_2024, hourly_rate=50)

        assert len(result) == 1
        assert result[0].project == "Website"
        assert result[0].hours == pytest.approx(3.0)
        assert result[0].value == pytest.approx(100.0)

    def test_project_without_hours_is_absent(self):
        projects = [make_project("p1", "Busy"), make_project("p2", "Idle")]
        entries = [make_entry("e1", datetime(2024, 3, 4), 1.5, project_id="p1")]

        result = aggregation.hours_by_project(projects, entries, MARCH_2024, hourly_rate=50)

        assert [row.project_id for row in result] == ["p1"]

    def test_sorted_descending_with_stable_ties(self):
        projects = [
            make_project("p1", "First"),
            make_project("p2", "Second"),
            make_project("p3", "Third"),
        ]
        entries = [
            make_entry("e1", datetime(2024, 3, 4), 1.0, project_id="p1"),
            make_entry("e2", datetime(2024, 3, 4), 4.0, project_id="p2"),
            make_entry("e3", datetime(2024, 3, 4), 1.0, project_id="p3"),
        ]

        result = aggregation.hours_by_project(projects, entries, MARCH_2024, hourly_rate=50)

        assert [row.project_id for row in result] == ["p2", "p1", "p3"]

    def test_hours_are_conserved(self):
        """Project hours add up to every in-range entry carrying a project."""
        projects = [make_project("p1", "A"), make_project("p2", "B")]
        entries = [
            make_entry("e1", datetime(2024, 1, 3), 1.25, project_id="p1"),
            make_entry("e2", datetime(2024, 2, 3), 2.5, project_id="p2", billable=False),
            make_entry("e3", datetime(2024, 3, 3), 0.75, project_id="p1"),
            make_entry("e4", datetime(2024, 3, 3), 9.0),
            make_entry("e5", datetime(2024, 5, 3), 3.0, project_id="p1"),
            make_entry("e6", datetime(2024, 3, 9), None, project_id="p2"),
        ]

        result = aggregation.hours_by_project(projects, entries, Q1_2024, hourly_rate=50)

        expected = sum(
            entry.duration_hours
            for entry in entries
            if entry.project_id is not None
            and entry.duration_hours is not None
            and Q1_2024.contains(entry.start_time)
        )
        assert sum(row.hours for row in result) == pytest.approx(expected)

    def test_running_and_negative_entries_are_skipped(self, caplog):
        projects = [make_project("p1", "A")]
        entries = [
            make_entry("running", datetime(2024, 3, 4), None, project_id="p1"),
            make_entry("negative", datetime(2024, 3, 4), -2.0, project_id="p1"),
            make_entry("ok", datetime(2024, 3, 4), 1.0, project_id="p1"),
        ]

        with caplog.at_level(logging.WARNING):
            result = aggregation.hours_by_project(projects, entries, MARCH_2024, hourly_rate=50)

        assert result[0].hours == pytest.approx(1.0)
        assert "negative" in caplog.text
        assert "running" not in caplog.text


class TestRevenueByClient:
    """Tests for per-client revenue."""

    def test_paid_revenue_per_client(self):
        clients = [make_client("c1", "Acme"), make_client("c2", "Globex"), make_client("c3", "Idle")]
        invoices = [
            make_invoice("i1", "c1", 100, "paid", datetime(2024, 3, 1)),
            make_invoice("i2", "c2", 400, "paid", datetime(2024, 3, 2)),
            make_invoice("i3", "c1", 150, "paid", datetime(2024, 3, 3)),
            make_invoice("i4", "c3", 999, "sent", datetime(2024, 3, 3)),
        ]

        result = aggregation.revenue_by_client(clients, invoices, MARCH_2024)

        assert [(row.client, row.revenue) for row in result] == [("Globex", 400), ("Acme", 250)]

    def test_ties_keep_fetch_order(self):
        clients = [make_client("c1", "Acme"), make_client("c2", "Globex")]
        invoices = [
            make_invoice("i1", "c2", 100, "paid", datetime(2024, 3, 1)),
            make_invoice("i2", "c1", 100, "paid", datetime(2024, 3, 2)),
        ]

        result = aggregation.revenue_by_client(clients, invoices, MARCH_2024)

        assert [row.client_id for row in result] == ["c1", "c2"]


class TestHoursByMonth:
    """Tests for the monthly hours series."""

    def test_billable_split(self):
        entries = [
            make_entry("e1", datetime(2024, 3, 4), 2.0, billable=True),
            make_entry("e2", datetime(2024, 3, 5), 1.5, billable=False),
        ]

        result = aggregation.hours_by_month(entries, MARCH_2024)

        assert len(result) == 1
        assert result[0].billable == pytest.approx(2.0)
        assert result[0].non_billable == pytest.approx(1.5)

    def test_dense_months(self):
        entries = [make_entry("e1", datetime(2024, 1, 4), 1.0)]

        result = aggregation.hours_by_month(entries, Q1_2024)

        assert [row.period for row in result] == ["Jan 2024", "Feb 2024", "Mar 2024"]
        assert [row.billable for row in result] == [1.0, 0, 0]


class TestSummaryStats:
    """Tests for the headline numbers."""

    def test_march_scenario_counts_clients_with_any_invoice(self):
        """The draft invoice still makes its client active."""
        invoices = [
            make_invoice("i1", "c1", 500, "paid", datetime(2024, 3, 5)),
            make_invoice("i2", "c2", 300, "draft", datetime(2024, 3, 10)),
        ]

        stats = aggregation.summary_stats(MARCH_2024, invoices, [], [])

        assert stats.total_revenue == 500
        assert stats.active_client_count == 2

    def test_paid_invoice_counts_client(self):
        invoices = [make_invoice("i1", "c1", 500, "paid", datetime(2024, 3, 5))]
        stats = aggregation.summary_stats(MARCH_2024, invoices, [], [])
        assert stats.active_client_count == 1

    def test_unpaid_invoice_counts_client(self):
        invoices = [make_invoice("i1", "c9", 80, "canceled", datetime(2024, 3, 5))]
        stats = aggregation.summary_stats(MARCH_2024, invoices, [], [])
        assert stats.active_client_count == 1
        assert stats.total_revenue == 0

    def test_clients_are_deduplicated_and_range_bound(self):
        invoices = [
            make_invoice("i1", "c1", 10, "paid", datetime(2024, 3, 5)),
            make_invoice("i2", "c1", 20, "sent", datetime(2024, 3, 6)),
            make_invoice("i3", "c2", 30, "paid", datetime(2024, 2, 28)),
        ]

        stats = aggregation.summary_stats(MARCH_2024, invoices, [], [])

        assert stats.active_client_count == 1
        assert stats.total_revenue == 10

    def test_hours_and_active_projects(self):
        entries = [
            make_entry("e1", datetime(2024, 3, 4), 2.0, billable=True),
            make_entry("e2", datetime(2024, 3, 5), 1.5, billable=False),
            make_entry("e3", datetime(2024, 4, 1), 7.0),
        ]
        projects = [
            make_project("p1", "A", status="not_started"),
            make_project("p2", "B", status="in_progress"),
            make_project("p3", "C", status="on_hold"),
            make_project("p4", "D", status="completed"),
            make_project("p5", "E", status="canceled"),
        ]

        stats = aggregation.summary_stats(MARCH_2024, [], entries, projects)

        assert stats.billable_hours == pytest.approx(2.0)
        assert stats.non_billable_hours == pytest.approx(1.5)
        assert stats.active_project_count == 2

    def test_repeated_calls_are_identical(self):
        invoices = [make_invoice("i1", "c1", 500, "paid", datetime(2024, 3, 5))]
        entries = [make_entry("e1", datetime(2024, 3, 4), 2.0)]

        first = aggregation.summary_stats(MARCH_2024, invoices, entries, [])
        second = aggregation.summary_stats(MARCH_2024, invoices, entries, [])

        assert first == second
