"""Tests for TaskService."""
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId


def make_db():
    mock_db = MagicMock()
    mock_tasks = AsyncMock()
    mock_projects = AsyncMock()
    mock_db.__getitem__.side_effect = lambda key: {
        "tasks": mock_tasks,
        "projects": mock_projects,
    }[key]
    return mock_db, mock_tasks, mock_projects


def task_doc(**overrides):
    now = datetime(2024, 3, 1)
    doc = {
        "_id": ObjectId(),
        "title": "Draft homepage copy",
        "description": "",
        "project_id": None,
        "assigned_to": "user123",
        "status": "todo",
        "priority": "medium",
        "due_date": None,
        "estimated_hours": None,
        "completed_at": None,
        "created_by": "user123",
        "created_at": now,
        "updated_at": now,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
class TestTaskService:
    """Tests for task operations."""

    async def test_create_task(self):
        from bizmanager.models.task import TaskCreate, TaskPriority
        from bizmanager.services.task_service import TaskService

        mock_db, mock_tasks, mock_projects = make_db()
        mock_projects.find_one.return_value = {"_id": ObjectId()}
        mock_tasks.insert_one.return_value = AsyncMock(inserted_id=ObjectId())

        service = TaskService(mock_db)
        project_id = str(ObjectId())
        task = await service.create_task(
            "user123",
            TaskCreate(title="Wireframes", project_id=project_id, priority=TaskPriority.HIGH),
        )

        assert task.title == "Wireframes"
        assert task.project_id == project_id
        assert task.status == "todo"
        assert task.completed_at is None

        inserted = mock_tasks.insert_one.call_args.args[0]
        assert inserted["priority"] == "high"
        assert inserted["created_by"] == "user123"

    async def test_create_task_with_unknown_project(self):
        from bizmanager.models.task import TaskCreate
        from bizmanager.services.task_service import TaskService

        mock_db, mock_tasks, mock_projects = make_db()
        mock_projects.find_one.return_value = None

        service = TaskService(mock_db)

        with pytest.raises(ValueError, match="Project not found"):
            await service.create_task("user123", TaskCreate(title="Orphan", project_id=str(ObjectId())))
        mock_tasks.insert_one.assert_not_called()

    async def test_completing_stamps_completed_at(self):
        from bizmanager.models.task import TaskStatus, TaskUpdate
        from bizmanager.services.task_service import TaskService

        mock_db, mock_tasks, _ = make_db()
        existing = task_doc()
        mock_tasks.find_one.return_value = existing
        mock_tasks.find_one_and_update.return_value = task_doc(status="completed", completed_at=datetime(2024, 3, 2))

        service = TaskService(mock_db)
        await service.update_task(str(existing["_id"]), TaskUpdate(status=TaskStatus.COMPLETED))

        update = mock_tasks.find_one_and_update.call_args.args[1]["$set"]
        assert update["status"] == "completed"
        assert update["completed_at"] is not None

    async def test_reopening_clears_completed_at(self):
        from bizmanager.models.task import TaskStatus, TaskUpdate
        from bizmanager.services.task_service import TaskService

        mock_db, mock_tasks, _ = make_db()
        existing = task_doc(status="completed", completed_at=datetime(2024, 3, 2))
        mock_tasks.find_one.return_value = existing
        mock_tasks.find_one_and_update.return_value = task_doc(status="in_progress")

        service = TaskService(mock_db)
        await service.update_task(str(existing["_id"]), TaskUpdate(status=TaskStatus.IN_PROGRESS))

        update = mock_tasks.find_one_and_update.call_args.args[1]["$set"]
        assert update["completed_at"] is None

    async def test_get_task_not_found(self):
        from bizmanager.exceptions import NotFoundError
        from bizmanager.services.task_service import TaskService

        mock_db, mock_tasks, _ = make_db()
        mock_tasks.find_one.return_value = None

        service = TaskService(mock_db)

        with pytest.raises(NotFoundError, match="Task not found"):
            await service.get_task(str(ObjectId()))

    async def test_count_pending(self):
        from bizmanager.services.task_service import TaskService

        mock_db, mock_tasks, _ = make_db()
        mock_tasks.count_documents.return_value = 2

        service = TaskService(mock_db)

        assert await service.count_pending("user123") == 2
        query = mock_tasks.count_documents.call_args.args[0]
        assert query["assigned_to"] == "user123"
        assert set(query["status"]["$in"]) == {"todo", "in_progress"}


@pytest.mark.asyncio
class TestUpcomingTasks:
    """Tests for the upcoming task list."""

    async def test_upcoming_orders_by_due_date_with_undated_last(self):
        from bizmanager.services.task_service import TaskService

        mock_db = MagicMock()
        mock_tasks = MagicMock()
        mock_db.__getitem__.return_value = mock_tasks

        later = task_doc(title="Later", due_date=datetime(2024, 3, 20))
        undated = task_doc(title="Someday")
        sooner = task_doc(title="Sooner", due_date=datetime(2024, 3, 10))
        mock_cursor = MagicMock()
        mock_cursor.to_list = AsyncMock(return_value=[later, undated, sooner])
        mock_tasks.find.return_value = mock_cursor

        service = TaskService(mock_db)
        tasks = await service.list_upcoming("user123", limit=2)

        assert [task.title for task in tasks] == ["Sooner", "Later"]
        query = mock_tasks.find.call_args.args[0]
        assert query["assigned_to"] == "user123"
