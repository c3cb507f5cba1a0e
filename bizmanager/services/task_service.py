"""Task service - business logic for task management."""
import logging
from datetime import datetime
from typing import Optional

from bizmanager.exceptions import NotFoundError
from bizmanager.models.task import (
    PENDING_TASK_STATUSES,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
)
from bizmanager.utils.documents import convert_all, parse_object_id


logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_LIMIT = 5


class TaskService:
    """Service for handling task operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.tasks = db["tasks"]
        self.projects = db["projects"]

    @staticmethod
    def _doc_to_task(doc: dict) -> Task:
        return Task(
            _id=str(doc["_id"]),
            title=doc["title"],
            description=doc.get("description", ""),
            project_id=doc.get("project_id"),
            assigned_to=doc.get("assigned_to"),
            status=doc["status"],
            priority=doc.get("priority", "medium"),
            due_date=doc.get("due_date"),
            estimated_hours=doc.get("estimated_hours"),
            completed_at=doc.get("completed_at"),
            created_by=doc["created_by"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _ensure_project(self, project_id: Optional[str]) -> None:
        if project_id is None:
            return
        project = await self.projects.find_one({"_id": parse_object_id(project_id, "project")})
        if not project:
            raise ValueError("Project not found")

    @staticmethod
    def _pending_query() -> dict:
        return {"status": {"$in": [status.value for status in PENDING_TASK_STATUSES]}}

    async def create_task(self, user_id: str, task_create: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: Author of the task
            task_create: Task fields

        Returns:
            Created task

        Raises:
            ValueError: If the referenced project does not exist
        """
        await self._ensure_project(task_create.project_id)

        now = datetime.utcnow()
        task_doc = {
            **task_create.model_dump(mode="python"),
            "status": task_create.status.value,
            "priority": task_create.priority.value,
            "completed_at": now if task_create.status == TaskStatus.COMPLETED else None,
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.tasks.insert_one(task_doc)
        task_doc["_id"] = result.inserted_id

        return self._doc_to_task(task_doc)

    async def list_tasks(
        self,
        project_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
    ) -> list[Task]:
        """List tasks in insertion order, optionally filtered by project or assignee."""
        query = {}
        if project_id:
            query["project_id"] = project_id
        if assigned_to:
            query["assigned_to"] = assigned_to

        cursor = self.tasks.find(query).sort("_id", 1)
        task_docs = await cursor.to_list(length=None)

        return convert_all(task_docs, self._doc_to_task, "task")

    async def list_upcoming(self, user_id: str, limit: int = DEFAULT_UPCOMING_LIMIT) -> list[Task]:
        """
        Open tasks assigned to a user, soonest due date first.

        Tasks without a due date come after every dated task.
        """
        cursor = self.tasks.find({"assigned_to": user_id, **self._pending_query()})
        task_docs = await cursor.to_list(length=None)

        task_docs.sort(key=lambda doc: (doc.get("due_date") is None, doc.get("due_date") or datetime.min))
        return convert_all(task_docs[:limit], self._doc_to_task, "task")

    async def count_pending(self, user_id: str) -> int:
        return await self.tasks.count_documents({"assigned_to": user_id, **self._pending_query()})

    async def get_task(self, task_id: str) -> Task:
        """
        Get a task by ID.

        Raises:
            NotFoundError: If task not found
        """
        task_doc = await self.tasks.find_one({"_id": parse_object_id(task_id, "task")})
        if not task_doc:
            raise NotFoundError("Task not found")

        return self._doc_to_task(task_doc)

    async def update_task(self, task_id: str, task_update: TaskUpdate) -> Task:
        """
        Update a task.

        Completing a task stamps ``completed_at`` once; reopening clears it.

        Raises:
            NotFoundError: If task not found
            ValueError: If the new project does not exist
        """
        object_id = parse_object_id(task_id, "task")
        existing = await self.tasks.find_one({"_id": object_id})
        if not existing:
            raise NotFoundError("Task not found")

        update_doc = task_update.model_dump(exclude_none=True)
        if "project_id" in update_doc:
            await self._ensure_project(update_doc["project_id"])

        now = datetime.utcnow()
        if task_update.status is not None:
            update_doc["status"] = task_update.status.value
            if task_update.status == TaskStatus.COMPLETED:
                update_doc["completed_at"] = existing.get("completed_at") or now
            else:
                update_doc["completed_at"] = None
        if task_update.priority is not None:
            update_doc["priority"] = task_update.priority.value
        update_doc["updated_at"] = now

        updated_doc = await self.tasks.find_one_and_update(
            {"_id": object_id},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_task(updated_doc)

    async def delete_task(self, task_id: str) -> dict:
        """
        Delete a task.

        Time entries keep their ``task_id`` as a dangling reference.

        Raises:
            NotFoundError: If task not found
        """
        result = await self.tasks.delete_one({"_id": parse_object_id(task_id, "task")})
        if result.deleted_count == 0:
            raise NotFoundError("Task not found")

        logger.info("Deleted task %s", task_id)
        return {"deleted_count": result.deleted_count}
