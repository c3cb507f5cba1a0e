"""Project service - business logic for project management."""
import logging
from datetime import date, datetime
from typing import Optional

from bizmanager.exceptions import NotFoundError
from bizmanager.models.project import (
    ACTIVE_PROJECT_STATUSES,
    Project,
    ProjectCreate,
    ProjectStatus,
    ProjectUpdate,
)
from bizmanager.utils.documents import convert_all, parse_object_id


logger = logging.getLogger(__name__)


def _as_date(value) -> Optional[date]:
    """MongoDB stores dates as datetimes; hand back plain dates."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_datetime(value: Optional[date]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.combine(value, datetime.min.time())


class ProjectService:
    """Service for handling project operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.projects = db["projects"]
        self.clients = db["clients"]

    def _doc_to_project(self, doc: dict) -> Project:
        """
        Convert database document to Project model.

        Handles datetime to date conversion for date fields.
        """
        return Project(
            _id=str(doc["_id"]),
            name=doc["name"],
            client_id=doc["client_id"],
            description=doc.get("description", ""),
            status=doc["status"],
            start_date=_as_date(doc.get("start_date")),
            deadline=_as_date(doc.get("deadline")),
            budget=doc.get("budget"),
            progress=doc.get("progress", 0),
            completed_at=doc.get("completed_at"),
            created_by=doc["created_by"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _ensure_client(self, client_id: str) -> None:
        client = await self.clients.find_one({"_id": parse_object_id(client_id, "client")})
        if not client:
            raise ValueError("Client not found")

    async def create_project(self, user_id: str, project_create: ProjectCreate) -> Project:
        """
        Create a new project.

        Raises:
            ValueError: If the referenced client does not exist
        """
        await self._ensure_client(project_create.client_id)

        now = datetime.utcnow()
        project_doc = {
            "name": project_create.name,
            "client_id": project_create.client_id,
            "description": project_create.description,
            "status": project_create.status.value,
            "start_date": _as_datetime(project_create.start_date),
            "deadline": _as_datetime(project_create.deadline),
            "budget": project_create.budget,
            "progress": project_create.progress,
            "completed_at": now if project_create.status == ProjectStatus.COMPLETED else None,
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.projects.insert_one(project_doc)
        project_doc["_id"] = result.inserted_id

        return self._doc_to_project(project_doc)

    async def list_projects(
        self,
        client_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Project]:
        """
        List projects with optional filtering.

        Args:
            client_id: Optional client filter
            status: Optional status filter

        Returns:
            List of projects in insertion order
        """
        query = {}
        if client_id:
            query["client_id"] = client_id
        if status:
            query["status"] = status

        cursor = self.projects.find(query).sort("_id", 1)
        project_docs = await cursor.to_list(length=None)

        return convert_all(project_docs, self._doc_to_project, "project")

    async def count_active_projects(self) -> int:
        return await self.projects.count_documents({
            "status": {"$in": [status.value for status in ACTIVE_PROJECT_STATUSES]},
        })

    async def get_project(self, project_id: str) -> Project:
        """
        Get a project by ID.

        Raises:
            NotFoundError: If project not found
        """
        project_doc = await self.projects.find_one({"_id": parse_object_id(project_id, "project")})
        if not project_doc:
            raise NotFoundError("Project not found")

        return self._doc_to_project(project_doc)

    async def update_project(self, project_id: str, project_update: ProjectUpdate) -> Project:
        """
        Update a project.

        Moving a project to ``completed`` stamps ``completed_at``; moving it
        anywhere else clears it.

        Raises:
            NotFoundError: If project not found
            ValueError: If the new client does not exist
        """
        object_id = parse_object_id(project_id, "project")
        existing = await self.projects.find_one({"_id": object_id})
        if not existing:
            raise NotFoundError("Project not found")

        update_doc = {"updated_at": datetime.utcnow()}

        if project_update.client_id is not None:
            await self._ensure_client(project_update.client_id)
            update_doc["client_id"] = project_update.client_id
        if project_update.name is not None:
            update_doc["name"] = project_update.name
        if project_update.description is not None:
            update_doc["description"] = project_update.description
        if project_update.status is not None:
            update_doc["status"] = project_update.status.value
            if project_update.status == ProjectStatus.COMPLETED:
                update_doc["completed_at"] = existing.get("completed_at") or update_doc["updated_at"]
            else:
                update_doc["completed_at"] = None
        if project_update.start_date is not None:
            update_doc["start_date"] = _as_datetime(project_update.start_date)
        if project_update.deadline is not None:
            update_doc["deadline"] = _as_datetime(project_update.deadline)
        if project_update.budget is not None:
            update_doc["budget"] = project_update.budget
        if project_update.progress is not None:
            update_doc["progress"] = project_update.progress

        updated_doc = await self.projects.find_one_and_update(
            {"_id": object_id},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_project(updated_doc)

    async def delete_project(self, project_id: str) -> dict:
        """
        Delete a project.

        Raises:
            NotFoundError: If project not found
        """
        result = await self.projects.delete_one({"_id": parse_object_id(project_id, "project")})
        if result.deleted_count == 0:
            raise NotFoundError("Project not found")

        logger.info("Deleted project %s", project_id)
        return {"deleted_count": result.deleted_count}
