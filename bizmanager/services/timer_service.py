"""Timer service - business logic for time tracking."""
import logging
from datetime import datetime
from typing import Optional

from pymongo.errors import DuplicateKeyError

from bizmanager.exceptions import NotFoundError, TimerConflictError
from bizmanager.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    TimerState,
)
from bizmanager.utils.dates import to_utc_naive
from bizmanager.utils.documents import convert_all, parse_object_id


logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def calculate_duration_hours(start_time: datetime, end_time: datetime) -> float:
    """
    Hours elapsed between two instants.

    Aware values are compared as naive UTC, matching what MongoDB returns.

    Raises:
        ValueError: If end_time is before start_time
    """
    start_time, end_time = to_utc_naive(start_time), to_utc_naive(end_time)
    if end_time < start_time:
        raise ValueError("End time cannot be before start time")
    return (end_time - start_time).total_seconds() / SECONDS_PER_HOUR


def elapsed_seconds(start_time: datetime, now: datetime) -> int:
    """Whole seconds since start_time, never negative."""
    return max(0, int((to_utc_naive(now) - to_utc_naive(start_time)).total_seconds()))


class TimerService:
    """Service for handling time tracking operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.projects = db["projects"]
        self.tasks = db["tasks"]

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """
        Convert database document to TimeEntry model.
        """
        return TimeEntry(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            project_id=doc.get("project_id"),
            task_id=doc.get("task_id"),
            description=doc.get("description", ""),
            start_time=doc["start_time"],
            end_time=doc.get("end_time"),
            duration_hours=doc.get("duration_hours"),
            billable=doc.get("billable", True),
            running=doc.get("end_time") is None,
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _ensure_project(self, project_id: Optional[str]) -> None:
        if project_id is None:
            return
        project = await self.projects.find_one({"_id": parse_object_id(project_id, "project")})
        if not project:
            raise ValueError("Project not found")

    async def _ensure_task(self, task_id: Optional[str]) -> None:
        if task_id is None:
            return
        task = await self.tasks.find_one({"_id": parse_object_id(task_id, "task")})
        if not task:
            raise ValueError("Task not found")

    async def _find_running(self, user_id: str) -> Optional[dict]:
        return await self.time_entries.find_one({
            "user_id": user_id,
            "end_time": None,
        })

    async def _find_owned(self, user_id: str, entry_id: str) -> dict:
        object_id = parse_object_id(entry_id, "entry")
        doc = await self.time_entries.find_one({
            "_id": object_id,
            "user_id": user_id,
        })
        if not doc:
            raise NotFoundError("Time entry not found")
        return doc

    async def start_timer(
        self,
        user_id: str,
        description: str = "",
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        billable: bool = True,
        start_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Start a new timer.

        A user can only have one running entry. The check is repeated by the
        unique index on running entries, so a concurrent start from another
        session fails the same way.

        Args:
            user_id: User ID
            description: Optional description
            project_id: Optional project the time is logged against
            task_id: Optional task reference
            billable: Whether the time can be invoiced
            start_time: Optional start time (defaults to now)

        Returns:
            Created, running time entry

        Raises:
            TimerConflictError: If a timer is already running
            ValueError: If the project or task doesn't exist
        """
        if await self._find_running(user_id):
            raise TimerConflictError("Timer already running")

        await self._ensure_project(project_id)
        await self._ensure_task(task_id)

        now = datetime.utcnow()
        entry_doc = {
            "user_id": user_id,
            "project_id": project_id,
            "task_id": task_id,
            "description": description,
            "start_time": to_utc_naive(start_time) or now,
            "end_time": None,
            "duration_hours": None,
            "billable": billable,
            "running": True,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.time_entries.insert_one(entry_doc)
        except DuplicateKeyError:
            logger.warning("Concurrent timer start rejected for user %s", user_id)
            raise TimerConflictError("Timer already running")
        entry_doc["_id"] = result.inserted_id

        logger.info("Timer %s started for user %s", entry_doc["_id"], user_id)
        return self._doc_to_entry(entry_doc)

    async def stop_timer(
        self,
        user_id: str,
        entry_id: str,
        end_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Stop a running entry.

        Stopping an entry that is already stopped changes nothing and returns
        it as stored, so a retried request is harmless.

        Raises:
            NotFoundError: If the entry does not exist for this user
            ValueError: If end_time is before the entry's start
        """
        doc = await self._find_owned(user_id, entry_id)
        if doc.get("end_time") is not None:
            logger.info("Timer %s already stopped", entry_id)
            return self._doc_to_entry(doc)

        end_time = to_utc_naive(end_time) or datetime.utcnow()
        duration = calculate_duration_hours(doc["start_time"], end_time)

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": doc["_id"], "end_time": None},
            {"$set": {
                "end_time": end_time,
                "duration_hours": duration,
                "running": False,
                "updated_at": datetime.utcnow(),
            }},
            return_document=True,
        )
        if updated_doc is None:
            # Stopped by a concurrent request in between.
            updated_doc = await self._find_owned(user_id, entry_id)
        else:
            logger.info("Timer %s stopped after %.4f hours", entry_id, duration)

        return self._doc_to_entry(updated_doc)

    async def stop_running(self, user_id: str, end_time: Optional[datetime] = None) -> TimeEntry:
        """
        Stop whichever entry is running for the user.

        Raises:
            ValueError: If no timer is running
        """
        running = await self._find_running(user_id)
        if not running:
            raise ValueError("No timer running")

        return await self.stop_timer(user_id, str(running["_id"]), end_time=end_time)

    async def resume_if_running(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[TimerState]:
        """
        Reconcile with a timer left running by an earlier session.

        Returns the running entry with its elapsed time derived from
        ``now - start_time``, or None when nothing is running.
        """
        running = await self._find_running(user_id)
        if not running:
            return None

        entry = self._doc_to_entry(running)
        return TimerState(
            entry=entry,
            elapsed_seconds=elapsed_seconds(entry.start_time, now or datetime.utcnow()),
        )

    async def list_entries(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        List time entries for a user with optional filtering.

        Returns:
            Entries sorted by start_time, most recent first
        """
        query = {
            "user_id": user_id,
        }

        if project_id:
            query["project_id"] = project_id

        if start_date or end_date:
            query["start_time"] = {}
            if start_date:
                query["start_time"]["$gte"] = to_utc_naive(start_date)
            if end_date:
                query["start_time"]["$lte"] = to_utc_naive(end_date)

        cursor = self.time_entries.find(query).sort("start_time", -1)
        entry_docs = await cursor.to_list(length=None)

        return convert_all(entry_docs, self._doc_to_entry, "time entry")

    async def list_entries_by_user(self, user_id: str) -> list[TimeEntry]:
        """Every entry of a user, oldest first, for report aggregation."""
        cursor = self.time_entries.find({"user_id": user_id}).sort("start_time", 1)
        entry_docs = await cursor.to_list(length=None)
        return convert_all(entry_docs, self._doc_to_entry, "time entry")

    async def get_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        """
        Raises:
            NotFoundError: If entry not found
        """
        return self._doc_to_entry(await self._find_owned(user_id, entry_id))

    async def create_entry(
        self,
        user_id: str,
        entry_create: TimeEntryCreate,
    ) -> TimeEntry:
        """
        Create a manual, already closed time entry.

        Raises:
            ValueError: If the project or task doesn't exist or the bounds are inverted
        """
        await self._ensure_project(entry_create.project_id)
        await self._ensure_task(entry_create.task_id)

        duration = calculate_duration_hours(entry_create.start_time, entry_create.end_time)

        now = datetime.utcnow()
        entry_doc = {
            "user_id": user_id,
            "project_id": entry_create.project_id,
            "task_id": entry_create.task_id,
            "description": entry_create.description,
            "start_time": entry_create.start_time,
            "end_time": entry_create.end_time,
            "duration_hours": duration,
            "billable": entry_create.billable,
            "running": False,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.time_entries.insert_one(entry_doc)
        entry_doc["_id"] = result.inserted_id

        return self._doc_to_entry(entry_doc)

    async def update_entry(
        self,
        user_id: str,
        entry_id: str,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Update a time entry.

        The duration is recomputed whenever either bound changes. Setting an
        end time on a running entry closes it.

        Raises:
            NotFoundError: If entry not found
            ValueError: If the project or task doesn't exist or the bounds are inverted
        """
        existing = await self._find_owned(user_id, entry_id)

        update_doc = {
            "updated_at": datetime.utcnow(),
        }

        if entry_update.project_id is not None:
            await self._ensure_project(entry_update.project_id)
            update_doc["project_id"] = entry_update.project_id
        if entry_update.task_id is not None:
            await self._ensure_task(entry_update.task_id)
            update_doc["task_id"] = entry_update.task_id
        if entry_update.description is not None:
            update_doc["description"] = entry_update.description
        if entry_update.billable is not None:
            update_doc["billable"] = entry_update.billable
        if entry_update.start_time is not None:
            update_doc["start_time"] = entry_update.start_time
        if entry_update.end_time is not None:
            update_doc["end_time"] = entry_update.end_time
            update_doc["running"] = False

        start_time = update_doc.get("start_time", existing["start_time"])
        end_time = update_doc.get("end_time", existing.get("end_time"))
        if end_time is not None:
            update_doc["duration_hours"] = calculate_duration_hours(start_time, end_time)

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": existing["_id"], "user_id": user_id},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_entry(updated_doc)

    async def delete_entry(
        self,
        user_id: str,
        entry_id: str,
    ) -> dict:
        """
        Delete a time entry (hard delete).

        Raises:
            NotFoundError: If entry not found
        """
        existing = await self._find_owned(user_id, entry_id)

        result = await self.time_entries.delete_one({
            "_id": existing["_id"],
            "user_id": user_id,
        })

        return {"deleted_count": result.deleted_count}
