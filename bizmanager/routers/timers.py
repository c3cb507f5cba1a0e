"""Timer endpoints - time tracking operations."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from bizmanager.database import get_database
from bizmanager.exceptions import NotFoundError, TimerConflictError
from bizmanager.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    TimerState,
)
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.timer_service import TimerService
from bizmanager.utils.dates import UtcDatetime


router = APIRouter(prefix="/timers", tags=["timers"])


class TimerStart(BaseModel):
    """Request model for starting a timer."""

    description: str = ""
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    billable: bool = True
    start_time: Optional[UtcDatetime] = None


@router.post("/start", response_model=TimeEntry)
async def start_timer(
    timer_start: TimerStart,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Start a new timer.

    - Only one timer can run at a time (409 otherwise)
    - Project, when given, must exist
    """
    service = TimerService(db)
    try:
        return await service.start_timer(
            user_id=user_id,
            description=timer_start.description,
            project_id=timer_start.project_id,
            task_id=timer_start.task_id,
            billable=timer_start.billable,
            start_time=timer_start.start_time,
        )
    except TimerConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/stop", response_model=TimeEntry)
async def stop_running_timer(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Stop the currently running timer.

    - Must have a running timer
    """
    service = TimerService(db)
    try:
        return await service.stop_running(user_id=user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/current", response_model=TimerState)
async def get_current_timer(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get the running timer with its elapsed seconds.

    - Returns 404 if no timer is running
    """
    service = TimerService(db)
    state = await service.resume_if_running(user_id=user_id)

    if not state:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No timer running")

    return state


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    project_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List time entries for the authenticated user.

    - Results sorted by start_time descending (most recent first)
    """
    service = TimerService(db)
    return await service.list_entries(
        user_id=user_id,
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_create: TimeEntryCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a manual time entry.

    - Both start and end time are required
    - Duration is computed from the bounds
    """
    service = TimerService(db)
    try:
        return await service.create_entry(user_id=user_id, entry_create=entry_create)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{entry_id}/stop", response_model=TimeEntry)
async def stop_timer(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Stop a specific running entry.

    - Stopping an already stopped entry returns it unchanged
    """
    service = TimerService(db)
    try:
        return await service.stop_timer(user_id=user_id, entry_id=entry_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a specific time entry by ID."""
    service = TimerService(db)
    try:
        return await service.get_entry(user_id=user_id, entry_id=entry_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: str,
    entry_update: TimeEntryUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update a time entry; duration follows the bounds."""
    service = TimerService(db)
    try:
        return await service.update_entry(
            user_id=user_id,
            entry_id=entry_id,
            entry_update=entry_update,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a time entry (permanent)."""
    service = TimerService(db)
    try:
        return await service.delete_entry(user_id=user_id, entry_id=entry_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
