"""Task router - API endpoints for task management."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizmanager.database import get_database
from bizmanager.exceptions import NotFoundError
from bizmanager.models.task import Task, TaskCreate, TaskUpdate
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.task_service import DEFAULT_UPCOMING_LIMIT, TaskService


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new task.

    Raises:
        HTTPException: If the project does not exist (400)
    """
    service = TaskService(db)
    try:
        return await service.create_task(user_id=user_id, task_create=task)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[Task])
async def list_tasks(
    project_id: Optional[str] = Query(None, description="Filter by project"),
    assigned_to: Optional[str] = Query(None, description="Filter by assignee"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List tasks, optionally filtered by project or assignee."""
    service = TaskService(db)
    return await service.list_tasks(project_id=project_id, assigned_to=assigned_to)


@router.get("/upcoming", response_model=list[Task])
async def upcoming_tasks(
    limit: int = Query(DEFAULT_UPCOMING_LIMIT, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Open tasks assigned to the current user, soonest due first."""
    service = TaskService(db)
    return await service.list_upcoming(user_id=user_id, limit=limit)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a task by ID."""
    service = TaskService(db)
    try:
        return await service.get_task(task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update a task."""
    service = TaskService(db)
    try:
        return await service.update_task(task_id, task_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a task."""
    service = TaskService(db)
    try:
        return await service.delete_task(task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
