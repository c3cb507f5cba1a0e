"""Project router - API endpoints for project management."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizmanager.database import get_database
from bizmanager.exceptions import NotFoundError
from bizmanager.models.project import Project, ProjectCreate, ProjectStatus, ProjectUpdate
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.project_service import ProjectService


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new project.

    Raises:
        HTTPException: If the client does not exist (400)
    """
    service = ProjectService(db)
    try:
        return await service.create_project(user_id=user_id, project_create=project)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[Project])
async def list_projects(
    client_id: Optional[str] = Query(None, description="Filter by client"),
    project_status: Optional[ProjectStatus] = Query(None, alias="status", description="Filter by status"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List projects, optionally filtered by client or status."""
    service = ProjectService(db)
    return await service.list_projects(
        client_id=client_id,
        status=project_status.value if project_status else None,
    )


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a project by ID."""
    service = ProjectService(db)
    try:
        return await service.get_project(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update a project."""
    service = ProjectService(db)
    try:
        return await service.update_project(project_id, project_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a project."""
    service = ProjectService(db)
    try:
        return await service.delete_project(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
