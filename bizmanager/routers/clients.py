"""Client router - API endpoints for client management."""
from fastapi import APIRouter, Depends, HTTPException, status

from bizmanager.database import get_database
from bizmanager.exceptions import NotFoundError
from bizmanager.models.client import Client, ClientCreate, ClientUpdate
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.client_service import ClientService


router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    client: ClientCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Create a new client."""
    service = ClientService(db)
    return await service.create_client(user_id=user_id, client_create=client)


@router.get("", response_model=list[Client])
async def list_clients(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List all clients."""
    service = ClientService(db)
    return await service.list_clients()


@router.get("/{client_id}", response_model=Client)
async def get_client(
    client_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a client by ID."""
    service = ClientService(db)
    try:
        return await service.get_client(client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    client_update: ClientUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update a client."""
    service = ClientService(db)
    try:
        return await service.update_client(client_id, client_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a client."""
    service = ClientService(db)
    try:
        return await service.delete_client(client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
