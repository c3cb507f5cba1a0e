"""Client model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClientBase(BaseModel):
    """Base client fields."""

    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    contact_person: Optional[str] = None
    notes: str = ""


class ClientCreate(ClientBase):
    """Client creation model."""

    pass


class ClientUpdate(BaseModel):
    """Client update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    contact_person: Optional[str] = None
    notes: Optional[str] = None


class Client(ClientBase):
    """Full client model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
