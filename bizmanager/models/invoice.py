"""Invoice model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from bizmanager.utils.dates import UtcDatetime


class InvoiceStatus(str, Enum):
    """Invoice lifecycle states."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELED = "canceled"


class InvoiceBase(BaseModel):
    """Base invoice fields."""

    invoice_number: str = Field(min_length=1)
    client_id: str
    issue_date: UtcDatetime
    due_date: Optional[UtcDatetime] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    subtotal: float = Field(default=0.0, ge=0)
    tax: float = Field(default=0.0, ge=0)
    discount: float = Field(default=0.0, ge=0)
    total: float = Field(ge=0)
    notes: str = ""


class InvoiceCreate(InvoiceBase):
    """Invoice creation model."""

    @model_validator(mode="after")
    def check_due_date(self) -> "InvoiceCreate":
        if self.due_date is not None and self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before issue date")
        return self


class InvoiceUpdate(BaseModel):
    """Invoice update model - all fields optional."""

    invoice_number: Optional[str] = Field(default=None, min_length=1)
    client_id: Optional[str] = None
    issue_date: Optional[UtcDatetime] = None
    due_date: Optional[UtcDatetime] = None
    status: Optional[InvoiceStatus] = None
    subtotal: Optional[float] = Field(default=None, ge=0)
    tax: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0)
    total: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class InvoiceItemCreate(BaseModel):
    """Line item added to an existing invoice."""

    description: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)
    project_id: Optional[str] = None
    task_id: Optional[str] = None


class InvoiceItem(InvoiceItemCreate):
    """Stored line item; ``amount`` is quantity times unit price."""

    id: str
    amount: float


class InvoicePayment(BaseModel):
    """Payment registration for an invoice."""

    paid_amount: Optional[float] = Field(default=None, ge=0)
    paid_at: Optional[UtcDatetime] = None


class Invoice(InvoiceBase):
    """Full invoice model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_by: str
    paid_at: Optional[datetime] = None
    paid_amount: Optional[float] = None
    items: list[InvoiceItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
