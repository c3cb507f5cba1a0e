"""Invoice router - API endpoints for invoicing."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizmanager.database import get_database
from bizmanager.exceptions import NotFoundError
from bizmanager.models.invoice import (
    Invoice,
    InvoiceCreate,
    InvoiceItem,
    InvoiceItemCreate,
    InvoicePayment,
    InvoiceStatus,
    InvoiceUpdate,
)
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.invoice_service import InvoiceService


router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice: InvoiceCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new invoice.

    Raises:
        HTTPException: If the client does not exist (400)
    """
    service = InvoiceService(db)
    try:
        return await service.create_invoice(user_id=user_id, invoice_create=invoice)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[Invoice])
async def list_invoices(
    client_id: Optional[str] = Query(None, description="Filter by client"),
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List invoices, optionally filtered by client or status."""
    service = InvoiceService(db)
    return await service.list_invoices(
        client_id=client_id,
        status=invoice_status.value if invoice_status else None,
    )


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get an invoice by ID."""
    service = InvoiceService(db)
    try:
        return await service.get_invoice(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{invoice_id}", response_model=Invoice)
async def update_invoice(
    invoice_id: str,
    invoice_update: InvoiceUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update an invoice."""
    service = InvoiceService(db)
    try:
        return await service.update_invoice(invoice_id, invoice_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{invoice_id}/pay", response_model=Invoice)
async def pay_invoice(
    invoice_id: str,
    payment: InvoicePayment,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Mark an invoice as paid.

    - Paid amount defaults to the invoice total
    - Canceled invoices cannot be paid
    """
    service = InvoiceService(db)
    try:
        return await service.mark_paid(invoice_id, payment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{invoice_id}/items", response_model=InvoiceItem, status_code=status.HTTP_201_CREATED)
async def add_invoice_item(
    invoice_id: str,
    item: InvoiceItemCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Add a line item to an invoice; amount is quantity times unit price."""
    service = InvoiceService(db)
    try:
        return await service.add_item(invoice_id, item)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{invoice_id}/items", response_model=list[InvoiceItem])
async def list_invoice_items(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List the line items of an invoice."""
    service = InvoiceService(db)
    try:
        return await service.list_items(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete an invoice."""
    service = InvoiceService(db)
    try:
        return await service.delete_invoice(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
