"""Invoice service - business logic for invoicing."""
import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId

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
from bizmanager.utils.dates import to_utc_naive
from bizmanager.utils.documents import convert_all, parse_object_id


logger = logging.getLogger(__name__)


class InvoiceService:
    """Service for handling invoice operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.invoices = db["invoices"]
        self.clients = db["clients"]

    @staticmethod
    def _doc_to_invoice(doc: dict) -> Invoice:
        return Invoice(
            _id=str(doc["_id"]),
            invoice_number=doc["invoice_number"],
            client_id=doc["client_id"],
            issue_date=doc["issue_date"],
            due_date=doc.get("due_date"),
            status=doc["status"],
            subtotal=doc.get("subtotal", 0.0),
            tax=doc.get("tax", 0.0),
            discount=doc.get("discount", 0.0),
            total=doc["total"],
            notes=doc.get("notes", ""),
            paid_at=doc.get("paid_at"),
            paid_amount=doc.get("paid_amount"),
            items=doc.get("items", []),
            created_by=doc["created_by"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _ensure_client(self, client_id: str) -> None:
        client = await self.clients.find_one({"_id": parse_object_id(client_id, "client")})
        if not client:
            raise ValueError("Client not found")

    async def create_invoice(self, user_id: str, invoice_create: InvoiceCreate) -> Invoice:
        """
        Create a new invoice.

        An invoice created directly as ``paid`` is considered paid in full at
        creation time.

        Raises:
            ValueError: If the referenced client does not exist
        """
        await self._ensure_client(invoice_create.client_id)

        now = datetime.utcnow()
        invoice_doc = {
            **invoice_create.model_dump(mode="python"),
            "status": invoice_create.status.value,
            "paid_at": None,
            "paid_amount": None,
            "items": [],
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }
        if invoice_create.status == InvoiceStatus.PAID:
            invoice_doc["paid_at"] = now
            invoice_doc["paid_amount"] = invoice_create.total

        result = await self.invoices.insert_one(invoice_doc)
        invoice_doc["_id"] = result.inserted_id

        return self._doc_to_invoice(invoice_doc)

    async def list_invoices(
        self,
        client_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Invoice]:
        """List invoices in insertion order, optionally filtered by client or status."""
        query = {}
        if client_id:
            query["client_id"] = client_id
        if status:
            query["status"] = status

        cursor = self.invoices.find(query).sort("_id", 1)
        invoice_docs = await cursor.to_list(length=None)

        return convert_all(invoice_docs, self._doc_to_invoice, "invoice")

    async def count_by_status(self, status: InvoiceStatus) -> int:
        return await self.invoices.count_documents({"status": status.value})

    async def count_overdue(self, now: datetime) -> int:
        """Invoices marked overdue, or sent and past their due date at ``now``."""
        return await self.invoices.count_documents({
            "$or": [
                {"status": InvoiceStatus.OVERDUE.value},
                {"status": InvoiceStatus.SENT.value, "due_date": {"$lte": now}},
            ],
        })

    async def get_invoice(self, invoice_id: str) -> Invoice:
        """
        Get an invoice by ID.

        Raises:
            NotFoundError: If invoice not found
        """
        invoice_doc = await self.invoices.find_one({"_id": parse_object_id(invoice_id, "invoice")})
        if not invoice_doc:
            raise NotFoundError("Invoice not found")

        return self._doc_to_invoice(invoice_doc)

    async def update_invoice(self, invoice_id: str, invoice_update: InvoiceUpdate) -> Invoice:
        """
        Update an invoice.

        Raises:
            NotFoundError: If invoice not found
            ValueError: If the new client does not exist
        """
        object_id = parse_object_id(invoice_id, "invoice")
        existing = await self.invoices.find_one({"_id": object_id})
        if not existing:
            raise NotFoundError("Invoice not found")

        update_doc = invoice_update.model_dump(exclude_none=True)
        if "client_id" in update_doc:
            await self._ensure_client(update_doc["client_id"])

        issue_date = update_doc.get("issue_date", existing["issue_date"])
        due_date = update_doc.get("due_date", existing.get("due_date"))
        if due_date is not None and due_date < issue_date:
            raise ValueError("Due date cannot be before issue date")

        now = datetime.utcnow()
        if invoice_update.status is not None:
            update_doc["status"] = invoice_update.status.value
            if invoice_update.status == InvoiceStatus.PAID and not existing.get("paid_at"):
                update_doc["paid_at"] = now
                update_doc["paid_amount"] = update_doc.get("total", existing["total"])
            elif invoice_update.status != InvoiceStatus.PAID:
                # Payment data only describes paid invoices
                update_doc["paid_at"] = None
                update_doc["paid_amount"] = None
        update_doc["updated_at"] = now

        updated_doc = await self.invoices.find_one_and_update(
            {"_id": object_id},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_invoice(updated_doc)

    async def mark_paid(self, invoice_id: str, payment: InvoicePayment) -> Invoice:
        """
        Register payment of an invoice.

        ``paid_amount`` defaults to the invoice total and ``paid_at`` to now.

        Raises:
            NotFoundError: If invoice not found
            ValueError: If the invoice was canceled
        """
        object_id = parse_object_id(invoice_id, "invoice")
        existing = await self.invoices.find_one({"_id": object_id})
        if not existing:
            raise NotFoundError("Invoice not found")
        if existing["status"] == InvoiceStatus.CANCELED.value:
            raise ValueError("Cannot pay a canceled invoice")

        now = datetime.utcnow()
        update_doc = {
            "status": InvoiceStatus.PAID.value,
            "paid_at": to_utc_naive(payment.paid_at) or now,
            "paid_amount": payment.paid_amount if payment.paid_amount is not None else existing["total"],
            "updated_at": now,
        }

        updated_doc = await self.invoices.find_one_and_update(
            {"_id": object_id},
            {"$set": update_doc},
            return_document=True,
        )

        logger.info("Invoice %s marked paid", invoice_id)
        return self._doc_to_invoice(updated_doc)

    async def add_item(self, invoice_id: str, item_create: InvoiceItemCreate) -> InvoiceItem:
        """
        Append a line item to an invoice.

        The invoice totals are left as entered; items only itemize them.

        Args:
            invoice_id: Invoice ID
            item_create: Description, quantity and unit price

        Returns:
            The stored item with its computed amount

        Raises:
            NotFoundError: If invoice not found
        """
        item = InvoiceItem(
            id=str(ObjectId()),
            amount=item_create.quantity * item_create.unit_price,
            **item_create.model_dump(),
        )

        result = await self.invoices.update_one(
            {"_id": parse_object_id(invoice_id, "invoice")},
            {
                "$push": {"items": item.model_dump()},
                "$set": {"updated_at": datetime.utcnow()},
            },
        )
        if result.matched_count == 0:
            raise NotFoundError("Invoice not found")

        return item

    async def list_items(self, invoice_id: str) -> list[InvoiceItem]:
        """
        Raises:
            NotFoundError: If invoice not found
        """
        return (await self.get_invoice(invoice_id)).items

    async def delete_invoice(self, invoice_id: str) -> dict:
        """
        Delete an invoice.

        Raises:
            NotFoundError: If invoice not found
        """
        result = await self.invoices.delete_one({"_id": parse_object_id(invoice_id, "invoice")})
        if result.deleted_count == 0:
            raise NotFoundError("Invoice not found")

        logger.info("Deleted invoice %s", invoice_id)
        return {"deleted_count": result.deleted_count}
