"""Client service - business logic for client management."""
import logging
from datetime import datetime

from bizmanager.exceptions import NotFoundError
from bizmanager.models.client import Client, ClientCreate, ClientUpdate
from bizmanager.utils.documents import convert_all, parse_object_id


logger = logging.getLogger(__name__)


class ClientService:
    """Service for handling client operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.clients = db["clients"]

    @staticmethod
    def _doc_to_client(doc: dict) -> Client:
        return Client(
            _id=str(doc["_id"]),
            name=doc["name"],
            email=doc.get("email"),
            phone=doc.get("phone"),
            address=doc.get("address"),
            city=doc.get("city"),
            country=doc.get("country"),
            contact_person=doc.get("contact_person"),
            notes=doc.get("notes", ""),
            created_by=doc["created_by"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def create_client(self, user_id: str, client_create: ClientCreate) -> Client:
        """Create a new client on behalf of a user."""
        now = datetime.utcnow()
        client_doc = {
            **client_create.model_dump(),
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.clients.insert_one(client_doc)
        client_doc["_id"] = result.inserted_id

        return self._doc_to_client(client_doc)

    async def list_clients(self) -> list[Client]:
        """List every client, unfiltered, in insertion order."""
        cursor = self.clients.find({}).sort("_id", 1)
        client_docs = await cursor.to_list(length=None)
        return convert_all(client_docs, self._doc_to_client, "client")

    async def count_clients(self) -> int:
        return await self.clients.count_documents({})

    async def get_client(self, client_id: str) -> Client:
        """
        Get a client by ID.

        Raises:
            NotFoundError: If client not found
        """
        client_doc = await self.clients.find_one({"_id": parse_object_id(client_id, "client")})
        if not client_doc:
            raise NotFoundError("Client not found")

        return self._doc_to_client(client_doc)

    async def update_client(self, client_id: str, client_update: ClientUpdate) -> Client:
        """
        Update a client with the fields that were provided.

        Raises:
            NotFoundError: If client not found
        """
        object_id = parse_object_id(client_id, "client")

        update_doc = client_update.model_dump(exclude_none=True)
        update_doc["updated_at"] = datetime.utcnow()

        updated_doc = await self.clients.find_one_and_update(
            {"_id": object_id},
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Client not found")

        return self._doc_to_client(updated_doc)

    async def delete_client(self, client_id: str) -> dict:
        """
        Delete a client.

        Raises:
            NotFoundError: If client not found
        """
        result = await self.clients.delete_one({"_id": parse_object_id(client_id, "client")})
        if result.deleted_count == 0:
            raise NotFoundError("Client not found")

        logger.info("Deleted client %s", client_id)
        return {"deleted_count": result.deleted_count}
