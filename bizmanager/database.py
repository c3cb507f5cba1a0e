"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from bizmanager.config import settings


logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        self.db = self.client[settings.mongodb_db_name]
        await ensure_indexes(self.db)
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create required MongoDB indexes (idempotent)."""
    await db["users"].create_index([("email", ASCENDING)], unique=True, name="uniq_email")

    time_entries = db["time_entries"]
    # At most one running entry per user
    await time_entries.create_index(
        [("user_id", ASCENDING)],
        unique=True,
        partialFilterExpression={"running": True},
        name="uniq_running_entry_per_user",
    )
    await time_entries.create_index(
        [("user_id", ASCENDING), ("start_time", DESCENDING)],
        name="idx_user_start_time",
    )

    await db["projects"].create_index([("client_id", ASCENDING)], name="idx_project_client")
    await db["tasks"].create_index([("project_id", ASCENDING)], name="idx_task_project")
    await db["tasks"].create_index(
        [("assigned_to", ASCENDING), ("status", ASCENDING)],
        name="idx_task_assignee_status",
    )
    await db["invoices"].create_index([("client_id", ASCENDING)], name="idx_invoice_client")
    await db["invoices"].create_index([("status", ASCENDING)], name="idx_invoice_status")
