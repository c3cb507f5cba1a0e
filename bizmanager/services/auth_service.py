"""Authentication service - business logic for user auth."""
import logging
from datetime import datetime

from pymongo.errors import DuplicateKeyError

from bizmanager.exceptions import NotFoundError
from bizmanager.models.user import User
from bizmanager.utils.auth import create_access_token, hash_password, verify_password
from bizmanager.utils.documents import parse_object_id


logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling user authentication."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    @staticmethod
    def _doc_to_user(doc: dict) -> User:
        return User(
            _id=str(doc["_id"]),
            email=doc["email"],
            name=doc["name"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def register_user(self, email: str, password: str, name: str) -> User:
        """
        Register a new user.

        Args:
            email: User email address
            password: Plain text password
            name: User's name

        Returns:
            User object (without password)

        Raises:
            ValueError: If email is already registered
        """
        existing = await self.users.find_one({"email": email})
        if existing:
            raise ValueError("Email already registered")

        now = datetime.utcnow()
        user_doc = {
            "email": email,
            "hashed_password": hash_password(password),
            "name": name,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.users.insert_one(user_doc)
        except DuplicateKeyError:
            raise ValueError("Email already registered")

        user_doc["_id"] = result.inserted_id
        logger.info("Registered user %s", user_doc["_id"])
        return self._doc_to_user(user_doc)

    async def login(self, email: str, password: str) -> str:
        """
        Check credentials and issue an access token.

        Args:
            email: User email address
            password: Plain text password

        Returns:
            JWT access token

        Raises:
            ValueError: If credentials are invalid
        """
        user_doc = await self.users.find_one({"email": email})
        if not user_doc or not verify_password(password, user_doc["hashed_password"]):
            logger.info("Rejected login for %s", email)
            raise ValueError("Invalid email or password")

        return create_access_token(user_id=str(user_doc["_id"]))

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Args:
            user_id: User ID from the access token

        Returns:
            User object (without password)

        Raises:
            NotFoundError: If user not found
        """
        object_id = parse_object_id(user_id, "user")
        user_doc = await self.users.find_one({"_id": object_id})
        if not user_doc:
            raise NotFoundError("User not found")

        return self._doc_to_user(user_doc)
