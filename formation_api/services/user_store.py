"""MongoDB access for user accounts."""

import logging
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from formation_api.core.exceptions import UserAlreadyExistsError
from formation_api.db.mongo import as_object_id
from formation_api.models.user import User, UserStatus

logger = logging.getLogger(__name__)


class UserStore:
    """Reads and writes ``User`` documents in the ``users`` collection."""

    def __init__(self, collection):
        self.collection = collection

    async def find_by_email(self, email: str) -> Optional[User]:
        doc = await self.collection.find_one({"email": email})
        return User.from_document(doc) if doc else None

    async def find_by_id(self, user_id: str) -> Optional[User]:
        doc = await self.collection.find_one({"_id": as_object_id(user_id)})
        return User.from_document(doc) if doc else None

    async def exists_by_email(self, email: str) -> bool:
        return await self.collection.count_documents({"email": email}, limit=1) > 0

    async def find_all_by_status(self, status: UserStatus) -> List[User]:
        cursor = self.collection.find({"userStatus": status.value})
        return [User.from_document(doc) async for doc in cursor]

    async def insert(self, user: User) -> User:
        """
        Insert a new user and return it with its generated id.

        Raises:
            UserAlreadyExistsError: the unique e-mail index rejected the insert
        """
        try:
            result = await self.collection.insert_one(user.to_document())
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate user e-mail rejected by index: {user.email}")
            raise UserAlreadyExistsError("You already have an account") from e
        return user.model_copy(update={"id": str(result.inserted_id)})

    async def save(self, user: User) -> User:
        """Overwrite the whole stored document (last writer wins)."""
        if user.id is None:
            return await self.insert(user)
        doc = user.to_document()
        doc["_id"] = as_object_id(user.id)
        await self.collection.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        return user
