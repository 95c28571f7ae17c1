"""MongoDB client lifecycle and document helpers."""

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from formation_api.config import settings

logger = logging.getLogger(__name__)

# Catalog fields used by the equality filters and single-field searches
FORMATION_INDEXES = [
    "region",
    "department",
    "establishmentStatus",
    "program",
    "alternanceAvailable",
    "hasDetailedInfo",
]

_client: Optional[AsyncIOMotorClient] = None


async def init_mongo() -> AsyncIOMotorDatabase:
    """
    Connect to MongoDB and make sure the indexes exist.

    The returned database handle is shared by every request; Motor pools
    connections internally.
    """
    global _client

    _client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        tz_aware=True,
    )
    db = _client[settings.MONGODB_DATABASE]

    try:
        await create_indexes(db)
        logger.info(f"Connected to MongoDB database '{settings.MONGODB_DATABASE}'")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise

    return db


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    users = db[settings.MONGODB_USERS_COLLECTION]
    await users.create_index("email", unique=True)
    await users.create_index("userStatus")

    formations = db[settings.MONGODB_FORMATIONS_COLLECTION]
    for field in FORMATION_INDEXES:
        await formations.create_index([(field, ASCENDING)])


async def close_mongo() -> None:
    global _client

    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")


def as_object_id(value: Any) -> Any:
    """Use an ObjectId for 24-hex identifiers, the raw value otherwise."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def stringify_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``doc`` with ``_id`` rendered as a string."""
    doc = dict(doc)
    if "_id" in doc and doc["_id"] is not None:
        doc["_id"] = str(doc["_id"])
    return doc
