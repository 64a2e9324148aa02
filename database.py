
# Example usage:
# from database import DocumentStore
#
# store = DocumentStore.connect("mongodb://localhost:27017", "collecthub")
# games = store.collection("games")
#
# # Insert, find, update and delete through the pymongo collection API
# result = games.insert_one({"user_id": "u1", "game_name": "Chess"})
# docs = [serialize_document(d) for d in games.find({"user_id": "u1"})]
#
# # Malformed ids never reach the driver
# oid = parse_object_id("not-an-id")  # -> None
#
# store.close()


import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Convert a string id to an ObjectId, or None when it is not a valid id."""
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return a copy of a stored document with ``_id`` exposed as ``id`` (str)."""
    if doc is None:
        return None
    data = dict(doc)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    return data


class DocumentStore:
    """Shared handle to one MongoDB database.

    Built once at application startup and closed at shutdown. Collection
    handles are safe to share between request threads; the driver owns the
    connection pool.
    """

    def __init__(self, client: MongoClient, database_name: str):
        if not database_name:
            raise ValueError("A database name is required")
        self._client = client
        self.db = client[database_name]
        self.name = database_name

    @classmethod
    def connect(cls, database_url: str, database_name: str, **client_options) -> "DocumentStore":
        """Create a store from a connection string and database name."""
        if not database_url:
            raise ValueError("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
        client = MongoClient(database_url, **client_options)
        logger.info("MongoDB client created for database %s", database_name)
        return cls(client, database_name)

    def collection(self, name: str) -> Collection:
        return self.db[name]

    def ping(self) -> float:
        """Round-trip the server and return the elapsed time in milliseconds.

        Raises whatever the driver raises when the server is unreachable.
        """
        started = time.perf_counter()
        self._client.admin.command("ping")
        return (time.perf_counter() - started) * 1000

    def list_collections(self, limit: int = 10) -> List[Dict[str, Any]]:
        """List collection names with their document counts."""
        info = []
        for col_name in sorted(self.db.list_collection_names())[:limit]:
            info.append({
                "name": col_name,
                "count": self.db[col_name].count_documents({}),
            })
        return info

    def close(self) -> None:
        self._client.close()
        logger.info("MongoDB client closed")
