"""
Resource services

``OwnedResourceService`` implements the create / list-by-owner / get / update /
delete pattern shared by every favorite collection. A ``ResourceDefinition``
tells it which collection to use and which Pydantic models describe the
payloads and stored records. ``UserService`` covers the users collection.

Absence is always a return value (``None`` / ``False``); only driver errors
propagate as exceptions.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type

from pymongo import ReturnDocument
from pymongo.collection import Collection

import schemas
from database import DocumentStore, parse_object_id, serialize_document, utcnow
from security import hash_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceDefinition:
    """Static description of one owned resource type."""

    name: str
    label: str
    collection: str
    create_model: Type[schemas.OwnedCreate]
    update_model: Type[schemas.OwnedUpdate]
    record_model: Type[schemas.OwnedRecord]
    timestamps: bool = True

    @property
    def prefix(self) -> str:
        return f"/api/{self.name}"


FAV_MUSIC = ResourceDefinition(
    name="favmusic",
    label="Favorite music",
    collection="favmusic",
    create_model=schemas.FavMusicCreate,
    update_model=schemas.FavMusicUpdate,
    record_model=schemas.FavMusic,
)

FAV_VEHICLE = ResourceDefinition(
    name="favvehicle",
    label="Vehicle",
    collection="favvehicle",
    create_model=schemas.FavVehicleCreate,
    update_model=schemas.FavVehicleUpdate,
    record_model=schemas.FavVehicle,
)

GAMES = ResourceDefinition(
    name="games",
    label="Game",
    collection="games",
    create_model=schemas.GameCreate,
    update_model=schemas.GameUpdate,
    record_model=schemas.Game,
)

MOBILE_APPS = ResourceDefinition(
    name="mobileapps",
    label="Mobile app",
    collection="mobileapps",
    create_model=schemas.MobileAppCreate,
    update_model=schemas.MobileAppUpdate,
    record_model=schemas.MobileApp,
)

YOUTUBE_CHANNELS = ResourceDefinition(
    name="youtubechannels",
    label="YouTube channel",
    collection="youtubechannels",
    create_model=schemas.YouTubeChannelCreate,
    update_model=schemas.YouTubeChannelUpdate,
    record_model=schemas.YouTubeChannel,
)

FAV_PROGRAMMING_LANGUAGES = ResourceDefinition(
    name="favprogramminglanguages",
    label="Favorite programming language",
    collection="favprogramminglanguages",
    create_model=schemas.FavProgrammingLanguageCreate,
    update_model=schemas.FavProgrammingLanguageUpdate,
    record_model=schemas.FavProgrammingLanguage,
)

RESOURCES = (
    FAV_MUSIC,
    FAV_VEHICLE,
    GAMES,
    MOBILE_APPS,
    YOUTUBE_CHANNELS,
    FAV_PROGRAMMING_LANGUAGES,
)


class OwnedResourceService:
    """CRUD over one collection whose documents carry a ``user_id`` owner."""

    def __init__(self, store: DocumentStore, definition: ResourceDefinition,
                 clock: Callable = utcnow):
        self.definition = definition
        self.collection: Collection = store.collection(definition.collection)
        self._clock = clock

    def _to_record(self, doc: Optional[Dict]) -> Optional[schemas.OwnedRecord]:
        if doc is None:
            return None
        return self.definition.record_model.model_validate(serialize_document(doc))

    @staticmethod
    def _owner_filter(oid, owner_id: str) -> Dict:
        return {"_id": oid, "user_id": owner_id}

    def create(self, payload: schemas.OwnedCreate) -> schemas.OwnedRecord:
        """Insert a new record and return it with its generated id."""
        data = payload.model_dump()
        if self.definition.timestamps:
            now = self._clock()
            data["created_at"] = now
            data["updated_at"] = now

        result = self.collection.insert_one(data)
        logger.info("Created %s %s for user %s", self.definition.name, result.inserted_id, data["user_id"])
        return self._to_record(self.collection.find_one({"_id": result.inserted_id}))

    def list_by_owner(self, owner_id: str) -> List[schemas.OwnedRecord]:
        return [self._to_record(doc) for doc in self.collection.find({"user_id": owner_id})]

    def get_by_id(self, record_id: str) -> Optional[schemas.OwnedRecord]:
        oid = parse_object_id(record_id)
        if oid is None:
            return None
        return self._to_record(self.collection.find_one({"_id": oid}))

    def update(self, record_id: str, owner_id: str,
               patch: schemas.OwnedUpdate) -> Optional[schemas.OwnedRecord]:
        """Apply the non-empty fields of ``patch`` to a record owned by ``owner_id``.

        Returns the record as it is after the update, or None when no document
        matches both the id and the owner.
        """
        oid = parse_object_id(record_id)
        if oid is None:
            return None

        changes = patch.model_dump(exclude_none=True)
        if self.definition.timestamps:
            changes["updated_at"] = self._clock()
        if not changes:
            # nothing to set; still report the current state for the owner
            return self._to_record(self.collection.find_one(self._owner_filter(oid, owner_id)))

        doc = self.collection.find_one_and_update(
            self._owner_filter(oid, owner_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_record(doc)

    def delete(self, record_id: str, owner_id: str) -> bool:
        oid = parse_object_id(record_id)
        if oid is None:
            return False
        result = self.collection.delete_one(self._owner_filter(oid, owner_id))
        if result.deleted_count:
            logger.info("Deleted %s %s for user %s", self.definition.name, record_id, owner_id)
        return result.deleted_count > 0

    def exists(self, record_id: str) -> bool:
        oid = parse_object_id(record_id)
        if oid is None:
            return False
        return self.collection.count_documents({"_id": oid}, limit=1) > 0

    def exists_for_owner(self, record_id: str, owner_id: str) -> bool:
        oid = parse_object_id(record_id)
        if oid is None:
            return False
        return self.collection.count_documents(self._owner_filter(oid, owner_id), limit=1) > 0


class UserService:
    """Signup, lookup and removal of users. Passwords are stored hashed."""

    collection_name = "users"

    def __init__(self, store: DocumentStore, clock: Callable = utcnow):
        self.collection: Collection = store.collection(self.collection_name)
        self._clock = clock

    @staticmethod
    def _to_user(doc: Optional[Dict]) -> Optional[schemas.UserRead]:
        if doc is None:
            return None
        return schemas.UserRead.model_validate(serialize_document(doc))

    def create(self, payload: schemas.UserCreate) -> schemas.UserRead:
        doc = {
            "name": payload.name,
            "email": payload.email,
            "password_hash": hash_password(payload.password),
            "created_at": self._clock(),
        }
        result = self.collection.insert_one(doc)
        logger.info("Created user %s", result.inserted_id)
        return self._to_user(self.collection.find_one({"_id": result.inserted_id}, {"password_hash": 0}))

    def list_all(self) -> List[schemas.UserRead]:
        return [self._to_user(doc) for doc in self.collection.find({}, {"password_hash": 0})]

    def get_by_id(self, user_id: str) -> Optional[schemas.UserRead]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return self._to_user(self.collection.find_one({"_id": oid}, {"password_hash": 0}))

    def delete(self, user_id: str) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        result = self.collection.delete_one({"_id": oid})
        if result.deleted_count:
            logger.info("Deleted user %s", user_id)
        return result.deleted_count > 0

    def exists_by_email(self, email: str) -> bool:
        return self.collection.count_documents({"email": email.lower()}, limit=1) > 0

