"""
MongoDB repository for users and their mood history.

Each user is one document holding an embedded, append-only ``moods`` array.
This module provides:
- Connection management (single shared client)
- User lookup / registration
- Appending moods and querying moods by date range
- Repository-level mood get/update/delete
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import certifi
import pymongo
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import OperationFailure, PyMongoError, ServerSelectionTimeoutError

from geomood.core.models import Location, MoodEntry, UserMoodHistory, WeatherSnapshot

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_DATABASE_NAME = "geomood"
USERS_COLLECTION_NAME = "users"

CONNECTION_TIMEOUT_MS = 10000


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MongoDBConnectionError(Exception):
    """Raised when MongoDB connection fails."""
    pass


class MongoDBOperationError(Exception):
    """Raised when database operations fail."""
    pass


# ============================================================================
# DATABASE CONNECTION
# ============================================================================

class DatabaseConfig:
    """Encapsulates MongoDB connection configuration."""

    def __init__(self, uri: Optional[str] = None, database_name: Optional[str] = None):
        """
        Args:
            uri: MongoDB connection URI (defaults to MONGODB_URI env var)
            database_name: Database name (defaults to MONGODB_DATABASE env var)

        Raises:
            ValueError: If URI not provided and env var not set
        """
        self.uri = uri or os.environ.get("MONGODB_URI")
        if not self.uri:
            raise ValueError("MONGODB_URI environment variable not set")
        self.database_name = database_name or os.environ.get("MONGODB_DATABASE", DEFAULT_DATABASE_NAME)

    def get_client(self) -> MongoClient:
        """
        Creates a MongoDB client returning timezone-aware (UTC) datetimes.

        Raises:
            MongoDBConnectionError: If connection fails.
        """
        options: Dict[str, Any] = {
            "tz_aware": True,
            "serverSelectionTimeoutMS": CONNECTION_TIMEOUT_MS,
            "connectTimeoutMS": CONNECTION_TIMEOUT_MS,
        }
        # certifi CA bundle for Atlas (TLS) clusters only
        if self.uri.startswith("mongodb+srv://") or "tls=true" in self.uri.lower():
            options["tlsCAFile"] = certifi.where()

        try:
            client = MongoClient(self.uri, **options)
            client.admin.command('ping')
            logger.info("[OK] MongoDB connected successfully")
            return client

        except ServerSelectionTimeoutError:
            logger.error("MongoDB connection timeout")
            raise MongoDBConnectionError("Connection timeout") from None
        except OperationFailure as e:
            logger.error(f"MongoDB authentication failed: {e}")
            raise MongoDBConnectionError(f"Authentication failed: {e}") from None
        except Exception as e:
            logger.error(f"MongoDB connection failed: {e}")
            raise MongoDBConnectionError(str(e)) from e


class DatabaseConnection:
    """Singleton connection manager for MongoDB."""

    _instance: Optional['DatabaseConnection'] = None
    _client: Optional[MongoClient] = None
    _database_name: str = DEFAULT_DATABASE_NAME

    def __new__(cls) -> 'DatabaseConnection':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def get_client(self, config: Optional[DatabaseConfig] = None) -> MongoClient:
        """
        Gets or creates the MongoDB client.

        Raises:
            MongoDBConnectionError: If connection fails.
        """
        if self._client is None:
            try:
                config = config or DatabaseConfig()
            except ValueError as e:
                logger.error(str(e))
                raise MongoDBConnectionError(str(e)) from e
            self._client = config.get_client()
            self._database_name = config.database_name

        return self._client

    def get_database(self, config: Optional[DatabaseConfig] = None) -> pymongo.database.Database:
        client = self.get_client(config)
        return client[self._database_name]

    def close(self) -> None:
        """Closes database connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")


# ============================================================================
# DOCUMENT MAPPING
# ============================================================================

def mood_to_document(entry: MoodEntry) -> Dict[str, Any]:
    """Maps a MoodEntry to its embedded document (with a fresh ``_id``)."""
    return {
        "_id": ObjectId(entry.id) if entry.id else ObjectId(),
        "text_content": entry.text_content,
        "user_rating": entry.user_rating,
        "rating": entry.rating,
        "location": entry.location.to_dict(),
        "weather": entry.weather.to_dict(),
        "picture": entry.picture,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


def mood_from_document(doc: Dict[str, Any]) -> MoodEntry:
    location = doc.get("location") or {}
    weather = doc.get("weather") or {}
    return MoodEntry(
        id=str(doc["_id"]) if doc.get("_id") is not None else None,
        text_content=doc.get("text_content", ""),
        user_rating=int(doc.get("user_rating", 0)),
        rating=float(doc.get("rating", 0.0)),
        location=Location(lat=location.get("lat", 0.0), lng=location.get("lng", 0.0)),
        weather=WeatherSnapshot(
            condition=weather.get("condition", "Unknown"),
            temperature=weather.get("temperature", 0.0),
            humidity=weather.get("humidity", 0.0),
            wind_speed=weather.get("wind_speed", 0.0),
            pressure=weather.get("pressure", 0.0),
        ),
        picture=doc.get("picture"),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


def user_from_document(doc: Dict[str, Any]) -> UserMoodHistory:
    return UserMoodHistory(
        id=str(doc["_id"]),
        email=doc.get("email", ""),
        moods=[mood_from_document(m) for m in doc.get("moods", [])],
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


def _object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise MongoDBOperationError(f"Invalid id: {value!r}") from e


# ============================================================================
# USER REPOSITORY
# ============================================================================

class MongoUserRepository:
    """Stores users and their moods in a single collection."""

    def __init__(self, collection: pymongo.collection.Collection):
        self.collection = collection

    def find_by_email(self, email: str) -> Optional[UserMoodHistory]:
        try:
            doc = self.collection.find_one({"email": email})
        except PyMongoError as e:
            logger.error(f"Failed to find user {email}: {e}")
            raise MongoDBOperationError(f"Lookup failed: {e}") from e
        return user_from_document(doc) if doc else None

    def create_user(self, email: str) -> UserMoodHistory:
        now = datetime.now(timezone.utc)
        doc = {"email": email, "name": email, "moods": [], "created_at": now, "updated_at": now}
        try:
            result = self.collection.insert_one(doc)
        except PyMongoError as e:
            logger.error(f"Failed to create user {email}: {e}")
            raise MongoDBOperationError(f"Insert failed: {e}") from e

        logger.info(f"[OK] New user registered: {email}")
        return UserMoodHistory(id=str(result.inserted_id), email=email, moods=[],
                               created_at=now, updated_at=now)

    def append_mood(self, user_id: str, entry: MoodEntry) -> UserMoodHistory:
        """
        Pushes a mood onto the user's history.

        Raises:
            MongoDBOperationError: If the user is gone or the write fails.
        """
        try:
            doc = self.collection.find_one_and_update(
                {"_id": _object_id(user_id)},
                {
                    "$push": {"moods": mood_to_document(entry)},
                    "$set": {"updated_at": datetime.now(timezone.utc)},
                },
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to append mood: {e}")
            raise MongoDBOperationError(f"Save failed: {e}") from e

        if doc is None:
            raise MongoDBOperationError(f"User {user_id} not found")

        logger.info(f"[OK] Mood appended for user {user_id}")
        return user_from_document(doc)

    def moods_by_date_range(self, start: datetime, end: datetime) -> List[UserMoodHistory]:
        """Users with moods created in [start, end), keeping only those moods."""
        in_range = {"$gte": start, "$lt": end}
        pipeline = [
            {"$match": {"moods": {"$elemMatch": {"created_at": in_range}}}},
            {"$addFields": {"moods": {"$filter": {
                "input": "$moods",
                "cond": {"$and": [
                    {"$gte": ["$$this.created_at", start]},
                    {"$lt": ["$$this.created_at", end]},
                ]},
            }}}},
        ]
        try:
            docs = list(self.collection.aggregate(pipeline))
        except PyMongoError as e:
            logger.error(f"Failed to query moods by date range: {e}")
            raise MongoDBOperationError(f"Retrieval failed: {e}") from e

        logger.info(f"[OK] Retrieved moods for {len(docs)} users")
        return [user_from_document(doc) for doc in docs]

    def get_mood(self, user_id: str, mood_id: str) -> Optional[MoodEntry]:
        doc = self.collection.find_one(
            {"_id": _object_id(user_id)},
            {"moods": {"$elemMatch": {"_id": _object_id(mood_id)}}},
        )
        if not doc or not doc.get("moods"):
            return None
        return mood_from_document(doc["moods"][0])

    def update_mood(self, user_id: str, mood_id: str,
                    text_content: Optional[str] = None,
                    rating: Optional[float] = None) -> Optional[UserMoodHistory]:
        """Updates a mood's text and/or rating and bumps ``updated_at``."""
        updates: Dict[str, Any] = {"moods.$.updated_at": datetime.now(timezone.utc)}
        if text_content is not None:
            updates["moods.$.text_content"] = text_content
        if rating is not None:
            updates["moods.$.rating"] = rating

        doc = self.collection.find_one_and_update(
            {"_id": _object_id(user_id), "moods._id": _object_id(mood_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        return user_from_document(doc) if doc else None

    def delete_mood(self, user_id: str, mood_id: str) -> Optional[UserMoodHistory]:
        doc = self.collection.find_one_and_update(
            {"_id": _object_id(user_id)},
            {"$pull": {"moods": {"_id": _object_id(mood_id)}}},
            return_document=ReturnDocument.AFTER,
        )
        return user_from_document(doc) if doc else None

    def delete_user(self, user_id: str) -> bool:
        result = self.collection.delete_one({"_id": _object_id(user_id)})
        return result.deleted_count > 0


# ============================================================================
# PUBLIC API
# ============================================================================

def get_users_collection(config: Optional[DatabaseConfig] = None) -> pymongo.collection.Collection:
    """
    Gets the users collection, creating the email index on first use.

    Raises:
        MongoDBConnectionError: If connection fails.
        MongoDBOperationError: If the index cannot be created.
    """
    db = DatabaseConnection().get_database(config)
    collection = db[USERS_COLLECTION_NAME]
    try:
        collection.create_index("email", unique=True)
    except PyMongoError as e:
        logger.error(f"Failed to create email index: {e}")
        raise MongoDBOperationError(f"Index creation failed: {e}") from e
    return collection


def get_user_repository(config: Optional[DatabaseConfig] = None) -> MongoUserRepository:
    return MongoUserRepository(get_users_collection(config))
