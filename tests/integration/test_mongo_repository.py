import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from bson import ObjectId
from pymongo.errors import PyMongoError

from geomood.adapters.repositories.mongo import (
    DatabaseConfig, MongoDBOperationError, MongoUserRepository,
    get_users_collection, mood_from_document, mood_to_document
)

USER_ID = ObjectId()
CREATED = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)


def user_document(moods=None):
    return {"_id": USER_ID, "email": "alice@example.com", "moods": moods or []}


class TestMongoUserRepository:
    """Test suite for the MongoDB user repository."""

    def setup_method(self):
        self.collection = MagicMock()
        self.repository = MongoUserRepository(self.collection)

    # ========================================================================
    # 1. DOCUMENT MAPPING
    # ========================================================================

    def test_mood_document_round_trip(self, entry_factory):
        entry = entry_factory(CREATED, rating=3.68, text="bien")

        doc = mood_to_document(entry)
        restored = mood_from_document(doc)

        assert isinstance(doc["_id"], ObjectId)
        assert restored.id == str(doc["_id"])
        assert restored.text_content == "bien"
        assert restored.rating == 3.68
        assert restored.created_at == CREATED

    # ========================================================================
    # 2. USERS
    # ========================================================================

    def test_find_by_email(self, entry_factory):
        self.collection.find_one.return_value = user_document([mood_to_document(entry_factory(CREATED))])

        user = self.repository.find_by_email("alice@example.com")

        self.collection.find_one.assert_called_once_with({"email": "alice@example.com"})
        assert user.id == str(USER_ID)
        assert user.mood_timestamps() == [CREATED]

    def test_find_by_email_missing(self):
        self.collection.find_one.return_value = None
        assert self.repository.find_by_email("nobody@example.com") is None

    def test_create_user(self):
        self.collection.insert_one.return_value.inserted_id = USER_ID

        user = self.repository.create_user("bob@example.com")

        inserted = self.collection.insert_one.call_args.args[0]
        assert inserted["email"] == "bob@example.com"
        assert inserted["moods"] == []
        assert user.id == str(USER_ID)

    # ========================================================================
    # 3. MOODS
    # ========================================================================

    def test_append_mood_pushes_document(self, entry_factory):
        entry = entry_factory(CREATED)
        self.collection.find_one_and_update.return_value = user_document([mood_to_document(entry)])

        user = self.repository.append_mood(str(USER_ID), entry)

        query, update = self.collection.find_one_and_update.call_args.args
        assert query == {"_id": USER_ID}
        assert update["$push"]["moods"]["text_content"] == entry.text_content
        assert len(user.moods) == 1

    def test_append_mood_unknown_user(self, entry_factory):
        self.collection.find_one_and_update.return_value = None

        with pytest.raises(MongoDBOperationError):
            self.repository.append_mood(str(USER_ID), entry_factory(CREATED))

    def test_append_mood_write_failure(self, entry_factory):
        self.collection.find_one_and_update.side_effect = PyMongoError("write concern")

        with pytest.raises(MongoDBOperationError):
            self.repository.append_mood(str(USER_ID), entry_factory(CREATED))

    def test_invalid_user_id(self, entry_factory):
        with pytest.raises(MongoDBOperationError):
            self.repository.append_mood("not-an-id", entry_factory(CREATED))

    def test_moods_by_date_range_uses_half_open_range(self, entry_factory):
        start = datetime(2025, 6, 1, tzinfo=timezone.utc)
        end = datetime(2025, 6, 2, tzinfo=timezone.utc)
        self.collection.aggregate.return_value = iter([user_document([mood_to_document(entry_factory(CREATED))])])

        users = self.repository.moods_by_date_range(start, end)

        pipeline = self.collection.aggregate.call_args.args[0]
        assert pipeline[0]["$match"]["moods"]["$elemMatch"]["created_at"] == {"$gte": start, "$lt": end}
        assert len(users) == 1
        assert users[0].moods[0].created_at == CREATED

    def test_update_mood_sets_fields(self):
        mood_id = ObjectId()
        self.collection.find_one_and_update.return_value = user_document()

        self.repository.update_mood(str(USER_ID), str(mood_id), text_content="edited")

        query, update = self.collection.find_one_and_update.call_args.args
        assert query == {"_id": USER_ID, "moods._id": mood_id}
        assert update["$set"]["moods.$.text_content"] == "edited"
        assert "moods.$.rating" not in update["$set"]
        assert "moods.$.updated_at" in update["$set"]

    def test_delete_mood_pulls_entry(self):
        mood_id = ObjectId()
        self.collection.find_one_and_update.return_value = user_document()

        self.repository.delete_mood(str(USER_ID), str(mood_id))

        update = self.collection.find_one_and_update.call_args.args[1]
        assert update == {"$pull": {"moods": {"_id": mood_id}}}


class TestDatabaseConfig:

    def test_requires_uri(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI")
        with pytest.raises(ValueError):
            DatabaseConfig()

    def test_srv_uri_uses_certifi(self):
        config = DatabaseConfig("mongodb+srv://user:pw@cluster.example.net/")
        with patch("geomood.adapters.repositories.mongo.MongoClient") as client_cls:
            config.get_client()
        kwargs = client_cls.call_args.kwargs
        assert "tlsCAFile" in kwargs
        assert kwargs["tz_aware"] is True

    def test_local_uri_skips_tls(self):
        with patch("geomood.adapters.repositories.mongo.MongoClient") as client_cls:
            DatabaseConfig().get_client()
        assert "tlsCAFile" not in client_cls.call_args.kwargs


class TestUsersCollection:

    def test_index_failure_is_wrapped(self):
        database = MagicMock()
        database.__getitem__.return_value.create_index.side_effect = PyMongoError("not primary")

        with patch("geomood.adapters.repositories.mongo.DatabaseConnection") as connection_cls:
            connection_cls.return_value.get_database.return_value = database
            with pytest.raises(MongoDBOperationError, match="Index creation failed"):
                get_users_collection()
