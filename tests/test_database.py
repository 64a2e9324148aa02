"""Tests for the document store component and its helpers."""

import mongomock
import pytest
from bson import ObjectId

from database import DocumentStore, parse_object_id, serialize_document


class TestParseObjectId:
    def test_valid_id(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid

    @pytest.mark.parametrize("value", [None, "", "abc", "zzzzzzzzzzzzzzzzzzzzzzzz", "123"])
    def test_malformed_ids_are_none(self, value):
        assert parse_object_id(value) is None


class TestSerializeDocument:
    def test_exposes_id_as_string(self):
        oid = ObjectId()
        doc = {"_id": oid, "user_id": "u1"}

        result = serialize_document(doc)

        assert result == {"id": str(oid), "user_id": "u1"}
        # the stored document is not mutated
        assert "_id" in doc

    def test_none_passes_through(self):
        assert serialize_document(None) is None


class TestDocumentStore:
    def test_requires_database_name(self):
        with pytest.raises(ValueError):
            DocumentStore(mongomock.MongoClient(), "")

    def test_connect_requires_url(self):
        with pytest.raises(ValueError):
            DocumentStore.connect("", "collecthub")

    def test_collection_handles_share_database(self, store):
        store.collection("games").insert_one({"user_id": "u1"})

        assert store.collection("games").count_documents({}) == 1
        assert store.db["games"].count_documents({"user_id": "u1"}) == 1

    def test_list_collections_reports_counts(self, store):
        store.collection("games").insert_many([{"n": 1}, {"n": 2}])
        store.collection("favmusic").insert_one({"n": 1})

        assert store.list_collections() == [
            {"name": "favmusic", "count": 1},
            {"name": "games", "count": 2},
        ]
