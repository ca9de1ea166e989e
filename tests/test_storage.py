import pytest
from pymongo.errors import DuplicateKeyError, PyMongoError

from myflix_api.errors import Conflict, InternalError
from myflix_api.storage import InMemoryDocumentStore, MongoDocumentStore
from myflix_api.storage.mongo_store import build_group_pipeline


def test_find_one_returns_copies():
    store = InMemoryDocumentStore({"users": [{"Username": "alice1", "FavoriteMovies": []}]})
    found = store.find_one("users", {"Username": "alice1"})
    found["FavoriteMovies"].append("m1")
    assert store.find_one("users", {"Username": "alice1"})["FavoriteMovies"] == []


def test_insert_assigns_id():
    store = InMemoryDocumentStore()
    stored = store.insert_one("movies", {"Title": "Heat"})
    assert stored["_id"] is not None
    assert store.find_one("movies", {"_id": stored["_id"]})["Title"] == "Heat"


def test_dotted_path_queries():
    store = InMemoryDocumentStore({"movies": [{"Title": "Heat", "Genre": {"Name": "Crime"}}]})
    assert store.find("movies", {"Genre.Name": "Crime"})
    assert store.find("movies", {"Genre.Name": "Drama"}) == []
    assert store.find("movies", {"Genre.Name.Missing": "Crime"}) == []


def test_update_operators():
    store = InMemoryDocumentStore({"users": [{"Username": "alice1"}]})
    store.find_one_and_update("users", {"Username": "alice1"}, {"$addToSet": {"FavoriteMovies": "m1"}})
    store.find_one_and_update("users", {"Username": "alice1"}, {"$addToSet": {"FavoriteMovies": "m1"}})
    user = store.find_one_and_update("users", {"Username": "alice1"}, {"$set": {"Email": "a@x.com"}})
    assert user["FavoriteMovies"] == ["m1"]
    assert user["Email"] == "a@x.com"

    user = store.find_one_and_update("users", {"Username": "alice1"}, {"$pull": {"FavoriteMovies": "m1"}})
    assert user["FavoriteMovies"] == []


def test_update_and_delete_miss_return_none():
    store = InMemoryDocumentStore()
    assert store.find_one_and_update("users", {"Username": "ghost"}, {"$set": {"Email": "x"}}) is None
    assert store.find_one_and_delete("users", {"Username": "ghost"}) is None


def test_unsupported_operator():
    store = InMemoryDocumentStore({"users": [{"Username": "alice1"}]})
    with pytest.raises(ValueError):
        store.find_one_and_update("users", {"Username": "alice1"}, {"$inc": {"count": 1}})


def test_group_first_matches_mongo_group_shape():
    store = InMemoryDocumentStore(
        {
            "movies": [
                {"Title": "A", "Genre": {"Name": "Drama", "Description": "first"}},
                {"Title": "B", "Genre": {"Name": "Drama", "Description": "second"}},
                {"Title": "C", "Genre": {"Name": "Crime", "Description": "other"}},
            ]
        }
    )
    summary = store.group_first("movies", "Genre.Name", "Drama", {"name": "Genre.Name", "description": "Genre.Description"}, "movies")
    assert summary["_id"] == "Drama"
    assert summary["description"] == "first"
    assert [movie["Title"] for movie in summary["movies"]] == ["A", "B"]
    assert store.group_first("movies", "Genre.Name", "Western", {}, "movies") is None


def test_build_group_pipeline():
    pipeline = build_group_pipeline("Director.Name", "Michael Mann", {"name": "Director.Name", "bio": "Director.Bio"}, "movies")
    assert pipeline == [
        {"$match": {"Director.Name": "Michael Mann"}},
        {
            "$group": {
                "_id": "$Director.Name",
                "name": {"$first": "$Director.Name"},
                "bio": {"$first": "$Director.Bio"},
                "movies": {"$push": "$$ROOT"},
            }
        },
    ]


class FailingCollection:
    def find_one(self, *args, **kwargs):
        raise PyMongoError("connection refused")


class FakeClient:
    def __getitem__(self, name):
        return {"users": FailingCollection()}


def test_mongo_errors_become_internal_errors():
    store = MongoDocumentStore("mongodb://unused", "myFlixDB", client=FakeClient())
    with pytest.raises(InternalError) as excinfo:
        store.find_one("users", {"Username": "alice1"})
    assert excinfo.value.details == "connection refused"
    assert excinfo.value.status_code == 500


def test_unique_field_rejects_duplicates_on_insert_and_update():
    store = InMemoryDocumentStore()
    store.ensure_unique("users", "Username")
    store.insert_one("users", {"Username": "alice1"})
    store.insert_one("users", {"Username": "bobby1"})

    with pytest.raises(Conflict):
        store.insert_one("users", {"Username": "alice1"})
    with pytest.raises(Conflict):
        store.find_one_and_update("users", {"Username": "bobby1"}, {"$set": {"Username": "alice1"}})

    assert store.find_one("users", {"Username": "bobby1"}) is not None
    updated = store.find_one_and_update("users", {"Username": "alice1"}, {"$set": {"Username": "alice1", "Email": "a@x.com"}})
    assert updated["Email"] == "a@x.com"


class RecordingCollection:
    def __init__(self):
        self.indexes = []

    def create_index(self, field, **kwargs):
        self.indexes.append((field, kwargs))

    def insert_one(self, document):
        raise DuplicateKeyError("E11000 duplicate key error")


class RecordingClient:
    def __init__(self):
        self.users = RecordingCollection()

    def __getitem__(self, name):
        return {"users": self.users}


def test_mongo_unique_index_and_duplicate_key():
    client = RecordingClient()
    store = MongoDocumentStore("mongodb://unused", "myFlixDB", client=client)
    store.ensure_unique("users", "Username")
    assert client.users.indexes == [("Username", {"unique": True})]

    with pytest.raises(Conflict):
        store.insert_one("users", {"Username": "alice1"})
