import logging

from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from myflix_api.errors import Conflict, InternalError
from myflix_api.storage.base import DocumentStore

logger = logging.getLogger(__name__)


def build_group_pipeline(key: str, value, fields: dict[str, str], push_as: str):
    """
    Create an aggregation pipeline that folds matches into one summary.

    Args:
        key (str): Dotted path to match and group on.
        value: Group key to look for.
        fields (dict[str, str]): Summary field mapped to the dotted path taken from the first match.
        push_as (str): Summary field collecting the matching documents.

    Returns:
        list[dict]: Pipeline definition for MongoDB.
    """
    group_stage = {"_id": f"${key}"}
    for name, path in fields.items():
        group_stage[name] = {"$first": f"${path}"}
    group_stage[push_as] = {"$push": "$$ROOT"}
    return [
        {"$match": {key: value}},
        {"$group": group_stage},
    ]


class MongoDocumentStore(DocumentStore):
    """DocumentStore backed by a MongoDB database through pymongo."""

    def __init__(self, uri: str, database: str, client: MongoClient | None = None):
        self.client = client if client is not None else MongoClient(uri)
        self.db = self.client[database]

    def _run(self, operation: str, collection: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DuplicateKeyError as exc:
            logger.info("%s on %s hit a unique index: %s", operation, collection, exc)
            raise Conflict() from exc
        except PyMongoError as exc:
            logger.exception("%s on %s failed", operation, collection)
            raise InternalError(details=str(exc)) from exc

    def ensure_unique(self, collection: str, field: str):
        self._run("create_index", collection, self.db[collection].create_index, field, unique=True)

    def find_one(self, collection: str, query: dict):
        return self._run("find_one", collection, self.db[collection].find_one, query)

    def find(self, collection: str, query: dict | None = None):
        return self._run("find", collection, lambda: list(self.db[collection].find(query or {})))

    def group_first(self, collection: str, key: str, value, fields: dict[str, str], push_as: str):
        pipeline = build_group_pipeline(key, value, fields, push_as)
        results = self._run("aggregate", collection, lambda: list(self.db[collection].aggregate(pipeline)))
        return results[0] if results else None

    def insert_one(self, collection: str, document: dict):
        stored = dict(document)
        result = self._run("insert_one", collection, self.db[collection].insert_one, stored)
        stored["_id"] = result.inserted_id
        return stored

    def find_one_and_update(self, collection: str, query: dict, update: dict):
        return self._run(
            "find_one_and_update",
            collection,
            self.db[collection].find_one_and_update,
            query,
            update,
            return_document=ReturnDocument.AFTER,
        )

    def find_one_and_delete(self, collection: str, query: dict):
        return self._run("find_one_and_delete", collection, self.db[collection].find_one_and_delete, query)
