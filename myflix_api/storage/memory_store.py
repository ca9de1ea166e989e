import copy
import threading

from bson import ObjectId

from myflix_api.errors import Conflict
from myflix_api.storage.base import DocumentStore

_MISSING = object()


def get_path(document: dict, path: str, default=_MISSING):
    """
    Read a dotted path such as ``Genre.Name`` from a nested document.

    Args:
        document (dict): Source document.
        path (str): Dotted path.
        default: Value returned when a segment is missing.

    Returns:
        Any: Value at the path or ``default``.
    """
    current = document
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def matches(document: dict, query: dict | None):
    if not query:
        return True
    return all(get_path(document, path) == expected for path, expected in query.items())


def apply_update(document: dict, update: dict):
    """
    Apply ``$set``, ``$addToSet`` and ``$pull`` operators in place.

    Args:
        document (dict): Document to mutate.
        update (dict): Update specification.

    Raises:
        ValueError: When an unsupported operator is used.
    """
    for operator, changes in update.items():
        if operator == "$set":
            for field, value in changes.items():
                document[field] = copy.deepcopy(value)
        elif operator == "$addToSet":
            for field, value in changes.items():
                values = document.setdefault(field, [])
                if value not in values:
                    values.append(value)
        elif operator == "$pull":
            for field, value in changes.items():
                document[field] = [item for item in document.get(field, []) if item != value]
        else:
            raise ValueError(f"Unsupported update operator: {operator}")


class InMemoryDocumentStore(DocumentStore):
    """
    DocumentStore kept in process memory.

    Documents are copied on the way in and out so callers never share
    state with the store. A single lock makes each call atomic.
    """

    def __init__(self, collections: dict[str, list[dict]] | None = None):
        self._lock = threading.Lock()
        self._collections: dict[str, list[dict]] = {}
        self._unique: dict[str, set[str]] = {}
        for name, documents in (collections or {}).items():
            for document in documents:
                self.insert_one(name, document)

    def _documents(self, collection: str):
        return self._collections.setdefault(collection, [])

    def _check_unique(self, collection: str, candidate: dict, skip=None):
        for field in self._unique.get(collection, ()):
            if field not in candidate:
                continue
            for other in self._documents(collection):
                if other is not skip and other.get(field) == candidate[field]:
                    raise Conflict(f"Duplicate value for {field}")

    def ensure_unique(self, collection: str, field: str):
        with self._lock:
            self._unique.setdefault(collection, set()).add(field)

    def find_one(self, collection: str, query: dict):
        with self._lock:
            for document in self._documents(collection):
                if matches(document, query):
                    return copy.deepcopy(document)
        return None

    def find(self, collection: str, query: dict | None = None):
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._documents(collection) if matches(doc, query)]

    def group_first(self, collection: str, key: str, value, fields: dict[str, str], push_as: str):
        with self._lock:
            grouped = [copy.deepcopy(doc) for doc in self._documents(collection) if get_path(doc, key) == value]
        if not grouped:
            return None

        first = grouped[0]
        summary = {"_id": value}
        for name, path in fields.items():
            summary[name] = get_path(first, path, None)
        summary[push_as] = grouped
        return summary

    def insert_one(self, collection: str, document: dict):
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        with self._lock:
            self._check_unique(collection, stored)
            self._documents(collection).append(stored)
        return copy.deepcopy(stored)

    def find_one_and_update(self, collection: str, query: dict, update: dict):
        with self._lock:
            documents = self._documents(collection)
            for index, document in enumerate(documents):
                if matches(document, query):
                    updated = copy.deepcopy(document)
                    apply_update(updated, update)
                    self._check_unique(collection, updated, skip=document)
                    documents[index] = updated
                    return copy.deepcopy(updated)
        return None

    def find_one_and_delete(self, collection: str, query: dict):
        with self._lock:
            documents = self._documents(collection)
            for index, document in enumerate(documents):
                if matches(document, query):
                    return documents.pop(index)
        return None
