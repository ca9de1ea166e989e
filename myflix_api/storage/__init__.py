from myflix_api.storage.base import DocumentStore
from myflix_api.storage.memory_store import InMemoryDocumentStore
from myflix_api.storage.mongo_store import MongoDocumentStore

__all__ = ["DocumentStore", "InMemoryDocumentStore", "MongoDocumentStore"]
