"""Document store adapters."""

from conductor.adapters.docstore.couchdb import CouchDBConfig, CouchDBDocumentStore
from conductor.adapters.docstore.memory import InMemoryDocumentStore

__all__ = ["CouchDBConfig", "CouchDBDocumentStore", "InMemoryDocumentStore"]
