"""In-memory document store for testing and local development."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

import structlog

from conductor.core.exceptions import DocumentNotFoundError
from conductor.core.interfaces import WriteResult

logger = structlog.get_logger()


def _next_revision(rev: str | None) -> str:
    """CouchDB-style revision: "<generation>-<random hex>"."""
    generation = int(rev.split("-", 1)[0]) + 1 if rev else 1
    return f"{generation}-{uuid4().hex}"


class InMemoryDocumentStore:
    """Revisioned document store held in a dict.

    Behaves like a single CouchDB database: writes must carry the current
    revision and documents are copied on the way in and out, so callers
    never share state with the store.

    Attributes:
        write_count: Number of accepted writes.
    """

    def __init__(self, docs: Iterable[dict[str, Any]] | None = None) -> None:
        """Initialize the store.

        Args:
            docs: Documents to seed the store with; any "_rev" is replaced.
        """
        self._docs: dict[str, dict[str, Any]] = {}
        self.write_count = 0
        for doc in docs or ():
            seeded = copy.deepcopy(doc)
            seeded["_rev"] = _next_revision(None)
            self._docs[seeded["_id"]] = seeded

    async def get(self, doc_id: str) -> dict[str, Any]:
        """Fetch a copy of a document."""
        doc = self._docs.get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        return copy.deepcopy(doc)

    async def put(self, doc: dict[str, Any]) -> WriteResult:
        """Write a document if its revision matches the stored one."""
        doc_id = doc["_id"]
        current = self._docs.get(doc_id)
        current_rev = current["_rev"] if current is not None else None

        if doc.get("_rev") != current_rev:
            logger.debug(
                "document_conflict",
                doc_id=doc_id,
                expected_rev=current_rev,
                got_rev=doc.get("_rev"),
            )
            return WriteResult(ok=False)

        rev = _next_revision(current_rev)
        stored = copy.deepcopy(doc)
        stored["_rev"] = rev
        self._docs[doc_id] = stored
        self.write_count += 1
        return WriteResult(ok=True, rev=rev)

    async def find_by_field(self, field: str, value: Any) -> list[dict[str, Any]]:
        """Find documents whose field equals value or, for lists, contains it."""
        matches = []
        for doc in self._docs.values():
            stored = doc.get(field)
            if stored == value or (isinstance(stored, list) and value in stored):
                matches.append(copy.deepcopy(doc))
        return matches

    async def close(self) -> None:
        """No-op for the in-memory store."""
        pass
