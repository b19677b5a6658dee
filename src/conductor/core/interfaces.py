"""Protocol definitions for external dependencies.

The user store is written entirely against DocumentStore; adapters in
conductor.adapters.docstore provide the concrete implementations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a document write.

    A conflicting write is reported as a value rather than an exception so
    callers can decide whether to retry.

    Attributes:
        ok: Whether the write was accepted.
        rev: New revision of the stored document when ok.
    """

    ok: bool
    rev: str | None = None

    @property
    def conflict(self) -> bool:
        """True when the store rejected the write as stale."""
        return not self.ok


@runtime_checkable
class DocumentStore(Protocol):
    """Interface for a revisioned document database.

    Documents are JSON objects keyed by "_id" and carrying the store's
    concurrency token in "_rev".
    """

    async def get(self, doc_id: str) -> dict[str, Any]:
        """Fetch a document by ID.

        Raises:
            DocumentNotFoundError: If no document has this ID.
        """
        ...

    async def put(self, doc: dict[str, Any]) -> WriteResult:
        """Write a document.

        The "_rev" field must match the stored revision (or be absent for a
        new document), otherwise the write is rejected with a conflict.
        """
        ...

    async def find_by_field(self, field: str, value: Any) -> list[dict[str, Any]]:
        """Find documents whose field equals value, or contains it if a list."""
        ...
