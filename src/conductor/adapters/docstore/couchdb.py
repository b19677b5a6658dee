"""CouchDB document store adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from conductor.core.exceptions import DocumentNotFoundError, DocumentStoreError
from conductor.core.interfaces import WriteResult

logger = structlog.get_logger()

# Upper bound on documents returned by a single _find query.
FIND_LIMIT = 1000


@dataclass
class CouchDBConfig:
    """CouchDB database configuration."""

    url: str  # full database URL, e.g. http://localhost:5984/people
    username: str | None = None
    password: str | None = None
    timeout_seconds: int = 30


class CouchDBDocumentStore:
    """Document store backed by one CouchDB database over HTTP."""

    def __init__(self, config: CouchDBConfig, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the store.

        Args:
            config: Database URL and credentials.
            client: HTTP client to use; one is created from config if omitted.
        """
        self.config = config
        if client is None:
            auth = None
            if config.username and config.password:
                auth = httpx.BasicAuth(config.username, config.password)
            client = httpx.AsyncClient(
                base_url=config.url.rstrip("/") + "/",
                auth=auth,
                timeout=config.timeout_seconds,
            )
        self._client = client

    @staticmethod
    def _doc_path(doc_id: str) -> str:
        return quote(doc_id, safe="")

    def _fail(self, action: str, response: httpx.Response) -> DocumentStoreError:
        logger.error(
            "couchdb_request_failed",
            url=self.config.url,
            action=action,
            status_code=response.status_code,
            body=response.text,
        )
        return DocumentStoreError(
            f"CouchDB {action} failed with status {response.status_code}",
            status_code=response.status_code,
        )

    async def get(self, doc_id: str) -> dict[str, Any]:
        """Fetch a document by ID."""
        response = await self._client.get(self._doc_path(doc_id))
        if response.status_code == 404:
            raise DocumentNotFoundError(doc_id)
        if not response.is_success:
            raise self._fail("get", response)
        doc: dict[str, Any] = response.json()
        return doc

    async def put(self, doc: dict[str, Any]) -> WriteResult:
        """Write a document; a 409 response is reported as a conflict."""
        response = await self._client.put(self._doc_path(doc["_id"]), json=doc)
        if response.status_code == 409:
            logger.debug("document_conflict", doc_id=doc["_id"], rev=doc.get("_rev"))
            return WriteResult(ok=False)
        if not response.is_success:
            raise self._fail("put", response)
        return WriteResult(ok=True, rev=response.json()["rev"])

    async def find_by_field(self, field: str, value: Any) -> list[dict[str, Any]]:
        """Run a Mango query matching a scalar field or an array element."""
        selector = {
            "$or": [
                {field: {"$eq": value}},
                {field: {"$elemMatch": {"$eq": value}}},
            ]
        }
        response = await self._client.post(
            "_find",
            json={"selector": selector, "limit": FIND_LIMIT},
        )
        if not response.is_success:
            raise self._fail("find", response)
        docs: list[dict[str, Any]] = response.json()["docs"]
        return docs

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
