"""Tests for the CouchDB document store adapter."""

import json
from collections.abc import Callable

import httpx
import pytest

from conductor.adapters.docstore import CouchDBConfig, CouchDBDocumentStore
from conductor.adapters.docstore.couchdb import FIND_LIMIT
from conductor.core.exceptions import DocumentNotFoundError, DocumentStoreError
from conductor.core.interfaces import DocumentStore

BASE_URL = "http://couch.test/people/"


def make_store(
    handler: Callable[[httpx.Request], httpx.Response],
) -> tuple[CouchDBDocumentStore, list[httpx.Request]]:
    """Create a store whose HTTP requests go to handler.

    Returns:
        The store and the list that collects every request made.
    """
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(record), base_url=BASE_URL)
    return CouchDBDocumentStore(CouchDBConfig(url=BASE_URL), client=client), requests


class TestCouchDBConfig:
    """Test client construction from config."""

    @pytest.mark.asyncio
    async def test_client_from_config(self) -> None:
        """Should build a client rooted at the database URL."""
        store = CouchDBDocumentStore(
            CouchDBConfig(url="http://localhost:5984/people", username="admin", password="pw")
        )
        assert str(store._client.base_url) == "http://localhost:5984/people/"
        assert isinstance(store._client.auth, httpx.BasicAuth)
        await store.close()

    @pytest.mark.asyncio
    async def test_client_without_credentials(self) -> None:
        """Should not send credentials when none are configured."""
        store = CouchDBDocumentStore(CouchDBConfig(url="http://localhost:5984/people"))
        assert store._client.auth is None
        await store.close()

    def test_implements_protocol(self) -> None:
        """Should satisfy the DocumentStore protocol."""
        store, _ = make_store(lambda request: httpx.Response(200))
        assert isinstance(store, DocumentStore)


class TestGet:
    """Test document reads."""

    @pytest.mark.asyncio
    async def test_get(self) -> None:
        """Should return the document JSON."""
        doc = {"_id": "bob", "_rev": "1-a", "name": "Bob"}
        store, requests = make_store(lambda request: httpx.Response(200, json=doc))

        assert await store.get("bob") == doc
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/people/bob"

    @pytest.mark.asyncio
    async def test_get_quotes_id(self) -> None:
        """Document IDs are percent-encoded into one path segment."""
        store, requests = make_store(lambda request: httpx.Response(200, json={}))
        await store.get("a/b")
        assert requests[0].url.raw_path == b"/people/a%2Fb"

    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        """A 404 is reported as DocumentNotFoundError."""
        store, _ = make_store(
            lambda request: httpx.Response(404, json={"error": "not_found", "reason": "missing"})
        )
        with pytest.raises(DocumentNotFoundError):
            await store.get("nobody")

    @pytest.mark.asyncio
    async def test_get_failure(self) -> None:
        """Other errors raise DocumentStoreError with the status."""
        store, _ = make_store(lambda request: httpx.Response(401, json={"error": "unauthorized"}))
        with pytest.raises(DocumentStoreError) as exc_info:
            await store.get("bob")
        assert exc_info.value.status_code == 401


class TestPut:
    """Test document writes."""

    @pytest.mark.asyncio
    async def test_put(self) -> None:
        """Should PUT the document and return the new revision."""
        store, requests = make_store(
            lambda request: httpx.Response(201, json={"ok": True, "id": "bob", "rev": "2-b"})
        )
        doc = {"_id": "bob", "_rev": "1-a", "name": "Bob"}

        result = await store.put(doc)

        assert result.ok is True
        assert result.rev == "2-b"
        assert requests[0].method == "PUT"
        assert requests[0].url.path == "/people/bob"
        assert json.loads(requests[0].content) == doc

    @pytest.mark.asyncio
    async def test_put_conflict(self) -> None:
        """A 409 is reported as a conflict, not an exception."""
        store, _ = make_store(lambda request: httpx.Response(409, json={"error": "conflict"}))
        result = await store.put({"_id": "bob", "_rev": "1-a"})
        assert result.conflict is True
        assert result.rev is None

    @pytest.mark.asyncio
    async def test_put_failure(self) -> None:
        """Other errors raise DocumentStoreError."""
        store, _ = make_store(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(DocumentStoreError) as exc_info:
            await store.put({"_id": "bob"})
        assert exc_info.value.status_code == 500


class TestFindByField:
    """Test Mango queries."""

    @pytest.mark.asyncio
    async def test_find(self) -> None:
        """Should query scalar and array matches and return the docs."""
        docs = [{"_id": "bob", "emails": ["bob@here.com"]}]
        store, requests = make_store(lambda request: httpx.Response(200, json={"docs": docs}))

        assert await store.find_by_field("emails", "bob@here.com") == docs

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/people/_find"
        assert json.loads(request.content) == {
            "selector": {
                "$or": [
                    {"emails": {"$eq": "bob@here.com"}},
                    {"emails": {"$elemMatch": {"$eq": "bob@here.com"}}},
                ]
            },
            "limit": FIND_LIMIT,
        }

    @pytest.mark.asyncio
    async def test_find_failure(self) -> None:
        """Query errors raise DocumentStoreError."""
        store, _ = make_store(lambda request: httpx.Response(400, json={"error": "bad_request"}))
        with pytest.raises(DocumentStoreError):
            await store.find_by_field("emails", "bob@here.com")
