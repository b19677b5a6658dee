"""Dependency wiring and service lifetime management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog

from conductor.adapters.docstore import CouchDBConfig, CouchDBDocumentStore, InMemoryDocumentStore
from conductor.config import MEMORY_STORE_URL, Settings, get_settings
from conductor.core.auth import SigningKey, UserRepository, get_signing_key
from conductor.core.auth.service import AuthService

logger = structlog.get_logger()


@dataclass
class Services:
    """Everything a request handler needs, built once per process."""

    settings: Settings
    store: InMemoryDocumentStore | CouchDBDocumentStore
    users: UserRepository
    signing_key: SigningKey
    auth: AuthService


def build_document_store(settings: Settings) -> InMemoryDocumentStore | CouchDBDocumentStore:
    """Create the users document store named by CONDUCTOR_USER_DB."""
    if settings.user_db_url.startswith(MEMORY_STORE_URL):
        return InMemoryDocumentStore()
    return CouchDBDocumentStore(
        CouchDBConfig(
            url=settings.user_db_url,
            username=settings.couchdb_username,
            password=settings.couchdb_password,
            timeout_seconds=settings.couchdb_timeout_seconds,
        )
    )


@asynccontextmanager
async def conductor_services(settings: Settings | None = None) -> AsyncIterator[Services]:
    """Build the services and release them on exit.

    The signing key is loaded up front; a KeyLoadError aborts startup.
    """
    settings = settings or get_settings()
    store = build_document_store(settings)
    try:
        signing_key = await get_signing_key(settings)
        users = UserRepository(store)
        auth = AuthService(users, signing_key, admin_role=settings.cluster_admin_group_name)
        logger.info(
            "conductor_services_ready",
            user_db=settings.user_db_url,
            instance_name=settings.instance_name,
        )
        yield Services(
            settings=settings,
            store=store,
            users=users,
            signing_key=signing_key,
            auth=auth,
        )
    finally:
        await store.close()
