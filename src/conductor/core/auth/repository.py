"""User record store over a revisioned document database."""

from __future__ import annotations

import structlog

from conductor.core.auth.types import User
from conductor.core.exceptions import (
    DocumentNotFoundError,
    DuplicateError,
    MultipleMatchError,
    UpdateConflictError,
    ValidationError,
)
from conductor.core.interfaces import DocumentStore

logger = structlog.get_logger()

# One write plus one retry with a freshly fetched revision.
MAX_SAVE_ATTEMPTS = 2


class UserRepository:
    """Users stored one document per user, keyed by user ID.

    Email uniqueness is only checked when a user is created, so two
    concurrent creates with the same email can both succeed.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Initialize with the users document store.

        Args:
            store: Document store holding the users database.
        """
        self._store = store

    async def find_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        try:
            doc = await self._store.get(user_id)
        except DocumentNotFoundError:
            return None
        return User.from_document(doc)

    async def find_by_email(self, email: str) -> User | None:
        """Get user by email address, ignoring case.

        Raises:
            MultipleMatchError: If more than one user holds the email.
        """
        docs = await self._store.find_by_field("emails", email.lower())
        if not docs:
            return None
        if len(docs) > 1:
            logger.error("multiple_users_for_email", email=email, matches=len(docs))
            raise MultipleMatchError(f"Multiple conflicting users with email {email}")
        return User.from_document(docs[0])

    async def find_by_email_or_username(self, identifier: str) -> User | None:
        """Get user by email address, falling back to user ID."""
        user = await self.find_by_email(identifier)
        if user is None:
            user = await self.find_by_id(identifier)
        return user

    async def create(self, email: str, username: str) -> tuple[User | None, str]:
        """Create a new, unsaved user.

        The user ID is the username, or the lowercased email when no
        username is given.

        Args:
            email: Email address, may be empty.
            username: Username, may be empty.

        Returns:
            (user, "") on success, (None, error message) otherwise.
        """
        try:
            user = await self._new_user(email, username)
        except (ValidationError, DuplicateError) as e:
            logger.info("user_create_rejected", email=email, username=username, reason=str(e))
            return None, str(e)
        return user, ""

    async def _new_user(self, email: str, username: str) -> User:
        if not email and not username:
            raise ValidationError("at least one of username and email is required")

        if email and await self.find_by_email(email) is not None:
            raise DuplicateError(f"user with email '{email}' already exists")

        user_id = username or email.lower()
        if await self.find_by_id(user_id) is not None:
            if username:
                raise DuplicateError(f"user with username '{username}' already exists")
            raise DuplicateError(f"user with email '{email}' already exists")

        return User(id=user_id, emails={email.lower()} if email else set())

    async def get_or_create(self, email: str) -> User:
        """Get the user holding an email, or a new unsaved one.

        Raises:
            ValidationError: If email is empty.
            DuplicateError: If the email is already another user's ID.
        """
        if not email:
            raise ValidationError("email is required")
        user = await self.find_by_email(email)
        if user is not None:
            return user
        user, error = await self.create(email, "")
        if user is None:
            raise DuplicateError(error)
        return user

    async def save(self, user: User) -> None:
        """Persist a user, retrying once on a concurrent-update conflict.

        On a conflict only user.revision is refreshed from the store; the
        rest of the in-memory record is written as-is.

        Raises:
            UpdateConflictError: If the retry conflicts as well.
        """
        for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
            result = await self._store.put(user.to_document())
            if result.ok:
                user.revision = result.rev
                logger.info("user_saved", user_id=user.id, rev=result.rev, attempt=attempt)
                return

            logger.warning("user_save_conflict", user_id=user.id, attempt=attempt)
            if attempt < MAX_SAVE_ATTEMPTS:
                user.revision = await self._current_revision(user.id)

        raise UpdateConflictError(f"Document update conflict saving user {user.id}")

    async def _current_revision(self, user_id: str) -> str | None:
        try:
            doc = await self._store.get(user_id)
        except DocumentNotFoundError:
            return None
        rev: str | None = doc.get("_rev")
        return rev
