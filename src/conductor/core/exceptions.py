"""Domain-specific exceptions.

All exceptions in the conductor system inherit from ConductorError,
making it easy to catch all system errors while still being able
to handle specific error types.
"""

from __future__ import annotations


class ConductorError(Exception):
    """Base exception for all conductor errors."""

    pass


class ValidationError(ConductorError):
    """Caller supplied insufficient identifying information.

    Raised when a user is created with neither an email address nor a
    username. Recoverable - the message is shown to the user.
    """

    pass


class DuplicateError(ConductorError):
    """A user with the same email or username already exists."""

    pass


class MultipleMatchError(ConductorError):
    """More than one stored user matches an email lookup.

    Emails are unique across users, so this indicates corrupted data
    upstream. It is never retried and no match is picked silently.
    """

    pass


class UpdateConflictError(ConductorError):
    """Optimistic-concurrency retry exhausted while saving a document.

    The store reported a conflicting write on the first attempt and again
    after re-fetching the current revision. Callers may re-read the record
    and retry at a higher level.
    """

    pass


class KeyLoadError(ConductorError):
    """Signing key material is missing or cannot be parsed.

    This is FATAL at startup - tokens must not be issued without a
    valid key.
    """

    pass


class TokenInvalidError(ConductorError):
    """A bearer token failed verification.

    Raised for signature mismatches, algorithm mismatches and malformed
    tokens. Always means "unauthenticated"; never retried.
    """

    pass


class DocumentNotFoundError(ConductorError):
    """The requested document does not exist in the store."""

    def __init__(self, doc_id: str) -> None:
        """Initialize DocumentNotFoundError.

        Args:
            doc_id: Identifier of the missing document.
        """
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class DocumentStoreError(ConductorError):
    """The document store failed for a reason other than not-found or conflict.

    Attributes:
        status_code: HTTP status returned by the store, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize DocumentStoreError.

        Args:
            message: Error description.
            status_code: HTTP status returned by the store, if any.
        """
        super().__init__(message)
        self.status_code = status_code


class PermissionDeniedError(ConductorError):
    """The acting user lacks the permission required for an operation."""

    pass
