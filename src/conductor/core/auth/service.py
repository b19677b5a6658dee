"""Auth service for local login, provider login, role management and tokens."""

from collections.abc import Iterable

import structlog

from conductor.core.auth.jwt import create_token, create_token_for
from conductor.core.auth.password import LOCAL_PROFILE, hash_password, verify_password
from conductor.core.auth.repository import UserRepository
from conductor.core.auth.types import SigningKey, User
from conductor.core.exceptions import ConductorError, PermissionDeniedError, ValidationError
from conductor.core.rbac import (
    ADMIN_ROLE,
    ProjectAction,
    add_emails,
    add_project_role,
    remove_project_role,
    set_profile,
    user_has_permission,
)

logger = structlog.get_logger()

# Every notebook accepts these roles in addition to its declared accesses.
DEFAULT_NOTEBOOK_ROLES = (ADMIN_ROLE, "user")


class AuthError(ConductorError):
    """Raised when authentication or registration fails."""

    pass


def notebook_roles(accesses: Iterable[str] | None) -> list[str]:
    """Roles that may be granted on a notebook.

    Args:
        accesses: Roles declared in the notebook metadata.

    Returns:
        The declared roles followed by any missing default roles.
    """
    roles = list(accesses or [])
    for role in DEFAULT_NOTEBOOK_ROLES:
        if role not in roles:
            roles.append(role)
    return roles


def add_local_password(user: User, password: str) -> None:
    """Store a bcrypt hash of password as the user's local profile."""
    set_profile(user, LOCAL_PROFILE, hash_password(password))


class AuthService:
    """Service for authentication and role management operations."""

    def __init__(
        self,
        users: UserRepository,
        signing_key: SigningKey,
        admin_role: str | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            users: User record store.
            signing_key: Key used to issue bearer tokens.
            admin_role: Global administrator marker; defaults to the
                configured CLUSTER_ADMIN_GROUP_NAME.
        """
        self._users = users
        self._signing_key = signing_key
        self._admin_role = admin_role

    async def register_local_user(
        self,
        username: str,
        email: str,
        name: str,
        password: str,
    ) -> User:
        """Create and save a user that logs in with a local password.

        Raises:
            AuthError: If the identity is missing or already taken.
        """
        user, error = await self._users.create(email, username)
        if user is None:
            raise AuthError(error)

        user.name = name
        add_local_password(user, password)
        await self._users.save(user)
        logger.info("local_user_registered", user_id=user.id)
        return user

    async def validate_local_user(self, identifier: str, password: str) -> User | None:
        """Check a local login.

        Args:
            identifier: Email address or username.
            password: Plain text password.

        Returns:
            The user when the password matches, otherwise None.
        """
        user = await self._users.find_by_email_or_username(identifier)
        if user is None:
            logger.info("local_login_unknown_user", identifier=identifier)
            return None

        stored_hash = user.profiles.get(LOCAL_PROFILE)
        if not stored_hash or not verify_password(password, stored_hash):
            logger.info("local_login_failed", user_id=user.id)
            return None
        return user

    async def login_with_provider(
        self,
        provider: str,
        email: str,
        name: str,
        profile: str,
    ) -> User:
        """Record a successful identity provider login.

        Finds the user by email (creating one if needed), merges the email
        and the provider's profile, and fills in the display name if the
        user has none.

        Raises:
            ValidationError: If the provider supplied no email.
        """
        user = await self._users.get_or_create(email)
        add_emails(user, [email])
        set_profile(user, provider, profile)
        if not user.name and name:
            user.name = name
        await self._users.save(user)
        logger.info("provider_login", provider=provider, user_id=user.id)
        return user

    async def get_user_token(self, user_id: str) -> str:
        """Issue a bearer token for a stored user.

        Unknown users receive a token without roles.
        """
        user = await self._users.find_by_id(user_id)
        if user is None:
            logger.info("token_for_unknown_user", user_id=user_id)
            return await create_token_for(user_id, [], self._signing_key)
        return await create_token(user, self._signing_key)

    async def update_project_role(
        self,
        actor: User | None,
        project_id: str,
        identifier: str,
        role: str,
        add: bool,
        accesses: Iterable[str] | None = None,
    ) -> User:
        """Grant or revoke a notebook role for another user.

        Args:
            actor: User making the change; needs modify permission.
            project_id: Notebook the role applies to.
            identifier: Email address or username of the target user.
            role: Role to grant or revoke.
            add: True to grant, False to revoke.
            accesses: Roles declared by the notebook.

        Returns:
            The saved target user.

        Raises:
            PermissionDeniedError: If actor may not modify the notebook.
            ValidationError: If the role is not valid for the notebook.
            AuthError: If the target user does not exist.
        """
        if not user_has_permission(actor, project_id, ProjectAction.MODIFY, self._admin_role):
            raise PermissionDeniedError(
                "you do not have permission to modify users for this notebook"
            )

        if role not in notebook_roles(accesses):
            raise ValidationError(f"Unknown role {role}")

        user = await self._users.find_by_email_or_username(identifier)
        if user is None:
            raise AuthError(f"Unknown user {identifier}")

        if add:
            add_project_role(user, project_id, role)
        else:
            remove_project_role(user, project_id, role)
        await self._users.save(user)

        logger.info(
            "project_role_updated",
            actor=actor.id if actor else None,
            user_id=user.id,
            project_id=project_id,
            role=role,
            added=add,
        )
        return user
