"""Role and identity mutations on an in-memory user record.

Every function here is idempotent and leaves user.roles regenerated from
the structured roles.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from conductor.core.rbac.codec import to_flat_roles

if TYPE_CHECKING:
    from conductor.core.auth.types import User


def refresh_roles(user: User) -> None:
    """Regenerate the flat role list from project and other roles."""
    user.roles = to_flat_roles(user.project_roles, user.other_roles)


def add_project_role(user: User, project_id: str, role: str) -> None:
    """Grant a role within a project."""
    user.project_roles.setdefault(project_id, set()).add(role)
    refresh_roles(user)


def remove_project_role(user: User, project_id: str, role: str) -> None:
    """Revoke a role within a project.

    Projects left without roles are dropped from project_roles.
    """
    roles = user.project_roles.get(project_id)
    if roles is not None:
        roles.discard(role)
        if not roles:
            del user.project_roles[project_id]
    refresh_roles(user)


def add_other_role(user: User, role: str) -> None:
    """Grant a global role."""
    user.other_roles.add(role)
    refresh_roles(user)


def remove_other_role(user: User, role: str) -> None:
    """Revoke a global role."""
    user.other_roles.discard(role)
    refresh_roles(user)


def add_emails(user: User, emails: Iterable[str]) -> None:
    """Attach email addresses to the user, lowercased."""
    user.emails.update(email.lower() for email in emails if email)


def set_profile(user: User, provider: str, profile: str) -> None:
    """Store an identity provider's serialized profile."""
    user.profiles[provider] = profile
