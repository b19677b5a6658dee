"""Permission evaluation over the structured role model."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from conductor.config import get_settings

if TYPE_CHECKING:
    from conductor.core.auth.types import User

ADMIN_ROLE = "admin"


class ProjectAction(str, Enum):
    """Actions gated per project (notebook)."""

    READ = "read"
    MODIFY = "modify"


def project_roles_for(user: User, project_id: str) -> set[str]:
    """Roles the user holds in a project; empty when the project is absent."""
    return set(user.project_roles.get(project_id, ()))


def user_is_global_admin(user: User | None, admin_role: str | None = None) -> bool:
    """Check whether the user holds the cluster administrator marker.

    Args:
        user: The user to check, or None for an anonymous request.
        admin_role: Marker role name. Defaults to CLUSTER_ADMIN_GROUP_NAME.
    """
    if user is None:
        return False
    marker = admin_role or get_settings().cluster_admin_group_name
    return marker in user.other_roles


def user_has_permission(
    user: User | None,
    project_id: str,
    action: ProjectAction | str,
    admin_role: str | None = None,
) -> bool:
    """Check whether a user may perform an action on a project.

    Read requires any role in the project; modify requires the project's
    admin role. A global administrator may do both everywhere.

    Raises:
        ValueError: If action is not a known ProjectAction.
    """
    action = ProjectAction(action)
    if user is None:
        return False
    if user_is_global_admin(user, admin_role):
        return True

    roles = project_roles_for(user, project_id)
    if action is ProjectAction.READ:
        return bool(roles)
    return ADMIN_ROLE in roles
