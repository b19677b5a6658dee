"""Role-based access control: role encoding, permission checks and mutations."""

from conductor.core.rbac.codec import (
    ROLE_SEPARATOR,
    decode_role,
    encode_project_role,
    from_flat_roles,
    to_flat_roles,
)
from conductor.core.rbac.mutations import (
    add_emails,
    add_other_role,
    add_project_role,
    refresh_roles,
    remove_other_role,
    remove_project_role,
    set_profile,
)
from conductor.core.rbac.permissions import (
    ADMIN_ROLE,
    ProjectAction,
    project_roles_for,
    user_has_permission,
    user_is_global_admin,
)

__all__ = [
    "ROLE_SEPARATOR",
    "encode_project_role",
    "decode_role",
    "to_flat_roles",
    "from_flat_roles",
    "ADMIN_ROLE",
    "ProjectAction",
    "project_roles_for",
    "user_has_permission",
    "user_is_global_admin",
    "refresh_roles",
    "add_project_role",
    "remove_project_role",
    "add_other_role",
    "remove_other_role",
    "add_emails",
    "set_profile",
]
