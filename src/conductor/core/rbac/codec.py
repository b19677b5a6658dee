"""Conversion between structured roles and CouchDB's flat role strings.

CouchDB's security model only understands a flat list of role names. A role
held within a project is stored as "<project_id>||<role>"; a role without the
separator is a global ("other") role.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

ROLE_SEPARATOR = "||"


def encode_project_role(project_id: str, role: str) -> str:
    """Encode a project-scoped role as a flat role string."""
    return f"{project_id}{ROLE_SEPARATOR}{role}"


def decode_role(flat_role: str) -> tuple[str | None, str]:
    """Split a flat role string into (project_id, role).

    The split happens on the first separator only, so a role name may
    itself contain the separator but a project ID may not. Global roles
    come back with a project_id of None.
    """
    if ROLE_SEPARATOR not in flat_role:
        return None, flat_role
    project_id, role = flat_role.split(ROLE_SEPARATOR, 1)
    return project_id, role


def to_flat_roles(
    project_roles: Mapping[str, Iterable[str]],
    other_roles: Iterable[str],
) -> list[str]:
    """Encode structured roles as a flat role list.

    Args:
        project_roles: Project ID to the roles held in that project.
        other_roles: Roles not scoped to any project.

    Returns:
        Project roles in project then role order, followed by the sorted
        other roles.
    """
    flat = [
        encode_project_role(project_id, role)
        for project_id in sorted(project_roles)
        for role in sorted(set(project_roles[project_id]))
    ]
    flat.extend(sorted(set(other_roles)))
    return flat


def from_flat_roles(flat_roles: Iterable[str]) -> tuple[dict[str, set[str]], set[str]]:
    """Decode a flat role list into (project_roles, other_roles)."""
    project_roles: dict[str, set[str]] = {}
    other_roles: set[str] = set()
    for flat_role in flat_roles:
        project_id, role = decode_role(flat_role)
        if project_id is None:
            other_roles.add(role)
        else:
            project_roles.setdefault(project_id, set()).add(role)
    return project_roles, other_roles
