"""Auth domain types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from conductor.core.rbac.codec import from_flat_roles, to_flat_roles


class User(BaseModel):
    """User domain model.

    project_roles and other_roles are the source of truth; roles is the
    flat form CouchDB understands and is regenerated from them.
    """

    id: str
    name: str = ""
    emails: set[str] = Field(default_factory=set)
    project_roles: dict[str, set[str]] = Field(default_factory=dict)
    other_roles: set[str] = Field(default_factory=set)
    profiles: dict[str, str] = Field(default_factory=dict)  # provider -> serialized profile
    revision: str | None = None
    roles: list[str] = Field(default_factory=list)

    @field_validator("emails")
    @classmethod
    def _lowercase_emails(cls, emails: set[str]) -> set[str]:
        return {email.lower() for email in emails}

    @model_validator(mode="after")
    def _derive_roles(self) -> User:
        self.roles = to_flat_roles(self.project_roles, self.other_roles)
        return self

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> User:
        """Build a user from a users-database document.

        Documents written before structured roles existed only carry the
        flat roles list; those are decoded to recover the structure.
        """
        project_roles = doc.get("project_roles")
        other_roles = doc.get("other_roles")
        if project_roles is None and other_roles is None:
            project_roles, other_roles = from_flat_roles(doc.get("roles") or [])

        profiles = {
            provider: profile if isinstance(profile, str) else json.dumps(profile)
            for provider, profile in (doc.get("profiles") or {}).items()
        }

        return cls(
            id=doc["_id"],
            name=doc.get("name") or "",
            emails={email.lower() for email in doc.get("emails") or []},
            project_roles=project_roles or {},
            other_roles=other_roles or set(),
            profiles=profiles,
            revision=doc.get("_rev"),
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a users-database document."""
        doc: dict[str, Any] = {
            "_id": self.id,
            "user_id": self.id,
            "name": self.name,
            "emails": sorted(self.emails),
            "roles": list(self.roles),
            "project_roles": {
                project_id: sorted(roles) for project_id, roles in self.project_roles.items()
            },
            "other_roles": sorted(self.other_roles),
            "profiles": dict(self.profiles),
        }
        if self.revision is not None:
            doc["_rev"] = self.revision
        return doc


@dataclass(frozen=True)
class KeyConfig:
    """Where to find the token signing key and how to use it."""

    signing_algorithm: str
    instance_name: str
    key_id: str
    private_key_file: str
    public_key_file: str


@dataclass(frozen=True)
class SigningKey:
    """Loaded token signing key.

    Attributes:
        alg: JWS algorithm, e.g. RS256.
        kid: Key ID placed in the token header.
        instance_name: Issuer name of this conductor instance.
        private_key: Key used to sign tokens.
        public_key: Key used to verify tokens.
        public_key_string: PEM form of the public key, for clients.
    """

    alg: str
    kid: str
    instance_name: str
    private_key: Any = field(repr=False)
    public_key: Any = field(repr=False)
    public_key_string: str = field(repr=False)


class TokenInfo(BaseModel):
    """Claims recovered from a verified bearer token."""

    username: str
    roles: list[str]
    name: str = ""
    instance_name: str | None = None
    issued_at: int
    key_id: str | None = None
