"""Application settings loaded from environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from conductor.core.auth.types import KeyConfig

MEMORY_STORE_URL = "memory://"


def _env(name: str, default: str) -> str:
    """Read an environment variable, treating the empty string as unset."""
    value = os.getenv(name, "").strip()
    return value or default


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        # Users database
        self.user_db_url = _env("CONDUCTOR_USER_DB", "http://localhost:5984/people")
        self.couchdb_username = _env("COUCHDB_USERNAME", "admin")
        self.couchdb_password = _env("COUCHDB_PASSWORD", "password")
        self.couchdb_timeout_seconds = int(_env("COUCHDB_TIMEOUT_SECONDS", "30"))

        # Token signing
        self.signing_algorithm = _env("CONDUCTOR_SIGNING_ALGORITHM", "RS256")
        self.key_id = _env("FAIMS_CONDUCTOR_KID", "test_key")
        self.private_key_path = _env("FAIMS_CONDUCTOR_PRIVATE_KEY_PATH", "private_key.pem")
        self.public_key_path = _env("FAIMS_CONDUCTOR_PUBLIC_KEY_PATH", "public_key.pem")
        self.instance_name = _env("FAIMS_CONDUCTOR_INSTANCE_NAME", "test")
        self.token_leeway_seconds = int(_env("TOKEN_LEEWAY_SECONDS", "0"))

        # Roles
        self.cluster_admin_group_name = _env("CLUSTER_ADMIN_GROUP_NAME", "cluster-admin")

    def key_config(self) -> KeyConfig:
        """Build the signing key configuration."""
        from conductor.core.auth.types import KeyConfig

        return KeyConfig(
            signing_algorithm=self.signing_algorithm,
            instance_name=self.instance_name,
            key_id=self.key_id,
            private_key_file=self.private_key_path,
            public_key_file=self.public_key_path,
        )


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings."""
    return Settings()
