"""Auth domain types and utilities."""

from conductor.core.auth.jwt import (
    ROLES_CLAIM,
    create_token,
    create_token_for,
    verify_token,
)
from conductor.core.auth.password import LOCAL_PROFILE, hash_password, verify_password
from conductor.core.auth.repository import UserRepository
from conductor.core.auth.signing_keys import (
    clear_signing_key_cache,
    get_signing_key,
    load_signing_key,
)
from conductor.core.auth.types import KeyConfig, SigningKey, TokenInfo, User

__all__ = [
    "User",
    "KeyConfig",
    "SigningKey",
    "TokenInfo",
    "ROLES_CLAIM",
    "create_token",
    "create_token_for",
    "verify_token",
    "LOCAL_PROFILE",
    "hash_password",
    "verify_password",
    "UserRepository",
    "load_signing_key",
    "get_signing_key",
    "clear_signing_key_cache",
]
