"""Bearer token creation and validation.

Tokens are compact JWS values that CouchDB's JWT authentication handler
accepts directly: the subject is the CouchDB username and the flat role
list travels in the "_couchdb.roles" claim.

No expiry claim is set. Callers wanting a maximum age must check
TokenInfo.issued_at themselves.
"""

import asyncio
import time
from collections.abc import Iterable
from functools import partial

import jwt
import pydantic
import structlog

from conductor.config import get_settings
from conductor.core.auth.types import SigningKey, TokenInfo, User
from conductor.core.exceptions import TokenInvalidError

logger = structlog.get_logger()

ROLES_CLAIM = "_couchdb.roles"


async def create_token_for(
    username: str,
    roles: Iterable[str],
    signing_key: SigningKey,
    name: str = "",
) -> str:
    """Create a signed token for a username and flat role list.

    Args:
        username: Subject of the token.
        roles: Flat CouchDB roles.
        signing_key: Key to sign with.
        name: Display name.

    Returns:
        Encoded JWT string
    """
    payload = {
        "sub": username,
        ROLES_CLAIM: list(roles),
        "name": name,
        "iss": signing_key.instance_name,
        "iat": int(time.time()),
    }
    # Signing is CPU bound; keep it off the event loop
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(
        None,
        partial(
            jwt.encode,
            payload,
            signing_key.private_key,
            algorithm=signing_key.alg,
            headers={"kid": signing_key.kid},
        ),
    )


async def create_token(user: User, signing_key: SigningKey) -> str:
    """Create a signed token carrying the user's current roles."""
    return await create_token_for(user.id, user.roles, signing_key, name=user.name)


async def verify_token(
    token: str,
    signing_key: SigningKey,
    leeway: int | None = None,
) -> TokenInfo:
    """Verify a token's signature and algorithm and decode its claims.

    Args:
        token: Encoded JWT string
        signing_key: Key whose public half and algorithm must match.
        leeway: Clock skew allowance in seconds for the issued-at check.
            Defaults to TOKEN_LEEWAY_SECONDS.

    Returns:
        Decoded token claims

    Raises:
        TokenInvalidError: If the token is malformed, signed with another
            key, uses a different algorithm, or carries claims of the
            wrong type.
    """
    if leeway is None:
        leeway = get_settings().token_leeway_seconds

    loop = asyncio.get_event_loop()
    try:
        payload = await loop.run_in_executor(
            None,
            partial(
                jwt.decode,
                token,
                signing_key.public_key,
                algorithms=[signing_key.alg],
                options={"require": ["sub", "iat"]},
                leeway=leeway,
            ),
        )
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        logger.info("token_rejected", reason=str(e))
        raise TokenInvalidError(f"Invalid token: {e}") from None

    roles = payload.get(ROLES_CLAIM, [])
    if not isinstance(roles, list) or not all(isinstance(role, str) for role in roles):
        raise TokenInvalidError(f"Invalid token: {ROLES_CLAIM} must be a list of strings")

    try:
        return TokenInfo(
            username=payload["sub"],
            roles=roles,
            name=payload.get("name") or "",
            instance_name=payload.get("iss"),
            # NumericDate may be fractional
            issued_at=int(payload["iat"]),
            key_id=header.get("kid"),
        )
    except pydantic.ValidationError as e:
        logger.info("token_rejected", reason=str(e))
        raise TokenInvalidError(f"Invalid token: malformed claims: {e}") from None
