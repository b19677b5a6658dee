"""Token signing key loading.

Keys are read once per process: the first successful load for a given
configuration is cached and returned on every later call.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import load_pem_private_key, load_pem_public_key
from jwt.algorithms import get_default_algorithms
from jwt.exceptions import InvalidKeyError

from conductor.config import get_settings
from conductor.core.auth.types import KeyConfig, SigningKey
from conductor.core.exceptions import KeyLoadError

if TYPE_CHECKING:
    from conductor.config import Settings

logger = structlog.get_logger()

_signing_keys: dict[KeyConfig, SigningKey] = {}


def _read_key_file(path: str) -> str:
    with open(path, encoding="utf-8") as key_file:
        return key_file.read()


async def load_signing_key(config: KeyConfig) -> SigningKey:
    """Load the signing key pair described by config.

    Args:
        config: Key file locations, algorithm, key ID and instance name.

    Returns:
        The loaded key, cached for the lifetime of the process.

    Raises:
        KeyLoadError: If a key file cannot be read, cannot be parsed, or
            does not suit the configured algorithm.
    """
    cached = _signing_keys.get(config)
    if cached is not None:
        return cached

    loop = asyncio.get_event_loop()
    try:
        private_key_string = await loop.run_in_executor(
            None, _read_key_file, config.private_key_file
        )
        public_key_string = await loop.run_in_executor(None, _read_key_file, config.public_key_file)
    except OSError as e:
        logger.error("signing_key_unreadable", key_id=config.key_id, error=str(e))
        raise KeyLoadError(f"Unable to read signing key files: {e}") from e

    algorithm = get_default_algorithms().get(config.signing_algorithm)
    if algorithm is None:
        raise KeyLoadError(f"Unsupported signing algorithm: {config.signing_algorithm}")

    try:
        private_key = algorithm.prepare_key(
            load_pem_private_key(private_key_string.encode("utf-8"), password=None)
        )
        public_key = algorithm.prepare_key(load_pem_public_key(public_key_string.encode("utf-8")))
    except (ValueError, TypeError, UnsupportedAlgorithm, InvalidKeyError) as e:
        logger.error(
            "signing_key_invalid",
            key_id=config.key_id,
            algorithm=config.signing_algorithm,
            error=str(e),
        )
        raise KeyLoadError(
            f"Unable to load signing key for algorithm {config.signing_algorithm}: {e}"
        ) from e

    signing_key = SigningKey(
        alg=config.signing_algorithm,
        kid=config.key_id,
        instance_name=config.instance_name,
        private_key=private_key,
        public_key=public_key,
        public_key_string=public_key_string,
    )
    _signing_keys[config] = signing_key
    logger.info(
        "signing_key_loaded",
        key_id=config.key_id,
        algorithm=config.signing_algorithm,
        instance_name=config.instance_name,
    )
    return signing_key


async def get_signing_key(settings: Settings | None = None) -> SigningKey:
    """Load the signing key named by the application settings."""
    return await load_signing_key((settings or get_settings()).key_config())


def clear_signing_key_cache() -> None:
    """Forget every loaded key."""
    _signing_keys.clear()
