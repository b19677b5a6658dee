"""Signing key fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from conductor.core.auth import KeyConfig, SigningKey, load_signing_key


def generate_rsa_pems() -> tuple[str, str]:
    """Create a fresh RSA key pair as (private PEM, public PEM)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
    ).decode("utf-8")
    public_pem = (
        private_key.public_key()
        .public_bytes(Encoding.PEM, PublicFormat.SubjectPublicKeyInfo)
        .decode("utf-8")
    )
    return private_pem, public_pem


def write_key_config(
    directory: Path,
    private_pem: str,
    public_pem: str,
    signing_algorithm: str = "RS256",
    key_id: str = "test_key",
    instance_name: str = "test",
) -> KeyConfig:
    """Write a key pair into directory and describe it as a KeyConfig."""
    private_path = directory / "private_key.pem"
    public_path = directory / "public_key.pem"
    private_path.write_text(private_pem)
    public_path.write_text(public_pem)
    return KeyConfig(
        signing_algorithm=signing_algorithm,
        instance_name=instance_name,
        key_id=key_id,
        private_key_file=str(private_path),
        public_key_file=str(public_path),
    )


@pytest.fixture(scope="session")
def rsa_pems() -> tuple[str, str]:
    """RSA key pair shared by the whole test session."""
    return generate_rsa_pems()


@pytest.fixture(scope="session")
def other_rsa_pems() -> tuple[str, str]:
    """A second, unrelated RSA key pair."""
    return generate_rsa_pems()


@pytest.fixture
def key_config(tmp_path: Path, rsa_pems: tuple[str, str]) -> KeyConfig:
    """Key configuration pointing at PEM files in a temp directory."""
    return write_key_config(tmp_path, *rsa_pems)


@pytest.fixture
async def signing_key(key_config: KeyConfig) -> SigningKey:
    """Loaded signing key for the session key pair."""
    return await load_signing_key(key_config)


@pytest.fixture
async def other_signing_key(tmp_path: Path, other_rsa_pems: tuple[str, str]) -> SigningKey:
    """Loaded signing key for an unrelated key pair."""
    directory = tmp_path / "other"
    directory.mkdir()
    return await load_signing_key(
        write_key_config(directory, *other_rsa_pems, key_id="other_key")
    )
