"""Utilities for generating deploy key material."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..constants import SECRET_PRIVATE_KEY, SECRET_PUBLIC_KEY


@dataclass(frozen=True)
class KeyPair:
    """An RSA keypair ready to be stored in a Secret."""

    private_key_pem: str
    public_key: str

    def as_secret_data(self) -> dict[str, str]:
        """Return the keypair laid out as Secret data."""
        return {
            SECRET_PRIVATE_KEY: self.private_key_pem,
            SECRET_PUBLIC_KEY: self.public_key,
        }


def generate_rsa_keypair(bits: int = 4096) -> KeyPair:
    """Generate a new RSA keypair.

    The private key is PKCS#1 PEM encoded; the public key is in OpenSSH
    authorized_keys format with a trailing newline, which is what the forge
    accepts for deploy keys.

    Args:
        bits: Key size in bits

    Returns:
        Generated keypair
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=bits)

    private_key_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")

    public_key = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    ).decode("utf-8")

    return KeyPair(private_key_pem=private_key_pem, public_key=public_key + "\n")
