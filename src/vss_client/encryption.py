from __future__ import annotations

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import DecryptionError


KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

# Order of the secp256k1 group; valid private scalars are 1 <= d < n
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class SecretKey:
    """
    32-byte secret used both as the AES-256-GCM key and as a secp256k1
    private scalar.

    The scalar form only matters for `public_key_hex()`, which anonymous
    clients use as their store identifier.
    """

    __slots__ = ("_raw", "_private_key")

    def __init__(self, raw: bytes) -> None:
        if not isinstance(raw, (bytes, bytearray)):
            raise TypeError("secret key must be bytes")
        if len(raw) != KEY_SIZE:
            raise ValueError(f"secret key must be {KEY_SIZE} bytes, got {len(raw)}")
        scalar = int.from_bytes(raw, "big")
        if not 0 < scalar < SECP256K1_ORDER:
            raise ValueError("secret key is not a valid secp256k1 scalar")
        self._raw = bytes(raw)
        self._private_key = ec.derive_private_key(scalar, ec.SECP256K1())

    @classmethod
    def from_hex(cls, value: str) -> "SecretKey":
        try:
            raw = bytes.fromhex(value.strip())
        except ValueError as ex:
            raise ValueError("secret key is not valid hex") from ex
        return cls(raw)

    @classmethod
    def generate(cls) -> "SecretKey":
        while True:
            raw = os.urandom(KEY_SIZE)
            if 0 < int.from_bytes(raw, "big") < SECP256K1_ORDER:
                return cls(raw)

    def secret_bytes(self) -> bytes:
        return self._raw

    def public_key_hex(self) -> str:
        """Lowercase hex of the 33-byte compressed SEC1 public key."""
        point = self._private_key.public_key().public_bytes(
            Encoding.X962, PublicFormat.CompressedPoint
        )
        return point.hex()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretKey):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"SecretKey(public={self.public_key_hex()})"


def encrypt_with_key(key: SecretKey, plaintext: bytes) -> bytes:
    """AES-256-GCM encrypt; output is `nonce || ciphertext || tag`."""
    nonce = os.urandom(NONCE_SIZE)
    return nonce + AESGCM(key.secret_bytes()).encrypt(nonce, plaintext, None)


def decrypt_with_key(key: SecretKey, data: bytes) -> bytes:
    """Inverse of `encrypt_with_key`.

    Raises DecryptionError when the input is truncated or the tag does not
    verify (wrong key, corruption, tampering).
    """
    if len(data) < NONCE_SIZE + TAG_SIZE:
        raise DecryptionError(
            f"ciphertext too short: {len(data)} bytes, need at least {NONCE_SIZE + TAG_SIZE}"
        )
    nonce, body = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        return AESGCM(key.secret_bytes()).decrypt(nonce, body, None)
    except InvalidTag as ex:
        raise DecryptionError("Failed to decrypt value: authentication tag mismatch") from ex


__all__ = [
    "SecretKey",
    "encrypt_with_key",
    "decrypt_with_key",
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
]
