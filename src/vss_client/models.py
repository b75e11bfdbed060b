from __future__ import annotations

import json
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer, field_validator

from .encryption import SecretKey, decrypt_with_key, encrypt_with_key
from .errors import EncodingError


UINT32_MAX = 0xFFFFFFFF


def _dump_value_json(value: Any) -> bytes:
    # Canonical JSON: sorted keys, no extra whitespace, UTF-8 kept as-is.
    # Values that cannot be serialized raise here and are not wrapped.
    return json.dumps(
        value, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _load_value_json(data: bytes) -> Any:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as ex:
        raise EncodingError("Decrypted value is not valid UTF-8") from ex
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as ex:
        raise EncodingError("Decrypted value is not valid JSON") from ex


class KeyVersion(BaseModel):
    """Key and its latest stored version, as returned by `listKeyVersions`."""

    key: str
    version: int = Field(..., ge=0, le=UINT32_MAX, strict=True)


class VersionedItem(BaseModel):
    """
    Plaintext item owned by the caller.

    Fields
    - key: caller-chosen namespace identifier (e.g., "settings", "labels/abc").
    - value: any JSON value; it is serialized and encrypted before upload.
    - version: caller-supplied counter, intended to increase per key. The
      server decides whether it is enforced.
    """

    key: str = Field(..., min_length=1)
    value: Any
    version: int = Field(..., ge=0, le=UINT32_MAX, strict=True)

    def encrypt(self, secret_key: SecretKey) -> "EncryptedItem":
        ciphertext = encrypt_with_key(secret_key, _dump_value_json(self.value))
        return EncryptedItem(key=self.key, ciphertext=ciphertext, version=self.version)


class EncryptedItem(BaseModel):
    """
    Wire form of a `VersionedItem`.

    The ciphertext travels as `value`, encoded as a JSON array of byte values
    (0-255). Both `model_dump(by_alias=True)` and `model_validate` use that
    shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., min_length=1)
    ciphertext: bytes = Field(..., alias="value")
    version: int = Field(..., ge=0, le=UINT32_MAX, strict=True)

    @field_validator("ciphertext", mode="before")
    @classmethod
    def coerce_byte_array(cls, v: Any) -> bytes:
        if isinstance(v, (bytes, bytearray)):
            return bytes(v)
        if isinstance(v, list):
            for b in v:
                if isinstance(b, bool) or not isinstance(b, int) or not 0 <= b <= 255:
                    raise ValueError("ciphertext must be an array of byte values (0-255)")
            return bytes(v)
        raise ValueError("ciphertext must be an array of byte values")

    @field_serializer("ciphertext")
    def serialize_byte_array(self, v: bytes) -> List[int]:
        return list(v)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)

    def decrypt(self, secret_key: SecretKey) -> VersionedItem:
        """Decrypt and parse the value.

        Raises:
        - DecryptionError if the ciphertext does not authenticate under `secret_key`.
        - EncodingError if the plaintext is not UTF-8 JSON.
        """
        plaintext = decrypt_with_key(secret_key, self.ciphertext)
        value = _load_value_json(plaintext)
        return VersionedItem(key=self.key, value=value, version=self.version)


KEY_VERSION_LIST = TypeAdapter(List[KeyVersion])


__all__ = [
    "KeyVersion",
    "VersionedItem",
    "EncryptedItem",
    "KEY_VERSION_LIST",
    "UINT32_MAX",
]
