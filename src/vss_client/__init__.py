"""
Client for a Versioned Storage Service (VSS).

Application state is serialized to JSON, encrypted client-side with
AES-256-GCM, and stored remotely under a caller-chosen key and version.

Modules:
- client: VssClient facade (put_objects, get_object, list_key_versions)
- models: plaintext/encrypted items and key version metadata
- encryption: SecretKey and the AES-GCM codec
- transport: authenticated/anonymous request dispatch
- errors: error taxonomy
"""

from .client import VssClient
from .encryption import SecretKey
from .errors import (
    AuthError,
    DecryptionError,
    EncodingError,
    ResponseParseError,
    TransportError,
    UrlParseError,
    VssError,
)
from .models import EncryptedItem, KeyVersion, VersionedItem
from .transport import Anonymous, AuthClient, Authenticated, TransportMode

__all__ = [
    "VssClient",
    "SecretKey",
    "KeyVersion",
    "VersionedItem",
    "EncryptedItem",
    "AuthClient",
    "Authenticated",
    "Anonymous",
    "TransportMode",
    "VssError",
    "UrlParseError",
    "TransportError",
    "AuthError",
    "ResponseParseError",
    "DecryptionError",
    "EncodingError",
]
