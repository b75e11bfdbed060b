from __future__ import annotations

import logging
import os
from typing import Any, List, Optional, Sequence, Union

import httpx
from pydantic import ValidationError

from .encryption import SecretKey
from .errors import DecryptionError, EncodingError, ResponseParseError, UrlParseError
from .models import KEY_VERSION_LIST, EncryptedItem, KeyVersion, VersionedItem
from .transport import Anonymous, AuthClient, Authenticated, TransportMode, send


# Environment variable names for convenience configuration
ENV_URL = "VSS_URL"
ENV_SECRET_KEY = "VSS_SECRET_KEY"

PUT_OBJECTS_PATH = "putObjects"
GET_OBJECT_PATH = "getObject"
LIST_KEY_VERSIONS_PATH = "listKeyVersions"

logger = logging.getLogger("vss_client.client")


def _to_secret_key(key: Union[SecretKey, bytes, str]) -> SecretKey:
    """Accept a SecretKey, 32 raw bytes, or a 64-char hex string."""
    if isinstance(key, SecretKey):
        return key
    if isinstance(key, str):
        return SecretKey.from_hex(key)
    return SecretKey(key)


class VssClient:
    """
    Client for a Versioned Storage Service (VSS).

    Values are encrypted client-side (AES-256-GCM) before they leave the
    process; the server only sees keys, versions and ciphertext.

    Usage
    - `VssClient.authenticated(delegate, url, key)`: requests go through an
      auth delegate, which owns credentials and the store identifier.
    - `VssClient.anonymous(url, key)`: requests go straight to the server; the
      store identifier is the hex compressed public key of `key`.
    - `VssClient.from_env()`: anonymous client from `VSS_URL`/`VSS_SECRET_KEY`.

    Notes
    - Every operation is one awaited request. Nothing is retried, cached or
      timed out internally; layer that policy on top.
    - The client is immutable after construction and safe to share between
      concurrent tasks.
    """

    def __init__(
        self,
        url: str,
        secret_key: Union[SecretKey, bytes, str],
        mode: TransportMode,
        *,
        owns_client: bool = False,
        log: Optional[logging.Logger] = None,
    ) -> None:
        if not isinstance(mode, (Authenticated, Anonymous)):
            raise TypeError(f"unsupported transport mode: {type(mode).__name__}")
        self._url = url.rstrip("/")
        self._secret_key = _to_secret_key(secret_key)
        self._mode = mode
        self._owns_client = owns_client
        self._log = log or logger

    # -------- Construction helpers --------
    @classmethod
    def authenticated(
        cls,
        delegate: AuthClient,
        url: str,
        secret_key: Union[SecretKey, bytes, str],
        *,
        log: Optional[logging.Logger] = None,
    ) -> "VssClient":
        log = log or logger
        log.info("Creating authenticated vss client")
        return cls(url, secret_key, Authenticated(delegate=delegate), log=log)

    @classmethod
    def anonymous(
        cls,
        url: str,
        secret_key: Union[SecretKey, bytes, str],
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ) -> "VssClient":
        key = _to_secret_key(secret_key)
        log = log or logger
        log.info("Creating unauthenticated vss client")
        mode = Anonymous(
            http=client or httpx.AsyncClient(timeout=timeout),
            store_id=key.public_key_hex(),
        )
        return cls(url, key, mode, owns_client=client is None, log=log)

    @classmethod
    def from_env(cls, *, timeout: Optional[float] = None) -> "VssClient":
        """Build an anonymous client from `VSS_URL` and `VSS_SECRET_KEY`.

        Raises RuntimeError naming every missing variable, and ValueError if
        the key is not a valid hex-encoded secret key.
        """
        url = os.environ.get(ENV_URL)
        key = os.environ.get(ENV_SECRET_KEY)
        if not url or not key:
            missing = [name for name, val in [(ENV_URL, url), (ENV_SECRET_KEY, key)] if not val]
            raise RuntimeError(
                f"Missing required environment variables for VSS client: {', '.join(missing)}"
            )
        return cls.anonymous(url, key, timeout=timeout)

    # -------- Lifecycle --------
    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client and isinstance(self._mode, Anonymous):
            await self._mode.http.aclose()

    async def __aenter__(self) -> "VssClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # -------- Properties --------
    @property
    def url(self) -> str:
        return self._url

    @property
    def mode(self) -> TransportMode:
        return self._mode

    @property
    def store_id(self) -> Optional[str]:
        return self._mode.store_id

    # -------- Core operations --------
    async def put_objects(self, items: Sequence[VersionedItem]) -> None:
        """Encrypt `items` and upload them as a single transaction.

        All items travel in one `PUT putObjects` request, even when `items` is
        empty. Atomicity of the batch is up to the server.
        """
        url = self._endpoint(PUT_OBJECTS_PATH)
        encrypted = [item.encrypt(self._secret_key).to_wire() for item in items]
        body = {"store_id": self.store_id, "transaction_items": encrypted}
        await send(self._mode, "PUT", url, body, log=self._log)

    async def get_object(self, key: str) -> VersionedItem:
        """Fetch and decrypt the latest stored item for `key`.

        Raises:
        - UrlParseError / TransportError / AuthError if the store is unreachable.
        - ResponseParseError if the response is not an encrypted item.
        - DecryptionError / EncodingError if the item is present but unreadable
          (wrong key, corruption or tampering).
        """
        url = self._endpoint(GET_OBJECT_PATH)
        body = {"store_id": self.store_id, "key": key}
        resp = await send(self._mode, "POST", url, body, log=self._log)

        data = self._json(resp, GET_OBJECT_PATH)
        try:
            encrypted = EncryptedItem.model_validate(data)
        except ValidationError as ve:
            self._log.error("Error parsing get objects response: %s", ve)
            raise ResponseParseError(f"Error parsing get objects response: {ve}") from ve

        try:
            return encrypted.decrypt(self._secret_key)
        except (DecryptionError, EncodingError) as ex:
            self._log.error("Error decrypting object %r: %s", key, ex)
            raise

    async def list_key_versions(self, key_prefix: Optional[str] = None) -> List[KeyVersion]:
        """List `(key, version)` pairs, optionally restricted to `key_prefix`.

        Nothing is decrypted; callers compare the versions with their local
        state to decide which keys to fetch with `get_object`.
        """
        url = self._endpoint(LIST_KEY_VERSIONS_PATH)
        body = {"store_id": self.store_id, "key_prefix": key_prefix}
        resp = await send(self._mode, "POST", url, body, log=self._log)

        data = self._json(resp, LIST_KEY_VERSIONS_PATH)
        try:
            return KEY_VERSION_LIST.validate_python(data)
        except ValidationError as ve:
            self._log.error("Error parsing list key versions response: %s", ve)
            raise ResponseParseError(f"Error parsing list key versions response: {ve}") from ve

    # -------- Internal --------
    def _endpoint(self, path: str) -> httpx.URL:
        raw = f"{self._url}/{path}"
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as exc:
            self._log.error("Error parsing %s url: %s", path, exc)
            raise UrlParseError(f"Invalid VSS url {raw!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            self._log.error("Error parsing %s url: %r is not an absolute http(s) url", path, raw)
            raise UrlParseError(f"Invalid VSS url {raw!r}: expected absolute http(s) url")
        return url

    def _json(self, resp: httpx.Response, path: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            self._log.error("Error parsing %s response: %s", path, exc)
            raise ResponseParseError(f"Failed to parse JSON from {path} response") from exc

    def __repr__(self) -> str:
        kind = "authenticated" if isinstance(self._mode, Authenticated) else "anonymous"
        return f"VssClient(url={self._url!r}, mode={kind}, store_id={self.store_id!r})"


__all__ = [
    "VssClient",
    "ENV_URL",
    "ENV_SECRET_KEY",
]
