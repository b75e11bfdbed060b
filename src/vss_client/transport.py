from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Union

import httpx

from .errors import AuthError, TransportError, VssError


logger = logging.getLogger("vss_client.transport")


class AuthClient(Protocol):
    """
    Delegate that performs authenticated requests on the client's behalf.

    It attaches credentials, injects the store identifier server-side, and
    may retry however it likes. Auth failures should be raised as
    `vss_client.errors.AuthError`.
    """

    async def request(
        self, method: str, url: httpx.URL, body: Optional[Dict[str, Any]]
    ) -> httpx.Response:
        ...


@dataclass(frozen=True)
class Authenticated:
    delegate: AuthClient

    @property
    def store_id(self) -> None:
        # Owned by the delegate's account, never tracked locally
        return None


@dataclass(frozen=True)
class Anonymous:
    http: httpx.AsyncClient
    store_id: str


TransportMode = Union[Authenticated, Anonymous]


async def send(
    mode: TransportMode,
    method: str,
    url: httpx.URL,
    body: Optional[Dict[str, Any]] = None,
    *,
    log: Optional[logging.Logger] = None,
) -> httpx.Response:
    """
    Dispatch one request through `mode` and return the 2xx response.

    Raises TransportError on network failure or non-success status. Errors
    raised by an auth delegate as `VssError` pass through unchanged; any
    other delegate failure is wrapped in AuthError.
    """
    log = log or logger
    log.debug("VSS %s %s", method, url)

    if isinstance(mode, Authenticated):
        try:
            resp = await mode.delegate.request(method, url, body)
        except VssError:
            raise
        except httpx.TransportError as exc:
            log.error("Error making authenticated request: %s", exc)
            raise TransportError(f"Error making request: {exc}") from exc
        except Exception as exc:
            log.error("Auth delegate failed: %s", exc)
            raise AuthError(f"Auth delegate failed: {exc}") from exc
    elif isinstance(mode, Anonymous):
        try:
            if body is None:
                resp = await mode.http.request(method, url)
            else:
                resp = await mode.http.request(method, url, json=body)
        except httpx.TransportError as exc:
            log.error("Error making request: %s", exc)
            raise TransportError(f"Error making request: {exc}") from exc
    else:
        raise TypeError(f"unsupported transport mode: {type(mode).__name__}")

    if not resp.is_success:
        log.error("HTTP %s from VSS for %s %s", resp.status_code, method, url)
        raise TransportError(
            f"HTTP {resp.status_code} from VSS: {resp.text[:200]}",
            status_code=resp.status_code,
        )
    return resp


__all__ = [
    "AuthClient",
    "Authenticated",
    "Anonymous",
    "TransportMode",
    "send",
]
