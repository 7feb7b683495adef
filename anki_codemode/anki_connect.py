"""
Async AnkiConnect client for anki-codemode.

Provides programmatic access to Anki via the AnkiConnect plugin. Every
call is one HTTP POST bounded by a deadline, and every failure is raised
as an `AnkiConnectError` subclass tagged with the action and params that
produced it.

Installation:
1. Install AnkiConnect plugin in Anki (code: 2055492159)
2. Restart Anki
3. Ensure Anki is running when using these functions

Documentation: https://foosoft.net/projects/anki-connect/
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence

import httpx

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8765"
DEFAULT_VERSION = 6
DEFAULT_TIMEOUT_MS = 10000

MULTI_ACTION = "multi"


class ErrorKind(str, Enum):
    """Failure categories at the client boundary."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    REMOTE = "remote"


class AnkiConnectError(Exception):
    """Raised when an AnkiConnect call does not produce a result."""

    kind = ErrorKind.REMOTE

    def __init__(
        self,
        message: str,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.action = action
        self.params = dict(params or {})

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, action={self.action!r}, "
            f"kind={self.kind.value!r})"
        )


class AnkiConnectNetworkError(AnkiConnectError, ConnectionError):
    """The transport failed before any response arrived."""

    kind = ErrorKind.NETWORK


class AnkiConnectTimeoutError(AnkiConnectError, TimeoutError):
    """The request deadline expired."""

    kind = ErrorKind.TIMEOUT


class AnkiConnectHTTPError(AnkiConnectError):
    """AnkiConnect answered with a non-2xx status."""

    kind = ErrorKind.HTTP_STATUS

    def __init__(
        self,
        message: str,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, action, params)
        self.status_code = status_code


class AnkiConnectRemoteError(AnkiConnectError):
    """AnkiConnect answered with an application-level error string."""

    kind = ErrorKind.REMOTE


class AnkiConnectClient:
    """Async client for interacting with Anki via AnkiConnect plugin."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        version: int = DEFAULT_VERSION,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        api_key: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize AnkiConnect client.

        Args:
            url: AnkiConnect API endpoint (default: http://localhost:8765)
            version: AnkiConnect protocol version (default: 6)
            timeout_ms: Per-request deadline in milliseconds (default: 10000)
            api_key: Optional AnkiConnect api key, sent as ``key``
            http_client: Optional shared httpx client; a short-lived one is
                opened per request when omitted
        """
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {timeout_ms!r}")
        self.url = url
        self.version = version
        self.timeout_ms = timeout_ms
        self.api_key = api_key
        self._http_client = http_client

    def __repr__(self) -> str:
        return (
            f"AnkiConnectClient(url={self.url!r}, version={self.version}, "
            f"timeout_ms={self.timeout_ms}, api_key={'***' if self.api_key else None})"
        )

    def build_envelope(
        self, action: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build the JSON request body for one action."""
        envelope: Dict[str, Any] = {
            "action": action,
            "version": self.version,
            "params": dict(params or {}),
        }
        if self.api_key:
            envelope["key"] = self.api_key
        return envelope

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def invoke(
        self, action: str, params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Invoke an AnkiConnect API action.

        Args:
            action: API action name
            params: Parameters for the action

        Returns:
            API response result

        Raises:
            AnkiConnectNetworkError: If Anki cannot be reached
            AnkiConnectTimeoutError: If the deadline expires first
            AnkiConnectHTTPError: If the response status is not 2xx
            AnkiConnectRemoteError: If AnkiConnect reports an error
        """
        params = dict(params or {})
        envelope = self.build_envelope(action, params)
        timeout_s = self.timeout_ms / 1000
        logger.debug("AnkiConnect %s params=%s", action, sorted(params))

        try:
            async with asyncio.timeout(timeout_s):
                async with self._session() as client:
                    response = await client.post(
                        self.url,
                        json=envelope,
                        headers={"Content-Type": "application/json"},
                        timeout=timeout_s,
                    )
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning("AnkiConnect %s timed out after %sms", action, self.timeout_ms)
            raise AnkiConnectTimeoutError(
                f"Request timed out after {self.timeout_ms}ms", action, params
            ) from e
        except httpx.RequestError as e:
            logger.warning("AnkiConnect %s request failure: %s", action, e)
            raise AnkiConnectNetworkError(
                str(e) or type(e).__name__, action, params
            ) from e

        if not response.is_success:
            raise AnkiConnectHTTPError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                action,
                params,
                status_code=response.status_code,
            )

        try:
            response_data = response.json()
        except ValueError as e:
            raise AnkiConnectRemoteError(
                f"Invalid response format: {response.text[:200]!r}", action, params
            ) from e

        if not isinstance(response_data, dict):
            raise AnkiConnectRemoteError(
                f"Invalid response format: {response_data!r}", action, params
            )

        if response_data.get("error") is not None:
            raise AnkiConnectRemoteError(str(response_data["error"]), action, params)

        return response_data.get("result")

    async def multi(self, actions: Sequence[Mapping[str, Any]]) -> List[Any]:
        """
        Run several actions in one request.

        Args:
            actions: Ordered ``{"action": ..., "params": ...}`` mappings;
                ``params`` may be omitted

        Returns:
            Results in the same order as ``actions``, as returned by AnkiConnect
        """
        wrapped = [
            {
                "action": item["action"],
                "version": self.version,
                "params": dict(item.get("params") or {}),
            }
            for item in actions
        ]
        return await self.invoke(MULTI_ACTION, {"actions": wrapped})

    async def get_version(self) -> int:
        """Get AnkiConnect version."""
        return await self.invoke("version")


__all__ = [
    "AnkiConnectClient",
    "AnkiConnectError",
    "AnkiConnectHTTPError",
    "AnkiConnectNetworkError",
    "AnkiConnectRemoteError",
    "AnkiConnectTimeoutError",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_URL",
    "DEFAULT_VERSION",
    "ErrorKind",
]
