"""
Authenticated request pipeline.

Wraps aiohttp: attaches the current bearer token to each outbound request
and turns failures into typed errors. It never signs the user out and
never retries; both are decisions for the caller.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

import aiohttp

from FitTracker.config import config
from FitTracker.core.session.exceptions import (
    AuthenticationRejected,
    NetworkUnavailable,
    ServerError,
)

logger = logging.getLogger(__name__)

TokenSource = Callable[[], Optional[str]]


class RequestPipeline:
    """
    HTTP middleware for the FitTracker API.

    One aiohttp.ClientSession is created lazily and reused for every
    request so connections are pooled; call :meth:`close` on shutdown.
    """

    def __init__(
        self,
        base_url: str = None,
        token_source: Optional[TokenSource] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            base_url: API root, e.g. ``http://host:3000/api``
            token_source: Returns the current token (or None) at dispatch time
            timeout: Transport timeout; defaults to the configured values
        """
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self._token_source = token_source or (lambda: None)
        self._timeout = timeout or aiohttp.ClientTimeout(
            total=config.REQUEST_TIMEOUT, connect=config.CONNECT_TIMEOUT
        )
        self._session: Optional[aiohttp.ClientSession] = None
        self._lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the shared aiohttp session."""
        if self._session is None or self._session.closed:
            async with self._lock:
                if self._session is None or self._session.closed:
                    self._session = aiohttp.ClientSession(
                        timeout=self._timeout,
                        headers={"Content-Type": "application/json"},
                    )
        return self._session

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        async with self._lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    async def __aenter__(self) -> 'RequestPipeline':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def build_headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Headers for one request, with the token read right now.

        Args:
            headers: Extra headers supplied by the caller

        Returns:
            dict: Headers to send
        """
        request_headers = dict(headers or {})
        token = self._token_source()
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        return request_headers

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to the API root, e.g. ``/workouts``
            data: JSON payload
            headers: Extra headers

        Returns:
            The decoded JSON body, or None for an empty body

        Raises:
            AuthenticationRejected: The backend answered 401
            ServerError: The backend answered with another error status
            NetworkUnavailable: No response was received
        """
        url = f"{self.base_url}{endpoint}"
        request_headers = self.build_headers(headers)
        logger.debug(
            "REQUEST %s %s token: %s",
            method.upper(), endpoint, "YES" if "Authorization" in request_headers else "NO"
        )

        session = await self._get_session()
        try:
            async with session.request(
                method=method.upper(),
                url=url,
                json=data,
                headers=request_headers,
            ) as response:
                body = _text(await response.read(), response.charset)
                status = response.status
        except asyncio.TimeoutError as e:
            logger.warning("Request %s %s timed out", method.upper(), endpoint)
            raise NetworkUnavailable(f"Request timed out: {method.upper()} {endpoint}") from e
        except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError) as e:
            logger.warning("Request %s %s failed: %s", method.upper(), endpoint, e)
            raise NetworkUnavailable(f"Request failed: {e}") from e
        except aiohttp.ClientError as e:
            # InvalidURL, TooManyRedirects and the like: still no usable response
            logger.warning("Request %s %s could not be sent: %s", method.upper(), endpoint, e)
            raise NetworkUnavailable(f"Request could not be sent: {e!r}") from e

        return self._handle_response(method.upper(), endpoint, status, body)

    def _handle_response(self, method: str, endpoint: str, status: int, body: str) -> Any:
        payload = _decode(body)

        if status < 400:
            return payload

        message = _error_message(payload) or f"Request failed with status {status}"
        logger.info("RESPONSE ERROR %s %s: %s %s", method, endpoint, status, message)

        details = payload if isinstance(payload, dict) else {}
        if status == 401:
            raise AuthenticationRejected(message, status=status, details=details)
        raise ServerError(message, status=status, details=details)

    async def get(self, endpoint: str, **kwargs) -> Any:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return await self.request("POST", endpoint, data=data, **kwargs)

    async def put(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PUT", endpoint, data=data, **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)


def _text(raw: bytes, charset: Optional[str]) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def _decode(body: str) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return body


def _error_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        return str(message) if message else None
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return None


__all__ = ['RequestPipeline', 'TokenSource']
