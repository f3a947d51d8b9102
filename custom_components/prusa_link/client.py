from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Mapping, Optional, TypeVar

import aiohttp
from yarl import URL

from .const import DEFAULT_TIMEOUT, HEADER_API_KEY, PRINTER_PATH
from .printer import Printer, PrinterResponse, printer_from_response

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class PrusaLinkError(Exception):
    """Base class for everything the client raises."""


class ConfigurationError(PrusaLinkError):
    """The configured endpoint is not a usable base URL."""


class TransportError(PrusaLinkError):
    """The request never produced an HTTP response (DNS, refused, timeout...)."""


class APIError(PrusaLinkError):
    """The printer answered with an HTTP error status."""

    def __init__(self, status: int):
        super().__init__(f"HTTP {status}")
        self.status = status


class DecodeError(PrusaLinkError):
    """The response body is not JSON or not shaped as expected."""


def normalize_endpoint(endpoint: str) -> URL:
    """Return the endpoint with exactly one trailing slash, or raise ConfigurationError."""
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise ConfigurationError("endpoint must be a non-empty URL")
    # a single trailing "/" keeps relative paths under the endpoint path
    raw = endpoint.strip().rstrip("/") + "/"
    try:
        url = URL(raw)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"parsing endpoint URL {endpoint!r}: {err}") from err
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"endpoint must be an absolute http(s) URL, got {endpoint!r}")
    if url.query_string or url.fragment:
        # a query or fragment would make relative paths resolve outside the base
        raise ConfigurationError(f"endpoint must not carry a query or fragment, got {endpoint!r}")
    if any(c.isspace() for c in raw):
        raise ConfigurationError(f"endpoint must not contain whitespace, got {endpoint!r}")
    return url


class PrusaLinkClient:
    """PrusaLink HTTP client (http://<host>/api).

    Endpoint and API key are fixed at construction, so one instance can be
    shared by concurrent callers. Every call is exactly one round-trip.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = "",
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._endpoint = normalize_endpoint(endpoint)
        self._api_key = api_key or ""
        self._session = session
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return str(self._endpoint)

    @property
    def host(self) -> str:
        return self._endpoint.host or ""

    @property
    def api_key(self) -> str:
        return self._api_key

    # ---------- Public API ----------

    async def async_get_printer(self) -> Printer:
        """GET /printer and normalize it into a Printer snapshot."""
        response = await self.async_request(
            "GET", PRINTER_PATH, decode=PrinterResponse.model_validate_json
        )
        return printer_from_response(response)

    def build_url(self, path: str, params: Optional[Mapping[str, str]] = None) -> URL:
        # trim leading "/" so the path resolves under the endpoint instead of replacing it
        url = self._endpoint.join(URL(path.lstrip("/")))
        if params:
            url = url.with_query(sorted(params.items()))
        return url

    def build_headers(self) -> dict[str, str]:
        headers = {aiohttp.hdrs.CONTENT_TYPE: "application/json"}
        if self._api_key:
            headers[HEADER_API_KEY] = self._api_key
        return headers

    async def async_request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        payload: Any = None,
        decode: Optional[Callable[[bytes], T]] = None,
    ) -> Optional[T]:
        """Perform one request; pass the raw JSON body to ``decode`` if given.

        Raises APIError for status >= 400, TransportError when no response
        arrives, DecodeError when the body can't be turned into a result.
        Cancellation propagates as asyncio.CancelledError.
        """
        url = self.build_url(path, params)

        # unserializable payloads are caller bugs; TypeError propagates
        data = None if payload is None else json.dumps(payload)

        if self._session is not None:
            return await self._async_do(self._session, method, url, data, decode)
        async with aiohttp.ClientSession() as session:
            return await self._async_do(session, method, url, data, decode)

    # ---------- Internal ----------

    async def _async_do(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: URL,
        data: Optional[str],
        decode: Optional[Callable[[bytes], T]],
    ) -> Optional[T]:
        _LOGGER.debug("%s %s", method, url)
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            async with session.request(
                method, url, headers=self.build_headers(), data=data, timeout=timeout
            ) as r:
                if r.status >= 400:
                    # error bodies have no guaranteed schema, don't read them
                    raise APIError(r.status)
                if decode is None:
                    return None
                body = await r.read()
        except asyncio.TimeoutError as err:
            raise TransportError(f"timeout after {self._timeout}s: {method} {url}") from err
        except aiohttp.ClientError as err:
            raise TransportError(f"executing http request {method} {url}: {err}") from err

        try:
            return decode(body)
        except (TypeError, ValueError, RecursionError) as err:
            # pydantic.ValidationError is a ValueError
            raise DecodeError(f"unmarshal json response {url}: {err}") from err
