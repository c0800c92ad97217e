"""Bill My Services HTTP client."""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import structlog

from .config import BMSConfig, load_config
from .exceptions import BMSClientError, BMSClientErrorCodes
from .logger import new_logger
from .models import Counter, CounterType, CounterTypeAndCounters, Credentials
from .request import RequestBuilder, SignedRequest
from .response import decode, with_status
from .result import Failure, Result

logger = structlog.stdlib.get_logger(__name__)

_ResponseHandler = Callable[[httpx.Response], Result[Any]]


def _confirmed(response: httpx.Response) -> Result[bool]:
    return with_status(200, response)


def _decoded(parse: Callable[[Any], Any]) -> _ResponseHandler:
    def handler(response: httpx.Response) -> Result[Any]:
        return with_status(200, response, lambda r: decode(r, parse))

    return handler


class BMSClient:
    """Immutable, non-blocking Bill My Services client.

    Every operation checks its arguments and signs the request before returning,
    then returns an ``asyncio.Task`` resolving to a ``Result``. Calls share only the
    credentials and the transport, so any number of them may run concurrently.
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not credentials.account_id:
            raise BMSClientError(
                code=BMSClientErrorCodes.CONFIGURATION,
                message="Bill My Services account id is empty",
            )
        if not credentials.secret_key:
            raise BMSClientError(
                code=BMSClientErrorCodes.CONFIGURATION,
                message="Bill My Services secret key is empty",
            )
        self._credentials = credentials
        self._builder = RequestBuilder(credentials, clock=clock)
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_config(cls, config: BMSConfig, http_client: httpx.AsyncClient | None = None) -> BMSClient:
        """Build a client from resolved settings.

        When the settings carry a log level, client logging is configured with it.

        Raises:
            BMSClientError: CONFIGURATION when the secret key is malformed.
        """
        client = cls(config.credentials(), http_client=http_client, timeout_seconds=config.timeout_seconds)
        if config.log_level is not None:
            new_logger(config.log_level, config.log_format)
        return client

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def http_client(self) -> httpx.AsyncClient:
        """The transport used by this client."""
        return self._http_client

    def list_counter_types(self) -> asyncio.Task[Result[list[CounterType]]]:
        """Return all the account counter types."""
        request = self._builder.build("GET")
        return self._submit("list_counter_types", request, _decoded(CounterType.list_from_json))

    def add_counter_type(self, counter_type: CounterType) -> asyncio.Task[Result[bool]]:
        """Create a counter type, or replace the one with the same code."""
        request = self._builder.build(
            "PUT",
            counter_type.code,
            name=counter_type.name,
            value=counter_type.default_value,
            k1=counter_type.k1,
            k2=counter_type.k2,
            mode=counter_type.version,
        )
        return self._submit("add_counter_type", request, _confirmed)

    def read_counter_type(self, counter_type_code: str) -> asyncio.Task[Result[CounterTypeAndCounters]]:
        """Read one counter type with all its counters."""
        request = self._builder.build("GET", counter_type_code)
        return self._submit("read_counter_type", request, _decoded(CounterTypeAndCounters.from_dict))

    def delete_counter_type(self, counter_type_code: str) -> asyncio.Task[Result[bool]]:
        """Delete one counter type."""
        request = self._builder.build("DELETE", counter_type_code)
        return self._submit("delete_counter_type", request, _confirmed)

    def read_counter(self, counter_type_code: str, counter_code: str) -> asyncio.Task[Result[Counter]]:
        """Read one counter. A counter never posted to comes back with its type defaults."""
        request = self._builder.build("GET", counter_type_code, counter_code)
        return self._submit("read_counter", request, _decoded(Counter.from_dict))

    def post_counter(
        self,
        counter_type_code: str,
        counter_code: str,
        value_delta: int,
    ) -> asyncio.Task[Result[bool]]:
        """Add ``value_delta`` to a counter.

        A delta rejected by the counter type policy resolves to a Failure.
        """
        request = self._builder.build("POST", counter_type_code, counter_code, value=value_delta)
        return self._submit("post_counter", request, _confirmed)

    def reset_counter(self, counter_type_code: str, counter_code: str) -> asyncio.Task[Result[bool]]:
        """Reset one counter to its type default value."""
        request = self._builder.build("DELETE", counter_type_code, counter_code)
        return self._submit("reset_counter", request, _confirmed)

    def _submit(
        self,
        operation: str,
        request: SignedRequest,
        handler: _ResponseHandler,
    ) -> asyncio.Task[Result[Any]]:
        # fails fast outside an event loop, before the coroutine is created
        loop = asyncio.get_running_loop()
        return loop.create_task(self._execute(operation, request, handler), name=f"bms-{operation}")

    async def _execute(
        self,
        operation: str,
        request: SignedRequest,
        handler: _ResponseHandler,
    ) -> Result[Any]:
        logger.debug("bms request", operation=operation, method=request.method, url=request.url)
        try:
            response = await self._http_client.request(request.method, request.url, headers=request.headers)
        except httpx.HTTPError as e:
            logger.warning("bms request failed", operation=operation, url=request.url, error=str(e))
            return Failure(f"HTTP request failed: {e}")
        result = handler(response)
        if not result.is_success:
            logger.warning(
                "bms request unsuccessful",
                operation=operation,
                status=response.status_code,
                error=result.error_message,
            )
        return result

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> BMSClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


_default_client: BMSClient | None = None
_default_lock = threading.Lock()


def get_default(path: Path | None = None) -> BMSClient:
    """Return the process-wide client, creating it from ``load_config`` on first use.

    Raises:
        BMSClientError: CONFIGURATION when the settings are missing or invalid.
    """
    global _default_client
    if _default_client is None:
        with _default_lock:
            if _default_client is None:
                _default_client = BMSClient.from_config(load_config(path))
    return _default_client


def reset_default() -> None:
    """Forget the process-wide client. The caller closes it if needed."""
    global _default_client
    with _default_lock:
        _default_client = None
