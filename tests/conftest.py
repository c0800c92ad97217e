"""Shared fixtures and an in-memory fake of the Bill My Services API."""

from __future__ import annotations

import base64
import hmac
import logging
from collections.abc import AsyncIterator, Iterator
from typing import Any
from urllib.parse import unquote

import httpx
import pytest
import respx
import structlog
from bms_client import BMSClient, Credentials, canonicalize, reset_default, sign
from bms_client.logger import LOGGER_NAME

BASE_URL = "http://bms.test"
ACCOUNT_ID = "acct-1"
SECRET_KEY = b"test-secret-key-0123456789abcdef"
SECRET_KEY_B64 = base64.b64encode(SECRET_KEY).decode("ascii")
FIXED_TIME = 1_700_000_000


def make_credentials() -> Credentials:
    return Credentials(service_url=BASE_URL, account_id=ACCOUNT_ID, secret_key=SECRET_KEY)


class FakeBillingService:
    """Fake server: checks signatures, stores counter types and enforces absolute counters."""

    def __init__(self, account_id: str = ACCOUNT_ID, secret_key: bytes = SECRET_KEY) -> None:
        self._account_id = account_id
        self._secret_key = secret_key
        self.counter_types: dict[str, dict[str, Any]] = {}
        self.counters: dict[tuple[str, str], dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        account, *rest = [unquote(s) for s in request.url.path.strip("/").split("/")]
        if account != self._account_id:
            return httpx.Response(404, text="unknown account")

        headers = request.headers
        type_code = rest[0] if rest else None
        counter_code = rest[1] if len(rest) > 1 else None
        canonical = canonicalize(
            account,
            type_code,
            counter_code,
            headers.get("wsb-name"),
            headers.get("wsb-value"),
            headers.get("wsb-k1"),
            headers.get("wsb-k2"),
            headers.get("wsb-mode"),
            timestamp=headers.get("wsb-time", ""),
        )
        if not hmac.compare_digest(sign(canonical, self._secret_key), headers.get("wsb-hmac", "")):
            return httpx.Response(401, text="bad signature")

        if type_code is None:
            return self._list()
        if counter_code is None:
            return self._counter_type(request.method, type_code, headers)
        return self._counter(request.method, type_code, counter_code, headers)

    def _list(self) -> httpx.Response:
        return httpx.Response(200, json=list(self.counter_types.values()))

    def _counter_type(self, method: str, code: str, headers: httpx.Headers) -> httpx.Response:
        if method == "PUT":
            self.counter_types[code] = {
                "code": code,
                "name": headers.get("wsb-name", ""),
                "value": int(headers["wsb-value"]),
                "k1": int(headers["wsb-k1"]),
                "k2": int(headers["wsb-k2"]),
                "version": headers["wsb-mode"],
            }
            return httpx.Response(200)
        if code not in self.counter_types:
            return httpx.Response(404, text=f"counter type `{code}` not found")
        if method == "GET":
            counters = [c for (t, _), c in self.counters.items() if t == code]
            return httpx.Response(200, json={"counterType": self.counter_types[code], "counters": counters})
        if method == "DELETE":
            del self.counter_types[code]
            for key in [k for k in self.counters if k[0] == code]:
                del self.counters[key]
            return httpx.Response(200)
        return httpx.Response(405)

    def _counter(self, method: str, type_code: str, code: str, headers: httpx.Headers) -> httpx.Response:
        counter_type = self.counter_types.get(type_code)
        if counter_type is None:
            return httpx.Response(404, text=f"counter type `{type_code}` not found")
        current = self.counters.get(
            (type_code, code),
            {"code": code, "timeRef": 0, "value": counter_type["value"]},
        )
        if method == "GET":
            return httpx.Response(200, json=current)
        if method == "DELETE":
            self.counters.pop((type_code, code), None)
            return httpx.Response(200)
        if method == "POST":
            value = current["value"] + int(headers["wsb-value"])
            if counter_type["version"] == "AbsoluteCounter" and not (
                counter_type["k1"] <= value <= counter_type["k2"]
            ):
                return httpx.Response(409, text="counter out of bounds")
            self.counters[(type_code, code)] = {
                "code": code,
                "timeRef": int(headers["wsb-time"]),
                "value": value,
            }
            return httpx.Response(200)
        return httpx.Response(405)


@pytest.fixture
def service() -> FakeBillingService:
    return FakeBillingService()


@pytest.fixture
async def client(service: FakeBillingService) -> AsyncIterator[BMSClient]:
    with respx.mock(assert_all_called=False) as router:
        router.route(url__startswith=BASE_URL).mock(side_effect=service)
        async with httpx.AsyncClient() as http:
            yield BMSClient(make_credentials(), http_client=http)


@pytest.fixture(autouse=True)
def _clean_default_client() -> None:
    reset_default()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(stdlib_logger.handlers):
        stdlib_logger.removeHandler(handler)
    stdlib_logger.setLevel(logging.NOTSET)
    stdlib_logger.propagate = True
