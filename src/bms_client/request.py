"""Signed request assembly."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import quote

from .exceptions import BMSClientError, BMSClientErrorCodes
from .models import CounterVersion, Credentials
from .signer import canonicalize, sign, to_ascii

HEADER_TIME = "wsb-time"
HEADER_VALUE = "wsb-value"
HEADER_K1 = "wsb-k1"
HEADER_K2 = "wsb-k2"
HEADER_MODE = "wsb-mode"
HEADER_NAME = "wsb-name"
HEADER_HMAC = "wsb-hmac"

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True)
class SignedRequest:
    """Request ready to be sent by the transport."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)


class RequestBuilder:
    """Builds signed requests for one set of credentials.

    Holds no per-request state, so one builder can be shared by concurrent calls.
    """

    def __init__(self, credentials: Credentials, clock: Callable[[], float] = time.time) -> None:
        self._credentials = credentials
        self._clock = clock

    def url_for(self, counter_type_code: str | None = None, counter_code: str | None = None) -> str:
        """Build ``{service_url}/{account_id}[/{counter_type_code}[/{counter_code}]]``.

        Raises:
            BMSClientError: INVALID_ARGUMENT when counter_code is given without counter_type_code.
        """
        segments = [self._credentials.service_url.rstrip("/"), quote(self._credentials.account_id, safe="")]
        if counter_type_code is None:
            if counter_code is not None:
                raise BMSClientError(
                    code=BMSClientErrorCodes.INVALID_ARGUMENT,
                    message="if `counter_type_code` is None then `counter_code` must be None",
                )
        else:
            segments.append(quote(counter_type_code, safe=""))
            if counter_code is not None:
                segments.append(quote(counter_code, safe=""))
        return "/".join(segments)

    def build(
        self,
        method: str,
        counter_type_code: str | None = None,
        counter_code: str | None = None,
        name: str | None = None,
        value: int | None = None,
        k1: int | None = None,
        k2: int | None = None,
        mode: CounterVersion | None = None,
    ) -> SignedRequest:
        """Build a signed request.

        Every optional field that is given is sent as a header and is part of the
        signed canonical string. ``wsb-time`` and ``wsb-hmac`` are always sent.

        Raises:
            BMSClientError: UNSUPPORTED_METHOD or INVALID_ARGUMENT for illegal calls.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise BMSClientError(
                code=BMSClientErrorCodes.UNSUPPORTED_METHOD,
                message=f"The http method `{method}` is not supported",
            )
        url = self.url_for(counter_type_code, counter_code)

        timestamp = str(int(self._clock()))
        value_s = None if value is None else str(int(value))
        k1_s = None if k1 is None else str(int(k1))
        k2_s = None if k2 is None else str(int(k2))
        mode_s = None if mode is None else CounterVersion(mode).value
        # header values must be ASCII, and the signed name must be the one sent
        name_s = None if name is None else to_ascii(name)

        headers: dict[str, str] = {}
        optional = ((HEADER_VALUE, value_s), (HEADER_K1, k1_s), (HEADER_K2, k2_s), (HEADER_MODE, mode_s))
        for header, text in optional:
            if text is not None:
                headers[header] = text
        headers[HEADER_TIME] = timestamp

        canonical = canonicalize(
            self._credentials.account_id,
            counter_type_code,
            counter_code,
            name_s,
            value_s,
            k1_s,
            k2_s,
            mode_s,
            timestamp=timestamp,
        )
        headers[HEADER_HMAC] = sign(canonical, self._credentials.secret_key)

        if name_s is not None:
            headers[HEADER_NAME] = name_s

        return SignedRequest(method=method, url=url, headers=headers)
