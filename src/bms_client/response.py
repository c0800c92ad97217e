"""HTTP response to Result mapping."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from .result import Failure, Result, Success

T = TypeVar("T")


def with_status(
    expected: int,
    response: httpx.Response,
    mapper: Callable[[httpx.Response], Result[Any]] | None = None,
) -> Result[Any]:
    """Map the response with ``mapper`` if its status is the expected one.

    Without a mapper a matching status yields ``Success(True)``. A different
    status yields a Failure quoting both codes and the raw response body.
    """
    if response.status_code == expected:
        if mapper is None:
            return Success(True)
        return mapper(response)
    return Failure(
        f"expected HTTP {expected} but {response.status_code}, response was `{response.text}`",
        status_code=response.status_code,
    )


def decode(response: httpx.Response, parse: Callable[[Any], T]) -> Result[T]:
    """Decode the JSON body with ``parse``, reporting decode errors as a Failure."""
    try:
        return Success(parse(response.json()))
    except Exception as e:  # any malformed body is a Failure
        return Failure(str(e) or type(e).__name__)
