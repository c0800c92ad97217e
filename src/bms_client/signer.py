"""Request signature generation.

The server rebuilds the same canonical string from the request it receives, so
field order and formatting here are part of the wire protocol.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac

from .exceptions import BMSClientError, BMSClientErrorCodes


def decode_secret_key(encoded: str) -> bytes:
    """Decode a base64 encoded secret key.

    Raises:
        BMSClientError: CONFIGURATION when the key is not valid base64 or is empty.
    """
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message="Bill My Services secret key is not valid base64",
            cause=e,
        ) from e
    if not key:
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message="Bill My Services secret key is empty",
        )
    return key


def to_ascii(text: str) -> str:
    """Replace every non-ASCII character with `?`."""
    return text.encode("ascii", errors="replace").decode("ascii")


def canonicalize(
    account_id: str,
    counter_type_code: str | None = None,
    counter_code: str | None = None,
    name: str | None = None,
    value: int | str | None = None,
    k1: int | str | None = None,
    k2: int | str | None = None,
    mode: str | None = None,
    *,
    timestamp: int | str,
) -> str:
    """Concatenate the present fields, in this fixed order, without separators."""
    fields = (account_id, counter_type_code, counter_code, name, value, k1, k2, mode, timestamp)
    return "".join(str(f) for f in fields if f is not None)


def sign(canonical: str, secret_key: bytes) -> str:
    """Generate the base64 HMAC-SHA256 signature of a canonical string."""
    # a new HMAC object per call, never shared between concurrent signings
    mac = hmac.new(secret_key, to_ascii(canonical).encode("ascii"), hashlib.sha256)
    return base64.b64encode(mac.digest()).decode("ascii")
