"""Bill My Services client library."""

from .client import BMSClient, get_default, reset_default
from .config import DEFAULT_BMS_URL, BMSConfig, load_config
from .exceptions import BMSClientError, BMSClientErrorCodes
from .logger import new_logger
from .models import Counter, CounterType, CounterTypeAndCounters, CounterVersion, Credentials
from .request import RequestBuilder, SignedRequest
from .response import decode, with_status
from .result import Failure, Result, Success
from .signer import canonicalize, decode_secret_key, sign, to_ascii

__all__ = [
    "BMSClient",
    "get_default",
    "reset_default",
    "BMSConfig",
    "DEFAULT_BMS_URL",
    "load_config",
    "BMSClientError",
    "BMSClientErrorCodes",
    "new_logger",
    "Counter",
    "CounterType",
    "CounterTypeAndCounters",
    "CounterVersion",
    "Credentials",
    "RequestBuilder",
    "SignedRequest",
    "decode",
    "with_status",
    "Failure",
    "Result",
    "Success",
    "canonicalize",
    "decode_secret_key",
    "sign",
    "to_ascii",
]
