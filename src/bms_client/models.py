"""Bill My Services data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .signer import decode_secret_key


class CounterVersion(StrEnum):
    """Counter behavior, enforced server-side."""

    # value kept between k1 and k2
    ABSOLUTE_COUNTER = "AbsoluteCounter"
    # at most k1 accumulated value for each k2 seconds interval
    FREQUENCY_COUNTER = "FrequencyCounter"


@dataclass(frozen=True)
class CounterType:
    """Counter type definition."""

    code: str
    name: str
    default_value: int
    k1: int
    k2: int
    version: CounterVersion

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CounterType:
        """Build a CounterType from an API response dict."""
        return cls(
            code=str(data["code"]),
            name=data.get("name", ""),
            default_value=int(data.get("value", 0)),
            k1=int(data.get("k1", 0)),
            k2=int(data.get("k2", 0)),
            version=CounterVersion(data["version"]),
        )

    @classmethod
    def list_from_json(cls, data: Any) -> list[CounterType]:
        """Build a list of CounterType from an API response array."""
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON array of counter types, got {type(data).__name__}")
        return [cls.from_dict(item) for item in data]

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "value": self.default_value,
            "k1": self.k1,
            "k2": self.k2,
            "version": self.version.value,
        }


@dataclass(frozen=True)
class Counter:
    """Counter value for one entity code."""

    code: str
    time_ref: int  # Unix timestamp
    value: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Counter:
        """Build a Counter from an API response dict."""
        return cls(
            code=str(data["code"]),
            time_ref=int(data.get("timeRef", 0)),
            value=int(data.get("value", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "timeRef": self.time_ref, "value": self.value}


@dataclass(frozen=True)
class CounterTypeAndCounters:
    """Counter type read together with its counters."""

    counter_type: CounterType
    counters: tuple[Counter, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CounterTypeAndCounters:
        """Build a CounterTypeAndCounters from an API response dict."""
        return cls(
            counter_type=CounterType.from_dict(data["counterType"]),
            counters=tuple(Counter.from_dict(c) for c in data.get("counters") or []),
        )


@dataclass(frozen=True)
class Credentials:
    """Service endpoint and account secrets, fixed for the life of a client."""

    service_url: str
    account_id: str
    secret_key: bytes

    @classmethod
    def from_encoded_key(cls, service_url: str, account_id: str, secret_key: str) -> Credentials:
        """Build Credentials from a base64 encoded secret key.

        Raises:
            BMSClientError: CONFIGURATION when the key is not valid base64 or is empty.
        """
        return cls(
            service_url=service_url.rstrip("/"),
            account_id=account_id,
            secret_key=decode_secret_key(secret_key),
        )

    def __repr__(self) -> str:
        return f"Credentials(service_url={self.service_url!r}, account_id={self.account_id!r})"
