"""Success / failure outcome type returned by every client operation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .exceptions import BMSClientError, BMSClientErrorCodes

T = TypeVar("T")


class Result(ABC, Generic[T]):
    """Either a ``Success`` carrying a value or a ``Failure`` carrying a message."""

    @property
    @abstractmethod
    def is_success(self) -> bool: ...

    @property
    @abstractmethod
    def value(self) -> T:
        """The success value.

        Raises:
            BMSClientError: INVALID_STATE when the result is a failure.
        """

    @property
    @abstractmethod
    def error_message(self) -> str:
        """The failure message.

        Raises:
            BMSClientError: INVALID_STATE when the result is a success.
        """

    @abstractmethod
    def guard(
        self,
        must_be_true: Callable[[T], bool],
        or_fail_with: str | Callable[[T], str],
    ) -> Result[T]:
        """Check the success value, turning the result into a failure when the check fails.

        ``or_fail_with`` is either the failure message or a function building it
        from the value. Failures are returned as they are, without running the check.
        """


@dataclass(frozen=True)
class Success(Result[T]):
    """Successful outcome."""

    success_value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def value(self) -> T:
        return self.success_value

    @property
    def error_message(self) -> str:
        raise BMSClientError(
            code=BMSClientErrorCodes.INVALID_STATE,
            message="Cannot get the error message if result is success",
        )

    def guard(
        self,
        must_be_true: Callable[[T], bool],
        or_fail_with: str | Callable[[T], str],
    ) -> Result[T]:
        if must_be_true(self.success_value):
            return self
        if callable(or_fail_with):
            return Failure(or_fail_with(self.success_value))
        return Failure(or_fail_with)


@dataclass(frozen=True)
class Failure(Result[T]):
    """Failed outcome.

    ``status_code`` holds the observed HTTP status when the failure comes from a
    status mismatch, and is ``None`` for transport and decoding failures.
    """

    message: str
    status_code: int | None = None

    @property
    def is_success(self) -> bool:
        return False

    @property
    def value(self) -> T:
        raise BMSClientError(
            code=BMSClientErrorCodes.INVALID_STATE,
            message="Cannot get the success value if result is failed",
        )

    @property
    def error_message(self) -> str:
        return self.message

    def guard(
        self,
        must_be_true: Callable[[T], bool],
        or_fail_with: str | Callable[[T], str],
    ) -> Result[T]:
        return self
