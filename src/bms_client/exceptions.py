"""bms_client exception types."""

from __future__ import annotations


class BMSClientError(Exception):
    """Base error for fatal configuration and contract violations."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class BMSClientErrorCodes:
    """BMSClientError code constants."""

    CONFIGURATION: str = "CONFIGURATION_ERROR"
    INVALID_ARGUMENT: str = "INVALID_ARGUMENT"
    UNSUPPORTED_METHOD: str = "UNSUPPORTED_METHOD"
    INVALID_STATE: str = "INVALID_STATE"
