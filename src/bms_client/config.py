"""Client configuration loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import BMSClientError, BMSClientErrorCodes
from .models import Credentials

DEFAULT_BMS_URL = "http://services.billmyservices.com"

SETTING_NAME_URL = "billmyservices_url"
SETTING_NAME_USERID = "billmyservices_userid"
SETTING_NAME_SECRETKEY = "billmyservices_secretkey"
SETTING_NAME_TIMEOUT = "billmyservices_timeout"
SETTING_NAME_LOGLEVEL = "billmyservices_loglevel"
SETTING_NAME_LOGFORMAT = "billmyservices_logformat"


class BMSConfig(BaseModel):
    """Bill My Services client settings."""

    model_config = ConfigDict(frozen=True)

    service_url: str = DEFAULT_BMS_URL
    account_id: str = Field(min_length=1)
    secret_key: str = Field(min_length=1, repr=False)  # base64 encoded
    timeout_seconds: float = Field(default=10.0, gt=0)
    # None leaves logging to the host application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None
    log_format: Literal["json", "text"] = "json"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def credentials(self) -> Credentials:
        """Decode the secret key into client credentials.

        Raises:
            BMSClientError: CONFIGURATION when the secret key is malformed.
        """
        return Credentials.from_encoded_key(self.service_url, self.account_id, self.secret_key)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML settings file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message=f"Failed to read settings file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message=f"Settings file must hold a mapping: {path}",
        )
    return {str(k).lower(): v for k, v in data.items()}


def _setting(
    key: str,
    settings: Mapping[str, Any],
    environ: Mapping[str, str],
    default: str | None = None,
) -> str | None:
    """Look a setting up in the settings file, then the environment, then fall back to default."""
    value = settings.get(key.lower())
    if value is not None:
        return str(value)
    value = environ.get(key.upper())
    if value is not None:
        return value
    return default


def _required(key: str, settings: Mapping[str, Any], environ: Mapping[str, str]) -> str:
    value = _setting(key, settings, environ)
    if value is None:
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message=f"Bill My Services configuration error, no settings found for the `{key}` value",
        )
    return value


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> BMSConfig:
    """Resolve the client settings.

    path: optional YAML settings file with lower-case ``billmyservices_*`` keys.
    environ: environment used as fallback (``BILLMYSERVICES_*``), defaults to ``os.environ``.

    Raises:
        BMSClientError: CONFIGURATION when the account id or secret key is missing
            or any setting is invalid.
    """
    settings = _read_yaml(path) if path is not None else {}
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {
        "service_url": _setting(SETTING_NAME_URL, settings, env, DEFAULT_BMS_URL),
        "account_id": _required(SETTING_NAME_USERID, settings, env),
        "secret_key": _required(SETTING_NAME_SECRETKEY, settings, env),
    }
    timeout = _setting(SETTING_NAME_TIMEOUT, settings, env)
    if timeout is not None:
        data["timeout_seconds"] = timeout
    log_level = _setting(SETTING_NAME_LOGLEVEL, settings, env)
    if log_level is not None:
        data["log_level"] = log_level
    log_format = _setting(SETTING_NAME_LOGFORMAT, settings, env)
    if log_format is not None:
        data["log_format"] = log_format
    try:
        return BMSConfig.model_validate(data)
    except ValidationError as e:
        raise BMSClientError(
            code=BMSClientErrorCodes.CONFIGURATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
