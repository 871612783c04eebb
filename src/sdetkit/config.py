"""Run configuration validation and TOML loading/saving."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Mapping
from contextlib import suppress
from pathlib import Path
from typing import Literal, cast
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing_extensions import TypedDict

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from sdetkit.errors import ConfigurationError
from sdetkit.logging import get_logger
from sdetkit.retry import Backoff, RetryPolicy, TransientPredicate, exponential_backoff

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/sdetkit/config.toml").expanduser()
BASE_URL_ENV = "SDETKIT_BASE_URL"
TIMEOUT_MS_RANGE = (1, 120_000)
RETRIES_RANGE = (0, 5)
VALID_ENVS = ("dev", "staging", "prod")
_INTEGER = re.compile(r"[+-]?[0-9]+")


class RunConfigPayload(TypedDict, total=False):
    baseUrl: str
    timeoutMs: int
    retries: int
    env: str


class RunConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    base_url: str = Field(alias="baseUrl")
    timeout_ms: int = Field(alias="timeoutMs", ge=TIMEOUT_MS_RANGE[0], le=TIMEOUT_MS_RANGE[1])
    retries: int = Field(alias="retries", ge=RETRIES_RANGE[0], le=RETRIES_RANGE[1])
    env: Literal["dev", "staging", "prod"] | None = Field(default=None, alias="env")

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if not parts.scheme or not (parts.netloc or parts.path):
            raise ValueError(f"Not an absolute URI: {value}")
        return value

    @field_validator("timeout_ms", "retries", mode="before")
    @classmethod
    def _require_integer(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("must be an integer")
        if isinstance(value, str):
            if not _INTEGER.fullmatch(value):
                raise ValueError(f"Not an integer: {value}")
            return int(value)
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def retry_policy(
        self,
        *,
        is_transient: TransientPredicate | None = None,
        backoff: Backoff | None = None,
    ) -> RetryPolicy:
        options: dict[str, object] = {
            "max_attempts": self.retries + 1,
            "backoff": backoff or exponential_backoff(),
        }
        if is_transient is not None:
            options["is_transient"] = is_transient
        return RetryPolicy(**options)  # type: ignore[arg-type]

    def to_payload(self) -> RunConfigPayload:
        return cast(RunConfigPayload, self.model_dump(by_alias=True, exclude_none=True))


_RANGE_ERRORS = {"greater_than_equal", "less_than_equal"}
_MESSAGES = {
    "baseUrl": ("baseUrl is required", "baseUrl must be an absolute URI"),
    "timeoutMs": (
        "timeoutMs is required and must be an integer",
        f"timeoutMs must be between {TIMEOUT_MS_RANGE[0]} and {TIMEOUT_MS_RANGE[1]}",
    ),
    "retries": (
        "retries is required and must be an integer",
        f"retries must be between {RETRIES_RANGE[0]} and {RETRIES_RANGE[1]}",
    ),
    "env": ("env must be one of: " + ", ".join(VALID_ENVS),) * 2,
}


def _alias_for(loc: object) -> str:
    name = str(loc)
    field_info = RunConfig.model_fields.get(name)
    if field_info is not None and field_info.alias:
        return field_info.alias
    return name


def _normalize(raw: Mapping[str, object]) -> dict[str, object]:
    normalized: dict[str, object] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        normalized[key] = value
    return normalized


def _describe(error: Mapping[str, object]) -> str:
    loc = cast(tuple, error.get("loc") or ("",))
    alias = _alias_for(loc[0])
    messages = _MESSAGES.get(alias)
    if messages is None:
        return f"{alias}: {error.get('msg', 'invalid value')}"
    missing_or_type, invalid = messages
    error_type = error.get("type")
    if error_type == "missing":
        return missing_or_type
    if alias == "baseUrl":
        return invalid
    if error_type in _RANGE_ERRORS:
        return invalid
    return missing_or_type


def _validate(raw: Mapping[str, object]) -> tuple[RunConfig | None, list[str]]:
    try:
        return RunConfig.model_validate(_normalize(raw)), []
    except ValidationError as exc:
        errors: list[str] = []
        for item in exc.errors():
            message = _describe(item)
            if message not in errors:
                errors.append(message)
        return None, errors


def validate_config(raw: Mapping[str, object]) -> list[str]:
    """Return human-readable problems with ``raw``; an empty list means valid."""
    _, errors = _validate(raw)
    return errors


def parse_config(raw: Mapping[str, object]) -> RunConfig:
    config, errors = _validate(raw)
    if config is None:
        raise ConfigurationError(
            "Invalid run configuration: " + "; ".join(errors),
            hint="Fix the listed fields and try again.",
        )
    return config


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def load_run_config(path: str | Path | None = None) -> RunConfig:
    resolved = get_config_path(path)
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Config file not found: {resolved}",
            hint="Create it or pass an explicit path.",
        ) from exc
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Unreadable config file %s: %s", resolved, exc)
        raise ConfigurationError(f"Unreadable config file: {resolved}", hint=str(exc)) from exc

    env_base_url = os.getenv(BASE_URL_ENV, "").strip()
    if env_base_url:
        raw["baseUrl"] = env_base_url

    try:
        return parse_config(raw)
    except ConfigurationError:
        logger.warning("Invalid config file %s", resolved)
        raise


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def save_run_config(config: RunConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    payload = config.to_payload()
    lines = [f"{key} = {_toml_scalar(value)}" for key, value in payload.items()]
    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
