"""Configuration loading and validation for emitter defaults."""

from __future__ import annotations

from copy import deepcopy
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from .directions import (
    DEFAULT_ORDER,
    DEFAULT_PROPAGATION,
    Direction,
    coerce_direction,
    normalize_order,
)
from .exceptions import ConfigValidationError, InvalidDirectionError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "event-tree"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EmitterConfig(BaseModel):
    """Defaults applied to every emitter built with this configuration."""

    model_config = ConfigDict(frozen=True)
    traversal_order: tuple[Direction, ...] = DEFAULT_ORDER
    propagation: Direction = DEFAULT_PROPAGATION
    max_listeners: int = Field(default=0, ge=0, le=1_000_000)

    @field_validator("traversal_order", mode="plain")
    @classmethod
    def _validate_order(cls, value: Any) -> tuple[Direction, ...]:
        if isinstance(value, (str, int)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("traversal_order must be a list of directions.")
        try:
            return normalize_order(value)
        except InvalidDirectionError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("propagation", mode="plain")
    @classmethod
    def _validate_propagation(cls, value: Any) -> Direction:
        if isinstance(value, list):
            value = "|".join(str(item) for item in value)
        try:
            return coerce_direction(value)
        except InvalidDirectionError as exc:
            raise ValueError(str(exc)) from exc

    @field_serializer("traversal_order")
    def _dump_order(self, value: tuple[Direction, ...]) -> list[str]:
        return [direction.name for direction in value]

    @field_serializer("propagation")
    def _dump_propagation(self, value: Direction) -> str:
        names = [member.name for member in Direction if member and member in value]
        return "|".join(names) if names else "NONE"


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/event-tree/event-tree.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    emitter: EmitterConfig = EmitterConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def _merge_sections(overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay user sections on the defaults one table at a time."""
    merged: dict[str, Any] = deepcopy(DEFAULT_CONFIG)
    for section, values in overrides.items():
        base = merged.get(section)
        if isinstance(base, dict) and isinstance(values, dict):
            merged[section] = {**base, **values}
        else:
            merged[section] = values
    return merged


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning(
            "config.invalid",
            extra={"event": "config.invalid", "reason": str(exc)},
        )
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    A missing file yields the defaults. The optional ``config_path`` argument
    is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning(
                "config.parse_failed",
                extra={
                    "event": "config.parse_failed",
                    "path": str(target_path),
                    "reason": str(exc),
                },
            )
            raw_data = {}

    return _validate_config(_merge_sections(raw_data))


def emitter_config_from(data: dict[str, Any] | None = None) -> EmitterConfig:
    """Build an ``EmitterConfig`` from a loaded config mapping."""
    if data is None:
        data = load_config()
    section = data.get("emitter", {})
    try:
        return EmitterConfig.model_validate(section)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid emitter configuration: {exc}") from exc
