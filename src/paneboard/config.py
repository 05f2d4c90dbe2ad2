"""XDG config loading/saving."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from paneboard.layout.models import Modifier, parse_modifier
from paneboard.logging import normalize_level
from paneboard.sender import DEFAULT_TARGET, DEFAULT_TIMEOUT_SECONDS

DEFAULT_CONFIG_PATH = Path("~/.config/paneboard/config.toml").expanduser()
TARGET_ENV = "PANEBOARD_TARGET"
MIN_TIMEOUT_SECONDS = 0.1
MAX_TIMEOUT_SECONDS = 30.0

LogLevel = Literal["DEBUG", "INFO", "WARN", "ERROR"]


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    layout_path: str = ""
    target_pane: str = DEFAULT_TARGET
    send_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        ge=MIN_TIMEOUT_SECONDS,
        le=MAX_TIMEOUT_SECONDS,
    )
    sticky_modifiers: list[str] = Field(default_factory=list)
    fallback_to_default_layout: bool = True
    preview_enabled: bool = True
    log_level: LogLevel = "INFO"

    @field_validator("target_pane")
    @classmethod
    def _validate_target(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Target pane cannot be empty")
        return value.strip()

    @field_validator("sticky_modifiers")
    @classmethod
    def _validate_sticky(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for item in value:
            modifier = parse_modifier(item)
            if modifier is None:
                raise ValueError(f"Invalid modifier: {item}")
            if modifier.value not in normalized:
                normalized.append(modifier.value)
        return normalized

    def sticky_modifier_set(self) -> frozenset[Modifier]:
        return frozenset(Modifier(item) for item in self.sticky_modifiers)


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    if isinstance(value, list):
        return "[" + ", ".join(_toml_scalar(item) for item in value) + "]"
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _normalize_sticky(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    normalized: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        modifier = parse_modifier(item)
        if modifier is None or modifier.value in normalized:
            continue
        normalized.append(modifier.value)
    return normalized


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    layout_path = raw.get("layout_path", cfg.layout_path)
    if isinstance(layout_path, str):
        cfg.layout_path = layout_path

    target_pane = raw.get("target_pane", cfg.target_pane)
    if isinstance(target_pane, str) and target_pane.strip():
        cfg.target_pane = target_pane
    env_target = os.getenv(TARGET_ENV, "").strip()
    if env_target:
        cfg.target_pane = env_target

    timeout = raw.get("send_timeout_seconds", cfg.send_timeout_seconds)
    if (
        isinstance(timeout, (int, float))
        and not isinstance(timeout, bool)
        and MIN_TIMEOUT_SECONDS <= timeout <= MAX_TIMEOUT_SECONDS
    ):
        cfg.send_timeout_seconds = float(timeout)

    cfg.sticky_modifiers = _normalize_sticky(raw.get("sticky_modifiers", []))

    fallback = raw.get("fallback_to_default_layout", cfg.fallback_to_default_layout)
    if isinstance(fallback, bool):
        cfg.fallback_to_default_layout = fallback

    preview_enabled = raw.get("preview_enabled", cfg.preview_enabled)
    if isinstance(preview_enabled, bool):
        cfg.preview_enabled = preview_enabled

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str):
        normalized = normalize_level(log_level)
        if normalized is not None:
            cfg.log_level = cast(LogLevel, normalized)

    return cfg


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _sanitize({})
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _sanitize({})
    if not isinstance(raw, dict):
        return _sanitize({})
    return _sanitize(raw)


def save_config(config: AppConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        f"layout_path = {_toml_scalar(config.layout_path)}",
        f"target_pane = {_toml_scalar(config.target_pane)}",
        f"send_timeout_seconds = {_toml_scalar(float(config.send_timeout_seconds))}",
        f"sticky_modifiers = {_toml_scalar(list(config.sticky_modifiers))}",
        f"fallback_to_default_layout = {_toml_scalar(config.fallback_to_default_layout)}",
        f"preview_enabled = {_toml_scalar(config.preview_enabled)}",
        f"log_level = {_toml_scalar(config.log_level)}",
    ]

    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
