"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import re
import shlex
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    ControlServerSettings,
    HookSettings,
    SamplerSettings,
    StatusBarSettings,
    TimerSettings,
)

_HEX_COLOR_PATTERN = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

_TIMER_DEFAULTS = TimerSettings()
_STATUS_BAR_DEFAULTS = StatusBarSettings()
_SAMPLER_DEFAULTS = SamplerSettings()
_CONTROL_SERVER_DEFAULTS = ControlServerSettings()


def parse_app_config(raw: Mapping[str, Any], *, source_file: str) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer")),
        status_bar=_parse_status_bar_settings(_section(raw, "status_bar")),
        sampler=_parse_sampler_settings(_section(raw, "sampler")),
        hooks=_parse_hook_settings(_section(raw, "hooks")),
        control_server=_parse_control_server_settings(_section(raw, "control_server")),
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    defaults = _TIMER_DEFAULTS
    return TimerSettings(
        tick_interval_seconds=_as_positive_float(
            section.get("tick_interval_seconds", defaults.tick_interval_seconds),
            "timer.tick_interval_seconds",
        ),
        cooldown_seconds=_as_positive_int(
            section.get("cooldown_seconds", defaults.cooldown_seconds),
            "timer.cooldown_seconds",
        ),
        default_block_seconds=_as_positive_int(
            section.get("default_block_seconds", defaults.default_block_seconds),
            "timer.default_block_seconds",
        ),
    )


def _parse_status_bar_settings(section: Mapping[str, Any]) -> StatusBarSettings:
    defaults = _STATUS_BAR_DEFAULTS

    def color(name: str) -> str:
        return _as_color(section.get(name, getattr(defaults, name)), f"status_bar.{name}")

    def count(name: str) -> int:
        value = _as_int(section.get(name, getattr(defaults, name)), f"status_bar.{name}")
        if value < 0:
            raise AppConfigurationError(f"status_bar.{name} must not be negative.")
        return value

    return StatusBarSettings(
        idle_color=color("idle_color"),
        paused_color=color("paused_color"),
        block_start_color=color("block_start_color"),
        block_end_color=color("block_end_color"),
        cooldown_start_color=color("cooldown_start_color"),
        cooldown_end_color=color("cooldown_end_color"),
        warn_background=color("warn_background"),
        error_background=color("error_background"),
        final_seconds_warning=count("final_seconds_warning"),
        warn_flash_ticks=count("warn_flash_ticks"),
        error_flash_ticks=count("error_flash_ticks"),
        cooldown_marker=_as_str(
            section.get("cooldown_marker", defaults.cooldown_marker),
            "status_bar.cooldown_marker",
        ),
    )


def _parse_sampler_settings(section: Mapping[str, Any]) -> SamplerSettings:
    defaults = _SAMPLER_DEFAULTS
    return SamplerSettings(
        enabled=_as_bool(section.get("enabled", defaults.enabled), "sampler.enabled"),
        command=_as_command(section.get("command", defaults.command), "sampler.command"),
        timeout_seconds=_as_positive_float(
            section.get("timeout_seconds", defaults.timeout_seconds),
            "sampler.timeout_seconds",
        ),
    )


def _parse_hook_settings(section: Mapping[str, Any]) -> HookSettings:
    return HookSettings(
        block_end_command=_as_str(
            section.get("block_end_command", ""),
            "hooks.block_end_command",
        ),
    )


def _parse_control_server_settings(section: Mapping[str, Any]) -> ControlServerSettings:
    defaults = _CONTROL_SERVER_DEFAULTS
    return ControlServerSettings(
        enabled=_as_bool(section.get("enabled", defaults.enabled), "control_server.enabled"),
        host=_as_str(section.get("host", defaults.host), "control_server.host"),
        port=_as_int(section.get("port", defaults.port), "control_server.port"),
        path=_as_str(section.get("path", defaults.path), "control_server.path"),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_positive_int(value: Any, field: str) -> int:
    number = _as_int(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")
    return number


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_positive_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")
    return number


def _as_color(value: Any, field: str) -> str:
    text = _as_str(value, field)
    if not _HEX_COLOR_PATTERN.fullmatch(text):
        raise AppConfigurationError(f"{field} must be a #RGB or #RRGGBB colour.")
    return text


def _as_command(value: Any, field: str) -> tuple[str, ...]:
    if isinstance(value, str):
        parts = tuple(shlex.split(value))
    elif isinstance(value, (list, tuple)) and all(isinstance(part, str) for part in value):
        parts = tuple(value)
    else:
        raise AppConfigurationError(f"{field} must be a string or a list of strings.")
    if not parts:
        raise AppConfigurationError(f"{field} cannot be empty.")
    return parts
