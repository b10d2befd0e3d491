from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import parse_app_config
from app_config_schema import (
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    ConfigWriteError,
    ControlServerSettings,
    HookSettings,
    SamplerSettings,
    StatusBarSettings,
    TimerSettings,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "ConfigWriteError",
    "ControlServerSettings",
    "HookSettings",
    "SamplerSettings",
    "StatusBarSettings",
    "TimerSettings",
    "dump_display_config",
    "load_app_config",
    "render_display_config",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv(CONFIG_FILE_ENV)
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    """Load config.toml; a missing *default* file means built-in defaults."""
    explicit = config_path is not None or os.getenv(CONFIG_FILE_ENV) is not None
    path = resolve_config_path(config_path)
    if not path.exists():
        if explicit:
            raise AppConfigurationError(f"Config file not found: {path}")
        return AppConfig(source_file="")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    return parse_app_config(raw, source_file=str(path))


def render_display_config(config: AppConfig) -> str:
    """Render the `[timer]` and `[status_bar]` tables as editable TOML."""
    sections: list[tuple[str, Any]] = [
        ("timer", config.timer),
        ("status_bar", config.status_bar),
    ]
    lines = ["# Status bar colours and thresholds. Edit and load with --config."]
    for name, settings in sections:
        lines.append("")
        lines.append(f"[{name}]")
        for key, value in vars(settings).items():
            lines.append(f"{key} = {_toml_value(value)}")
    return "\n".join(lines) + "\n"


def dump_display_config(config: AppConfig, target: str | Path) -> Path:
    path = Path(target).expanduser()
    try:
        path.write_text(render_display_config(config), encoding="utf-8")
    except OSError as error:
        raise ConfigWriteError(f"Could not write config to {path}: {error}") from error
    return path


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    # JSON string escaping is a valid TOML basic string.
    return json.dumps(str(value), ensure_ascii=False)
