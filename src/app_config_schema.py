"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_FILE_ENV = "BLOCKBAR_CONFIG_FILE"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


class ConfigWriteError(Exception):
    """Raised when the configuration dump cannot be written."""


@dataclass(frozen=True)
class TimerSettings:
    """Block and tick timing loaded from `[timer]`."""
    tick_interval_seconds: float = 1.0
    cooldown_seconds: int = 300
    default_block_seconds: int = 1500


@dataclass(frozen=True)
class StatusBarSettings:
    """Status line colours and thresholds loaded from `[status_bar]`."""
    idle_color: str = "#AAAAAA"
    paused_color: str = "#AAAAAA"
    block_start_color: str = "#00FF00"
    block_end_color: str = "#FFFF00"
    cooldown_start_color: str = "#FF0000"
    cooldown_end_color: str = "#00FFFF"
    warn_background: str = "#FFFF00"
    error_background: str = "#FF0000"
    final_seconds_warning: int = 10
    warn_flash_ticks: int = 5
    error_flash_ticks: int = 7
    cooldown_marker: str = "~"


@dataclass(frozen=True)
class SamplerSettings:
    """Focused-window sampler loaded from `[sampler]`."""
    enabled: bool = True
    command: tuple[str, ...] = ("xdotool", "getwindowfocus", "getwindowname")
    timeout_seconds: float = 0.5


@dataclass(frozen=True)
class HookSettings:
    """External commands loaded from `[hooks]`."""
    block_end_command: str = ""


@dataclass(frozen=True)
class ControlServerSettings:
    """Websocket control endpoint loaded from `[control_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8766
    path: str = "/control"


@dataclass(frozen=True)
class AppConfig:
    """Top-level immutable runtime configuration object."""
    timer: TimerSettings = field(default_factory=TimerSettings)
    status_bar: StatusBarSettings = field(default_factory=StatusBarSettings)
    sampler: SamplerSettings = field(default_factory=SamplerSettings)
    hooks: HookSettings = field(default_factory=HookSettings)
    control_server: ControlServerSettings = field(default_factory=ControlServerSettings)
    source_file: str = ""
