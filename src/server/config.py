"""Configuration model for the websocket control server."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONTROL_HOST = "127.0.0.1"
DEFAULT_CONTROL_PORT = 8766
DEFAULT_CONTROL_PATH = "/control"
HEALTHZ_PATH = "/healthz"


class ServerConfigurationError(Exception):
    """Raised when control server configuration is invalid."""


@dataclass(frozen=True)
class ControlServerConfig:
    """Validated control server configuration derived from app settings."""
    enabled: bool = True
    host: str = DEFAULT_CONTROL_HOST
    port: int = DEFAULT_CONTROL_PORT
    path: str = DEFAULT_CONTROL_PATH

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("control_server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"control_server.port must be in [1, 65535], got: {self.port}"
            )

        if not self.path.startswith("/"):
            raise ServerConfigurationError(
                f"control_server.path must start with '/', got: {self.path!r}"
            )
        if self.path == HEALTHZ_PATH:
            raise ServerConfigurationError(
                f"control_server.path cannot be {HEALTHZ_PATH}"
            )

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_settings(cls, settings) -> "ControlServerConfig":
        path = settings.path.strip() if settings.path else DEFAULT_CONTROL_PATH
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            path=path,
        )
