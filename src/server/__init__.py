"""Websocket control endpoint for block commands."""

from .client import ControlClientError, send_command
from .config import ControlServerConfig, ServerConfigurationError
from .service import ControlServer

__all__ = [
    "ControlClientError",
    "ControlServer",
    "ControlServerConfig",
    "ServerConfigurationError",
    "send_command",
]
