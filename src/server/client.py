"""Blocking one-shot client for the control server."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from websockets.exceptions import WebSocketException
from websockets.sync.client import connect

from contracts.control_protocol import EVENT_ERROR, EVENT_RESULT


class ControlClientError(Exception):
    """Raised when a control command cannot be delivered or answered."""


def send_command(
    url: str,
    command: str,
    arguments: Optional[Mapping[str, Any]] = None,
    *,
    timeout_seconds: float = 5.0,
) -> dict[str, Any]:
    """Send `command` and return the decoded `result` (or `error`) event."""
    message = json.dumps({"command": command, **dict(arguments or {})})
    try:
        with connect(url, open_timeout=timeout_seconds) as websocket:
            websocket.send(message)
            while True:
                raw = websocket.recv(timeout=timeout_seconds)
                reply = json.loads(raw)
                if isinstance(reply, dict) and reply.get("type") in (EVENT_RESULT, EVENT_ERROR):
                    return reply
    except TimeoutError as error:
        raise ControlClientError(f"No reply from {url} within {timeout_seconds:.1f}s") from error
    except (OSError, WebSocketException) as error:
        raise ControlClientError(f"Control server unavailable at {url}: {error}") from error
    except json.JSONDecodeError as error:
        raise ControlClientError(f"Malformed reply from {url}: {error}") from error
