"""Serialization of control replies/events and parsing of inbound commands."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable


class ControlMessageError(ValueError):
    """Raised when an inbound control message cannot be parsed."""


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_command_message(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    """Split `{"command": name, ...arguments}` into the name and its arguments."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise ControlMessageError("Control message is not UTF-8") from error

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as error:
        raise ControlMessageError(f"Control message is not JSON: {error}") from error

    if not isinstance(data, dict):
        raise ControlMessageError("Control message must be a JSON object")

    name = data.pop("command", None)
    if not isinstance(name, str) or not name.strip():
        raise ControlMessageError("Control message requires a 'command' string")
    return name.strip(), data
