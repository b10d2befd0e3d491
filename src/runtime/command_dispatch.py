"""Dispatcher that executes control commands against the shared block session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pomodoro import BlockSnapshot
from pomodoro.constants import (
    ACTION_CANCEL,
    ACTION_PAUSE,
    ACTION_START,
    DEFAULT_BLOCK_SECONDS,
)
from contracts.control_protocol import (
    BLOCK_COMMAND_TO_ACTION,
    COMMAND_TASK_LOG_ADD,
    COMMAND_TASK_LOG_OUTPUT,
    COMMAND_TASK_LOG_REMOVE,
    REASON_INVALID_ARGUMENTS,
    REASON_LOG_DISABLED,
    REASON_LOG_ENABLED,
    REASON_LOG_OUTPUT,
    REASON_UNKNOWN_COMMAND,
)

from .messages import block_accepted_text, block_rejection_text
from .session import BlockSession


@dataclass(frozen=True)
class CommandResult:
    """Accept/reject outcome reported back to the control caller."""
    command: str
    accepted: bool
    reason: str
    message: str = ""
    output: Optional[str] = None
    snapshot: Optional[BlockSnapshot] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "command": self.command,
            "accepted": self.accepted,
            "reason": self.reason,
        }
        if self.message:
            payload["message"] = self.message
        if self.output is not None:
            payload["output"] = self.output
        if self.snapshot is not None:
            payload["phase"] = self.snapshot.phase
            payload["duration_seconds"] = self.snapshot.duration_seconds
            payload["remaining_seconds"] = self.snapshot.remaining_seconds
        return payload


class CommandDispatcher:
    """Routes each control command to exactly one session operation."""
    def __init__(
        self,
        *,
        session: BlockSession,
        logger: Optional[logging.Logger] = None,
        default_block_seconds: int = DEFAULT_BLOCK_SECONDS,
    ):
        self._session = session
        self._logger = logger or logging.getLogger("runtime.dispatch")
        self._default_block_seconds = int(default_block_seconds)

    def start_block(self, duration_seconds: int) -> CommandResult:
        return self._apply_block_action("start_block", ACTION_START, duration_seconds)

    def pause_block(self) -> CommandResult:
        return self._apply_block_action("pause_block", ACTION_PAUSE)

    def cancel_block(self) -> CommandResult:
        return self._apply_block_action("cancel_block", ACTION_CANCEL)

    def task_log_add(self, label: str) -> CommandResult:
        self._session.enable_log(label)
        return CommandResult(
            command=COMMAND_TASK_LOG_ADD,
            accepted=True,
            reason=REASON_LOG_ENABLED,
            message=f"Logging activity as '{label}'.",
        )

    def task_log_remove(self) -> CommandResult:
        self._session.disable_log()
        return CommandResult(
            command=COMMAND_TASK_LOG_REMOVE,
            accepted=True,
            reason=REASON_LOG_DISABLED,
            message="Activity logging stopped.",
        )

    def task_log_output(self, reset: bool = False) -> CommandResult:
        _, text = self._session.dump_log(reset=reset)
        return CommandResult(
            command=COMMAND_TASK_LOG_OUTPUT,
            accepted=True,
            reason=REASON_LOG_OUTPUT,
            output=text,
        )

    def handle_command(
        self,
        name: Any,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> CommandResult:
        """Validate raw command arguments and route them to a handler."""
        args = arguments if isinstance(arguments, Mapping) else {}
        if not isinstance(name, str) or not name:
            return self._reject(str(name), REASON_UNKNOWN_COMMAND, "Missing command name.")

        if name in BLOCK_COMMAND_TO_ACTION:
            action = BLOCK_COMMAND_TO_ACTION[name]
            if action != ACTION_START:
                return self._apply_block_action(name, action)
            raw_duration = args.get("duration_seconds", self._default_block_seconds)
            duration = _parse_duration_seconds(raw_duration)
            if duration is None:
                return self._reject(
                    name,
                    REASON_INVALID_ARGUMENTS,
                    f"Invalid duration_seconds: {raw_duration!r}",
                )
            return self.start_block(duration)

        if name == COMMAND_TASK_LOG_ADD:
            label = args.get("label")
            if not isinstance(label, str):
                return self._reject(name, REASON_INVALID_ARGUMENTS, "label must be a string.")
            return self.task_log_add(label)

        if name == COMMAND_TASK_LOG_REMOVE:
            return self.task_log_remove()

        if name == COMMAND_TASK_LOG_OUTPUT:
            reset = args.get("reset", False)
            if not isinstance(reset, bool):
                return self._reject(name, REASON_INVALID_ARGUMENTS, "reset must be a boolean.")
            return self.task_log_output(reset=reset)

        self._logger.warning("Unsupported control command: %s", name)
        return self._reject(name, REASON_UNKNOWN_COMMAND, f"Unknown command: {name}")

    def _apply_block_action(
        self,
        command: str,
        action: str,
        duration_seconds: Optional[int] = None,
    ) -> CommandResult:
        result = self._session.apply(action, duration_seconds=duration_seconds)
        if result.accepted:
            message = block_accepted_text(action, result.reason, result.snapshot)
        else:
            message = block_rejection_text(action, result.reason, result.snapshot)
        return CommandResult(
            command=command,
            accepted=result.accepted,
            reason=result.reason,
            message=message,
            snapshot=result.snapshot,
        )

    @staticmethod
    def _reject(command: str, reason: str, message: str) -> CommandResult:
        return CommandResult(command=command, accepted=False, reason=reason, message=message)


def _parse_duration_seconds(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None
