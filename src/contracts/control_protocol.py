"""Control command names and websocket event types."""

from __future__ import annotations

from pomodoro.constants import ACTION_CANCEL, ACTION_PAUSE, ACTION_START

# Canonical command names accepted by the dispatcher and the control server.
COMMAND_START_BLOCK = "start_block"
COMMAND_PAUSE_BLOCK = "pause_block"
COMMAND_CANCEL_BLOCK = "cancel_block"
COMMAND_TASK_LOG_ADD = "task_log_add"
COMMAND_TASK_LOG_REMOVE = "task_log_remove"
COMMAND_TASK_LOG_OUTPUT = "task_log_output"

COMMAND_NAME_ORDER: tuple[str, ...] = (
    COMMAND_START_BLOCK,
    COMMAND_PAUSE_BLOCK,
    COMMAND_CANCEL_BLOCK,
    COMMAND_TASK_LOG_ADD,
    COMMAND_TASK_LOG_REMOVE,
    COMMAND_TASK_LOG_OUTPUT,
)

BLOCK_COMMAND_TO_ACTION: dict[str, str] = {
    COMMAND_START_BLOCK: ACTION_START,
    COMMAND_PAUSE_BLOCK: ACTION_PAUSE,
    COMMAND_CANCEL_BLOCK: ACTION_CANCEL,
}

REASON_UNKNOWN_COMMAND = "unknown_command"
REASON_INVALID_ARGUMENTS = "invalid_arguments"
REASON_LOG_ENABLED = "log_enabled"
REASON_LOG_DISABLED = "log_disabled"
REASON_LOG_OUTPUT = "log_output"

# Websocket event types
EVENT_HELLO = "hello"
EVENT_RESULT = "result"
EVENT_BLOCK = "block"
EVENT_ERROR = "error"
