"""State, action, and reason constants used by the block timer."""

from __future__ import annotations

DEFAULT_BLOCK_SECONDS = 25 * 60
DEFAULT_COOLDOWN_SECONDS = 5 * 60

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_PAUSED = "paused"
PHASE_COOLDOWN = "cooldown"

ACTIVE_PHASES: frozenset[str] = frozenset({PHASE_RUNNING, PHASE_PAUSED})

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_CANCEL = "cancel"

TRANSITION_BLOCK_FINISHED = "block_finished"
TRANSITION_COOLDOWN_FINISHED = "cooldown_finished"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_CANCELED = "canceled"
REASON_INVALID_DURATION = "invalid_duration"
REASON_BLOCK_ACTIVE = "block_active"
REASON_COOLDOWN = "cooldown"
REASON_NOT_ACTIVE = "not_active"
REASON_NOT_PAUSED = "not_paused"
REASON_UNSUPPORTED_ACTION = "unsupported_action"

# Rejections for these reasons flash as errors; every other rejection is a warning.
ERROR_REASONS: frozenset[str] = frozenset({REASON_COOLDOWN, REASON_INVALID_DURATION})
