"""Reply text builders for control command results."""

from __future__ import annotations

from pomodoro import BlockSnapshot
from pomodoro.constants import (
    ACTION_CANCEL,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    PHASE_COOLDOWN,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_BLOCK_ACTIVE,
    REASON_COOLDOWN,
    REASON_INVALID_DURATION,
    REASON_NOT_ACTIVE,
    REASON_NOT_PAUSED,
    REASON_PAUSED,
    REASON_RESUMED,
)


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def block_status_message(snapshot: BlockSnapshot) -> str:
    if snapshot.phase == PHASE_RUNNING:
        return f"Block running ({format_duration(snapshot.remaining_seconds)} remaining)"
    if snapshot.phase == PHASE_PAUSED:
        return f"Block paused ({format_duration(snapshot.remaining_seconds)} remaining)"
    if snapshot.phase == PHASE_COOLDOWN:
        return f"Cooldown ({format_duration(snapshot.remaining_seconds)} remaining)"
    return "Idle"


def block_accepted_text(action: str, reason: str, snapshot: BlockSnapshot) -> str:
    if action == ACTION_START:
        return f"Started a {format_duration(snapshot.duration_seconds)} block."
    if reason == REASON_PAUSED:
        return f"Paused block with {format_duration(snapshot.remaining_seconds)} remaining."
    if reason == REASON_RESUMED or action == ACTION_RESUME:
        return f"Resumed block with {format_duration(snapshot.remaining_seconds)} remaining."
    if action == ACTION_CANCEL:
        return "Canceled block."
    return block_status_message(snapshot)


def block_rejection_text(action: str, reason: str, snapshot: BlockSnapshot) -> str:
    if reason == REASON_COOLDOWN:
        return (
            "Cooldown in progress "
            f"({format_duration(snapshot.remaining_seconds)} remaining); "
            f"cannot {action}."
        )
    if reason == REASON_BLOCK_ACTIVE:
        return "A block is already active; cancel it first."
    if reason == REASON_INVALID_DURATION:
        return "Block duration must be a positive number of seconds."
    if reason == REASON_NOT_ACTIVE and action in (ACTION_PAUSE, ACTION_CANCEL):
        return "No block is active."
    if reason == REASON_NOT_PAUSED:
        return "The block is not paused."
    return f"Cannot {action} while {snapshot.phase}."
