"""In-memory block/cooldown state machine timed by a suspend-aware clock."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .constants import (
    ACTION_CANCEL,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    ACTIVE_PHASES,
    DEFAULT_COOLDOWN_SECONDS,
    PHASE_COOLDOWN,
    PHASE_IDLE,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_BLOCK_ACTIVE,
    REASON_CANCELED,
    REASON_COOLDOWN,
    REASON_INVALID_DURATION,
    REASON_NOT_ACTIVE,
    REASON_NOT_PAUSED,
    REASON_PAUSED,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_UNSUPPORTED_ACTION,
    TRANSITION_BLOCK_FINISHED,
    TRANSITION_COOLDOWN_FINISHED,
)

BlockPhase = Literal["idle", "running", "paused", "cooldown"]
BlockAction = Literal["start", "pause", "resume", "cancel"]


def boottime_clock() -> float:
    """Seconds on a monotonic clock that keeps counting while the machine sleeps."""
    return time.clock_gettime(time.CLOCK_BOOTTIME)


# Blocks are wall-duration commitments, so suspended time must count against them.
DEFAULT_CLOCK: Callable[[], float] = (
    boottime_clock if hasattr(time, "CLOCK_BOOTTIME") else time.monotonic
)


@dataclass(frozen=True)
class BlockSnapshot:
    """Immutable timer snapshot exposed to the tick loop and control clients."""
    phase: BlockPhase
    duration_seconds: int
    remaining_seconds: int
    period_seconds: int = 0
    elapsed_fraction: float = 0.0


@dataclass(frozen=True)
class BlockActionResult:
    """Result envelope returned after applying a block action."""
    action: str
    accepted: bool
    reason: str
    snapshot: BlockSnapshot


@dataclass(frozen=True)
class BlockTransition:
    """Timed transition applied by `BlockTimer.poll`."""
    kind: str
    snapshot: BlockSnapshot


class BlockTimer:
    """Single work-block state machine: idle, running, paused, cooldown.

    Remaining time is always derived from the clock, so missed polls never
    shift when a block or cooldown ends. The timer is not thread-safe; the
    owning session serializes access.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: int = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = DEFAULT_CLOCK,
        logger: Optional[logging.Logger] = None,
    ):
        if cooldown_seconds <= 0:
            raise ValueError("cooldown_seconds must be greater than zero")

        self._cooldown_seconds = int(cooldown_seconds)
        self._clock = clock
        self._logger = logger or logging.getLogger("block")

        self._phase: BlockPhase = PHASE_IDLE
        self._duration_seconds: int = 0
        self._started_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._paused_total_seconds: float = 0.0
        self._cooldown_started_at: Optional[float] = None

    @property
    def phase(self) -> BlockPhase:
        return self._phase

    @property
    def cooldown_seconds(self) -> int:
        return self._cooldown_seconds

    def snapshot(self) -> BlockSnapshot:
        return self._snapshot(self._clock())

    def apply(
        self,
        action: str,
        *,
        duration_seconds: Optional[int] = None,
    ) -> BlockActionResult:
        now = self._clock()
        if action == ACTION_START:
            return self._start(now, duration_seconds)
        if action == ACTION_PAUSE:
            if self._phase == PHASE_PAUSED:
                return self._resume(action, now)
            return self._pause(now)
        if action == ACTION_RESUME:
            return self._resume(action, now)
        if action == ACTION_CANCEL:
            return self._cancel(now)
        return self._result(action, False, REASON_UNSUPPORTED_ACTION, now)

    def poll(self) -> Optional[BlockTransition]:
        """Apply an overdue block or cooldown end, if any."""
        now = self._clock()
        if self._phase == PHASE_RUNNING and self._running_remaining(now) <= 0:
            self._phase = PHASE_COOLDOWN
            self._started_at = None
            self._paused_total_seconds = 0.0
            self._cooldown_started_at = now
            self._logger.info(
                "Block finished after %ss; cooldown for %ss",
                self._duration_seconds,
                self._cooldown_seconds,
            )
            return BlockTransition(
                kind=TRANSITION_BLOCK_FINISHED,
                snapshot=self._snapshot(now),
            )

        if self._phase == PHASE_COOLDOWN and self._cooldown_remaining(now) <= 0:
            self._phase = PHASE_IDLE
            self._cooldown_started_at = None
            self._logger.info("Cooldown finished")
            return BlockTransition(
                kind=TRANSITION_COOLDOWN_FINISHED,
                snapshot=self._snapshot(now),
            )

        return None

    def _start(self, now: float, duration_seconds: Optional[int]) -> BlockActionResult:
        if self._phase in ACTIVE_PHASES:
            return self._result(ACTION_START, False, REASON_BLOCK_ACTIVE, now)
        if self._phase == PHASE_COOLDOWN:
            return self._result(ACTION_START, False, REASON_COOLDOWN, now)
        if duration_seconds is None or int(duration_seconds) <= 0:
            return self._result(ACTION_START, False, REASON_INVALID_DURATION, now)

        self._phase = PHASE_RUNNING
        self._duration_seconds = int(duration_seconds)
        self._started_at = now
        self._paused_at = None
        self._paused_total_seconds = 0.0
        self._logger.info("Block started: duration=%ss", self._duration_seconds)
        return self._result(ACTION_START, True, REASON_STARTED, now)

    def _pause(self, now: float) -> BlockActionResult:
        if self._phase == PHASE_COOLDOWN:
            return self._result(ACTION_PAUSE, False, REASON_COOLDOWN, now)
        if self._phase != PHASE_RUNNING:
            return self._result(ACTION_PAUSE, False, REASON_NOT_ACTIVE, now)

        self._paused_at = now
        self._phase = PHASE_PAUSED
        self._logger.info(
            "Block paused: remaining=%ss",
            self._running_remaining(now),
        )
        return self._result(ACTION_PAUSE, True, REASON_PAUSED, now)

    def _resume(self, action: str, now: float) -> BlockActionResult:
        if self._phase == PHASE_COOLDOWN:
            return self._result(action, False, REASON_COOLDOWN, now)
        if self._phase != PHASE_PAUSED or self._paused_at is None:
            return self._result(action, False, REASON_NOT_PAUSED, now)

        self._paused_total_seconds += max(0.0, now - self._paused_at)
        self._paused_at = None
        self._phase = PHASE_RUNNING
        self._logger.info(
            "Block resumed: remaining=%ss",
            self._running_remaining(now),
        )
        return self._result(action, True, REASON_RESUMED, now)

    def _cancel(self, now: float) -> BlockActionResult:
        if self._phase == PHASE_COOLDOWN:
            return self._result(ACTION_CANCEL, False, REASON_COOLDOWN, now)
        if self._phase not in ACTIVE_PHASES:
            return self._result(ACTION_CANCEL, False, REASON_NOT_ACTIVE, now)

        self._logger.info(
            "Block canceled: remaining=%ss",
            self._current_remaining(now),
        )
        self._phase = PHASE_IDLE
        self._duration_seconds = 0
        self._started_at = None
        self._paused_at = None
        self._paused_total_seconds = 0.0
        return self._result(ACTION_CANCEL, True, REASON_CANCELED, now)

    def _result(
        self,
        action: str,
        accepted: bool,
        reason: str,
        now: float,
    ) -> BlockActionResult:
        if not accepted:
            self._logger.info("Rejected %s while %s: %s", action, self._phase, reason)
        return BlockActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot(now),
        )

    def _snapshot(self, now: float) -> BlockSnapshot:
        period = self._period_seconds()
        remaining = self._current_remaining(now)
        if period > 0:
            elapsed_fraction = min(1.0, max(0.0, self._elapsed(now) / period))
        else:
            elapsed_fraction = 0.0
        return BlockSnapshot(
            phase=self._phase,
            duration_seconds=self._duration_seconds,
            remaining_seconds=remaining,
            period_seconds=period,
            elapsed_fraction=elapsed_fraction,
        )

    def _period_seconds(self) -> int:
        if self._phase in ACTIVE_PHASES:
            return self._duration_seconds
        if self._phase == PHASE_COOLDOWN:
            return self._cooldown_seconds
        return 0

    def _elapsed(self, now: float) -> float:
        if self._phase == PHASE_RUNNING:
            return self._running_elapsed(now)
        if self._phase == PHASE_PAUSED:
            return self._running_elapsed(self._paused_at if self._paused_at is not None else now)
        if self._phase == PHASE_COOLDOWN and self._cooldown_started_at is not None:
            return max(0.0, now - self._cooldown_started_at)
        return 0.0

    def _current_remaining(self, now: float) -> int:
        if self._phase == PHASE_RUNNING:
            return self._running_remaining(now)
        if self._phase == PHASE_PAUSED:
            paused_at = self._paused_at if self._paused_at is not None else now
            return self._running_remaining(paused_at)
        if self._phase == PHASE_COOLDOWN:
            return self._cooldown_remaining(now)
        return 0

    def _running_elapsed(self, now: float) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, now - self._started_at - self._paused_total_seconds)

    def _running_remaining(self, now: float) -> int:
        remaining = int(math.ceil(self._duration_seconds - self._running_elapsed(now)))
        return max(0, min(self._duration_seconds, remaining))

    def _cooldown_remaining(self, now: float) -> int:
        if self._cooldown_started_at is None:
            return 0
        elapsed = max(0.0, now - self._cooldown_started_at)
        remaining = int(math.ceil(self._cooldown_seconds - elapsed))
        return max(0, min(self._cooldown_seconds, remaining))
