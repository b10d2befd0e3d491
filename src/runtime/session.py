"""Shared block/activity state guarded by a single lock."""

from __future__ import annotations

import datetime as dt
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from activity import ActivityLog, ActivityReport
from pomodoro import DEFAULT_CLOCK, BlockActionResult, BlockSnapshot, BlockTimer, BlockTransition
from pomodoro.constants import (
    ACTION_CANCEL,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    ERROR_REASONS,
    PHASE_RUNNING,
    TRANSITION_BLOCK_FINISHED,
    TRANSITION_COOLDOWN_FINISHED,
)

FLASH_WARN = "warn"
FLASH_ERROR = "error"

DEFAULT_WARN_FLASH_TICKS = 5
DEFAULT_ERROR_FLASH_TICKS = 7

_JOURNAL_TEXT = {
    ACTION_START: "started block",
    ACTION_PAUSE: "paused block",
    ACTION_RESUME: "resumed block",
    ACTION_CANCEL: "canceled block",
}


@dataclass(frozen=True)
class StatusFrame:
    """Everything the status line needs for one tick."""
    snapshot: BlockSnapshot
    flash: Optional[str] = None


def _local_now() -> dt.datetime:
    return dt.datetime.now().astimezone()


class BlockSession:
    """Process-wide holder of the block timer and the activity log.

    The tick loop and the command dispatcher share one instance. Every public
    method takes the lock for a single query or transition and never calls
    out to external processes while holding it.
    """

    def __init__(
        self,
        *,
        timer: BlockTimer,
        activity_log: ActivityLog,
        clock: Callable[[], float] = DEFAULT_CLOCK,
        wall_clock: Callable[[], dt.datetime] = _local_now,
        warn_flash_ticks: int = DEFAULT_WARN_FLASH_TICKS,
        error_flash_ticks: int = DEFAULT_ERROR_FLASH_TICKS,
        logger: Optional[logging.Logger] = None,
    ):
        self._timer = timer
        self._activity_log = activity_log
        self._clock = clock
        self._wall_clock = wall_clock
        self._warn_flash_ticks = max(0, int(warn_flash_ticks))
        self._error_flash_ticks = max(0, int(error_flash_ticks))
        self._logger = logger or logging.getLogger("runtime.session")
        self._lock = threading.Lock()

        self._flash_warn = 0
        self._flash_error = 0
        self._journal: list[str] = []

    def snapshot(self) -> BlockSnapshot:
        with self._lock:
            return self._timer.snapshot()

    def apply(
        self,
        action: str,
        *,
        duration_seconds: Optional[int] = None,
    ) -> BlockActionResult:
        with self._lock:
            result = self._timer.apply(action, duration_seconds=duration_seconds)
            if not result.accepted:
                self._flash_locked(
                    FLASH_ERROR if result.reason in ERROR_REASONS else FLASH_WARN
                )
                return result

            phase = result.snapshot.phase
            if action == ACTION_START:
                self._journal = []
            if action == ACTION_PAUSE and phase == PHASE_RUNNING:
                self._note_locked(_JOURNAL_TEXT[ACTION_RESUME])
            else:
                self._note_locked(_JOURNAL_TEXT.get(action, action))

            if phase == PHASE_RUNNING:
                self._activity_log.mark(self._clock())
            else:
                self._activity_log.interrupt()
            return result

    def poll(self) -> Optional[BlockTransition]:
        with self._lock:
            transition = self._timer.poll()
            if transition is None:
                return None
            if transition.kind == TRANSITION_BLOCK_FINISHED:
                self._activity_log.interrupt()
                self._note_locked("end block; start cooldown")
            elif transition.kind == TRANSITION_COOLDOWN_FINISHED:
                self._note_locked("end cooldown")
            return transition

    def record_window(self, title: str) -> Optional[str]:
        """Credit time to `title`'s activity if a block is running."""
        with self._lock:
            if self._timer.phase != PHASE_RUNNING:
                self._activity_log.interrupt()
                return None
            return self._activity_log.sample(title, self._clock())

    def skip_sample(self) -> None:
        """Discard the time since the last sample when no title could be read."""
        with self._lock:
            if self._timer.phase == PHASE_RUNNING:
                self._activity_log.mark(self._clock())
            else:
                self._activity_log.interrupt()

    def enable_log(self, name: str) -> None:
        with self._lock:
            running = self._timer.phase == PHASE_RUNNING
            self._activity_log.enable(name, now=self._clock() if running else None)

    def disable_log(self) -> None:
        with self._lock:
            self._activity_log.disable()

    def dump_log(self, reset: bool = False) -> tuple[ActivityReport, str]:
        """Return the activity report and the full text shown to callers."""
        with self._lock:
            report = self._activity_log.dump(reset=reset)
            if reset:
                self._note_locked("reset statistics")
            else:
                self._note_locked("output statistics (did not reset)")
            text = "".join(f"{line}\n" for line in self._journal) + report.to_text()
            return report, text

    def flash(self, severity: str) -> None:
        with self._lock:
            self._flash_locked(severity)

    def frame(self) -> StatusFrame:
        """Snapshot plus the flash to show on this tick; consumes one flash step."""
        with self._lock:
            flash: Optional[str] = None
            if self._flash_warn > 0:
                if self._flash_warn % 2 == 1:
                    flash = FLASH_WARN
                self._flash_warn -= 1
            if self._flash_error > 0:
                if self._flash_error % 2 == 1:
                    flash = FLASH_ERROR
                self._flash_error -= 1
            return StatusFrame(snapshot=self._timer.snapshot(), flash=flash)

    def _flash_locked(self, severity: str) -> None:
        if severity == FLASH_ERROR:
            self._flash_error = self._error_flash_ticks
        else:
            self._flash_warn = self._warn_flash_ticks

    def _note_locked(self, text: str) -> None:
        stamp = self._wall_clock().strftime("%Y-%m-%d %H:%M:%S%z")
        self._journal.append(f"{stamp}: {text}")
