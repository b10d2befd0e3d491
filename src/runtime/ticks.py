"""Periodic driver: timed transitions, window sampling, status line output."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from activity import WindowSampler
from pomodoro import DEFAULT_CLOCK, BlockTransition
from pomodoro.constants import PHASE_RUNNING, TRANSITION_BLOCK_FINISHED

from .hooks import ShellRunner
from .session import BlockSession
from .status_line import StatusLineRenderer

DEFAULT_TICK_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class TickDependencies:
    """Collaborators used by the tick loop."""
    session: BlockSession
    sampler: WindowSampler
    shell_runner: ShellRunner
    renderer: StatusLineRenderer
    stream: TextIO
    logger: logging.Logger
    publish_transition: Optional[Callable[[BlockTransition], None]] = None


class TickLoop:
    """Runs one tick per interval until stopped.

    Each tick applies an overdue transition, samples the focused window while
    a block runs, and writes exactly one status line. Sampling and rendering
    failures are logged and never skip the line or stop the loop.
    """

    def __init__(
        self,
        dependencies: TickDependencies,
        *,
        interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = DEFAULT_CLOCK,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._dependencies = dependencies
        self._interval_seconds = interval_seconds
        self._clock = clock

    def run(self, stop_event: threading.Event) -> int:
        """Tick until `stop_event` is set; returns a process exit code."""
        next_tick = self._clock()
        while not stop_event.is_set():
            try:
                self.tick()
            except BrokenPipeError:
                self._dependencies.logger.error("Status line reader went away; stopping.")
                return 1

            next_tick += self._interval_seconds
            now = self._clock()
            if next_tick < now:
                # Behind schedule after load or suspend: skip missed ticks.
                next_tick = now + self._interval_seconds
            stop_event.wait(max(0.0, next_tick - now))
        return 0

    def tick(self) -> None:
        deps = self._dependencies

        transition = deps.session.poll()
        if transition is not None:
            self._handle_transition(transition)

        if deps.session.snapshot().phase == PHASE_RUNNING:
            self._sample_window()

        self._emit_status_line()

    def _handle_transition(self, transition: BlockTransition) -> None:
        deps = self._dependencies
        if transition.kind == TRANSITION_BLOCK_FINISHED:
            try:
                deps.shell_runner.run()
            except Exception as error:
                deps.logger.error("Block-end hook failed: %s", error, exc_info=True)

        if deps.publish_transition is not None:
            try:
                deps.publish_transition(transition)
            except Exception as error:
                deps.logger.warning("Failed to publish transition: %s", error)

    def _sample_window(self) -> None:
        deps = self._dependencies
        try:
            title = deps.sampler.current_window_title()
        except Exception as error:
            deps.logger.debug("Window sampler raised: %s", error)
            title = None
        if not title:
            deps.session.skip_sample()
            return
        deps.session.record_window(title)

    def _emit_status_line(self) -> None:
        deps = self._dependencies
        try:
            line = deps.renderer.render(deps.session.frame())
        except Exception as error:
            deps.logger.error("Status line rendering failed: %s", error, exc_info=True)
            line = "<fc=#FF0000>??</fc>"
        deps.stream.write(line + "\n")
        deps.stream.flush()
