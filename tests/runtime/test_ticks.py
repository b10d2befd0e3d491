import datetime as dt
import io
import logging
import threading
import unittest
from typing import Optional

from activity import ActivityLog
from pomodoro import BlockTimer, BlockTransition
from runtime.session import BlockSession
from runtime.status_line import StatusLineRenderer
from runtime.ticks import TickDependencies, TickLoop


class _Clock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _SamplerStub:
    def __init__(self, title: Optional[str] = "editor", error: Optional[Exception] = None):
        self.title = title
        self.error = error
        self.calls = 0

    def current_window_title(self) -> Optional[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.title


class _ShellRunnerStub:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls = 0

    def run(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


class _BrokenRenderer:
    def render(self, frame) -> str:
        raise RuntimeError("boom")


class _BrokenPipeStream(io.StringIO):
    def write(self, text: str) -> int:
        raise BrokenPipeError()


def _identity(title: str) -> tuple[str, ...]:
    return (title,)


class TickLoopTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.session = BlockSession(
            timer=BlockTimer(clock=self.clock),
            activity_log=ActivityLog(classify=_identity),
            clock=self.clock,
            wall_clock=lambda: dt.datetime(2026, 3, 1, tzinfo=dt.timezone.utc),
        )
        self.sampler = _SamplerStub()
        self.runner = _ShellRunnerStub()
        self.stream = io.StringIO()
        self.published: list[BlockTransition] = []

    def _loop(self, **overrides) -> TickLoop:
        values = dict(
            session=self.session,
            sampler=self.sampler,
            shell_runner=self.runner,
            renderer=StatusLineRenderer(),
            stream=self.stream,
            logger=logging.getLogger("test"),
            publish_transition=self.published.append,
        )
        values.update(overrides)
        return TickLoop(TickDependencies(**values), clock=self.clock)

    def _lines(self) -> list[str]:
        return self.stream.getvalue().splitlines()

    def test_each_tick_writes_one_line(self) -> None:
        loop = self._loop()
        loop.tick()
        self.session.apply("start", duration_seconds=90)
        loop.tick()

        self.assertEqual(["<fc=#AAAAAA>--</fc>", "<fc=#00ff00>01:30</fc>"], self._lines())

    def test_idle_tick_does_not_sample(self) -> None:
        self._loop().tick()
        self.assertEqual(0, self.sampler.calls)

    def test_running_tick_samples_window(self) -> None:
        self.session.enable_log("Focus")
        self.session.apply("start", duration_seconds=90)
        loop = self._loop()

        for _ in range(3):
            self.clock.advance(1)
            loop.tick()

        report, _ = self.session.dump_log()
        self.assertEqual(3, self.sampler.calls)
        self.assertEqual({"editor": 3.0}, report.totals)

    def test_block_end_runs_hook_once_and_publishes(self) -> None:
        self.session.apply("start", duration_seconds=2)
        loop = self._loop()

        for _ in range(5):
            self.clock.advance(1)
            loop.tick()

        self.assertEqual(1, self.runner.calls)
        self.assertEqual(["block_finished"], [t.kind for t in self.published])
        self.assertTrue(self._lines()[-1].endswith(">~04:57</fc>"))

    def test_cooldown_end_publishes_without_hook(self) -> None:
        self.session.apply("start", duration_seconds=1)
        loop = self._loop()
        self.clock.advance(1)
        loop.tick()
        self.clock.advance(300)
        loop.tick()

        self.assertEqual(1, self.runner.calls)
        self.assertEqual(
            ["block_finished", "cooldown_finished"],
            [t.kind for t in self.published],
        )
        self.assertEqual("<fc=#AAAAAA>--</fc>", self._lines()[-1])

    def test_hook_failure_does_not_skip_line(self) -> None:
        self.session.apply("start", duration_seconds=1)
        loop = self._loop(shell_runner=_ShellRunnerStub(error=RuntimeError("bad hook")))
        self.clock.advance(1)

        with self.assertLogs("test", level="ERROR"):
            loop.tick()

        self.assertEqual(1, len(self._lines()))
        self.assertEqual("cooldown", self.session.snapshot().phase)

    def test_sampler_failure_still_emits_line(self) -> None:
        self.session.apply("start", duration_seconds=60)
        loop = self._loop(sampler=_SamplerStub(error=OSError("no display")))
        self.clock.advance(1)

        loop.tick()

        self.assertEqual(["<fc=#00ff00>00:59</fc>"], self._lines())

    def test_unreadable_titles_are_not_credited_to_the_next_sample(self) -> None:
        self.session.enable_log("Focus")
        self.session.apply("start", duration_seconds=1500)
        loop = self._loop()

        self.sampler.title = None
        for _ in range(3):
            self.clock.advance(200)
            loop.tick()
        self.sampler.title = "editor"
        self.clock.advance(200)
        loop.tick()

        report, _ = self.session.dump_log()
        self.assertEqual({"editor": 200.0}, report.totals)

    def test_sampler_errors_are_not_credited_to_the_next_sample(self) -> None:
        self.session.enable_log("Focus")
        self.session.apply("start", duration_seconds=1500)
        self.sampler.error = OSError("no display")
        loop = self._loop()

        self.clock.advance(300)
        loop.tick()
        self.sampler.error = None
        self.clock.advance(5)
        loop.tick()

        report, _ = self.session.dump_log()
        self.assertEqual({"editor": 5.0}, report.totals)

    def test_render_failure_emits_placeholder(self) -> None:
        loop = self._loop(renderer=_BrokenRenderer())
        with self.assertLogs("test", level="ERROR"):
            loop.tick()
        self.assertEqual(["<fc=#FF0000>??</fc>"], self._lines())

    def test_run_stops_when_event_set(self) -> None:
        stop_event = threading.Event()
        stop_event.set()
        self.assertEqual(0, self._loop().run(stop_event))
        self.assertEqual([], self._lines())

    def test_run_stops_on_broken_pipe(self) -> None:
        loop = self._loop(stream=_BrokenPipeStream())
        with self.assertLogs("test", level="ERROR"):
            self.assertEqual(1, loop.run(threading.Event()))

    def test_rejects_non_positive_interval(self) -> None:
        deps = TickDependencies(
            session=self.session,
            sampler=self.sampler,
            shell_runner=self.runner,
            renderer=StatusLineRenderer(),
            stream=self.stream,
            logger=logging.getLogger("test"),
        )
        with self.assertRaises(ValueError):
            TickLoop(deps, interval_seconds=0)


if __name__ == "__main__":
    unittest.main()
