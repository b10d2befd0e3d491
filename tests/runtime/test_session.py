import datetime as dt
import threading
import unittest

from activity import ActivityLog
from pomodoro import BlockTimer
from runtime.session import FLASH_ERROR, FLASH_WARN, BlockSession


class _Clock:
    def __init__(self, now: float = 500.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _fixed_wall_clock() -> dt.datetime:
    return dt.datetime(2026, 3, 1, 9, 30, 0, tzinfo=dt.timezone.utc)


def _identity(title: str) -> tuple[str, ...]:
    return (title,)


class BlockSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.session = BlockSession(
            timer=BlockTimer(clock=self.clock),
            activity_log=ActivityLog(classify=_identity),
            clock=self.clock,
            wall_clock=_fixed_wall_clock,
        )

    def _flashes(self, count: int) -> list:
        return [self.session.frame().flash for _ in range(count)]

    def test_frame_without_flash(self) -> None:
        frame = self.session.frame()
        self.assertIsNone(frame.flash)
        self.assertEqual("idle", frame.snapshot.phase)

    def test_rejected_command_flashes_warn_for_five_ticks(self) -> None:
        result = self.session.apply("pause")

        self.assertFalse(result.accepted)
        self.assertEqual(
            [FLASH_WARN, None, FLASH_WARN, None, FLASH_WARN, None],
            self._flashes(6),
        )

    def test_cooldown_rejection_flashes_error_for_seven_ticks(self) -> None:
        self.session.apply("start", duration_seconds=5)
        self.clock.advance(5)
        self.session.poll()

        result = self.session.apply("start", duration_seconds=5)

        self.assertEqual("cooldown", result.reason)
        flashes = self._flashes(8)
        self.assertEqual(4, flashes.count(FLASH_ERROR))
        self.assertIsNone(flashes[-1])

    def test_invalid_duration_flashes_error(self) -> None:
        self.session.apply("start", duration_seconds=0)
        self.assertEqual(FLASH_ERROR, self.session.frame().flash)

    def test_error_flash_wins_over_warn(self) -> None:
        self.session.flash(FLASH_WARN)
        self.session.flash(FLASH_ERROR)
        self.assertEqual(FLASH_ERROR, self.session.frame().flash)

    def test_accepted_command_does_not_flash(self) -> None:
        self.session.apply("start", duration_seconds=60)
        self.assertIsNone(self.session.frame().flash)

    def test_samples_only_credited_while_running(self) -> None:
        self.session.enable_log("Focus")
        self.assertIsNone(self.session.record_window("editor"))

        self.session.apply("start", duration_seconds=100)
        self.clock.advance(2)
        self.assertEqual("editor", self.session.record_window("editor"))

        self.session.apply("pause")
        self.clock.advance(30)
        self.assertIsNone(self.session.record_window("editor"))

        self.session.apply("pause")
        self.clock.advance(3)
        self.session.record_window("editor")

        report, _ = self.session.dump_log()
        self.assertEqual({"editor": 5.0}, report.totals)

    def test_block_end_stops_crediting_time(self) -> None:
        self.session.enable_log("Focus")
        self.session.apply("start", duration_seconds=10)
        self.clock.advance(4)
        self.session.record_window("editor")
        self.clock.advance(6)
        transition = self.session.poll()
        assert transition is not None
        self.assertEqual("block_finished", transition.kind)

        self.clock.advance(100)
        self.assertIsNone(self.session.record_window("editor"))

        report, _ = self.session.dump_log()
        self.assertEqual({"editor": 4.0}, report.totals)

    def test_dump_reset_clears_totals_and_keeps_logging(self) -> None:
        self.session.apply("start", duration_seconds=100)
        self.session.enable_log("Focus")
        self.clock.advance(1)
        self.session.record_window("editor")

        first, _ = self.session.dump_log(reset=True)
        second, _ = self.session.dump_log()

        self.assertEqual({"editor": 1.0}, first.totals)
        self.assertEqual({}, second.totals)
        self.assertTrue(second.enabled)

    def test_disable_log_drops_samples(self) -> None:
        self.session.apply("start", duration_seconds=100)
        self.session.enable_log("Focus")
        self.session.disable_log()
        self.clock.advance(1)

        self.assertIsNone(self.session.record_window("editor"))

    def test_dump_text_includes_journal_and_report(self) -> None:
        self.session.enable_log("Focus")
        self.session.apply("start", duration_seconds=100)
        self.session.apply("pause")
        self.session.apply("pause")

        _, text = self.session.dump_log(reset=True)

        lines = text.splitlines()
        self.assertEqual("2026-03-01 09:30:00+0000: started block", lines[0])
        self.assertEqual("2026-03-01 09:30:00+0000: paused block", lines[1])
        self.assertEqual("2026-03-01 09:30:00+0000: resumed block", lines[2])
        self.assertEqual("2026-03-01 09:30:00+0000: reset statistics", lines[3])
        self.assertIn("Task log: Focus", text)

    def test_start_clears_journal(self) -> None:
        self.session.apply("start", duration_seconds=1)
        self.clock.advance(1)
        self.session.poll()
        self.clock.advance(300)
        self.session.poll()
        self.session.apply("start", duration_seconds=60)

        _, text = self.session.dump_log()

        self.assertNotIn("end cooldown", text)
        self.assertIn("started block", text)
        self.assertIn("output statistics (did not reset)", text)
    def test_skip_sample_discards_the_gap_since_the_last_sample(self) -> None:
        self.session.enable_log("Focus")
        self.session.apply("start", duration_seconds=600)
        self.clock.advance(100)
        self.session.skip_sample()
        self.clock.advance(5)
        self.session.record_window("editor")

        report, _ = self.session.dump_log()
        self.assertEqual({"editor": 5.0}, report.totals)


class BlockSessionConcurrencyTests(unittest.TestCase):
    def test_commands_and_ticks_from_many_threads_keep_state_consistent(self) -> None:
        clock = _Clock()
        session = BlockSession(
            timer=BlockTimer(clock=clock),
            activity_log=ActivityLog(classify=_identity),
            clock=clock,
            wall_clock=_fixed_wall_clock,
        )
        session.enable_log("Race")
        barrier = threading.Barrier(6)
        accepted: list[str] = []
        frames = []

        def _commands() -> None:
            barrier.wait()
            for _ in range(200):
                for action, duration in (("start", 10), ("cancel", None)):
                    if session.apply(action, duration_seconds=duration).accepted:
                        accepted.append(action)

        def _ticks() -> None:
            barrier.wait()
            for _ in range(400):
                frames.append(session.frame())
                session.record_window("editor")

        threads = [threading.Thread(target=_commands) for _ in range(4)]
        threads += [threading.Thread(target=_ticks) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30.0)

        for frame in frames:
            if frame.snapshot.phase == "running":
                self.assertEqual(10, frame.snapshot.duration_seconds)
                self.assertEqual(10, frame.snapshot.remaining_seconds)
            else:
                self.assertEqual("idle", frame.snapshot.phase)
                self.assertEqual(0, frame.snapshot.duration_seconds)
        final_phase = session.snapshot().phase
        self.assertEqual(
            1 if final_phase == "running" else 0,
            accepted.count("start") - accepted.count("cancel"),
        )
        self.assertGreaterEqual(session._flash_warn, 0)
        self.assertGreaterEqual(session._flash_error, 0)


if __name__ == "__main__":
    unittest.main()
