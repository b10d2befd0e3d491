import unittest

from activity.log import ActivityLog


def _identity(title: str) -> tuple[str, ...]:
    return (title,)


class ActivityLogTests(unittest.TestCase):
    def setUp(self) -> None:
        self.log = ActivityLog(classify=_identity)

    def test_samples_dropped_until_enabled(self) -> None:
        self.assertIsNone(self.log.sample("editor", 10.0))
        self.assertEqual({}, self.log.dump().totals)

    def test_enable_accumulates_inter_sample_durations(self) -> None:
        self.log.enable("Writing", now=100.0)

        self.log.sample("editor", 101.0)
        self.log.sample("editor", 102.5)
        self.log.sample("browser", 104.0)

        report = self.log.dump()
        self.assertEqual("Writing", report.name)
        self.assertEqual({"editor": 2.5, "browser": 1.5}, report.totals)
        self.assertEqual(4.0, report.total_seconds)

    def test_entries_are_label_runs(self) -> None:
        self.log.enable("Writing", now=0.0)
        for timestamp, label in ((1, "a"), (2, "a"), (3, "b"), (4, "a"), (5, "a")):
            self.log.sample(label, float(timestamp))

        entries = self.log.dump().entries
        self.assertEqual(["a", "b", "a"], [entry.label for entry in entries])
        self.assertEqual([2.0, 1.0, 2.0], [entry.duration_seconds for entry in entries])
        self.assertEqual([0.0, 2.0, 3.0], [entry.started_at for entry in entries])

    def test_totals_keep_first_seen_order(self) -> None:
        self.log.enable("Order", now=0.0)
        for timestamp, label in ((1, "zeta"), (2, "alpha"), (3, "zeta"), (4, "mid")):
            self.log.sample(label, float(timestamp))

        self.assertEqual(["zeta", "alpha", "mid"], list(self.log.dump().totals))

    def test_dump_reset_clears_content_but_keeps_flag_and_name(self) -> None:
        self.log.enable("Review", now=0.0)
        self.log.sample("editor", 3.0)

        first = self.log.dump(reset=True)
        second = self.log.dump(reset=True)

        self.assertEqual({"editor": 3.0}, first.totals)
        self.assertEqual({}, second.totals)
        self.assertEqual((), second.entries)
        self.assertTrue(self.log.enabled)
        self.assertEqual("Review", self.log.name)

    def test_enable_again_resets_under_new_name(self) -> None:
        self.log.enable("First", now=0.0)
        self.log.sample("editor", 5.0)

        self.log.enable("Second", now=10.0)

        report = self.log.dump()
        self.assertEqual("Second", report.name)
        self.assertEqual({}, report.totals)

    def test_disable_drops_samples_but_keeps_content(self) -> None:
        self.log.enable("Work", now=0.0)
        self.log.sample("editor", 2.0)

        self.log.disable()
        self.assertIsNone(self.log.sample("editor", 4.0))

        report = self.log.dump()
        self.assertFalse(report.enabled)
        self.assertEqual({"editor": 2.0}, report.totals)

    def test_interrupt_does_not_credit_gap(self) -> None:
        self.log.enable("Work", now=0.0)
        self.log.sample("editor", 2.0)

        self.log.interrupt()
        self.log.sample("editor", 50.0)
        self.log.mark(60.0)
        self.log.sample("editor", 61.0)

        self.assertEqual({"editor": 3.0}, self.log.dump().totals)

    def test_empty_label_is_dropped(self) -> None:
        self.log.enable("Work", now=0.0)
        self.assertIsNone(self.log.sample("", 1.0))
        self.assertEqual({}, self.log.dump().totals)

    def test_empty_label_discards_the_gap_before_it(self) -> None:
        self.log.enable("Work", now=0.0)
        self.log.sample("editor", 10.0)
        self.log.sample("   ", 400.0)
        self.log.sample("editor", 410.0)

        self.assertEqual({"editor": 20.0}, self.log.dump().totals)

    def test_report_text_lists_percentages_and_timeline(self) -> None:
        self.log.enable("Work", now=0.0)
        self.log.sample("editor", 30.0)
        self.log.sample("browser", 40.0)

        text = self.log.dump().to_text()

        self.assertIn("Task log: Work", text)
        self.assertIn("- [ 75.00%    30.00s] editor", text)
        self.assertIn("- [ 25.00%    10.00s] browser", text)
        self.assertIn("+00:30", text)

    def test_report_text_rolls_up_path_prefixes(self) -> None:
        log = ActivityLog(classify=lambda title: tuple(title.split("/")))
        log.enable("Work", now=0.0)
        log.sample("Github/Notifications", 30.0)
        log.sample("Emacs", 50.0)
        log.sample("Github/repo", 60.0)

        report = log.dump()
        text = report.to_text()

        self.assertEqual(
            {"Github / Notifications": 30.0, "Emacs": 20.0, "Github / repo": 10.0},
            report.totals,
        )
        self.assertEqual(("Github", "repo"), report.paths["Github / repo"])
        breakdown = text.split("Breakdown:\n", 1)[1].split("Timeline:", 1)[0]
        self.assertEqual(
            "- [ 66.67%    40.00s] Github\n"
            "    - [ 50.00%    30.00s] Notifications\n"
            "    - [ 16.67%    10.00s] repo\n"
            "- [ 33.33%    20.00s] Emacs\n",
            breakdown,
        )

    def test_default_classifier_is_used(self) -> None:
        log = ActivityLog()
        log.enable("Work", now=0.0)
        log.sample("Notifications - qutebrowser", 1.0)
        self.assertEqual({"Github / Notifications": 1.0}, log.dump().totals)


if __name__ == "__main__":
    unittest.main()
