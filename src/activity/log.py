"""Aggregation of focused-window samples into per-activity totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .classifier import LABEL_SEPARATOR, classify_window_title


@dataclass
class ActivityEntry:
    """One uninterrupted run of samples sharing a label."""
    label: str
    started_at: float
    duration_seconds: float = 0.0


@dataclass
class ActivityNode:
    """Rolled-up time for one activity path prefix."""
    name: str
    seconds: float = 0.0
    children: dict[str, "ActivityNode"] = field(default_factory=dict)

    def add(self, path: tuple[str, ...], seconds: float) -> None:
        self.seconds += seconds
        if path:
            child = self.children.setdefault(path[0], ActivityNode(path[0]))
            child.add(path[1:], seconds)

    def sorted_children(self) -> list["ActivityNode"]:
        # Stable sort: ties keep first-seen order.
        return sorted(self.children.values(), key=lambda node: -node.seconds)


@dataclass(frozen=True)
class ActivityReport:
    """Point-in-time copy of the log contents."""
    name: Optional[str]
    enabled: bool
    totals: dict[str, float]
    entries: tuple[ActivityEntry, ...]
    paths: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def total_seconds(self) -> float:
        return sum(self.totals.values())

    def breakdown(self) -> ActivityNode:
        """Totals summed over every path prefix, e.g. all of `Github`."""
        root = ActivityNode("")
        for label, seconds in self.totals.items():
            root.add(self.paths.get(label, (label,)), seconds)
        return root

    def to_text(self) -> str:
        lines = [f"Task log: {self.name or '(unnamed)'}"]
        total = self.total_seconds
        for label, seconds in self.totals.items():
            lines.append(_summary_line("", label, seconds, total))
        if self.totals:
            lines.append("Breakdown:")
            for node in self.breakdown().sorted_children():
                _append_node(lines, node, 0, total)
        if self.entries:
            origin = self.entries[0].started_at
            lines.append("Timeline:")
            for entry in self.entries:
                offset = int(entry.started_at - origin)
                minutes, seconds = divmod(max(0, offset), 60)
                lines.append(
                    f"  +{minutes:02d}:{seconds:02d} {entry.duration_seconds:8.2f}s {entry.label}"
                )
        return "\n".join(lines) + "\n"


def _summary_line(indent: str, name: str, seconds: float, total: float) -> str:
    percent = 100.0 * seconds / total if total > 0 else 0.0
    return f"{indent}- [{percent:6.2f}% {seconds:8.2f}s] {name}"


def _append_node(lines: list[str], node: ActivityNode, depth: int, total: float) -> None:
    lines.append(_summary_line("    " * depth, node.name, node.seconds, total))
    for child in node.sorted_children():
        _append_node(lines, child, depth + 1, total)


class ActivityLog:
    """Label totals plus a chronological sequence of label runs.

    The enabled flag and the accumulated content are independent: `disable`
    keeps content, `dump(reset=True)` keeps the flag and name. Whether the
    block is running is the caller's concern; the log only sees samples it is
    handed. Not thread-safe.
    """

    def __init__(
        self,
        *,
        classify: Callable[[str], tuple[str, ...]] = classify_window_title,
        logger: Optional[logging.Logger] = None,
    ):
        self._classify = classify
        self._logger = logger or logging.getLogger("activity")
        self._enabled = False
        self._name: Optional[str] = None
        self._totals: dict[str, float] = {}
        self._paths: dict[str, tuple[str, ...]] = {}
        self._entries: list[ActivityEntry] = []
        self._last_sample_at: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def name(self) -> Optional[str]:
        return self._name

    def enable(self, name: str, *, now: Optional[float] = None) -> None:
        self._enabled = True
        self._name = " ".join(name.split()) or None
        self._clear()
        self._last_sample_at = now
        self._logger.info("Task log enabled: %s", self._name)

    def disable(self) -> None:
        self._enabled = False
        self._last_sample_at = None
        self._logger.info("Task log disabled: %s", self._name)

    def mark(self, now: float) -> None:
        """Start measuring the next sample's duration from `now`."""
        self._last_sample_at = now

    def interrupt(self) -> None:
        """Forget the previous sample so time outside active blocks is not credited."""
        self._last_sample_at = None

    def sample(self, title: str, timestamp: float) -> Optional[str]:
        if not self._enabled:
            return None

        path = tuple(part.strip() for part in self._classify(title) if part.strip())
        if not path:
            # The time since the last sample belongs to no activity.
            self._last_sample_at = timestamp
            return None
        label = LABEL_SEPARATOR.join(path)

        since = self._last_sample_at if self._last_sample_at is not None else timestamp
        duration = max(0.0, timestamp - since)
        self._last_sample_at = timestamp

        self._totals[label] = self._totals.get(label, 0.0) + duration
        self._paths.setdefault(label, path)
        if self._entries and self._entries[-1].label == label:
            self._entries[-1].duration_seconds += duration
        else:
            self._entries.append(
                ActivityEntry(label=label, started_at=since, duration_seconds=duration)
            )
        return label

    def dump(self, reset: bool = False) -> ActivityReport:
        report = ActivityReport(
            name=self._name,
            enabled=self._enabled,
            totals=dict(self._totals),
            entries=tuple(
                ActivityEntry(entry.label, entry.started_at, entry.duration_seconds)
                for entry in self._entries
            ),
            paths=dict(self._paths),
        )
        if reset:
            self._clear()
        return report

    def _clear(self) -> None:
        self._totals = {}
        self._paths = {}
        self._entries = []
