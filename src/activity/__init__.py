"""Focused-window sampling and per-activity time accounting."""

from .classifier import activity_label, classify_window_title
from .log import ActivityEntry, ActivityLog, ActivityNode, ActivityReport
from .sampler import CommandWindowSampler, NullWindowSampler, WindowSampler

__all__ = [
    "ActivityEntry",
    "ActivityLog",
    "ActivityNode",
    "ActivityReport",
    "CommandWindowSampler",
    "NullWindowSampler",
    "WindowSampler",
    "activity_label",
    "classify_window_title",
]
